"""Tests for the serial form finder and the replay path."""
import logging

import pytest

from form_finder import FormFinder, FormFinderConfig, NodeStatus
from splitter_base import EigenForm, EigenvalueTableSplitter
from tests.conftest import E3, PAIR_FORMS


def _found(splitter):
    return [(nf.eigenvalues, nf.basis_plus, nf.basis_minus) for nf in splitter.newforms]


class TestFind:
    def test_two_newforms(self, pair_splitter, run_finder):
        splitter = pair_splitter()
        finder = run_finder(splitter, plus=False)
        assert finder.count == 2
        assert [nf.eigenvalues for nf in splitter.newforms] == [(1, -1), (1, 2)]
        for i, nf in enumerate(splitter.newforms):
            assert (nf.basis_plus, nf.basis_minus) == splitter.expected_basis(i)

    def test_plus_and_minus_vectors_are_independent(self, pair_splitter, run_finder):
        splitter = pair_splitter()
        run_finder(splitter, plus=False)
        for nf in splitter.newforms:
            bp, bm = nf.basis_plus, nf.basis_minus
            minors = [bp[i] * bm[j] - bp[j] * bm[i] for i in range(4) for j in range(i + 1, 4)]
            assert any(minors)

    def test_denominator(self, pair_splitter, run_finder):
        splitter = pair_splitter(denominator=2)
        run_finder(splitter, plus=False)
        assert [nf.eigenvalues for nf in splitter.newforms] == [(1, -1), (1, 2)]
        for i, nf in enumerate(splitter.newforms):
            assert (nf.basis_plus, nf.basis_minus) == splitter.expected_basis(i)

    def test_plus_space(self, run_finder):
        forms = [EigenForm((1, 0)), EigenForm((2, 1)), EigenForm((2, -1))]
        splitter = EigenvalueTableSplitter(forms, eigenvectors=E3, plus=True)
        run_finder(splitter, max_depth=2, plus=True)
        assert [nf.eigenvalues for nf in splitter.newforms] == [(1,), (2, -1), (2, 1)]
        expected = {
            (1,): splitter.expected_basis(0),
            (2, 1): splitter.expected_basis(1),
            (2, -1): splitter.expected_basis(2),
        }
        for nf in splitter.newforms:
            assert nf.basis_minus is None
            assert (nf.basis_plus, None) == expected[nf.eigenvalues]
        assert splitter.requests[("symmetry_matrix", -1)] == 0

    def test_all_old_branch_is_pruned(self, run_finder):
        forms = [EigenForm((-2, 1, 1), old=True)] + PAIR_FORMS
        splitter = EigenvalueTableSplitter(forms, plus=False, candidates=range(-2, 3))
        finder = run_finder(splitter, plus=False)
        old = [rec for rec in finder.history if rec.prefix == (-2,)]
        assert len(old) == 1
        assert old[0].status is NodeStatus.ALL_OLD
        assert old[0].dimold == 2
        assert not [rec for rec in finder.history if rec.prefix[:1] == (-2,) and rec.depth > 1]
        assert [nf.eigenvalues for nf in splitter.newforms] == [(1, -1), (1, 2)]

    def test_max_depth_zero(self, pair_splitter):
        splitter = pair_splitter()
        finder = FormFinder(splitter, FormFinderConfig(max_depth=0, plus=False))
        finder.find()
        assert finder.root.status is NodeStatus.MAX_DEPTH
        assert finder.root.children == {}
        assert splitter.requests[("operator_matrix", 0)] == 0
        assert splitter.newforms == []

    def test_max_depth_warning(self, run_finder, caplog):
        forms = [EigenForm((1, 2, 3)), EigenForm((1, 2, 3))]
        splitter = EigenvalueTableSplitter(forms, plus=False)
        with caplog.at_level(logging.WARNING, logger="form_finder"):
            finder = run_finder(splitter, plus=False, max_depth=3)
        assert splitter.newforms == []
        statuses = [rec.status for rec in finder.history if rec.depth == 3]
        assert statuses == [NodeStatus.MAX_DEPTH]
        assert any("abandoning" in r.getMessage() for r in caplog.records)

    def test_min_depth(self, pair_splitter, run_finder):
        splitter = pair_splitter()
        run_finder(splitter, plus=False, min_depth=2)
        assert [nf.eigenvalues for nf in splitter.newforms] == [(1, -1, 2), (1, 2, 0)]
        for i, nf in enumerate(splitter.newforms):
            assert (nf.basis_plus, nf.basis_minus) == splitter.expected_basis(i)

    def test_history_invariants(self, pair_splitter, run_finder):
        finder = run_finder(pair_splitter(), plus=False)
        dims = {rec.prefix: rec.subdim for rec in finder.history}
        for rec in finder.history:
            assert rec.depth == len(rec.prefix) <= finder.max_depth
            if rec.depth:
                assert rec.subdim <= dims[rec.prefix[:-1]]
            if rec.status is NodeStatus.FOUND_NEW:
                assert rec.subdim == 2

    def test_tree_released_after_find(self, pair_splitter, run_finder):
        finder = run_finder(pair_splitter(), plus=False)
        assert finder.root.children == {}
        assert finder.root.submat is None

    def test_repeated_find_starts_fresh(self, pair_splitter, run_finder):
        splitter = pair_splitter()
        finder = run_finder(splitter, plus=False, check_restrictions=True)
        history = list(finder.history)
        diagnostics = list(finder.diagnostics)
        finder.find()
        assert finder.history == history
        assert finder.diagnostics == diagnostics
        assert finder.count == 2
        assert len(splitter.newforms) == 4
        assert splitter.requests[("operator_matrix", 0)] == 2


class TestRestrictionModes:
    def test_bulk_and_incremental_agree(self, pair_splitter, run_finder):
        incremental = pair_splitter()
        bulk = pair_splitter()
        run_finder(incremental, plus=False, big_mats=False)
        run_finder(bulk, plus=False, big_mats=True)
        assert _found(incremental) == _found(bulk)

        assert incremental.requests[("operator_matrix", 0)] == 1
        assert incremental.requests[("operator_matrix", 1)] == 0
        assert incremental.requests[("operator_matrix_restricted", 1)] == 1
        assert incremental.requests[("operator_matrix_restricted", -1)] == 2
        assert incremental.requests[("symmetry_matrix", -1)] == 0

        assert bulk.requests[("operator_matrix", 1)] == 1
        assert bulk.requests[("symmetry_matrix", -1)] == 1
        assert sum(n for (name, _), n in bulk.requests.items() if name == "operator_matrix_restricted") == 0

    def test_restricted_matrix_matches_full(self, mixed_splitter):
        from modular_linalg import eigenspace, restrict, to_int_rows

        splitter = mixed_splitter()
        s = eigenspace(splitter.operator_matrix(0), 1)
        assert s.dim == 4
        for index in (1, 2, -1):
            full = splitter.symmetry_matrix() if index == -1 else splitter.operator_matrix(index)
            assert to_int_rows(restrict(full, s)) == to_int_rows(splitter.operator_matrix_restricted(index, s))

    def test_cached_submat_is_read_without_lock(self, pair_splitter):
        splitter = pair_splitter()
        finder = FormFinder(splitter, FormFinderConfig(max_depth=3, plus=False))
        submat = finder._make_submat(finder.root)
        with finder.root.lock:
            assert finder._make_submat(finder.root) is submat
        assert splitter.requests[("operator_matrix", 0)] == 1

    @pytest.mark.parametrize("big_mats", [False, True])
    def test_check_restrictions(self, mixed_splitter, run_finder, big_mats):
        finder = run_finder(mixed_splitter(), plus=False, big_mats=big_mats, check_restrictions=True)
        assert finder.diagnostics
        assert all(d.ok for d in finder.diagnostics)


class _NoMinusSplitter(EigenvalueTableSplitter):
    def _conjugation_values(self):
        return [self.matrix_denominator()] * self.matrix_dimension()


class TestBasisExtraction:
    def test_wrong_conjugation_aborts_branch(self, pair_splitter, run_finder, caplog):
        splitter = pair_splitter(cls=_NoMinusSplitter)
        with caplog.at_level(logging.ERROR, logger="form_finder"):
            finder = run_finder(splitter, plus=False)
        assert splitter.newforms == []
        assert finder.count == 0
        errors = [r.getMessage() for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 2
        assert all("aborting this branch" in msg for msg in errors)
        assert [rec.status for rec in finder.history if rec.depth == 2] == [NodeStatus.ABORTED] * 2
        assert NodeStatus.FOUND_NEW not in {rec.status for rec in finder.history}

    def test_splitoff_logs_and_skips(self, pair_splitter, caplog):
        splitter = pair_splitter(cls=_NoMinusSplitter)
        finder = FormFinder(splitter, FormFinderConfig(max_depth=3, plus=False))
        with caplog.at_level(logging.ERROR, logger="form_finder"):
            finder.splitoff([1, 2])
        assert splitter.newforms == []
        assert any("aborting this branch" in r.getMessage() for r in caplog.records)


class TestRecover:
    def test_recover_matches_find(self, pair_splitter, run_finder):
        searched = pair_splitter()
        run_finder(searched, plus=False)
        replayed = pair_splitter()
        finder = FormFinder(replayed, FormFinderConfig(max_depth=3, plus=False))
        finder.recover([[1, -1], [1, 2]])
        assert _found(replayed) == _found(searched)

    def test_common_prefix_reuses_node(self, pair_splitter):
        splitter = pair_splitter()
        finder = FormFinder(splitter, FormFinderConfig(max_depth=3, plus=False))
        finder.splitoff([1, -1])
        first = finder.root.child(1)
        finder.splitoff([1, 2])
        assert list(finder.root.children) == [1]
        assert finder.root.child(1) is first
        assert list(first.children) == [2]
        assert splitter.requests[("operator_matrix", 0)] == 1
        assert splitter.requests[("operator_matrix_restricted", 1)] == 1

    def test_replay_is_idempotent(self, pair_splitter):
        splitter = pair_splitter()
        finder = FormFinder(splitter, FormFinderConfig(max_depth=3, plus=False))
        finder.splitoff([1, 2])
        finder.splitoff([1, 2])
        assert len(splitter.newforms) == 2
        assert splitter.newforms[0] == splitter.newforms[1]
        assert (splitter.newforms[0].basis_plus, splitter.newforms[0].basis_minus) == splitter.expected_basis(1)

    def test_longer_sequence_is_accepted_whole(self, pair_splitter):
        splitter = pair_splitter()
        finder = FormFinder(splitter, FormFinderConfig(max_depth=3, plus=False))
        finder.splitoff([1, -1, 2])
        assert splitter.newforms[0].eigenvalues == (1, -1, 2)

    def test_short_sequence(self, pair_splitter):
        finder = FormFinder(pair_splitter(), FormFinderConfig(max_depth=3, plus=False))
        with pytest.raises(ValueError):
            finder.splitoff([1])

    def test_teardown(self, pair_splitter):
        finder = FormFinder(pair_splitter(), FormFinderConfig(max_depth=3, plus=False))
        finder.splitoff([1, 2])
        finder.teardown()
        assert finder.root.children == {}
        assert finder.root.submat is None
