#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Form finder: splitting a space of modular symbols into newform eigenspaces
================================================================================

Given commuting operators T_0, T_1, ... on an n-dimensional space (supplied by
a ``SplitterBase``), the finder builds a tree whose nodes are eigenvalue
prefixes (a_0, ..., a_{k-1}); the node holds the nested subspace

    V(a_0..a_{k-1}) = ker(T_0 - a_0) ∩ ... ∩ ker(T_{k-1} - a_{k-1})

and the matrix of T_k restricted to it.  A branch ends when

  - the old part reported by the source fills the whole subspace (ALL_OLD),
  - the subspace reaches the target dimension past ``min_depth`` (FOUND_NEW),
    at which point the eigenvector(s) are extracted and reported,
  - or the depth bound is hit first (MAX_DEPTH, always reported).

Target dimension is 1 when only the plus space is searched; otherwise 2 and
the final plane is split by the conjugation involution into its +1 and -1
lines.

Red-lines
---------
- Exact arithmetic only (GF(p) via ``modular_linalg``); no thresholds.
- Serial mode is depth-first and follows the source's candidate order, so a
  fixed source gives a reproducible sequence of ``accept`` calls.
- Concurrent mode delivers the same set of newforms, batched after the worker
  pool has drained.
- A leaf whose final eigenspace has the wrong dimension aborts that branch
  only (logged, recorded as ABORTED); worker exceptions are re-raised after
  the pool drains.
================================================================================
"""

from __future__ import annotations

import logging
import os
import threading
import weakref
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from modular_linalg import (
    RestrictionCheck,
    Subspace,
    basis_vector,
    check_restriction,
    combine,
    eigenspace,
    lift_vector,
    modulus_of,
    restrict,
)
from splitter_base import CONJUGATION_INDEX, EigenForm, EigenvalueTableSplitter, SplitterBase

_logger = logging.getLogger(__name__)

DEFAULT_NUM_THREADS = 15
NUM_THREADS_ENV = "FORM_FINDER_NUM_THREADS"


# =============================================================================
# Errors and configuration
# =============================================================================


class FormFinderError(RuntimeError):
    """Failure inside the search engine."""


class BasisExtractionError(FormFinderError):
    """A leaf eigenspace does not have the expected dimension; the branch is dropped."""


def _env_int(name: str, *, default: int) -> int:
    """
    Read an env var as int (base-10), strict.
    """
    raw = os.getenv(name)
    if raw is None or not str(raw).strip():
        return int(default)
    try:
        return int(str(raw).strip(), 10)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer (base-10), got {raw!r}") from e


@dataclass(frozen=True)
class FormFinderConfig:
    """
    Search parameters.

    plus:        search the plus space only (target dimension 1)
    max_depth:   number of operators that may be used along a branch
    min_depth:   a branch may only be accepted strictly below this depth
    use_dual:    passed to the source for full operator matrices (bulk mode)
    big_mats:    bulk mode: fetch full matrices and restrict them here;
                 otherwise ask the source for restricted matrices directly
    verbose:     0 silent, 1 progress at INFO, 2 and above adds DEBUG detail
    concurrent:  explore sibling branches on a thread pool
    num_threads: pool size; None reads FORM_FINDER_NUM_THREADS (default 15)
    check_restrictions: verify every restriction against the full matrix
    """

    max_depth: int
    plus: bool = True
    min_depth: int = 0
    use_dual: bool = True
    big_mats: bool = False
    verbose: int = 0
    concurrent: bool = False
    num_threads: Optional[int] = None
    check_restrictions: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.max_depth, int) or self.max_depth < 0:
            raise ValueError(f"max_depth must be int >= 0, got {self.max_depth!r}")
        if not isinstance(self.min_depth, int):
            raise ValueError(f"min_depth must be int, got {self.min_depth!r}")
        if not isinstance(self.verbose, int) or self.verbose < 0:
            raise ValueError(f"verbose must be int >= 0, got {self.verbose!r}")
        if self.num_threads is not None and (not isinstance(self.num_threads, int) or self.num_threads < 1):
            raise ValueError(f"num_threads must be int >= 1, got {self.num_threads!r}")

    @property
    def target_dim(self) -> int:
        return 1 if self.plus else 2

    def resolved_num_threads(self) -> int:
        if self.num_threads is not None:
            return int(self.num_threads)
        n = _env_int(NUM_THREADS_ENV, default=DEFAULT_NUM_THREADS)
        if n < 1:
            raise ValueError(f"{NUM_THREADS_ENV} must be >= 1, got {n}")
        return n


# =============================================================================
# Search tree
# =============================================================================


class NodeStatus(Enum):
    INTERNAL = auto()
    ALL_OLD = auto()
    ABORTED = auto()
    FOUND_NEW = auto()
    MAX_DEPTH = auto()
    COMPLETE = auto()


@dataclass(frozen=True)
class VisitRecord:
    """One node as seen by ``find``."""

    prefix: Tuple[int, ...]
    depth: int
    subdim: int
    dimold: int
    status: NodeStatus


class FFData:
    """
    Node of the search tree for one eigenvalue prefix.

    Children are owned through ``children``; ``parent`` is a weak back
    reference.  ``lock`` guards the child map and the submat counters.
    """

    def __init__(self) -> None:
        self.depth: int = 0
        self.eigenvalue: Optional[int] = None
        self.subspace: Optional[Subspace] = None
        self.subdim: int = 0
        self.submat: Any = None
        self.conjmat: Any = None
        self.children: Dict[int, FFData] = {}
        self.status: NodeStatus = NodeStatus.INTERNAL
        self.basis_plus: Optional[Tuple[int, ...]] = None
        self.basis_minus: Optional[Tuple[int, ...]] = None
        self.submat_usage: int = 0
        self.num_children: int = 0
        self.lock = threading.Lock()
        self._parent: Optional[weakref.ReferenceType] = None

    @property
    def parent(self) -> Optional["FFData"]:
        return None if self._parent is None else self._parent()

    def child(self, eig: int) -> Optional["FFData"]:
        return self.children.get(eig)

    def add_child(self, eig: int, child: "FFData") -> None:
        if eig in self.children:
            raise FormFinderError(f"node for eigenvalue {eig} already exists at depth {self.depth + 1}")
        child._parent = weakref.ref(self)
        child.eigenvalue = int(eig)
        child.depth = self.depth + 1
        self.children[eig] = child

    def child_status(self, eig: int, status: NodeStatus) -> None:
        child = self.children.get(eig)
        if child is not None:
            child.status = status

    def erase_child(self, eig: int) -> None:
        child = self.children.pop(eig, None)
        if child is not None:
            child.destroy()

    def clear_children(self) -> None:
        for child in self.children.values():
            child.destroy()
        self.children.clear()

    def destroy(self) -> None:
        """Drop the subtree and every matrix it holds."""
        self.clear_children()
        self.submat = None
        self.conjmat = None
        self.subspace = None

    def increase_submat_usage(self) -> bool:
        """Count one consumer of ``submat``; True once every expected child has used it."""
        self.submat_usage += 1
        return self.num_children > 0 and self.submat_usage >= self.num_children

    def complete(self) -> bool:
        return not self.children

    def eiglist(self) -> List[int]:
        eigs: List[int] = []
        node: Optional[FFData] = self
        while node is not None and node.eigenvalue is not None:
            eigs.append(node.eigenvalue)
            node = node.parent
        eigs.reverse()
        return eigs

    def __repr__(self) -> str:
        return f"FFData(eigs={self.eiglist()}, subdim={self.subdim}, status={self.status.name})"


# =============================================================================
# Worker pool
# =============================================================================


class _BranchPool:
    """
    Thread pool whose tasks may submit further tasks.

    ``close`` waits until no task is pending (including tasks submitted by
    running tasks), shuts the executor down and re-raises the first task
    error.
    """

    def __init__(self, num_threads: int) -> None:
        self._executor = ThreadPoolExecutor(max_workers=int(num_threads), thread_name_prefix="form-finder")
        self._cond = threading.Condition()
        self._pending = 0
        self._errors: List[BaseException] = []

    def submit(self, fn: Callable[..., None], *args: Any) -> None:
        with self._cond:
            self._pending += 1
        future = self._executor.submit(fn, *args)
        future.add_done_callback(self._task_done)

    def _task_done(self, future: Future) -> None:
        exc = future.exception()
        with self._cond:
            if exc is not None:
                self._errors.append(exc)
            self._pending -= 1
            if self._pending == 0:
                self._cond.notify_all()

    def close(self) -> None:
        with self._cond:
            while self._pending:
                self._cond.wait()
        self._executor.shutdown(wait=True)
        if self._errors:
            raise FormFinderError(
                f"{len(self._errors)} branch task(s) failed; first error: {self._errors[0]!r}"
            ) from self._errors[0]


# =============================================================================
# Form finder
# =============================================================================


class FormFinder:
    """
    Recursive splitter over a ``SplitterBase``.

    ``find`` explores the whole tree; ``recover`` replays known eigenvalue
    sequences.  Newforms go to ``splitter.accept``.
    """

    def __init__(self, splitter: SplitterBase, config: FormFinderConfig) -> None:
        if not isinstance(splitter, SplitterBase):
            raise TypeError(f"splitter must be SplitterBase, got {type(splitter).__name__}")
        if not isinstance(config, FormFinderConfig):
            raise TypeError(f"config must be FormFinderConfig, got {type(config).__name__}")
        self._splitter = splitter
        self.config = config
        self.plus = config.plus
        self.use_dual = config.use_dual
        self.big_mats = config.big_mats
        self.verbose = config.verbose
        self.max_depth = config.max_depth
        self.min_depth = config.min_depth
        self.target_dim = config.target_dim

        self.denom = int(splitter.matrix_denominator())
        self.dimen = int(splitter.matrix_dimension())
        if self.denom < 1:
            raise ValueError(f"matrix denominator must be >= 1, got {self.denom}")
        if self.dimen < 1:
            raise ValueError(f"matrix dimension must be >= 1, got {self.dimen}")

        self.root = FFData()
        self.root.subdim = self.dimen
        if not self.plus and self.big_mats:
            # The full conjugation matrix is only needed in bulk mode.
            self.root.conjmat = splitter.symmetry_matrix(CONJUGATION_INDEX, self.use_dual)

        self._pool: Optional[_BranchPool] = None
        self._store_lock = threading.Lock()
        self.basis_plus: List[Tuple[int, ...]] = []
        self.basis_minus: List[Optional[Tuple[int, ...]]] = []
        self.eigenvalue_prefixes: List[List[int]] = []
        self.count = 0
        self.history: List[VisitRecord] = []
        self.diagnostics: List[RestrictionCheck] = []

    # ----------------------------------------------------------------- logging

    def _log(self, level: int, msg: str, *args: Any) -> None:
        if self.verbose > level:
            _logger.log(logging.INFO if level == 0 else logging.DEBUG, msg, *args)

    # ------------------------------------------------------------------ public

    def find(self) -> None:
        """Explore the whole tree from the root and report every newform."""
        with self._store_lock:
            self.count = 0
            self.history = []
            self.diagnostics = []
        if not self.config.concurrent:
            self._find(self.root)
            return

        num_threads = self.config.resolved_num_threads()
        self._reset_batch()
        self._log(0, "Starting form finder with %d worker threads", num_threads)
        pool = _BranchPool(num_threads)
        # Workers read self._pool; it must stay set until the pool has drained.
        self._pool = pool
        try:
            self._find(self.root)
        finally:
            try:
                pool.close()
            finally:
                self._pool = None

        self._log(1, "Now performing use() on all lists at once")
        self._flush_batch()

    def recover(self, eigs: Sequence[Sequence[int]]) -> None:
        """Replay each eigenvalue sequence in turn (see ``splitoff``)."""
        for iform, seq in enumerate(eigs):
            if self.verbose:
                _logger.info("Form number %d with eigs %s ...", iform + 1, " ".join(str(e) for e in list(seq)[:10]))
            self.splitoff(seq)

    def splitoff(self, eigs: Sequence[int]) -> None:
        """
        Grow the branch for a known eigenvalue sequence and report its basis.

        Existing nodes matching a prefix of ``eigs`` are reused; the siblings
        hanging from the first node that does not match are discarded.  No
        alternative eigenvalues are tried below that point.
        """
        eigs = [int(e) for e in eigs]
        current = self.root
        depth, subdim = current.depth, current.subdim
        self._log(0, "Entering form_finder, depth = %d, dimension %d", depth, subdim)

        while depth < len(eigs) and current.child(eigs[depth]) is not None:
            current = current.child(eigs[depth])
            depth, subdim = current.depth, current.subdim

        # New branch point: trim old branches, keep the cached submat.
        with current.lock:
            current.clear_children()
            current.num_children = 0
            current.submat_usage = 0
        self._log(0, "restarting at depth = %d, dimension %d", depth, subdim)

        while subdim > self.target_dim and depth < self.max_depth:
            if depth >= len(eigs):
                raise ValueError(
                    f"eigenvalue sequence of length {len(eigs)} ends before the subspace "
                    f"reached dimension {self.target_dim} (dimension {subdim} at depth {depth})"
                )
            self._make_submat(current)
            with current.lock:
                current.add_child(eigs[depth], FFData())
            current = self._go_down(current, eigs[depth])
            depth, subdim = current.depth, current.subdim

        try:
            self._make_basis(current)
        except BasisExtractionError as exc:
            _logger.error("%s; aborting this branch", exc)
            return
        self._splitter.accept(current.basis_plus, current.basis_minus, eigs)

    def teardown(self) -> None:
        """Release the whole tree below the root and the root's matrices."""
        with self.root.lock:
            self.root.clear_children()
            self.root.submat = None
            self.root.num_children = 0
            self.root.submat_usage = 0

    # ----------------------------------------------------------- tree walking

    def _find(self, node: FFData) -> None:
        depth = node.depth
        subdim = node.subdim
        prefix = node.eiglist()

        dimold = int(self._splitter.old_subspace_dimension(prefix))
        self._log(
            0,
            "In formfinder, depth = %d, aplist = %s; dimsofar=%d, dimold=%d, dimnew=%d",
            depth, prefix, subdim, dimold, subdim - dimold,
        )

        if dimold == subdim:
            node.status = NodeStatus.ALL_OLD
            self._record(node, prefix, dimold)
            self._log(0, "Abandoning a common eigenspace of dimension %d which is a sum of oldclasses.", subdim)
            return

        if subdim == self.target_dim and depth > self.min_depth:
            try:
                self._make_basis(node)
            except BasisExtractionError as exc:
                node.status = NodeStatus.ABORTED
                self._record(node, prefix, dimold)
                _logger.error("%s; aborting this branch", exc)
                return
            node.status = NodeStatus.FOUND_NEW
            self._record(node, prefix, dimold)
            self._store(node.basis_plus, node.basis_minus, prefix)
            return

        if depth == self.max_depth:
            node.status = NodeStatus.MAX_DEPTH
            self._record(node, prefix, dimold)
            _logger.warning(
                "Found a %dD common eigenspace at aplist %s; abandoning, even though oldforms only make up %dD of this.",
                subdim, prefix, dimold,
            )
            return

        self._record(node, prefix, dimold)
        self._make_submat(node)

        t_eigs = [int(e) for e in self._splitter.candidate_eigenvalues(depth)]
        self._log(0, "Testing eigenvalues %s at level %d", t_eigs, depth + 1)

        pool = self._pool
        if pool is None:
            with node.lock:
                node.num_children = len(t_eigs)
                node.submat_usage = 0
            for eig in t_eigs:
                self._log(1, "Going down with ap = %d", eig)
                child = FFData()
                with node.lock:
                    node.add_child(eig, child)
                self._go_down(node, eig)
                if child.subdim > 0:
                    self._find(child)
                self._go_up(child)
            self._log(0, "Finished at level %d", depth + 1)
            return

        # All children exist before any task runs, so the parent cannot look
        # complete while siblings are still being created.
        children: List[FFData] = []
        with node.lock:
            node.num_children = len(t_eigs)
            node.submat_usage = 0
            for eig in t_eigs:
                child = FFData()
                node.add_child(eig, child)
                children.append(child)
        for child in children:
            pool.submit(self._explore, child)

    def _explore(self, child: FFData) -> None:
        """Pool task: go down into ``child``, search below it, go up if it is a leaf."""
        parent = child.parent
        if parent is None:
            raise FormFinderError(f"orphaned node for eigenvalue {child.eigenvalue}")
        self._log(1, "Going down with ap = %d", child.eigenvalue)
        self._go_down(parent, child.eigenvalue)
        if child.subdim > 0:
            self._find(child)
        # Internal nodes are released by their last child's go-up.
        if child.num_children == 0:
            self._go_up(child)

    def _go_down(self, node: FFData, eig: int) -> FFData:
        with node.lock:
            child = node.child(eig)
        if child is None:
            raise FormFinderError(f"no child for eigenvalue {eig} at depth {node.depth}")
        depth = node.depth
        submat = self._make_submat(node)

        eig2 = eig * self.denom
        self._log(1, "Increasing depth to %d, trying eig = %d...after scaling, eig = %d...", depth + 1, eig, eig2)
        self._log(1, "Using elimination (size = %s)...", tuple(submat.shape))

        s = eigenspace(submat, eig2)

        with node.lock:
            if node.increase_submat_usage():
                # every child has used it; recomputed if ever needed again
                node.submat = None

        self._log(1, "done (dim = %d), combining subspaces...", s.dim)
        child.subspace = s if depth == 0 else combine(node.subspace, s)
        child.subdim = child.subspace.dim

        self._log(1, "Eigenvalue %d has multiplicity %d", eig, child.subdim)
        if child.subdim > 0:
            self._log(0, " eig %d gives new subspace at depth %d of dimension %d", eig, depth + 1, child.subdim)
        return child

    def _go_up(self, node: FFData) -> None:
        parent = node.parent
        if parent is None:
            return
        propagate = False
        with parent.lock:
            parent.child_status(node.eigenvalue, NodeStatus.COMPLETE)
            parent.erase_child(node.eigenvalue)
            if self._pool is not None:
                # only the last child to finish carries completion upwards
                propagate = parent.complete() and parent.parent is not None
        if propagate:
            self._go_up(parent)

    # ------------------------------------------------------------- matrices

    def _make_submat(self, node: FFData) -> Any:
        """Return the next operator restricted to the node, computing it if absent."""
        submat = node.submat
        if submat is not None:
            return submat
        # Built under the node lock: one sibling regenerates, the rest wait for it.
        with node.lock:
            if node.submat is None:
                node.submat = self._compute_submat(node)
            return node.submat

    def _compute_submat(self, node: FFData) -> Any:
        depth = node.depth
        if self.big_mats:
            opmat = self._splitter.operator_matrix(depth, self.use_dual)
            if depth == 0:
                return opmat
            self._log(1, "restricting the_opmat to subspace...")
            submat = restrict(opmat, node.subspace)
            if self.config.check_restrictions:
                self._check(opmat, node, submat)
            return submat

        if depth == 0:
            return self._splitter.operator_matrix(0, True)
        submat = self._splitter.operator_matrix_restricted(depth, node.subspace)
        if self.config.check_restrictions:
            self._check(self._splitter.operator_matrix(depth, True), node, submat)
        return submat

    def _check(self, full: Any, node: FFData, restricted: Any) -> None:
        result = check_restriction(full, node.subspace, restricted)
        if not result.ok:
            _logger.error("restriction check failed at aplist %s: %s", node.eiglist(), result.detail)
        with self._store_lock:
            self.diagnostics.append(result)

    # ------------------------------------------------------------------ bases

    def _make_basis(self, node: FFData) -> None:
        depth = node.depth
        subdim = node.subdim
        if subdim != self.target_dim:
            raise BasisExtractionError(
                f"error in make_basis with eiglist {node.eiglist()}: final subspace has dimension {subdim}"
            )

        if self.plus:
            if depth == 0:
                # root subspace is implicit (whole space)
                vec = [0] * self.dimen
                vec[0] = 1
                node.basis_plus = tuple(vec)
            else:
                node.basis_plus = self._getbasis1(node.subspace)
            return

        s = node.subspace
        if self.big_mats:
            subconj = restrict(self.root.conjmat, s) if depth else self.root.conjmat
        elif depth:
            subconj = self._splitter.operator_matrix_restricted(CONJUGATION_INDEX, s)
        else:
            subconj = self._splitter.symmetry_matrix(CONJUGATION_INDEX, True)
        node.conjmat = subconj

        for signeig in (+1, -1):
            spm = eigenspace(subconj, signeig * self.denom)
            if depth:
                spm = combine(s, spm)
            if spm.dim != 1:
                raise BasisExtractionError(
                    f"error in make_basis with eiglist {node.eiglist()}: final "
                    f"({'+' if signeig > 0 else '-'}) subspace has dimension {spm.dim}"
                )
            if signeig > 0:
                node.basis_plus = self._getbasis1(spm)
            else:
                node.basis_minus = self._getbasis1(spm)

    def _getbasis1(self, s: Subspace) -> Tuple[int, ...]:
        return lift_vector(basis_vector(s, 0), modulus_of(s.basis))

    # ---------------------------------------------------------------- results

    def _record(self, node: FFData, prefix: Sequence[int], dimold: int) -> None:
        rec = VisitRecord(
            prefix=tuple(prefix),
            depth=node.depth,
            subdim=node.subdim,
            dimold=int(dimold),
            status=node.status,
        )
        with self._store_lock:
            self.history.append(rec)

    def _store(
        self,
        bp: Optional[Tuple[int, ...]],
        bm: Optional[Tuple[int, ...]],
        eigs: Sequence[int],
    ) -> None:
        if self._pool is None:
            with self._store_lock:
                self.count += 1
                n = self.count
            self._log(0, "Current newform subtotal count at %d", n)
            self._splitter.accept(bp, bm, list(eigs))
            return

        with self._store_lock:
            self.basis_plus.append(bp)
            self.basis_minus.append(bm)
            self.eigenvalue_prefixes.append(list(eigs))
            self.count += 1
            n = self.count
        self._log(0, "Current newform subtotal count at %d", n)

    def _reset_batch(self) -> None:
        with self._store_lock:
            self.basis_plus = []
            self.basis_minus = []
            self.eigenvalue_prefixes = []

    def _flush_batch(self) -> None:
        with self._store_lock:
            batch = list(zip(self.basis_plus, self.basis_minus, self.eigenvalue_prefixes))
            self.basis_plus = []
            self.basis_minus = []
            self.eigenvalue_prefixes = []
        for bp, bm, eigs in batch:
            self._splitter.accept(bp, bm, eigs)


# =============================================================================
# Self-test: serial and concurrent runs on a synthetic table must agree
# =============================================================================


def _self_test() -> Dict[str, Any]:
    results: Dict[str, Any] = {"ok": True, "tests": []}

    def record(name: str, passed: bool, detail: str = "") -> None:
        results["tests"].append({"name": name, "passed": passed, "detail": detail})
        if not passed:
            results["ok"] = False
            _logger.error("SELF-TEST FAILED: %s - %s", name, detail)

    forms = [
        EigenForm((1, 0, 2)),
        EigenForm((1, 0, -1)),
        EigenForm((-1, 2, 0)),
        EigenForm((2, 2, 1), old=True),
    ]
    eigenvectors = [[1 if j in (i, i + 1) else 0 for j in range(8)] for i in range(8)]

    def run(concurrent: bool, big_mats: bool) -> set:
        splitter = EigenvalueTableSplitter(forms, eigenvectors=eigenvectors, plus=False, candidates=range(-2, 3))
        finder = FormFinder(
            splitter,
            FormFinderConfig(max_depth=3, plus=False, big_mats=big_mats, concurrent=concurrent, num_threads=4),
        )
        finder.find()
        return {(nf.eigenvalues, nf.basis_plus, nf.basis_minus) for nf in splitter.newforms}

    try:
        serial = run(concurrent=False, big_mats=False)
        assert len(serial) == 3, f"expected 3 newforms, got {len(serial)}"
        record("serial_count", True)
        assert run(concurrent=True, big_mats=False) == serial, "concurrent run differs from serial run"
        record("serial_vs_concurrent", True)
        assert run(concurrent=False, big_mats=True) == serial, "bulk restriction differs from incremental"
        record("bulk_vs_incremental", True)
    except Exception as e:
        record("form_finder_equivalence", False, str(e))

    if not results["ok"]:
        raise RuntimeError("form_finder self-test failed; deployment must abort")
    return results


__all__ = [
    "BasisExtractionError",
    "DEFAULT_NUM_THREADS",
    "FFData",
    "FormFinder",
    "FormFinderConfig",
    "FormFinderError",
    "NUM_THREADS_ENV",
    "NodeStatus",
    "VisitRecord",
]


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    print("Running form_finder self-test...")
    out = _self_test()
    print(out)
