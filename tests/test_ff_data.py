"""Tests for the search tree node."""
import pytest

from form_finder import FFData, FormFinderError, NodeStatus
from modular_linalg import as_field_matrix, eigenspace


class TestChildren:
    def test_add_child_sets_links(self):
        root = FFData()
        child = FFData()
        root.add_child(3, child)
        assert child.parent is root
        assert child.depth == 1
        assert child.eigenvalue == 3
        assert root.child(3) is child
        assert root.child(4) is None

    def test_duplicate_child(self):
        root = FFData()
        root.add_child(1, FFData())
        with pytest.raises(FormFinderError):
            root.add_child(1, FFData())

    def test_eiglist(self):
        root = FFData()
        a, b = FFData(), FFData()
        root.add_child(2, a)
        a.add_child(-1, b)
        assert root.eiglist() == []
        assert b.eiglist() == [2, -1]
        assert b.depth == 2

    def test_erase_destroys_subtree(self):
        root = FFData()
        a, b = FFData(), FFData()
        root.add_child(1, a)
        a.add_child(0, b)
        a.subspace = eigenspace(as_field_matrix([[1, 0], [0, 2]]), 1)
        a.submat = as_field_matrix([[1]])
        root.erase_child(1)
        assert root.complete()
        assert a.children == {}
        assert a.subspace is None
        assert a.submat is None

    def test_child_status(self):
        root = FFData()
        root.add_child(5, FFData())
        root.child_status(5, NodeStatus.COMPLETE)
        assert root.child(5).status is NodeStatus.COMPLETE
        root.child_status(6, NodeStatus.COMPLETE)


class TestSubmatUsage:
    def test_release_after_every_child(self):
        node = FFData()
        node.num_children = 2
        assert node.increase_submat_usage() is False
        assert node.increase_submat_usage() is True

    def test_never_released_without_expected_children(self):
        node = FFData()
        for _ in range(5):
            assert node.increase_submat_usage() is False
