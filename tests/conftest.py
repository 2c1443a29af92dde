"""Shared eigenvalue tables for the form finder tests."""
import pytest

from form_finder import FormFinder, FormFinderConfig
from splitter_base import EigenForm, EigenvalueTableSplitter

# Unit upper triangular, so invertible over every field.
E4 = [
    [1, 2, 0, 1],
    [0, 1, 1, 0],
    [0, 0, 1, 3],
    [0, 0, 0, 1],
]

E3 = [
    [1, 1, 0],
    [0, 1, 2],
    [0, 0, 1],
]

# Bidiagonal: column j is e_j + e_{j-1}.
E8 = [[1 if j in (i, i + 1) else 0 for j in range(8)] for i in range(8)]

PAIR_FORMS = [EigenForm((1, -1, 2)), EigenForm((1, 2, 0))]

MIXED_FORMS = [
    EigenForm((1, 0, 2)),
    EigenForm((1, 0, -1)),
    EigenForm((-1, 2, 0)),
    EigenForm((2, 2, 1), old=True),
]


@pytest.fixture
def pair_splitter():
    """Two newforms in the full (plus and minus) space, dimension 4."""
    def make(cls=EigenvalueTableSplitter, **kwargs):
        kwargs.setdefault("eigenvectors", E4)
        kwargs.setdefault("plus", False)
        kwargs.setdefault("candidates", range(-2, 3))
        return cls(PAIR_FORMS, **kwargs)
    return make


@pytest.fixture
def mixed_splitter():
    """Three newforms and one old form, dimension 8."""
    def make(cls=EigenvalueTableSplitter, **kwargs):
        kwargs.setdefault("eigenvectors", E8)
        kwargs.setdefault("plus", False)
        kwargs.setdefault("candidates", range(-2, 3))
        return cls(MIXED_FORMS, **kwargs)
    return make


@pytest.fixture
def run_finder():
    def run(splitter, **config):
        config.setdefault("max_depth", 3)
        finder = FormFinder(splitter, FormFinderConfig(**config))
        finder.find()
        return finder
    return run
