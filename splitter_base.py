"""
Operator sources for the form finder.

``SplitterBase`` is the capability the search engine consumes: it supplies
operator matrices (full or already restricted to a subspace), the candidate
eigenvalues tried at each depth, the dimension of the part of a common
eigenspace that is explained by old classes, and it receives each completed
newform through ``accept``.

``EigenvalueTableSplitter`` is a synthetic source whose operators are built
from an explicit table of eigenvalue sequences and an eigenvector basis.  It
is used by the self-test and by the test-suite, and it is a convenient
reference when wiring a real modular-symbol space to the finder.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np

from modular_linalg import (
    BIGPRIME,
    Subspace,
    as_field_matrix,
    field_for,
    lift_vector,
    restrict,
)

# Operator index that addresses the conjugation (star) involution.
CONJUGATION_INDEX = -1


class SplitterBase(ABC):
    """Capability object queried by ``form_finder.FormFinder``."""

    @abstractmethod
    def matrix_dimension(self) -> int:
        """Dimension of the ambient space."""

    @abstractmethod
    def matrix_denominator(self) -> int:
        """Common denominator d: operator matrices are d times the true operators."""

    @abstractmethod
    def operator_matrix(self, index: int, use_dual: bool = True) -> Any:
        """Full matrix of the operator with the given depth index."""

    @abstractmethod
    def symmetry_matrix(self, sign: int = -1, use_dual: bool = True) -> Any:
        """Full matrix of the conjugation involution (scaled by the denominator)."""

    @abstractmethod
    def old_subspace_dimension(self, prefix: Sequence[int]) -> int:
        """Dimension of the old part of the common eigenspace for ``prefix``."""

    @abstractmethod
    def candidate_eigenvalues(self, depth: int) -> Sequence[int]:
        """Ordered eigenvalues to try for the operator at ``depth``."""

    @abstractmethod
    def accept(
        self,
        basis_plus: Tuple[int, ...],
        basis_minus: Optional[Tuple[int, ...]],
        eigenvalues: Sequence[int],
    ) -> None:
        """Sink for one completed newform."""

    def operator_matrix_restricted(self, index: int, subspace: Subspace) -> Any:
        """
        Operator ``index`` restricted to ``subspace`` (dual convention).

        The default materialises the full matrix first; sources that can work
        row by row should override this.
        """
        if index == CONJUGATION_INDEX:
            full = self.symmetry_matrix(-1, True)
        else:
            full = self.operator_matrix(index, True)
        return restrict(full, subspace)


@dataclass(frozen=True)
class EigenForm:
    """One row of an eigenvalue table: its eigenvalue at every depth."""

    eigs: Tuple[int, ...]
    old: bool = False

    def __post_init__(self) -> None:
        eigs = tuple(self.eigs)
        if not eigs:
            raise ValueError("eigs must be non-empty")
        if any(not isinstance(e, int) for e in eigs):
            raise TypeError("eigs must be integers")
        object.__setattr__(self, "eigs", eigs)


@dataclass(frozen=True)
class Newform:
    """What ``EigenvalueTableSplitter.accept`` records."""

    basis_plus: Tuple[int, ...]
    basis_minus: Optional[Tuple[int, ...]]
    eigenvalues: Tuple[int, ...]


class EigenvalueTableSplitter(SplitterBase):
    """
    Commuting operators with prescribed simultaneous eigenvectors.

    Column k of ``eigenvectors`` (E) carries form k // m, where m = 1 in plus
    mode and m = 2 otherwise; with m = 2 the even column is the +1 and the odd
    column the -1 eigenvector of conjugation.  In the dual convention the
    operator at depth i is

        E diag(d * a_i(form)) E^{-1}

    with d the denominator; ``use_dual=False`` returns its transpose.
    """

    def __init__(
        self,
        forms: Sequence[EigenForm],
        *,
        eigenvectors: Optional[Sequence[Sequence[int]]] = None,
        plus: bool = True,
        denominator: int = 1,
        candidates: Optional[Sequence[int]] = None,
        modulus: int = BIGPRIME,
    ) -> None:
        if not forms:
            raise ValueError("at least one form is required")
        if not isinstance(denominator, int) or denominator < 1:
            raise ValueError(f"denominator must be int >= 1, got {denominator!r}")
        self._forms: Tuple[EigenForm, ...] = tuple(forms)
        self._plus = bool(plus)
        self._mult = 1 if self._plus else 2
        self._dim = len(self._forms) * self._mult
        self._denom = int(denominator)
        self._candidates = None if candidates is None else [int(c) for c in candidates]
        self._p = int(modulus)
        self._gf = field_for(self._p)
        self._num_operators = min(len(f.eigs) for f in self._forms)

        if eigenvectors is None:
            eigenvectors = np.identity(self._dim, dtype=np.int64).tolist()
        self._E = as_field_matrix(eigenvectors, self._p)
        if self._E.shape != (self._dim, self._dim):
            raise ValueError(f"eigenvectors must be {self._dim} x {self._dim}, got {self._E.shape}")
        try:
            self._E_inv = np.linalg.inv(self._E)
        except np.linalg.LinAlgError as exc:
            raise ValueError(f"eigenvectors must be invertible modulo {self._p}") from exc

        self._lock = threading.Lock()
        self.requests: Counter = Counter()
        self.newforms: List[Newform] = []

    # ---------------------------------------------------------------- helpers

    def _count(self, name: str, index: int) -> None:
        with self._lock:
            self.requests[(name, int(index))] += 1

    def _diagonal(self, values: Sequence[int]):
        return self._gf(np.diag([int(v) % self._p for v in values]).astype(np.int64))

    def _operator_values(self, index: int) -> List[int]:
        if not 0 <= index < self._num_operators:
            raise IndexError(f"no operator with index {index}; the table has {self._num_operators}")
        values: List[int] = []
        for f in self._forms:
            values.extend([f.eigs[index] * self._denom] * self._mult)
        return values

    def _conjugation_values(self) -> List[int]:
        if self._plus:
            return [self._denom] * self._dim
        return [self._denom, -self._denom] * len(self._forms)

    def _values(self, index: int) -> List[int]:
        if index == CONJUGATION_INDEX:
            return self._conjugation_values()
        return self._operator_values(index)

    def _full(self, values: Sequence[int], use_dual: bool):
        m = self._E @ self._diagonal(values) @ self._E_inv
        return m if use_dual else m.T.copy()

    # ------------------------------------------------------------- capability

    @property
    def modulus(self) -> int:
        return self._p

    @property
    def num_operators(self) -> int:
        return self._num_operators

    def matrix_dimension(self) -> int:
        return self._dim

    def matrix_denominator(self) -> int:
        return self._denom

    def operator_matrix(self, index: int, use_dual: bool = True):
        self._count("operator_matrix", index)
        return self._full(self._values(index), use_dual)

    def symmetry_matrix(self, sign: int = -1, use_dual: bool = True):
        if sign != CONJUGATION_INDEX:
            raise ValueError(f"only the conjugation operator (sign {CONJUGATION_INDEX}) is available, got {sign}")
        self._count("symmetry_matrix", sign)
        return self._full(self._conjugation_values(), use_dual)

    def operator_matrix_restricted(self, index: int, subspace: Subspace):
        # Only the pivot rows of E D E^{-1} are formed.
        self._count("operator_matrix_restricted", index)
        values = self._values(index)
        if subspace.dim == 0:
            return self._gf.Zeros((0, 0))
        rows = self._E[list(subspace.pivots), :]
        return rows @ self._diagonal(values) @ (self._E_inv @ subspace.basis)

    def old_subspace_dimension(self, prefix: Sequence[int]) -> int:
        key = tuple(int(e) for e in prefix)
        n = len(key)
        return sum(self._mult for f in self._forms if f.old and f.eigs[:n] == key)

    def candidate_eigenvalues(self, depth: int) -> Sequence[int]:
        if self._candidates is not None:
            return list(self._candidates)
        if not 0 <= depth < self._num_operators:
            return []
        bound = max(abs(f.eigs[depth]) for f in self._forms)
        return list(range(-bound, bound + 1))

    def accept(
        self,
        basis_plus: Tuple[int, ...],
        basis_minus: Optional[Tuple[int, ...]],
        eigenvalues: Sequence[int],
    ) -> None:
        record = Newform(
            basis_plus=tuple(int(x) for x in basis_plus),
            basis_minus=None if basis_minus is None else tuple(int(x) for x in basis_minus),
            eigenvalues=tuple(int(e) for e in eigenvalues),
        )
        with self._lock:
            self.newforms.append(record)

    # ---------------------------------------------------------- expectations

    def expected_basis(self, form_index: int) -> Tuple[Tuple[int, ...], Optional[Tuple[int, ...]]]:
        """Primitive eigenvector(s) of a form in the dual convention."""
        if not 0 <= form_index < len(self._forms):
            raise IndexError(f"form index {form_index} out of range")
        col = form_index * self._mult
        columns = self._E.view(np.ndarray)
        plus_vec = lift_vector([int(x) for x in columns[:, col]], self._p)
        if self._plus:
            return plus_vec, None
        minus_vec = lift_vector([int(x) for x in columns[:, col + 1]], self._p)
        return plus_vec, minus_vec


__all__ = [
    "CONJUGATION_INDEX",
    "EigenForm",
    "EigenvalueTableSplitter",
    "Newform",
    "SplitterBase",
]
