"""Exact GF(p) linear algebra for the form finder.

The splitting engine only needs a handful of primitives: eigenspaces of a
square matrix, intersection of nested subspaces (``combine``), restriction of
an operator to an invariant subspace, and lifting of a final eigenvector from
GF(p) back to a primitive integer vector.  Matrices are ``galois`` field
arrays over GF(p); plain ``numpy`` integer arrays are used while assembling
kernels.

Subspace convention
-------------------
A subspace of GF(p)^n with dimension d is stored as an n x d basis matrix whose
*columns* span it, together with d pivot rows at which the basis restricts to
the d x d identity.  Matrices act on column vectors.  With this convention

    restrict(m, s) = m[pivots(s), :] @ basis(s)

is the matrix of ``m`` on ``s`` whenever ``s`` is m-invariant, and a subspace
expressed in the coordinates of another one composes by a single product
(see ``combine``).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from fractions import Fraction
from functools import lru_cache
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import galois
import numpy as np

_logger = logging.getLogger(__name__)

# 2^31 - 1.  (p - 1)^2 still fits a signed 64-bit word.
BIGPRIME = 2147483647


class LinearAlgebraError(RuntimeError):
    """Shape or field mismatch handed to the backend (caller precondition)."""


# ---------------------------------------------------------------------------
# Field construction
# ---------------------------------------------------------------------------


@lru_cache(maxsize=None)
def field_for(p: int = BIGPRIME):
    """Return the (cached) galois field class GF(p)."""
    if not isinstance(p, int) or p < 2:
        raise ValueError(f"p must be int >= 2, got {p!r}")
    return galois.GF(int(p))


def modulus_of(m: Any) -> int:
    return int(type(m).characteristic)


def as_field_matrix(rows: Any, p: int = BIGPRIME):
    """
    Coerce an integer matrix (nested lists or ndarray) into GF(p).

    Entries may be any Python integers, including negatives; they are
    reduced modulo p before construction.
    """
    GF = field_for(p)
    reduced = [[int(x) % p for x in row] for row in rows]
    if not reduced:
        return GF.Zeros((0, 0))
    width = len(reduced[0])
    if any(len(row) != width for row in reduced):
        raise LinearAlgebraError("matrix is not rectangular")
    return GF(np.array(reduced, dtype=np.int64).reshape(len(reduced), width))


def to_int_rows(m: Any) -> List[List[int]]:
    """Field matrix -> list of rows of residues in [0, p)."""
    return [[int(x) for x in row] for row in m.view(np.ndarray)]


# ---------------------------------------------------------------------------
# Subspaces
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class Subspace:
    """
    Column-basis subspace in pivot form.

    basis:  n x d field array
    pivots: d row indices with basis[pivots, :] == identity
    """

    basis: Any
    pivots: Tuple[int, ...]

    def __post_init__(self) -> None:
        if self.basis.ndim != 2:
            raise LinearAlgebraError("subspace basis must be a 2-d array")
        if self.basis.shape[1] != len(self.pivots):
            raise LinearAlgebraError(
                f"basis has {self.basis.shape[1]} columns but {len(self.pivots)} pivots"
            )

    @property
    def dim(self) -> int:
        return int(self.basis.shape[1])

    @property
    def ambient_dim(self) -> int:
        return int(self.basis.shape[0])


def dim(s: Subspace) -> int:
    return s.dim


def basis(s: Subspace):
    return s.basis


def pivots(s: Subspace) -> Tuple[int, ...]:
    return s.pivots


def zero_subspace(GF, n: int) -> Subspace:
    return Subspace(basis=GF.Zeros((n, 0)), pivots=tuple())


def basis_vector(s: Subspace, i: int = 0) -> List[int]:
    """Column i of the basis as residues."""
    if not 0 <= i < s.dim:
        raise LinearAlgebraError(f"basis index {i} out of range for dimension {s.dim}")
    return [int(x) for x in s.basis.view(np.ndarray)[:, i]]


# ---------------------------------------------------------------------------
# Kernels, eigenspaces, combine, restrict
# ---------------------------------------------------------------------------


def kernel(m: Any) -> Subspace:
    """
    Right kernel {x : m x = 0} in pivot form.

    From the reduced row echelon form R of m: every non-pivot column f gives
    one basis vector with a 1 in row f and -R[i, f] in the row of the i-th
    pivot column.  The free columns are therefore the subspace pivots.
    """
    GF = type(m)
    p = int(GF.characteristic)
    if m.ndim != 2:
        raise LinearAlgebraError("kernel expects a 2-d matrix")
    n_cols = int(m.shape[1])

    if m.shape[0] == 0:
        rref = np.zeros((0, n_cols), dtype=np.int64)
    else:
        rref = m.row_reduce().view(np.ndarray)

    pivot_cols: List[int] = []
    for row in rref:
        nz = np.flatnonzero(row)
        if nz.size == 0:
            break
        pivot_cols.append(int(nz[0]))

    pivot_set = set(pivot_cols)
    free = [c for c in range(n_cols) if c not in pivot_set]

    b = np.zeros((n_cols, len(free)), dtype=np.int64)
    for j, f in enumerate(free):
        b[f, j] = 1
        for i, c in enumerate(pivot_cols):
            b[c, j] = (-int(rref[i, f])) % p
    return Subspace(basis=GF(b), pivots=tuple(free))


def eigenspace(m: Any, value: int) -> Subspace:
    """Kernel of m - value * I; value is any integer (reduced mod p)."""
    if m.ndim != 2 or m.shape[0] != m.shape[1]:
        raise LinearAlgebraError(f"eigenspace needs a square matrix, got shape {m.shape}")
    GF = type(m)
    lam = GF(int(value) % int(GF.characteristic))
    return kernel(m - lam * GF.Identity(int(m.shape[0])))


def combine(s1: Subspace, s2: Subspace) -> Subspace:
    """
    Compose nested subspaces: s2 is given in the coordinates of s1.

    The result lives in the ambient space of s1; its pivots are the s1 pivots
    selected by the s2 pivots.
    """
    if s2.ambient_dim != s1.dim:
        raise LinearAlgebraError(
            f"cannot combine: inner subspace lives in dimension {s2.ambient_dim}, outer has dimension {s1.dim}"
        )
    if s2.dim == 0:
        return zero_subspace(type(s1.basis), s1.ambient_dim)
    return Subspace(
        basis=s1.basis @ s2.basis,
        pivots=tuple(s1.pivots[i] for i in s2.pivots),
    )


def restrict(m: Any, s: Subspace):
    """Matrix of m on the m-invariant subspace s (s.dim x s.dim)."""
    if m.shape[0] != s.ambient_dim:
        raise LinearAlgebraError(
            f"matrix has {m.shape[0]} rows but subspace lives in dimension {s.ambient_dim}"
        )
    if s.dim == m.shape[0]:
        return m
    if s.dim == 0:
        return type(m).Zeros((0, 0))
    return m[list(s.pivots), :] @ s.basis


def restrict_dense(m: Any, s: Subspace):
    """Same as ``restrict`` but through the full product m @ basis(s)."""
    if s.dim == 0:
        return type(m).Zeros((0, 0))
    return (m @ s.basis)[list(s.pivots), :]


@dataclass(frozen=True)
class RestrictionCheck:
    """Outcome of ``check_restriction``; ``ok`` is the conjunction."""

    ok: bool
    invariant: bool
    matches_dense: bool
    detail: str = ""


def check_restriction(m: Any, s: Subspace, restricted: Optional[Any] = None) -> RestrictionCheck:
    """
    Verify a restriction against the full matrix.

      - invariance: m @ B == B @ R
      - R equals the dense restriction (m @ B)[pivots]

    ``restricted`` is the matrix under test; it is computed with ``restrict``
    when omitted.  Never raises on a mismatch.
    """
    r = restrict(m, s) if restricted is None else restricted
    if s.dim == 0:
        return RestrictionCheck(ok=True, invariant=True, matches_dense=True, detail="zero subspace")
    if r.shape != (s.dim, s.dim):
        return RestrictionCheck(
            ok=False,
            invariant=False,
            matches_dense=False,
            detail=f"restricted matrix has shape {r.shape}, expected {(s.dim, s.dim)}",
        )
    left = (m @ s.basis).view(np.ndarray)
    right = (s.basis @ r).view(np.ndarray)
    invariant = bool(np.array_equal(left, right))
    matches = bool(np.array_equal(r.view(np.ndarray), restrict_dense(m, s).view(np.ndarray)))
    detail = ""
    if not invariant:
        detail = "subspace not invariant"
    elif not matches:
        detail = "restricted matrix differs from dense restriction"
    return RestrictionCheck(ok=invariant and matches, invariant=invariant, matches_dense=matches, detail=detail)


# ---------------------------------------------------------------------------
# Lifting GF(p) vectors to primitive integer vectors
# ---------------------------------------------------------------------------


def rational_reconstruct(a: int, p: int) -> Optional[Fraction]:
    """
    Find r/s with |r|, |s| <= sqrt(p/2) and r = s*a (mod p), or None.

    Half extended Euclid on (p, a); the invariant r_i = s_i * a (mod p) holds
    for every remainder pair.
    """
    bound = math.isqrt(p // 2)
    r0, r1 = p, int(a) % p
    s0, s1 = 0, 1
    while r1 > bound:
        q = r0 // r1
        r0, r1 = r1, r0 - q * r1
        s0, s1 = s1, s0 - q * s1
    if s1 == 0 or abs(s1) > bound:
        return None
    return Fraction(r1, s1)


def _symmetric_lift(x: int, p: int) -> int:
    r = int(x) % p
    if r > p // 2:
        r -= p
    return r


def make_primitive(v: Iterable[int]) -> Tuple[int, ...]:
    """Divide out the content; the first non-zero entry becomes positive."""
    ints = [int(x) for x in v]
    g = math.gcd(*ints) if ints else 0
    if g == 0:
        return tuple(ints)
    ints = [x // g for x in ints]
    for x in ints:
        if x != 0:
            if x < 0:
                ints = [-y for y in ints]
            break
    return tuple(ints)


def lift_vector(v: Sequence[int], p: int) -> Tuple[int, ...]:
    """
    Lift a GF(p) vector to the primitive integer vector it represents.

    Each residue goes through rational reconstruction, denominators are
    cleared, and the result is made primitive.  When some entry cannot be
    reconstructed the symmetric residues are used instead (logged).
    """
    fracs: List[Fraction] = []
    for x in v:
        q = rational_reconstruct(int(x), p)
        if q is None:
            _logger.warning("Unable to lift eigenvector from mod %d; using symmetric residues", p)
            return make_primitive(_symmetric_lift(int(y), p) for y in v)
        fracs.append(q)
    den = 1
    for q in fracs:
        den = den * q.denominator // math.gcd(den, q.denominator)
    return make_primitive(int(q * den) for q in fracs)


__all__ = [
    "BIGPRIME",
    "LinearAlgebraError",
    "RestrictionCheck",
    "Subspace",
    "as_field_matrix",
    "basis",
    "basis_vector",
    "check_restriction",
    "combine",
    "dim",
    "eigenspace",
    "field_for",
    "kernel",
    "lift_vector",
    "make_primitive",
    "modulus_of",
    "pivots",
    "rational_reconstruct",
    "restrict",
    "restrict_dense",
    "to_int_rows",
    "zero_subspace",
]
