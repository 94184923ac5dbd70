"""
Fast computation of the polynomial approximation of the combined
scattering matrix.

The D elementary transfer matrices are multiplied together by recursive
halving: both halves are assembled independently and the two results are
combined with one 2x2 polynomial matrix product. Polynomial lengths double
with each level, so with FFT-based convolution the total cost is
O(D log² D).

To keep the coefficients representable, the product is rescaled by a power
of two after every merge and the exponent is accumulated:

    true matrix = coeffs * 2**W

Reference: Wahls and Poor, "Introducing the fast nonlinear Fourier
transform", Proc. ICASSP 2013.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from ..config import DEFAULT_DISCRETIZATION, OVERFLOW_EXPONENT
from ..errors import InvalidInputError, ScratchAllocationError
from .discretization import elementary_matrices, require_polynomial
from .poly import poly_eval, poly_matmul2x2


@dataclass
class CombinedPolynomial:
    """
    Combined transfer polynomial S(z) of a sampled signal.

    Attributes
    ----------
    coeffs : np.ndarray
        Shape (2, 2, degree + 1), ascending powers of z.
    W : int
        Scaling exponent; the true matrix is coeffs * 2**W.
    discretization : str
        Name of the discretization the elementary matrices came from.
    eps : float
        Step size of the signal.
    D : int
        Number of samples.
    """
    coeffs: np.ndarray
    W: int
    discretization: str
    eps: float
    D: int

    @property
    def degree(self) -> int:
        """Polynomial degree of the entries."""
        return self.coeffs.shape[-1] - 1

    @property
    def a_coeffs(self) -> np.ndarray:
        """Coefficients of S11, whose zeros are the bound states."""
        return self.coeffs[0, 0]

    @property
    def b_coeffs(self) -> np.ndarray:
        """Coefficients of S21."""
        return self.coeffs[1, 0]

    def evaluate(self, z) -> np.ndarray:
        """
        Evaluate the true matrix coeffs(z) * 2**W.

        Returns
        -------
        np.ndarray
            Shape (2, 2) + np.shape(z).
        """
        z = np.asarray(z, dtype=complex)
        S = np.empty((2, 2) + z.shape, dtype=complex)
        for i in range(2):
            for j in range(2):
                S[i, j] = poly_eval(self.coeffs[i, j], z)
        return _ldexp(S, self.W)


def _ldexp(x: np.ndarray, e: int) -> np.ndarray:
    return np.ldexp(x.real, e) + 1j * np.ldexp(x.imag, e)


def _rescale(C: np.ndarray, W: int, normalize: bool) -> Tuple[np.ndarray, int]:
    """Scale C by a power of two so its largest coefficient lies in [1/2, 1)."""
    m = np.max(np.abs(C))
    if m == 0:
        return C, W
    if not np.isfinite(m):
        raise InvalidInputError("Non-finite coefficients in transfer matrix")
    if not normalize and 2.0 ** -OVERFLOW_EXPONENT <= m <= 2.0 ** OVERFLOW_EXPONENT:
        return C, W
    _, e = np.frexp(m)
    e = int(e)
    if e == 0:
        return C, W
    return _ldexp(C, -e), W + e


def _assemble(M: np.ndarray, lo: int, hi: int,
              normalize: bool) -> Tuple[np.ndarray, int]:
    if hi - lo == 1:
        return _rescale(M[lo].copy(), 0, normalize)

    mid = (lo + hi) // 2
    left, w_left = _assemble(M, lo, mid, normalize)
    right, w_right = _assemble(M, mid, hi, normalize)

    # Later samples act last: S = S_right @ S_left
    C = poly_matmul2x2(right, left)
    return _rescale(C, w_left + w_right, normalize)


def assemble(matrices: np.ndarray, normalize: bool = True) -> Tuple[np.ndarray, int]:
    """
    Multiply a sequence of 2x2 polynomial matrices in spectral order.

    Parameters
    ----------
    matrices : np.ndarray
        Shape (D, 2, 2, n). matrices[0] acts first.
    normalize : bool
        If True, normalise after every merge. Otherwise only rescale when
        the coefficients threaten to overflow or underflow.

    Returns
    -------
    coeffs : np.ndarray
        Shape (2, 2, D*(n-1) + 1).
    W : int
        Scaling exponent.
    """
    matrices = np.asarray(matrices)
    if matrices.ndim != 4 or matrices.shape[1:3] != (2, 2) or matrices.shape[0] == 0:
        raise InvalidInputError(
            f"Expected elementary matrices of shape (D, 2, 2, n), got {matrices.shape}"
        )
    try:
        return _assemble(matrices.astype(complex, copy=False), 0,
                         matrices.shape[0], normalize)
    except MemoryError as exc:
        raise ScratchAllocationError(
            f"Could not allocate scratch for {matrices.shape[0]} samples"
        ) from exc


def fscatter_numel(D: int, discretization=DEFAULT_DISCRETIZATION) -> int:
    """
    Number of coefficients in the combined transfer polynomial.

    Returns 4 * (D * degree + 1).
    """
    degree = require_polynomial(discretization).degree
    return 4 * (D * degree + 1)


def fscatter(q, eps: float, kappa: int,
             discretization=DEFAULT_DISCRETIZATION,
             normalize: bool = True,
             verbose: bool = False) -> CombinedPolynomial:
    """
    Compute the combined transfer polynomial of a sampled signal.

    Parameters
    ----------
    q : array_like
        Complex samples q(t_0), ..., q(t_{D-1}).
    eps : float
        Step size.
    kappa : int
        +1 (focusing) or -1 (defocusing).
    discretization : str
        Polynomial discretization identifier.
    normalize : bool
        Normalise intermediate products (see `assemble`).
    verbose : bool
        If True, print progress.

    Returns
    -------
    CombinedPolynomial

    Raises
    ------
    InvalidInputError
        If q is empty or not finite.
    UnsupportedDiscretizationError
        If the discretization is not polynomial or unknown.
    """
    disc = require_polynomial(discretization)
    q = np.asarray(q, dtype=complex).ravel()
    if len(q) == 0:
        raise InvalidInputError("At least one sample is required")
    if not np.all(np.isfinite(q)):
        raise InvalidInputError("Samples must be finite")

    M = elementary_matrices(q, eps, kappa, disc)
    coeffs, W = assemble(M, normalize=normalize)

    if verbose:
        print(f"fscatter: D={len(q)}, {disc.name}, degree={coeffs.shape[-1] - 1}, W={W}")

    return CombinedPolynomial(coeffs=coeffs, W=W, discretization=disc.name,
                              eps=float(eps), D=len(q))
