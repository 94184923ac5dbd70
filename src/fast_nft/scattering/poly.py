"""
Polynomial kernels for the fast scattering step.

Polynomials are stored as coefficient arrays in ascending powers, i.e.
c[k] is the coefficient of z^k. A 2x2 polynomial matrix is an array of
shape (2, 2, n).

Convolutions are summed directly for short outputs and computed with
scipy.fft above FFT_CROSSOVER_LENGTH.
"""

import numpy as np
from numpy.polynomial import polynomial as P
from scipy import fft

from ..config import FFT_CROSSOVER_LENGTH


def poly_conv(a: np.ndarray, b: np.ndarray,
              crossover: int = FFT_CROSSOVER_LENGTH) -> np.ndarray:
    """
    Multiply two polynomials.

    Parameters
    ----------
    a, b : np.ndarray
        Coefficients in ascending powers.
    crossover : int
        Output length from which the FFT is used.

    Returns
    -------
    np.ndarray
        Coefficients of a*b, length len(a) + len(b) - 1.
    """
    a = np.asarray(a, dtype=complex)
    b = np.asarray(b, dtype=complex)
    n = len(a) + len(b) - 1
    if n < crossover:
        return np.convolve(a, b)
    nfft = fft.next_fast_len(n)
    return fft.ifft(fft.fft(a, nfft) * fft.fft(b, nfft))[:n]


def poly_matmul2x2(A: np.ndarray, B: np.ndarray,
                   crossover: int = FFT_CROSSOVER_LENGTH) -> np.ndarray:
    """
    Multiply two 2x2 polynomial matrices, C = A B.

    The lengths of A and B may differ. In the fast path each of the eight
    input entries is transformed once and each of the four output entries
    is transformed back once.

    Parameters
    ----------
    A : np.ndarray
        Shape (2, 2, la).
    B : np.ndarray
        Shape (2, 2, lb).

    Returns
    -------
    np.ndarray
        Shape (2, 2, la + lb - 1).
    """
    la = A.shape[-1]
    lb = B.shape[-1]
    n = la + lb - 1

    if n < crossover:
        C = np.empty((2, 2, n), dtype=complex)
        for i in range(2):
            for j in range(2):
                C[i, j] = np.convolve(A[i, 0], B[0, j]) + np.convolve(A[i, 1], B[1, j])
        return C

    nfft = fft.next_fast_len(n)
    FA = fft.fft(A, nfft, axis=-1)
    FB = fft.fft(B, nfft, axis=-1)
    FC = np.einsum("ikn,kjn->ijn", FA, FB)
    return fft.ifft(FC, axis=-1)[..., :n]


def poly_eval(c: np.ndarray, z) -> np.ndarray:
    """Evaluate the polynomial with ascending coefficients c at z (Horner)."""
    return P.polyval(np.asarray(z, dtype=complex), np.asarray(c, dtype=complex))
