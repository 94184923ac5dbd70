"""
Analytic test case: the sech pulse q(t) = A sech(t).

For this signal the scattering data are known in closed form
(Satsuma and Yajima, Prog. Theor. Phys. Suppl. 55, 1974):

    a(λ) = Γ(1/2 - jλ)² / [Γ(1/2 - jλ - A) Γ(1/2 - jλ + A)]

The bound states are λ_n = j(A - 1/2 - n) for n = 0, 1, ... with
A - 1/2 - n > 0, and |b(λ_n)| = 1. Reference values are computed with
mpmath in extended precision.
"""

from typing import Tuple

import numpy as np
from mpmath import mp, mpc, mpf, diff, gamma, rgamma

from .config import MPMATH_PRECISION, SECH_INTERVAL
from .errors import InvalidInputError
from .misc import sech


# Set precision for mpmath
mp.dps = MPMATH_PRECISION


def sech_signal(D: int, A: float,
                T: Tuple[float, float] = SECH_INTERVAL) -> Tuple[np.ndarray, Tuple[float, float]]:
    """
    Samples of A sech(t) at D equidistant points spanning T.

    >>> q, T = sech_signal(5, 1.0, (-1.0, 1.0))
    >>> float(q[2].real)
    1.0
    """
    if D < 2:
        raise InvalidInputError(f"At least two samples are required, got D={D}")
    t = np.linspace(T[0], T[1], D)
    return (A * sech(t)).astype(complex), (float(T[0]), float(T[1]))


def sech_bound_states(A: float) -> np.ndarray:
    """Exact bound states j(A - 1/2 - n), largest imaginary part first."""
    n = np.arange(int(np.ceil(A - 0.5)))
    im = A - 0.5 - n
    return 1j * im[im > 0]


def _a_exact(lam, A):
    s = mpf(0.5) - 1j * mpc(lam)
    return gamma(s) ** 2 * rgamma(s - A) * rgamma(s + A)


def sech_a(lam, A: float) -> np.ndarray:
    """
    Exact a(λ) of A sech(t) for Im λ > -1/2.

    Parameters
    ----------
    lam : array_like
        Spectral parameters.
    A : float
        Amplitude.

    Returns
    -------
    np.ndarray
        Complex values, same shape as lam.
    """
    lam = np.asarray(lam, dtype=complex)
    A = mpf(A)
    out = [complex(_a_exact(complex(x), A)) for x in lam.ravel()]
    return np.array(out, dtype=complex).reshape(lam.shape)


def sech_a_prime(lam, A: float) -> np.ndarray:
    """Exact da/dλ of A sech(t) (numerical differentiation in mpmath)."""
    lam = np.asarray(lam, dtype=complex)
    A = mpf(A)
    out = [complex(diff(lambda x: _a_exact(x, A), mpc(complex(x))))
           for x in lam.ravel()]
    return np.array(out, dtype=complex).reshape(lam.shape)


def sech_residue_magnitudes(A: float) -> np.ndarray:
    """|b(λ_n)/a'(λ_n)| = 1/|a'(λ_n)| at the exact bound states."""
    return 1.0 / np.abs(sech_a_prime(sech_bound_states(A), A))
