"""
Small numerical helpers shared across the package.

Implements:
- Step size and interval validation
- Error measures (relative l1 error, Hausdorff distance)
- Signal energy by the trapezoidal rule
- Subsampling of a signal
"""

from typing import Tuple

import numpy as np

from .errors import InvalidInputError


def step_size(D: int, T: Tuple[float, float]) -> float:
    """
    Step size ε = (T1 - T0)/(D - 1) of D samples spanning T.

    Raises
    ------
    InvalidInputError
        If D < 2 or T0 >= T1.
    """
    if D < 2:
        raise InvalidInputError(f"At least two samples are required, got D={D}")
    if len(T) != 2 or not T[0] < T[1]:
        raise InvalidInputError(f"Expected T[0] < T[1], got T={tuple(T)}")
    return (T[1] - T[0]) / (D - 1)


def check_kappa(kappa) -> int:
    """
    Validate the nonlinearity sign: an integer +1 or -1.

    bool and float values are rejected even when they compare equal to ±1.
    """
    if (isinstance(kappa, (bool, np.bool_))
            or not isinstance(kappa, (int, np.integer))
            or kappa not in (1, -1)):
        raise InvalidInputError(f"kappa must be the integer +1 or -1, got {kappa!r}")
    return int(kappa)


def sech(x):
    """Hyperbolic secant, 1/cosh(x)."""
    return 1.0 / np.cosh(x)


def rel_err(numer, exact) -> float:
    """
    Relative l1 error sum|numer - exact| / sum|exact|.

    Returns the absolute l1 error if exact is zero.
    """
    numer = np.asarray(numer)
    exact = np.asarray(exact)
    denom = np.sum(np.abs(exact))
    err = np.sum(np.abs(numer - exact))
    return float(err / denom) if denom > 0 else float(err)


def hausdorff_dist(A, B) -> float:
    """
    Hausdorff distance between two finite sets of complex numbers.

    Returns 0 if both sets are empty and inf if exactly one is.
    """
    A = np.atleast_1d(np.asarray(A, dtype=complex))
    B = np.atleast_1d(np.asarray(B, dtype=complex))
    if len(A) == 0 and len(B) == 0:
        return 0.0
    if len(A) == 0 or len(B) == 0:
        return float("inf")
    d = np.abs(A[:, None] - B[None, :])
    return float(max(np.max(np.min(d, axis=1)), np.max(np.min(d, axis=0))))


def l2norm2(q, T: Tuple[float, float]) -> float:
    """
    Squared L2 norm of the signal by the trapezoidal rule.

        (ε/2)(|q_0|² + |q_{D-1}|²) + ε Σ_{n=1}^{D-2} |q_n|²
    """
    q = np.asarray(q)
    eps = step_size(len(q), T)
    e = np.abs(q) ** 2
    return float(eps * (np.sum(e) - (e[0] + e[-1]) / 2))


def downsample(q, T: Tuple[float, float],
               target_len: int) -> Tuple[np.ndarray, Tuple[float, float], int]:
    """
    Keep every s-th sample of q.

    The factor s = round(D / target_len) is at least 1; the result keeps
    at least two samples.

    Parameters
    ----------
    q : array_like
        Samples, D >= 2.
    T : tuple of float
        (T0, T1) of the original samples.
    target_len : int
        Desired number of samples.

    Returns
    -------
    qsub : np.ndarray
        The retained samples q[0], q[s], q[2s], ...
    Tsub : tuple of float
        Positions of the first and last retained sample.
    factor : int
        The subsampling factor s.
    """
    q = np.asarray(q, dtype=complex).ravel()
    D = len(q)
    eps = step_size(D, T)
    factor = max(1, int(round(D / max(int(target_len), 1))))
    factor = min(factor, D - 1)

    qsub = q[::factor].copy()
    last = (len(qsub) - 1) * factor
    return qsub, (T[0], T[0] + last * eps), factor
