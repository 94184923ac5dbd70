"""
Discretizations of the Zakharov-Shabat scattering problem.

    dv/dt = [[-jλ, q(t)], [r(t), jλ]] v,    r = -kappa * conj(q)

Each sample q[n] is treated as constant on [t_n - ε/2, t_n + ε/2]. The
splitting-type discretizations approximate the transfer matrix of one sample
by a 2x2 matrix whose entries are polynomials in

    z = exp(2jλε / degree),

after pulling out scalar phase factors. The product of all D of these
matrices is the combined transfer polynomial S(z), from which

    a(λ) = S11(z)
    b(λ) = S21(z) * exp(-jλ(ε(D + boundary_shift) + T0 + T1))

The upper half plane Im λ > 0 corresponds to the unit disk |z| < 1.

Registered schemes:
- 2SPLIT2A: Strang splitting E(ε/2) exp(εQ) E(ε/2), degree 1
- 2SPLIT4A: Richardson extrapolation (4/3) S(ε/2)^2 - (1/3) S(ε) of the
  Strang step S, degree 4
- BO: exact exponential exp(εA(λ)) of each sample (Boffetta and Osborne).
  Not polynomial in z; only used for refinement and amplitudes.

Reference: Wahls and Poor, Proc. ICASSP 2013; Prins and Wahls, Proc.
ICASSP 2018; Boffetta and Osborne, J. Comput. Phys. 102(2), 1992.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np

from ..config import REFINEMENT_DISCRETIZATION, SMALL_ARGUMENT
from ..errors import InvalidInputError, UnsupportedDiscretizationError
from ..misc import check_kappa


@dataclass(frozen=True)
class Discretization:
    """
    A registered discretization scheme.

    Attributes
    ----------
    name : str
        Identifier, e.g. "2SPLIT4A".
    degree : int
        Polynomial degree in z of one elementary matrix (0 if not polynomial).
    boundary_shift : float
        Phase shift (in units of ε) between S21 and b, see module docstring.
    order : int
        Order of the splitting for a piecewise constant signal.
    polynomial : bool
        Whether the elementary matrices are polynomials in z.
    """
    name: str
    degree: int
    boundary_shift: float
    order: int
    polynomial: bool = True


SPLIT2A = Discretization("2SPLIT2A", degree=1, boundary_shift=1.0, order=2)
SPLIT4A = Discretization("2SPLIT4A", degree=4, boundary_shift=0.5, order=4)
BO = Discretization(REFINEMENT_DISCRETIZATION, degree=0, boundary_shift=0.0,
                    order=2, polynomial=False)

DISCRETIZATIONS: Dict[str, Discretization] = {
    d.name: d for d in (SPLIT2A, SPLIT4A, BO)
}
"""Registry of all known discretizations, keyed by name."""


def get_discretization(name) -> Discretization:
    """
    Look up a discretization by name (case-insensitive).

    Parameters
    ----------
    name : str or Discretization
        Scheme identifier.

    Returns
    -------
    Discretization

    Raises
    ------
    UnsupportedDiscretizationError
        If the name is not registered.
    """
    if isinstance(name, Discretization):
        return name
    key = str(name).upper()
    if key not in DISCRETIZATIONS:
        raise UnsupportedDiscretizationError(
            f"Unknown discretization {name!r}, expected one of "
            f"{sorted(DISCRETIZATIONS)}"
        )
    return DISCRETIZATIONS[key]


def require_polynomial(name) -> Discretization:
    """Return the discretization, raising if it is not polynomial in z."""
    disc = get_discretization(name)
    if not disc.polynomial:
        raise UnsupportedDiscretizationError(
            f"Discretization {disc.name} has no polynomial transfer matrix"
        )
    return disc


def discretization_degree(name) -> int:
    """Polynomial degree in z of one elementary transfer matrix."""
    return require_polynomial(name).degree


def lambda_to_z(lam, eps: float, degree: int):
    """Map λ to z = exp(2jλε/degree)."""
    return np.exp(2j * np.asarray(lam) * eps / degree)


def z_to_lambda(z, eps: float, degree: int):
    """
    Map z back to λ using the principal branch of the logarithm.

    Re λ is therefore restricted to (-π·degree/(2ε), π·degree/(2ε)].
    """
    return degree * np.log(np.asarray(z, dtype=complex)) / (2j * eps)


def boundary_phase(lam, eps: float, D: int, T: Tuple[float, float], name):
    """
    Phase factor that turns S21(z) into b(λ).

    Parameters
    ----------
    lam : complex or np.ndarray
        Spectral parameter(s).
    eps : float
        Step size.
    D : int
        Number of samples.
    T : tuple of float
        Positions (T0, T1) of the first and last sample.
    name : str
        Discretization identifier.
    """
    disc = require_polynomial(name)
    lam = np.asarray(lam)
    return np.exp(-1j * lam * (eps * (D + disc.boundary_shift) + T[0] + T[1]))


def cosh_sinhc(w2, h):
    """
    Return cosh(w h) and sinh(w h)/w for w = sqrt(w2).

    Both are even in w, so no branch of the square root has to be chosen.
    A Taylor series is used for |w2 h²| small.

    Parameters
    ----------
    w2 : complex or np.ndarray
        Square of the exponent rate.
    h : float
        Step.

    Returns
    -------
    (np.ndarray, np.ndarray)
    """
    w2 = np.asarray(w2, dtype=complex)
    x = w2 * h * h
    small = np.abs(x) < SMALL_ARGUMENT ** 2
    w = np.sqrt(np.where(small, 1.0, w2))
    wh = w * h
    with np.errstate(over="ignore", invalid="ignore"):
        ch = np.where(small, 1.0 + x / 2 + x * x / 24, np.cosh(wh))
        sc = np.where(small, h * (1.0 + x / 6 + x * x / 120), np.sinh(wh) / w)
    return ch, sc


def _expm_offdiag(q: np.ndarray, r: np.ndarray, h: float) -> np.ndarray:
    """exp(h [[0, q], [r, 0]]) for each sample, shape (D, 2, 2)."""
    ch, sc = cosh_sinhc(q * r, h)
    G = np.empty((len(q), 2, 2), dtype=complex)
    G[:, 0, 0] = ch
    G[:, 0, 1] = q * sc
    G[:, 1, 0] = r * sc
    G[:, 1, 1] = ch
    return G


def _split2a_matrices(q, r, eps):
    # diag(1, z) exp(εQ)
    G = _expm_offdiag(q, r, eps)
    M = np.zeros((len(q), 2, 2, 2), dtype=complex)
    M[:, 0, :, 0] = G[:, 0, :]
    M[:, 1, :, 1] = G[:, 1, :]
    return M


def _split4a_matrices(q, r, eps):
    # diag(1, z^2) [(4/3) H diag(1, z^2) H - (1/3) diag(1, z) G diag(1, z)]
    H = _expm_offdiag(q, r, eps / 2)
    G = _expm_offdiag(q, r, eps)

    C = np.zeros((len(q), 2, 2, 3), dtype=complex)
    C[..., 0] = (4.0 / 3.0) * np.einsum("ni,nj->nij", H[:, :, 0], H[:, 0, :])
    C[..., 2] = (4.0 / 3.0) * np.einsum("ni,nj->nij", H[:, :, 1], H[:, 1, :])
    C[:, 0, 0, 0] -= G[:, 0, 0] / 3.0
    C[:, 0, 1, 1] -= G[:, 0, 1] / 3.0
    C[:, 1, 0, 1] -= G[:, 1, 0] / 3.0
    C[:, 1, 1, 2] -= G[:, 1, 1] / 3.0

    M = np.zeros((len(q), 2, 2, 5), dtype=complex)
    M[:, 0, :, 0:3] = C[:, 0, :, :]
    M[:, 1, :, 2:5] = C[:, 1, :, :]
    return M


_BUILDERS = {
    "2SPLIT2A": _split2a_matrices,
    "2SPLIT4A": _split4a_matrices,
}


def elementary_matrices(q, eps: float, kappa: int, name) -> np.ndarray:
    """
    Compute the elementary transfer matrices of all samples.

    Parameters
    ----------
    q : array_like
        Complex samples, length D.
    eps : float
        Step size ε > 0.
    kappa : int
        +1 (focusing) or -1 (defocusing).
    name : str
        Polynomial discretization identifier.

    Returns
    -------
    np.ndarray
        Array of shape (D, 2, 2, degree + 1). Entry [n, i, j, k] is the
        coefficient of z^k in entry (i, j) of the matrix of sample n.

    Raises
    ------
    UnsupportedDiscretizationError
        If the discretization is unknown or not polynomial.
    InvalidInputError
        If eps is not positive or kappa is not ±1.
    """
    disc = require_polynomial(name)
    if not eps > 0:
        raise InvalidInputError(f"Step size must be positive, got {eps}")
    check_kappa(kappa)

    q = np.asarray(q, dtype=complex).ravel()
    r = -kappa * np.conj(q)
    return _BUILDERS[disc.name](q, r, eps)
