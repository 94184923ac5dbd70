"""
Tests for the fast assembly of the combined transfer polynomial.
"""

import numpy as np
import pytest

from fast_nft.errors import InvalidInputError, UnsupportedDiscretizationError
from fast_nft.misc import step_size
from fast_nft.scattering.discretization import (
    boundary_phase,
    elementary_matrices,
    lambda_to_z,
)
from fast_nft.scattering.fscatter import assemble, fscatter, fscatter_numel
from fast_nft.scattering.poly import poly_matmul2x2
from fast_nft.scattering.propagation import evaluate_scattering
from fast_nft.testcases import sech_signal


def _scaled(C, W):
    return C * 2.0 ** W


def _random_signal(D, seed=0):
    rng = np.random.default_rng(seed)
    return rng.standard_normal(D) + 1j * rng.standard_normal(D)


# =============================================================================
# Assembly
# =============================================================================

class TestAssemble:
    """Test the recursive product of elementary matrices."""

    @pytest.mark.parametrize("split", [4, 3, 1])
    def test_composition_law(self, split):
        """The full product is the right part times the left part."""
        M = elementary_matrices(_random_signal(8), 0.1, 1, "2SPLIT4A")
        full, W = assemble(M)
        left, w_left = assemble(M[:split])
        right, w_right = assemble(M[split:])
        expected = _scaled(poly_matmul2x2(right, left), w_left + w_right)
        np.testing.assert_allclose(_scaled(full, W), expected,
                                   atol=1e-12 * np.max(np.abs(expected)))

    def test_single_matrix(self):
        """One matrix is returned unchanged up to the scaling exponent."""
        M = elementary_matrices(_random_signal(1), 0.2, 1, "2SPLIT2A")
        C, W = assemble(M)
        np.testing.assert_allclose(_scaled(C, W), M[0], atol=1e-15)

    def test_normalized_range(self):
        """With normalisation the largest coefficient lies in [1/2, 1)."""
        M = elementary_matrices(3.0 * _random_signal(64, seed=5), 0.5, 1, "2SPLIT2A")
        C, _ = assemble(M, normalize=True)
        m = np.max(np.abs(C))
        assert 0.5 <= m < 1.0

    def test_normalize_flag_same_matrix(self):
        """Disabling normalisation changes only the representation."""
        M = elementary_matrices(_random_signal(16, seed=7), 0.1, 1, "2SPLIT4A")
        C1, W1 = assemble(M, normalize=True)
        C2, W2 = assemble(M, normalize=False)
        np.testing.assert_allclose(_scaled(C1, W1), _scaled(C2, W2),
                                   atol=1e-12 * np.max(np.abs(_scaled(C2, W2))))

    def test_bad_shape_raises(self):
        """Arrays that are not (D, 2, 2, n) are rejected."""
        with pytest.raises(InvalidInputError):
            assemble(np.zeros((3, 2, 2)))

    def test_empty_raises(self):
        """Zero matrices are rejected."""
        with pytest.raises(InvalidInputError):
            assemble(np.zeros((0, 2, 2, 2)))


# =============================================================================
# fscatter
# =============================================================================

class TestFscatter:
    """Test the combined transfer polynomial of a signal."""

    @pytest.mark.parametrize("name,degree", [("2SPLIT2A", 1), ("2SPLIT4A", 4)])
    def test_degree_and_numel(self, name, degree):
        """Degree is D * degree and the coefficient count matches."""
        poly = fscatter(_random_signal(10), 0.1, 1, name)
        assert poly.degree == 10 * degree
        assert poly.coeffs.size == fscatter_numel(10, name)

    def test_zero_signal(self):
        """For q = 0, S(z) = diag(1, z^(D degree))."""
        poly = fscatter(np.zeros(6), 0.1, 1, "2SPLIT4A")
        z = np.array([0.3 + 0.1j, -0.5j])
        S = poly.evaluate(z)
        np.testing.assert_allclose(S[0, 0], 1.0, atol=1e-14)
        np.testing.assert_allclose(S[1, 0], 0.0, atol=1e-14)
        np.testing.assert_allclose(S[1, 1], z ** 24, atol=1e-14)

    @pytest.mark.parametrize("name,tol", [("2SPLIT2A", 2e-2), ("2SPLIT4A", 1e-3)])
    def test_matches_exact_propagation(self, name, tol):
        """a = S11 and b = S21 * phase approximate the exact scattering data."""
        q, T = sech_signal(256, 1.3, (-10.0, 10.0))
        eps = step_size(len(q), T)
        lam = np.array([0.4 + 0.3j, -0.8 + 0.1j, 0.25])
        poly = fscatter(q, eps, 1, name)

        S = poly.evaluate(lambda_to_z(lam, eps, poly.degree // len(q)))
        a_poly = S[0, 0]
        b_poly = S[1, 0] * boundary_phase(lam, eps, len(q), T, name)
        a, b, _ = evaluate_scattering(q, T, 1, lam)

        np.testing.assert_allclose(a_poly, a, atol=tol)
        np.testing.assert_allclose(b_poly, b, atol=tol)

    def test_defocusing_unimodular(self):
        """For kappa = -1, |a|² - |b|² = 1 on the real axis."""
        q, T = sech_signal(128, 0.8, (-8.0, 8.0))
        eps = step_size(len(q), T)
        poly = fscatter(q, eps, -1, "2SPLIT4A")
        lam = np.array([-1.0, 0.0, 0.7])
        S = poly.evaluate(lambda_to_z(lam, eps, 4))
        np.testing.assert_allclose(np.abs(S[0, 0]) ** 2 - np.abs(S[1, 0]) ** 2, 1.0,
                                   atol=1e-2)

    def test_bo_unsupported(self):
        """BO cannot be assembled into a polynomial."""
        with pytest.raises(UnsupportedDiscretizationError):
            fscatter(np.ones(4), 0.1, 1, "BO")

    def test_non_finite_raises(self):
        """NaN samples are rejected."""
        with pytest.raises(InvalidInputError):
            fscatter(np.array([1.0, np.nan]), 0.1, 1, "2SPLIT2A")
