"""
Tests for exact sample-by-sample propagation.
"""

import numpy as np
import pytest

from fast_nft.discrete.roots import newton_refine
from fast_nft.scattering.propagation import (
    bidirectional_b,
    energy_midpoint,
    evaluate_scattering,
    transfer_matrices,
)
from fast_nft.testcases import sech_a, sech_bound_states, sech_signal


class TestTransferMatrices:
    """Test per-sample exponentials."""

    def test_unit_determinant(self):
        """exp(εA) has determinant one."""
        q = np.array([0.5 + 0.2j, 2.0, -1.0j])
        T, _ = transfer_matrices(q, 0.1, 1, np.array([0.3 + 0.2j, -1.0]))
        det = T[:, 0, 0] * T[:, 1, 1] - T[:, 0, 1] * T[:, 1, 0]
        np.testing.assert_allclose(det, 1.0, atol=1e-14)

    def test_derivative_finite_difference(self):
        """dT/dλ matches a central difference."""
        q = np.array([0.8 - 0.1j, 1e-6])
        lam = np.array([0.4 + 0.3j])
        h = 1e-6
        _, dT = transfer_matrices(q, 0.2, 1, lam, derivative=True)
        Tp, _ = transfer_matrices(q, 0.2, 1, lam + h)
        Tm, _ = transfer_matrices(q, 0.2, 1, lam - h)
        np.testing.assert_allclose(dT, (Tp - Tm) / (2 * h), atol=1e-8)

    def test_no_derivative_by_default(self):
        """dT is None unless requested."""
        _, dT = transfer_matrices(np.ones(2), 0.1, 1, 0.5)
        assert dT is None


class TestEvaluateScattering:
    """Test a(λ), b(λ) and a'(λ) by forward propagation."""

    def test_zero_signal(self):
        """For q = 0, a = 1, b = 0 and a' = 0."""
        lam = np.array([0.3 + 0.5j, -2.0, 1.0j])
        a, b, da = evaluate_scattering(np.zeros(32), (-3.0, 3.0), 1, lam,
                                       derivative=True)
        np.testing.assert_allclose(a, 1.0, atol=1e-13)
        np.testing.assert_allclose(b, 0.0, atol=1e-13)
        np.testing.assert_allclose(da, 0.0, atol=1e-12)

    @pytest.mark.parametrize("kappa,sign", [(1, 1), (-1, -1)])
    def test_unimodular_real_axis(self, kappa, sign):
        """|a|² + kappa|b|² = 1 for real λ."""
        q, T = sech_signal(200, 1.7, (-12.0, 12.0))
        lam = np.linspace(-3.0, 3.0, 7)
        a, b, _ = evaluate_scattering(q, T, kappa, lam)
        np.testing.assert_allclose(np.abs(a) ** 2 + sign * np.abs(b) ** 2, 1.0,
                                   atol=1e-12)

    def test_derivative_finite_difference(self):
        """a'(λ) matches a central difference of a."""
        q, T = sech_signal(128, 1.2, (-10.0, 10.0))
        lam = np.array([0.3 + 0.4j, -0.5 + 1.0j])
        h = 1e-6
        _, _, da = evaluate_scattering(q, T, 1, lam, derivative=True)
        ap, _, _ = evaluate_scattering(q, T, 1, lam + h)
        am, _, _ = evaluate_scattering(q, T, 1, lam - h)
        np.testing.assert_allclose(da, (ap - am) / (2 * h), rtol=1e-6)

    def test_matches_sech_closed_form(self):
        """a(λ) converges to the closed form for A sech(t)."""
        q, T = sech_signal(2048, 1.4, (-16.0, 16.0))
        lam = np.array([0.5 + 0.5j, -1.0 + 0.2j])
        a, _, _ = evaluate_scattering(q, T, 1, lam)
        np.testing.assert_allclose(a, sech_a(lam, 1.4), atol=1e-3)

    def test_large_imaginary_part(self):
        """Rescaling keeps a finite far into the upper half plane."""
        q, T = sech_signal(256, 2.0, (-20.0, 20.0))
        a, b, da = evaluate_scattering(q, T, 1, np.array([400.0j]), derivative=True)
        assert np.all(np.isfinite(a)) and np.all(np.isfinite(da))
        assert abs(a[0] - 1.0) < 5e-2


class TestBidirectional:
    """Test evaluation of b from both ends of the signal."""

    def test_energy_midpoint_symmetric(self):
        """The energy of a symmetric pulse splits in the middle."""
        q, _ = sech_signal(101, 1.0, (-10.0, 10.0))
        assert abs(energy_midpoint(q) - 50) <= 1

    def test_energy_midpoint_zero_signal(self):
        """A zero signal is split in half."""
        assert energy_midpoint(np.zeros(10)) == 5

    def test_full_forward_split_equals_forward_b(self):
        """Propagating every sample from the left reproduces the forward b."""
        q, T = sech_signal(64, 1.1, (-8.0, 8.0))
        lam = np.array([0.2 + 0.1j, -0.7])
        _, b, _ = evaluate_scattering(q, T, 1, lam)
        np.testing.assert_allclose(bidirectional_b(q, T, 1, lam, split=len(q)), b,
                                   rtol=1e-12)

    def test_matches_forward_at_bound_state(self):
        """At a zero of a every split gives the same b."""
        q, T = sech_signal(256, 0.8, (-8.0, 8.0))
        lam = newton_refine(sech_bound_states(0.8), q, T, 1, niter=20)
        _, b, _ = evaluate_scattering(q, T, 1, lam)
        for split in (None, 60, 200):
            np.testing.assert_allclose(bidirectional_b(q, T, 1, lam, split=split), b,
                                       rtol=1e-6)

    def test_sech_unit_modulus(self):
        """|b(λ_k)| = 1 for the symmetric sech pulse."""
        q, T = sech_signal(1024, 2.2, (-16.0, 16.0))
        lam = newton_refine(sech_bound_states(2.2), q, T, 1, niter=20)
        np.testing.assert_allclose(np.abs(bidirectional_b(q, T, 1, lam)), 1.0,
                                   atol=1e-2)
