import pytest
import numpy as np
from numpy.testing import assert_allclose

from mpskit.tensor.decomp import (
    Spectrum,
    svd_truncated,
    eigh_truncated,
    denmat_truncated,
    qr_stabilized,
    lq_stabilized,
    _compute_number_to_keep,
)


dtypes = ['float64', 'complex128']


def rand_matrix(m, n, dtype='float64', seed=42):
    rng = np.random.default_rng(seed)
    x = rng.standard_normal((m, n))
    if 'complex' in dtype:
        x = x + 1j * rng.standard_normal((m, n))
    return x.astype(dtype)


def rand_low_rank(m, n, k, dtype='float64'):
    return rand_matrix(m, k, dtype, seed=1) @ rand_matrix(k, n, dtype, seed=2)


class TestSpectrum:

    def test_from_weights(self):
        spectrum = Spectrum.from_weights([3.0, 1.0], 1)
        assert spectrum.bond_dim == 1
        assert_allclose(spectrum.eigs, [0.75])
        assert spectrum.truncerr == pytest.approx(0.25)

    def test_zero_weights(self):
        spectrum = Spectrum.from_weights([0.0, 0.0], 1)
        assert spectrum.bond_dim == 1
        assert spectrum.truncerr == 0.0

    def test_repr(self):
        assert "bond_dim=2" in repr(Spectrum([0.5, 0.5]))


class TestNumberToKeep:

    @pytest.mark.parametrize("cutoff,mode,expected", [
        (1.5, 1, 2),
        (0.3, 2, 2),
        (0.9, 3, 3),
        (1.1, 3, 2),
        (5.5, 3, 1),
        (0.01, 4, 3),
        (0.1, 4, 2),
        (1.5, 5, 2),
        (0.2, 6, 2),
    ])
    def test_modes(self, cutoff, mode, expected):
        s = np.array([4.0, 2.0, 1.0])
        assert _compute_number_to_keep(s, cutoff, mode, -1) == expected

    def test_max_bond(self):
        s = np.array([4.0, 2.0, 1.0])
        assert _compute_number_to_keep(s, -1.0, 4, 2) == 2
        assert _compute_number_to_keep(s, 1e-10, 4, 1) == 1
        assert _compute_number_to_keep(s, -1.0, 4, -1) == 3

    def test_keeps_at_least_one(self):
        s = np.array([1.0, 1.0])
        assert _compute_number_to_keep(s, 10.0, 1, -1) == 1


class TestSVDTruncated:

    @pytest.mark.parametrize('dtype', dtypes)
    @pytest.mark.parametrize('absorb', ['left', 'both', 'right'])
    def test_exact_low_rank(self, dtype, absorb):
        x = rand_low_rank(6, 5, 3, dtype)
        info = {}
        U, s, VH = svd_truncated(x, cutoff=1e-10, absorb=absorb, info=info)
        assert s is None
        assert U.shape == (6, 3)
        assert VH.shape == (3, 5)
        assert_allclose(U @ VH, x, atol=1e-10)
        spectrum = info['spectrum']
        assert spectrum.bond_dim == 3
        assert spectrum.eigs.sum() == pytest.approx(1.0)
        assert spectrum.truncerr < 1e-12

    def test_return_singular_values(self):
        x = rand_matrix(4, 4)
        U, s, VH = svd_truncated(x, absorb=None)
        assert_allclose(s, np.linalg.svd(x, compute_uv=False))
        assert_allclose((U * s) @ VH, x, atol=1e-12)

    def test_max_bond_truncerr(self):
        x = rand_matrix(5, 5)
        s_full = np.linalg.svd(x, compute_uv=False)
        info = {}
        U, _, VH = svd_truncated(x, max_bond=2, absorb='right', info=info)
        assert U.shape == (5, 2)
        expected = np.sum(s_full[2:]**2) / np.sum(s_full**2)
        assert info['spectrum'].truncerr == pytest.approx(expected)
        assert_allclose(U.conj().T @ U, np.eye(2), atol=1e-12)


class TestEighTruncated:

    def test_descending_and_truncated(self):
        w0 = np.array([0.1, 0.6, 0.0, 0.3])
        Q = np.linalg.qr(rand_matrix(4, 4))[0]
        rho = (Q * w0) @ Q.T
        info = {}
        U, w = eigh_truncated(rho, cutoff=1e-10, info=info)
        assert_allclose(w, [0.6, 0.3, 0.1], atol=1e-12)
        assert U.shape == (4, 3)
        assert info['spectrum'].bond_dim == 3
        assert_allclose(info['spectrum'].eigs, [0.6, 0.3, 0.1], atol=1e-12)


class TestDenmatTruncated:

    @pytest.mark.parametrize('dtype', dtypes)
    @pytest.mark.parametrize('which', ['left', 'right'])
    def test_exact_reconstruction(self, dtype, which):
        x = rand_low_rank(6, 5, 2, dtype)
        info = {}
        left, right = denmat_truncated(x, which=which, cutoff=1e-12,
                                       info=info)
        assert_allclose(left @ right, x, atol=1e-10)
        assert info['spectrum'].bond_dim == 2
        if which == 'left':
            assert_allclose(left.conj().T @ left, np.eye(2), atol=1e-12)
        else:
            assert_allclose(right @ right.conj().T, np.eye(2), atol=1e-12)

    @pytest.mark.parametrize('use_proj', [False, True])
    def test_noise_keeps_isometry(self, use_proj):
        x = rand_low_rank(4, 4, 1)
        x_proj = rand_matrix(4, 4, seed=7) if use_proj else None
        info = {}
        left, right = denmat_truncated(x, which='left', cutoff=1e-12,
                                       noise=1e-3, x_proj=x_proj, info=info)
        k = left.shape[1]
        # the noise lifts the zero eigenvalues
        assert k > 1
        assert_allclose(left.conj().T @ left, np.eye(k), atol=1e-12)
        assert_allclose(left @ right, x, atol=1e-10)
        assert info['spectrum'].eigs.sum() <= 1.0 + 1e-12


class TestQRLQ:

    @pytest.mark.parametrize('dtype', dtypes)
    def test_qr_stabilized(self, dtype):
        x = rand_matrix(5, 3, dtype)
        Q, s, R = qr_stabilized(x)
        assert s is None
        assert_allclose(Q @ R, x, atol=1e-12)
        assert np.all(np.diag(R).real >= 0.0)
        assert_allclose(np.diag(R).imag, 0.0, atol=1e-12)
        assert_allclose(Q.conj().T @ Q, np.eye(3), atol=1e-12)

    @pytest.mark.parametrize('dtype', dtypes)
    def test_lq_stabilized(self, dtype):
        x = rand_matrix(3, 5, dtype)
        L, s, Q = lq_stabilized(x)
        assert s is None
        assert_allclose(L @ Q, x, atol=1e-12)
