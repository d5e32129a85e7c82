import pytest
import numpy as np
from numpy.testing import assert_allclose

from mpskit.tensor import (
    randn,
    MPS_rand_state,
    MPS_product_state,
    MPS_computational_state,
    check_ortho,
)


class TestRandn:

    @pytest.mark.parametrize('dtype', ['float32', 'float64', 'complex128'])
    def test_dtype(self, dtype):
        x = randn((3, 4), dtype=dtype)
        assert x.shape == (3, 4)
        assert x.dtype == dtype

    def test_seeded(self):
        x = randn(5, rng=np.random.default_rng(3))
        y = randn(5, rng=np.random.default_rng(3))
        assert_allclose(x, y)


class TestMPSRandState:

    @pytest.mark.parametrize('dtype', ['float64', 'complex128'])
    def test_normalized(self, dtype):
        psi = MPS_rand_state(6, 4, dtype=dtype, seed=0)
        assert psi.L == 6
        assert psi.ortho_center() == 0
        assert psi.norm() == pytest.approx(1.0)
        assert check_ortho(psi)
        assert np.linalg.norm(psi.to_dense()) == pytest.approx(1.0)
        assert psi.iscomplex() == (dtype == 'complex128')

    def test_unnormalized(self):
        psi = MPS_rand_state(4, 3, normalize=False, seed=1)
        assert not psi.is_ortho()
        assert psi.bond_sizes() == [3, 3, 3]

    def test_seed_reproducible(self):
        a = MPS_rand_state(4, 2, seed=5)
        b = MPS_rand_state(4, 2, seed=5)
        assert_allclose(a.to_dense(), b.to_dense())

    def test_varying_phys_dim(self):
        psi = MPS_rand_state(4, 2, phys_dim=[2, 3])
        assert [psi.phys_dim(i) for i in range(4)] == [2, 3, 2, 3]

    def test_single_site(self):
        psi = MPS_rand_state(1, 5, phys_dim=3, seed=2)
        assert psi.bond_sizes() == []
        assert psi.norm() == pytest.approx(1.0)


class TestProductStates:

    def test_computational(self):
        psi = MPS_computational_state('0110')
        x = np.zeros(16)
        x[0b0110] = 1.0
        assert_allclose(psi.to_dense(), x)
        assert psi.max_bond_dim() == 1
        assert psi.ortho_center() == 0

    def test_computational_from_ints(self):
        psi = MPS_computational_state([1, 0], dtype='complex128')
        assert_allclose(psi.to_dense(), [0, 0, 1, 0])
        assert psi.iscomplex()

    def test_plus_minus(self):
        psi = MPS_computational_state('+-')
        expected = np.kron([1, 1], [1, -1]) / 2
        assert_allclose(psi.to_dense(), expected, atol=1e-14)

    def test_product_state(self):
        psi = MPS_product_state([np.array([3.0, 4.0]), np.array([0.0, 2.0])])
        assert not psi.is_ortho()
        assert_allclose(psi.to_dense(), [0.0, 6.0, 0.0, 8.0])
