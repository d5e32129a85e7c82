"""Builders for common matrix product states.
"""
import itertools
from numbers import Integral

import numpy as np

from .array_ops import asarray, sensibly_scale, norm_fro
from .tensor_1d import MatrixProductState


def randn(shape, dtype='float64', rng=None):
    """Standard normal samples of ``shape``, with independent real and
    imaginary parts for complex ``dtype``.
    """
    if rng is None:
        rng = np.random.default_rng()
    x = rng.standard_normal(shape)
    if np.issubdtype(np.dtype(dtype), np.complexfloating):
        x = x + 1j * rng.standard_normal(shape)
    return x.astype(dtype)


def _link_shape(i, L, bond_dim):
    """The link dimensions, in 'lr' order, of site ``i`` of ``L``.
    """
    return (bond_dim,) * ((i > 0) + (i < L - 1))


def MPS_rand_state(L, bond_dim, phys_dim=2, normalize=True, dtype='float64',
                   seed=None, **mps_opts):
    """A random matrix product state.

    Parameters
    ----------
    L : int
        Number of sites.
    bond_dim : int
        Dimension of every link.
    phys_dim : int or sequence of int, optional
        Local dimension, a sequence being repeated along the chain.
    normalize : bool, optional
        Normalize the state, which leaves the orthogonality center at site 0.
    dtype : str or numpy dtype, optional
        Data type of the site arrays.
    seed : int, optional
        Seed for ``numpy.random.default_rng``.
    mps_opts
        Supplied to :class:`~mpskit.tensor.tensor_1d.MatrixProductState`.
    """
    rng = np.random.default_rng(seed)

    if isinstance(phys_dim, Integral):
        phys_dims = itertools.repeat(phys_dim)
    else:
        phys_dims = itertools.cycle(phys_dim)

    arrays = [
        sensibly_scale(randn((*_link_shape(i, L, bond_dim), d),
                             dtype=dtype, rng=rng))
        for i, d in zip(range(L), phys_dims)
    ]
    psi = MatrixProductState(arrays, **mps_opts)

    if normalize:
        psi.position(0)
        psi.normalize()

    return psi


def MPS_product_state(arrays, **mps_opts):
    """A product state, every link having dimension 1, from one local vector
    per site. When all vectors after the first have unit norm the state is
    already in canonical form with its center on site 0, and is marked so.
    """
    arrays = [asarray(x) for x in arrays]
    L = len(arrays)

    site_arrays = [x.reshape(*_link_shape(i, L, 1), -1)
                   for i, x in enumerate(arrays)]

    if L > 0 and all(abs(norm_fro(x) - 1.0) < 1e-12 for x in arrays[1:]):
        mps_opts.setdefault('left_lim', -1)
        mps_opts.setdefault('right_lim', 1)

    return MatrixProductState(site_arrays, shape='lrp', **mps_opts)


_BASIS_VECTORS = {
    '0': (1.0, 0.0),
    '1': (0.0, 1.0),
    '+': (2**-0.5, 2**-0.5),
    '-': (2**-0.5, -2**-0.5),
}


def MPS_computational_state(binary, dtype='float64', **mps_opts):
    """A qubit product state, such as ``'0110'``, ``[0, 1, 1, 0]`` or with
    ``'+'`` and ``'-'`` for the x basis.

    Parameters
    ----------
    binary : str or sequence of int
        One symbol per site.
    dtype : str or numpy dtype, optional
        Data type of the site arrays.
    mps_opts
        Supplied to :func:`MPS_product_state`.
    """
    return MPS_product_state(
        [np.array(_BASIS_VECTORS[str(s)], dtype=dtype) for s in binary],
        **mps_opts)
