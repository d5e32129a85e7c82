"""Array helpers that dispatch on the backend of their input.
"""
import numpy
from autoray import compose, do, get_dtype_name, infer_backend

from ..core import njit


def asarray(array):
    """Return ``array`` untouched if it already looks like an array (has a
    ``shape``), else convert it with numpy. ``numpy.matrix`` is always
    converted, since it doesn't keep its number of dimensions.
    """
    if isinstance(array, numpy.matrix) or not hasattr(array, 'shape'):
        return numpy.asarray(array)
    return array


def ndim(array):
    try:
        return array.ndim
    except AttributeError:
        return len(array.shape)


def iscomplex(x):
    if infer_backend(x) == 'builtins':
        return isinstance(x, complex)
    return 'complex' in get_dtype_name(x)


@njit
def _norm_fro_numba(x):  # pragma: no cover
    return numpy.linalg.norm(x.ravel())


@compose
def norm_fro(x):
    """The Frobenius norm of ``x``, treating it as a flat vector.
    """
    return do("sum", do("abs", x)**2) ** 0.5


@norm_fro.register("numpy")
def norm_fro_numpy(x):
    if x.size == 0:
        return 0.0
    return float(_norm_fro_numba(numpy.ascontiguousarray(x)))


def sensibly_scale(x):
    """Rescale a random site array so that chains of them keep a norm of
    order one.
    """
    return x / norm_fro(x)**(1.5 / ndim(x))
