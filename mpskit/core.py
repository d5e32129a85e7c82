"""Package wide settings, read from the environment at import, and a few
scalar helpers.
"""
import os
import operator
import functools


def _read_num_thread_workers():
    for env_var in ('MPSKIT_NUM_THREAD_WORKERS',
                    'MPSKIT_NUM_PROCS',
                    'OMP_NUM_THREADS'):
        if env_var in os.environ:
            return int(os.environ[env_var])

    import psutil
    return psutil.cpu_count(logical=False) or 1


_NUM_THREAD_WORKERS = _read_num_thread_workers()

# numba reads this once, at its own import
os.environ.setdefault('NUMBA_NUM_THREADS', str(_NUM_THREAD_WORKERS))

import numba as nb  # noqa: E402

_NUMBA_CACHE = os.environ.get('MPSKIT_NUMBA_CACHE', 'True') == 'True'

njit = functools.partial(nb.njit, cache=_NUMBA_CACHE)
"""Numba no-python jit, obeying ``MPSKIT_NUMBA_CACHE``."""


def get_num_thread_workers():
    """The number of threads numba was configured with.
    """
    return _NUM_THREAD_WORKERS


def prod(xs):
    """Product of the elements of ``xs``, ``1`` if empty.
    """
    return functools.reduce(operator.mul, xs, 1)


def realify_scalar(x, imag_tol=1e-12):
    """Return the real part of ``x`` if its imaginary part is negligible
    relative to it, else ``x`` unchanged.
    """
    try:
        return x.real if abs(x.imag) < abs(x.real) * imag_tol else x
    except AttributeError:
        return x
