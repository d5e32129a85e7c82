"""Default options for contractions, performed with ``cotengra``.
"""
import threading
import contextlib

import cotengra as ctg


_CONTRACT_STRATEGY = 'greedy'
_CONTRACT_BACKEND = None
_LOCAL = threading.local()


def _strategy_stack():
    try:
        return _LOCAL.strategies
    except AttributeError:
        _LOCAL.strategies = []
        return _LOCAL.strategies


def get_contract_strategy():
    """The ``optimize`` option given to ``cotengra`` when none is supplied,
    taking into account any :func:`contract_strategy` active in this thread.
    """
    stack = _strategy_stack()
    return stack[-1] if stack else _CONTRACT_STRATEGY


def set_contract_strategy(strategy):
    global _CONTRACT_STRATEGY
    _CONTRACT_STRATEGY = strategy


@contextlib.contextmanager
def contract_strategy(strategy):
    """Temporarily use ``strategy`` for contractions in the current thread.
    """
    stack = _strategy_stack()
    stack.append(strategy)
    try:
        yield
    finally:
        stack.pop()


def get_contract_backend():
    """The array backend contractions use, ``None`` meaning infer it from
    the arrays.
    """
    return _CONTRACT_BACKEND


def set_contract_backend(backend):
    global _CONTRACT_BACKEND
    _CONTRACT_BACKEND = backend


def array_contract(arrays, inputs, output=None, optimize=None, backend=None,
                   **kwargs):
    """Contract ``arrays``, whose axes are labelled by ``inputs``, into the
    labels ``output``.
    """
    if optimize is None:
        optimize = get_contract_strategy()
    if backend is None:
        backend = get_contract_backend()
    return ctg.array_contract(arrays, inputs, output, optimize=optimize,
                              backend=backend, **kwargs)
