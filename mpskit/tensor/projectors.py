"""Effective operators projected onto a two-site bond, used to direct the
density matrix noise term of a bond update.
"""
import numpy as np

from .tensor_core import Tensor, prime_ind


class BondProjector:
    """Base class for anything that can act on a two-site bond tensor.

    Subclasses implement :meth:`apply`, which must return a tensor with the
    same indices as its input.
    """

    def apply(self, T):
        raise NotImplementedError

    def __call__(self, T):
        return self.apply(T)


class LocalOperatorProjector(BondProjector):
    """Project with an explicit operator on the bond's site indices.

    Parameters
    ----------
    op : Tensor
        The operator, whose unprimed indices are contracted with the bond
        tensor and whose primed versions of those indices are the outputs.

    Examples
    --------

        >>> ZZ = Tensor(zz.reshape(2, 2, 2, 2), inds=("k1'", "k2'", 'k1', 'k2'))
        >>> psi.svd_bond(1, AA, 'right', noise=1e-4,
        ...              projector=LocalOperatorProjector(ZZ))

    """

    def __init__(self, op):
        if not isinstance(op, Tensor):
            raise TypeError("``op`` should be a ``Tensor``, got "
                            f"{type(op).__name__}.")
        self.op = op
        self.input_inds = tuple(ix for ix in op.inds
                                if prime_ind(ix) in op.inds)

    def apply(self, T):
        missing = [ix for ix in self.input_inds if ix not in T.inds]
        if missing:
            raise ValueError(f"Operator acts on {missing} which the bond "
                             f"tensor with inds {T.inds} doesn't have.")
        PT = (T @ self.op).noprime(
            [prime_ind(ix) for ix in self.input_inds])
        return PT.transpose(*T.inds)


class IdentityProjector(BondProjector):
    """Leaves the bond tensor unchanged, the noise term is then simply
    the (rescaled) density matrix itself.
    """

    def apply(self, T):
        return T.copy()


def local_projector_from_array(op, inds):
    """Build a :class:`LocalOperatorProjector` from a raw operator array,
    shaped either as a matrix ``(D, D)`` or with one dimension per index,
    acting on the site indices ``inds``.
    """
    inds = tuple(inds)
    op = np.asarray(op)
    if op.ndim == 2:
        d = int(round(op.shape[0] ** (1 / len(inds))))
        op = op.reshape((d,) * (2 * len(inds)))
    out_inds = tuple(prime_ind(ix) for ix in inds)
    return LocalOperatorProjector(
        Tensor(op, inds=(*out_inds, *inds)))
