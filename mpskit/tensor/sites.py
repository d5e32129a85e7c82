"""Descriptions of the local Hilbert spaces a matrix product state lives on.
"""
import functools
import operator

from .qn import QN, spin, fermion


class SiteSet:
    """The local basis at each site of a chain.

    Parameters
    ----------
    phys_dims : sequence of int
        The local dimension of each site.
    site_ind_id : str, optional
        Format string for the physical index name of each site.
    qns : sequence of sequence of QN, optional
        For each site, the quantum number label of each local basis state.
        If not given every basis state is labelled with the empty ``QN()``.
    """

    def __init__(self, phys_dims, site_ind_id='k{}', qns=None):
        self._phys_dims = tuple(int(d) for d in phys_dims)
        self.site_ind_id = site_ind_id

        if qns is None:
            qns = [[QN()] * d for d in self._phys_dims]
        qns = tuple(tuple(q) for q in qns)

        if len(qns) != len(self._phys_dims):
            raise ValueError(f"Got quantum numbers for {len(qns)} sites, but "
                             f"there are {len(self._phys_dims)} sites.")
        for i, (d, q) in enumerate(zip(self._phys_dims, qns)):
            if len(q) != d:
                raise ValueError(f"Site {i} has dimension {d}, but {len(q)} "
                                 "quantum numbers were given.")
        self._qns = qns

    @property
    def L(self):
        return len(self._phys_dims)

    def __len__(self):
        return self.L

    def phys_dim(self, i):
        return self._phys_dims[i]

    @property
    def phys_dims(self):
        return self._phys_dims

    def site_ind(self, i):
        return self.site_ind_id.format(i)

    @property
    def site_inds(self):
        return tuple(map(self.site_ind, range(self.L)))

    def qn(self, i, state):
        """The quantum number of local basis state ``state`` at site ``i``.
        """
        return self._qns[i][state]

    def state_qn(self, config):
        """Total quantum number of the product state labelled by ``config``,
        one local basis state per site.
        """
        if len(config) != self.L:
            raise ValueError(f"Configuration of length {len(config)} doesn't "
                             f"match {self.L} sites.")
        return functools.reduce(
            operator.add, (self.qn(i, s) for i, s in enumerate(config)), QN())

    def __eq__(self, other):
        if not isinstance(other, SiteSet):
            return NotImplemented
        return ((self._phys_dims == other._phys_dims) and
                (self.site_ind_id == other.site_ind_id))

    def __repr__(self):
        return f"{self.__class__.__name__}(L={self.L})"


class SpinHalf(SiteSet):
    """Spin-1/2 sites, basis ``(up, down)`` with ``Sz = +1, -1`` in units of
    spin 1/2.
    """

    def __init__(self, L, site_ind_id='k{}'):
        super().__init__([2] * L, site_ind_id=site_ind_id,
                         qns=[[spin(+1), spin(-1)]] * L)


class Fermion(SiteSet):
    """Spinless fermion sites, basis ``(empty, occupied)``.
    """

    def __init__(self, L, site_ind_id='k{}'):
        super().__init__([2] * L, site_ind_id=site_ind_id,
                         qns=[[fermion(0), fermion(1)]] * L)
