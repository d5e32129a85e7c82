"""Adding matrix product states together, with compression.
"""
from ..utils import partition_all, progbar as Progbar
from .tensor_core import tensor_direct_product
from .tensor_1d import MatrixProductState, DimensionMismatchError


def mps_direct_sum(a, b):
    """Form the exact sum ``a + b`` as a state whose bond spaces are the
    direct sums of those of ``a`` and ``b``, so every bond dimension is the
    sum of the two. The result has no orthogonality structure.

    Parameters
    ----------
    a, b : MatrixProductState
        The states to add, with the same number of sites and physical
        dimensions.

    Returns
    -------
    MatrixProductState
    """
    if a.L != b.L:
        raise DimensionMismatchError(
            f"Can't add states with {a.L} and {b.L} sites.")

    new = a.copy()
    if a.L == 0:
        return new

    # align b's index names with a's
    index_map = {b.site_ind(i): a.site_ind(i) for i in range(b.L)}
    for i in range(b.L - 1):
        index_map[b.link_ind(i)] = a.link_ind(i)

    for i in range(a.L):
        Tb = b[i].reindex(index_map)
        if a.L == 1:
            new._tensors[i] = a[i] + Tb
        else:
            # end tensors only have one link, which is simply stacked
            new._tensors[i] = tensor_direct_product(
                a[i], Tb, sum_inds=a.site_ind(i))

    new._left_lim = -1
    new._right_lim = new.L
    return new


def mps_add_compress(a, b, **compress_opts):
    """Add two states and compress the result.

    Parameters
    ----------
    a, b : MatrixProductState
        The states to add.
    compress_opts
        Supplied to :meth:`MatrixProductState.orthogonalize`, for example
        ``cutoff`` and ``max_bond``.

    Returns
    -------
    MatrixProductState
        With the orthogonality center at the last site.
    """
    return mps_direct_sum(a, b).orthogonalize(**compress_opts)


def MPS_sum(terms, progbar=False, **compress_opts):
    """Sum a sequence of states, adding and compressing them in pairs,
    round by round, so the bond dimension of intermediate states stays
    controlled.

    Parameters
    ----------
    terms : sequence of MatrixProductState
        The states to sum.
    progbar : bool, optional
        Show a progress bar over the pairwise additions.
    compress_opts
        Supplied to :func:`mps_add_compress`.

    Returns
    -------
    MatrixProductState
        An empty state if ``terms`` is empty, the single term itself if it
        has one element.
    """
    terms = list(terms)

    if not terms:
        return MatrixProductState()
    if len(terms) == 1:
        return terms[0]

    if progbar:
        pbar = Progbar(total=len(terms) - 1, desc="MPS_sum")
    else:
        pbar = None

    try:
        while len(terms) > 1:
            new_terms = []
            for pair in partition_all(2, terms):
                if len(pair) == 2:
                    new_terms.append(mps_add_compress(*pair, **compress_opts))
                    if pbar is not None:
                        pbar.update()
                else:
                    # odd one out is carried to the next round untouched
                    new_terms.append(pair[0])
            terms = new_terms
    finally:
        if pbar is not None:
            pbar.close()

    return terms[0]
