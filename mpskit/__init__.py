"""
Matrix product state bond updates, overlaps and sums.
"""

from .core import get_num_thread_workers, prod, realify_scalar
from .utils import check_opt, oset, progbar

from .tensor import (
    QN,
    Tensor,
    MatrixProductState,
    MPS_rand_state,
    MPS_product_state,
    MPS_computational_state,
    MPS_sum,
    overlap,
    check_ortho,
)


__version__ = "0.1.0"

__all__ = [
    "get_num_thread_workers",
    "prod",
    "realify_scalar",
    "check_opt",
    "oset",
    "progbar",
    "QN",
    "Tensor",
    "MatrixProductState",
    "MPS_rand_state",
    "MPS_product_state",
    "MPS_computational_state",
    "MPS_sum",
    "overlap",
    "check_ortho",
]
