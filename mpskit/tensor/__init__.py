from .qn import (
    QN,
    QNVal,
    Arrow,
    MalformedQNError,
    is_active,
    is_fermionic,
    parity_sign,
    spin,
    boson,
    spinboson,
    fermion,
    fparity,
    electron,
    elparity,
    clock,
)
from .tensor_core import (
    tensor_contract,
    tensor_split,
    tensor_canonize_bond,
    tensor_direct_product,
    bonds,
    rand_uuid,
    Tensor,
)
from .decomp import Spectrum
from .contraction import (
    contract_strategy,
    get_contract_strategy,
    set_contract_strategy,
    get_contract_backend,
    set_contract_backend,
)
from .projectors import (
    BondProjector,
    LocalOperatorProjector,
    IdentityProjector,
    local_projector_from_array,
)
from .sites import (
    SiteSet,
    SpinHalf,
    Fermion,
)
from .tensor_1d import (
    MIN_CUT,
    get_default_opts,
    MatrixProductState,
    MPS,
    overlap,
    overlap_complex,
    psiphi,
    psiphi_complex,
    check_ortho,
    UninitializedError,
    GaugeConsistencyError,
    OrthogonalityError,
    DimensionMismatchError,
    NumericDegeneracyError,
)
from .tensor_1d_compress import (
    mps_direct_sum,
    mps_add_compress,
    MPS_sum,
)
from .tensor_gen import (
    randn,
    MPS_rand_state,
    MPS_product_state,
    MPS_computational_state,
)


__all__ = (
    "QN",
    "QNVal",
    "Arrow",
    "MalformedQNError",
    "is_active",
    "is_fermionic",
    "parity_sign",
    "spin",
    "boson",
    "spinboson",
    "fermion",
    "fparity",
    "electron",
    "elparity",
    "clock",
    "tensor_contract",
    "tensor_split",
    "tensor_canonize_bond",
    "tensor_direct_product",
    "bonds",
    "rand_uuid",
    "Tensor",
    "Spectrum",
    "contract_strategy",
    "get_contract_strategy",
    "set_contract_strategy",
    "get_contract_backend",
    "set_contract_backend",
    "BondProjector",
    "LocalOperatorProjector",
    "IdentityProjector",
    "local_projector_from_array",
    "SiteSet",
    "SpinHalf",
    "Fermion",
    "MIN_CUT",
    "get_default_opts",
    "MatrixProductState",
    "MPS",
    "overlap",
    "overlap_complex",
    "psiphi",
    "psiphi_complex",
    "check_ortho",
    "UninitializedError",
    "GaugeConsistencyError",
    "OrthogonalityError",
    "DimensionMismatchError",
    "NumericDegeneracyError",
    "mps_direct_sum",
    "mps_add_compress",
    "MPS_sum",
    "randn",
    "MPS_rand_state",
    "MPS_product_state",
    "MPS_computational_state",
)
