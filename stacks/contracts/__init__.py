"""Cross-stack parameter contracts."""

from .keys import (
    ParameterFamily,
    NetworkOutputs,
    DatabaseOutputs,
    CognitoOutputs,
    FrontendOutputs,
    StorageOutputs,
    PROBE_KEYS,
)
from .store import (
    ParameterContractStore,
    ParameterBackend,
    CdkParameterBackend,
    LiveParameterBackend,
    InMemoryParameterBackend,
    encode_optional,
    decode_optional,
    is_present_condition,
)
from .bundles import (
    NetworkOutputParameters,
    DatabaseOutputParameters,
    CognitoOutputParameters,
    FrontendOutputParameters,
    StorageOutputParameters,
)

__all__ = [
    "ParameterFamily",
    "NetworkOutputs",
    "DatabaseOutputs",
    "CognitoOutputs",
    "FrontendOutputs",
    "StorageOutputs",
    "PROBE_KEYS",
    "ParameterContractStore",
    "ParameterBackend",
    "CdkParameterBackend",
    "LiveParameterBackend",
    "InMemoryParameterBackend",
    "encode_optional",
    "decode_optional",
    "is_present_condition",
    "NetworkOutputParameters",
    "DatabaseOutputParameters",
    "CognitoOutputParameters",
    "FrontendOutputParameters",
    "StorageOutputParameters",
]
