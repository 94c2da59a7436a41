from .core import (  # noqa: F401
    Tez,
    OperationFees,
    OperationKind,
    Operation,
    Reveal,
    Transaction,
    Delegation,
    Origination,
    OperationMetadata,
    OperationWithCounter,
    OperationPayload,
    SignedOperationPayload,
    SignedProtocolOperationPayload,
    SimulationResult,
    SimulationSuccess,
    SimulationFailure,
    ForgingPolicy,
    OperationFeePolicy,
)
