from cardledger.models.card import (
    CardCondition,
    CardMetadata,
    CardUpdate,
    CardUsage,
    NewCard,
)
from cardledger.models.failure import (
    AmbiguousCardError,
    CardCandidate,
    CardLedgerError,
    ConflictError,
    FailureDetail,
    FailureKind,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    UpstreamUnavailableError,
)

__all__ = [
    "AmbiguousCardError",
    "CardCandidate",
    "CardCondition",
    "CardLedgerError",
    "CardMetadata",
    "CardUpdate",
    "CardUsage",
    "ConflictError",
    "FailureDetail",
    "FailureKind",
    "InternalError",
    "InvalidArgumentError",
    "NewCard",
    "NotFoundError",
    "UpstreamUnavailableError",
]
