"""Engine API client used by hive simulators to drive execution clients under test."""

from .auth import MAX_CLOCK_SKEW, TokenIssuer, mint_token, verify_token
from .block_number import (
    FINALIZED,
    LATEST,
    PENDING,
    SAFE,
    BlockNumber,
    BlockTag,
    from_block_number_arg,
    to_block_number_arg,
)
from .client import CallMemory, EngineClient
from .connection import (
    DEFAULT_JWT_SECRET,
    ENGINE_PORT_HTTP,
    ETH_PORT_HTTP,
    RPC_TIMEOUT,
    ConnectionHandle,
)
from .context import CallContext, background
from .errors import (
    AuthorizationError,
    ConfigurationError,
    EngineClientError,
    JSONRPCError,
    NotFoundError,
    ResponseDecodeError,
    RPCCancelledError,
    RPCTimeoutError,
    SigningError,
    TransportError,
)
from .nonce_cache import AccountTransactionInfo, NonceCache
from .rpc import EngineRPC, EthRPC
from .starter import EngineClientStarter, StartParameters, calculate_real_ttd
from .types import (
    BlockHeader,
    ExecutionPayload,
    ForkchoiceState,
    ForkchoiceUpdateResponse,
    PayloadAttributes,
    PayloadStatus,
    PayloadStatusEnum,
    TotalDifficultyHeader,
    TransitionConfiguration,
    Withdrawal,
)

__all__ = [
    "AccountTransactionInfo",
    "AuthorizationError",
    "BlockHeader",
    "BlockNumber",
    "BlockTag",
    "CallContext",
    "CallMemory",
    "ConfigurationError",
    "ConnectionHandle",
    "DEFAULT_JWT_SECRET",
    "ENGINE_PORT_HTTP",
    "ETH_PORT_HTTP",
    "EngineClient",
    "EngineClientError",
    "EngineClientStarter",
    "EngineRPC",
    "EthRPC",
    "ExecutionPayload",
    "FINALIZED",
    "ForkchoiceState",
    "ForkchoiceUpdateResponse",
    "JSONRPCError",
    "LATEST",
    "MAX_CLOCK_SKEW",
    "NonceCache",
    "NotFoundError",
    "PENDING",
    "PayloadAttributes",
    "PayloadStatus",
    "PayloadStatusEnum",
    "RPCCancelledError",
    "RPCTimeoutError",
    "RPC_TIMEOUT",
    "ResponseDecodeError",
    "SAFE",
    "SigningError",
    "StartParameters",
    "TokenIssuer",
    "TotalDifficultyHeader",
    "TransitionConfiguration",
    "TransportError",
    "Withdrawal",
    "background",
    "calculate_real_ttd",
    "from_block_number_arg",
    "mint_token",
    "to_block_number_arg",
    "verify_token",
]
