"""
Engine client used by hive tests to drive an execution client.

The client composes an authenticated `EngineRPC` handle and an `EthRPC` handle, remembers the
last forkchoice update and new payload it sent (and what came back) so tests can assert on
them, and tracks account nonces across blocks.
"""

from dataclasses import dataclass
from typing import Any, Callable, Tuple

import requests

from hive_engine_base_types import Address, Bytes
from pytest_plugins.logging import get_logger

from .block_number import BlockNumber, to_block_number_arg
from .connection import RPC_TIMEOUT, ConnectionHandle
from .context import CallContext
from .errors import ConfigurationError, NotFoundError
from .nonce_cache import NonceCache
from .rpc import EngineRPC, EthRPC, validate_result
from .types import (
    BlockHeader,
    ExecutionPayload,
    ForkchoiceState,
    ForkchoiceUpdateResponse,
    PayloadAttributes,
    PayloadStatus,
    TotalDifficulty,
    TotalDifficultyHeader,
    TransitionConfiguration,
)

logger = get_logger(__name__)


@dataclass
class CallMemory:
    """
    Last request and response of the calls tests assert against.

    A response slot holds the error raised by the call when the call failed, so the attempted
    request can still be compared with the outcome.
    """

    forkchoice_state_sent: ForkchoiceState | None = None
    payload_attributes_sent: PayloadAttributes | None = None
    forkchoice_response: ForkchoiceUpdateResponse | Exception | None = None
    payload_sent: ExecutionPayload | None = None
    payload_status_response: PayloadStatus | Exception | None = None


class EngineClient:
    """Engine API client bound to the engine and eth endpoints of a single client."""

    def __init__(
        self,
        handle: ConnectionHandle,
        *,
        rpc_timeout: float = RPC_TIMEOUT,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ):
        """Create the engine and eth handles for the endpoints described by `handle`."""
        self.handle = handle
        self.rpc_timeout = rpc_timeout
        self.engine = EngineRPC(handle.engine_url, handle.jwt_secret, session=session_factory())
        self.eth = EthRPC(handle.eth_url, session=session_factory())
        self.memory = CallMemory()
        self.nonce_cache = NonceCache()

    def __enter__(self) -> "EngineClient":
        """Return the client itself."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Close the client when leaving the block."""
        self.close()

    def __repr__(self) -> str:
        """Return the client id and endpoints."""
        return f"EngineClient(id={self.id}, engine={self.engine.url}, eth={self.eth.url})"

    @property
    def id(self) -> str:
        """Return the id of the client container, used to correlate logs."""
        return self.handle.client_id

    def enode_url(self) -> str:
        """Return the enode URL of the client."""
        if self.handle.enode_url is None:
            raise ConfigurationError(f"no enode URL was supplied for client {self.id}")
        return self.handle.enode_url

    @property
    def terminal_total_difficulty(self) -> int | None:
        """Return the terminal total difficulty the client was started with."""
        return self.handle.terminal_total_difficulty

    # Engine API

    def forkchoice_updated(
        self,
        ctx: CallContext,
        forkchoice_state: ForkchoiceState,
        payload_attributes: PayloadAttributes | None = None,
        *,
        version: int = 1,
    ) -> ForkchoiceUpdateResponse:
        """Send `engine_forkchoiceUpdatedVX` and remember the request and its outcome."""
        auth = self.engine.authorization_headers()
        self.memory.forkchoice_state_sent = forkchoice_state
        self.memory.payload_attributes_sent = payload_attributes
        try:
            response = self.engine.forkchoice_updated(
                ctx, forkchoice_state, payload_attributes, version=version, extra_headers=auth
            )
        except Exception as e:
            self.memory.forkchoice_response = e
            raise
        self.memory.forkchoice_response = response
        return response

    def get_payload(
        self, ctx: CallContext, payload_id: Bytes, *, version: int = 1
    ) -> ExecutionPayload:
        """Send `engine_getPayloadVX`; the call is not remembered."""
        return self.engine.get_payload(ctx, payload_id, version=version)

    def new_payload(
        self,
        ctx: CallContext,
        payload: ExecutionPayload,
        *extra_params: Any,
        version: int = 1,
    ) -> PayloadStatus:
        """Send `engine_newPayloadVX` and remember the payload and its outcome."""
        auth = self.engine.authorization_headers()
        self.memory.payload_sent = payload
        try:
            status = self.engine.new_payload(
                ctx, payload, *extra_params, version=version, extra_headers=auth
            )
        except Exception as e:
            self.memory.payload_status_response = e
            raise
        self.memory.payload_status_response = status
        return status

    def exchange_transition_configuration(
        self, ctx: CallContext, transition_configuration: TransitionConfiguration
    ) -> TransitionConfiguration:
        """Send `engine_exchangeTransitionConfigurationV1` without a bearer token."""
        return self.engine.exchange_transition_configuration(ctx, transition_configuration)

    # Eth API

    def header_by_number(self, ctx: CallContext, number: BlockNumber = None) -> BlockHeader:
        """
        Return the header of the selected block.

        Raises `NotFoundError` when the client answered but has no such block.
        """
        result = self.eth.get_block_by_number(ctx, number, False)
        if result is None:
            raise NotFoundError(f"block {to_block_number_arg(number)} not found on {self.id}")
        return validate_result(BlockHeader, result, "eth_getBlockByNumber")

    def total_difficulty(self, ctx: CallContext) -> int:
        """
        Return the total difficulty of the latest block.

        The standard header shape has no total difficulty, so the same response is decoded a
        second time into a shape that only carries that field.
        """
        result = self.eth.get_block_by_number(ctx, None, False)
        if result is None:
            raise NotFoundError(f"latest block not found on {self.id}")
        header = validate_result(BlockHeader, result, "eth_getBlockByNumber")
        td = validate_result(TotalDifficulty, result, "eth_getBlockByNumber")
        merged = TotalDifficultyHeader(
            **header.model_dump(), total_difficulty=td.total_difficulty
        )
        return int(merged.total_difficulty)

    def next_account_nonce(self, ctx: CallContext, account: Address) -> int:
        """Return the nonce to use for the next transaction sent from `account`."""

        def head_lookup() -> BlockHeader:
            return self.header_by_number(ctx.with_timeout(self.rpc_timeout), None)

        def nonce_lookup(head: BlockHeader) -> int:
            return self.eth.get_transaction_count(
                ctx.with_timeout(self.rpc_timeout), Address(account), int(head.number)
            )

        return self.nonce_cache.next_nonce(Address(account), head_lookup, nonce_lookup)

    # Recorded calls

    def latest_forkchoice_sent(self) -> Tuple[ForkchoiceState | None, PayloadAttributes | None]:
        """Return the forkchoice state and payload attributes of the last forkchoice update."""
        return self.memory.forkchoice_state_sent, self.memory.payload_attributes_sent

    def latest_forkchoice_response(self) -> ForkchoiceUpdateResponse | Exception | None:
        """Return the response, or error, of the last forkchoice update."""
        return self.memory.forkchoice_response

    def latest_new_payload_sent(self) -> ExecutionPayload | None:
        """Return the payload of the last new payload call."""
        return self.memory.payload_sent

    def latest_new_payload_response(self) -> PayloadStatus | Exception | None:
        """Return the status, or error, of the last new payload call."""
        return self.memory.payload_status_response

    def post_run_verifications(self) -> None:
        """Run checks after a test; RPC-backed clients have none."""
        pass

    def close(self) -> None:
        """Release both endpoint handles. Call at most once."""
        logger.debug(f"Closing engine client {self.id}")
        self.engine.close()
        self.eth.close()
