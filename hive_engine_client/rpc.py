"""JSON-RPC handles for the `eth` and `engine` endpoints of an execution client."""

import concurrent.futures
import threading
from itertools import count
from typing import Any, Callable, ClassVar, Dict, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from hive_engine_base_types import Address, Bytes, to_json
from pytest_plugins.logging import get_logger

from .auth import TokenIssuer
from .block_number import BlockNumber, to_block_number_arg
from .context import CallContext
from .errors import (
    JSONRPCError,
    ResponseDecodeError,
    RPCCancelledError,
    RPCTimeoutError,
    TransportError,
)
from .types import (
    ExecutionPayload,
    ForkchoiceState,
    ForkchoiceUpdateResponse,
    GetPayloadResponse,
    PayloadAttributes,
    PayloadStatus,
    TransitionConfiguration,
)

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)


def validate_result(model: Type[M], result: Any, method: str) -> M:
    """Parse a JSON-RPC result into `model`, reporting shape mismatches as decode errors."""
    try:
        return model.model_validate(result)
    except ValidationError as e:
        raise ResponseDecodeError(f"{method} returned an unexpected result: {e}") from e


class BaseRPC:
    """
    JSON-RPC 2.0 handle bound to one endpoint.

    The namespace prepended to every method is derived from the subclass name, so `EthRPC`
    calls `eth_*` methods. Each request runs on its own daemon thread while the caller waits in
    short slices, which lets a cancelled or expired `CallContext` stop the wait promptly even
    while the HTTP request is still in flight. An abandoned request never holds up later calls
    and is bounded by `max_request_timeout`. Calls are never retried.
    """

    namespace: ClassVar[str]
    poll_interval: ClassVar[float] = 0.05
    max_request_timeout: ClassVar[float] = 60.0

    def __init__(
        self,
        url: str,
        *,
        session: requests.Session | None = None,
        extra_headers: Dict[str, str] | None = None,
    ):
        """Initialize the handle for the given url."""
        if extra_headers is None:
            extra_headers = {}
        self.url = url
        self.request_id_counter = count(1)
        self.extra_headers = extra_headers
        self.session = session if session is not None else requests.Session()

    def __init_subclass__(cls) -> None:
        """Set namespace of the RPC class to the lowercase of the class name."""
        namespace = cls.__name__
        if namespace.endswith("RPC"):
            namespace = namespace[:-3]
        cls.namespace = namespace.lower()

    def _submit(
        self, fn: Callable[..., Any], *args: Any, **kwargs: Any
    ) -> concurrent.futures.Future:
        future: concurrent.futures.Future = concurrent.futures.Future()

        def run() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(fn(*args, **kwargs))
            except Exception as e:
                future.set_exception(e)

        threading.Thread(target=run, name=f"{self.namespace}-rpc", daemon=True).start()
        return future

    def request_timeout(self, ctx: CallContext) -> float:
        """Return the HTTP timeout for a request made under `ctx`."""
        remaining = ctx.remaining()
        if remaining is None:
            return self.max_request_timeout
        # urllib3 rejects timeouts that are not positive
        return max(min(remaining, self.max_request_timeout), 0.001)

    def post_request(
        self,
        ctx: CallContext,
        method: str,
        *params: Any,
        extra_headers: Dict[str, str] | None = None,
    ) -> Any:
        """Send a JSON-RPC POST request and return the `result` member of the response."""
        if extra_headers is None:
            extra_headers = {}
        ctx.check()

        rpc_method = f"{self.namespace}_{method}"
        payload = {
            "jsonrpc": "2.0",
            "method": rpc_method,
            "params": list(params),
            "id": next(self.request_id_counter),
        }
        headers = {"Content-Type": "application/json"} | self.extra_headers | extra_headers

        logger.verbose(f"{self.url} <- {payload}")
        future = self._submit(
            self.session.post,
            self.url,
            json=payload,
            headers=headers,
            timeout=self.request_timeout(ctx),
        )
        response = self._wait(ctx, future, rpc_method)
        result = self._decode(response, rpc_method)
        logger.verbose(f"{self.url} -> {rpc_method}: {result}")
        return result

    def _wait(
        self, ctx: CallContext, future: concurrent.futures.Future, rpc_method: str
    ) -> requests.Response:
        while True:
            remaining = ctx.remaining()
            wait_slice = self.poll_interval if remaining is None else min(
                self.poll_interval, remaining
            )
            done, _ = concurrent.futures.wait([future], timeout=wait_slice)
            if done:
                break
            if ctx.cancelled:
                future.cancel()
                raise RPCCancelledError(f"{rpc_method} cancelled before {self.url} answered")
            if ctx.expired:
                future.cancel()
                raise RPCTimeoutError(f"{rpc_method} timed out waiting for {self.url}")

        try:
            return future.result()
        except requests.Timeout as e:
            raise RPCTimeoutError(f"{rpc_method} timed out waiting for {self.url}: {e}") from e
        except requests.RequestException as e:
            raise TransportError(f"{rpc_method} request to {self.url} failed: {e}") from e

    def _decode(self, response: requests.Response, rpc_method: str) -> Any:
        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise TransportError(
                f"{rpc_method} rejected by {self.url} with HTTP {response.status_code}"
            ) from e

        try:
            response_json = response.json()
        except ValueError as e:
            raise ResponseDecodeError(f"{rpc_method} returned invalid JSON: {e}") from e
        if not isinstance(response_json, dict):
            raise ResponseDecodeError(f"{rpc_method} returned a non-object response")

        if "error" in response_json:
            error = response_json["error"]
            if not isinstance(error, dict):
                raise JSONRPCError(-1, str(error))
            logger.verbose(f"{self.url} -> {rpc_method} error: {error}")
            raise JSONRPCError(
                error.get("code", -1), error.get("message", ""), error.get("data")
            )

        if "result" not in response_json:
            raise ResponseDecodeError(f"{rpc_method} response didn't contain a result field")
        return response_json["result"]

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()


class EthRPC(BaseRPC):
    """Represents the `eth_X` methods the engine tests need from the general endpoint."""

    def get_block_by_number(
        self, ctx: CallContext, block_number: BlockNumber = None, full_txs: bool = False
    ) -> Dict[str, Any] | None:
        """`eth_getBlockByNumber`: Returns the raw block object, or None when there is none."""
        return self.post_request(
            ctx, "getBlockByNumber", to_block_number_arg(block_number), full_txs
        )

    def get_transaction_count(
        self, ctx: CallContext, address: Address, block_number: BlockNumber = None
    ) -> int:
        """`eth_getTransactionCount`: Returns the number of transactions sent from an address."""
        result = self.post_request(
            ctx, "getTransactionCount", f"{address}", to_block_number_arg(block_number)
        )
        try:
            return int(result, 16)
        except (TypeError, ValueError) as e:
            raise ResponseDecodeError(f"eth_getTransactionCount returned {result!r}") from e


class EngineRPC(BaseRPC):
    """
    Represents the Engine API methods. Every authenticated call carries a bearer token minted
    right before the request.
    """

    def __init__(
        self,
        url: str,
        jwt_secret: bytes | str,
        *,
        session: requests.Session | None = None,
        extra_headers: Dict[str, str] | None = None,
    ):
        """Initialize the handle for the given url and shared JWT secret."""
        super().__init__(url, session=session, extra_headers=extra_headers)
        self.token_issuer = TokenIssuer(jwt_secret)

    def authorization_headers(self) -> Dict[str, str]:
        """Mint a token and return the header carrying it; raises before any network I/O."""
        return self.token_issuer.authorization_header()

    def post_request(
        self,
        ctx: CallContext,
        method: str,
        *params: Any,
        extra_headers: Dict[str, str] | None = None,
        authenticated: bool = True,
    ) -> Any:
        """Send an Engine API request, authenticated unless the caller opts out."""
        if extra_headers is None:
            extra_headers = {}
        if authenticated and "Authorization" not in extra_headers:
            extra_headers = self.authorization_headers() | extra_headers
        return super().post_request(ctx, method, *params, extra_headers=extra_headers)

    def forkchoice_updated(
        self,
        ctx: CallContext,
        forkchoice_state: ForkchoiceState,
        payload_attributes: PayloadAttributes | None = None,
        *,
        version: int = 1,
        extra_headers: Dict[str, str] | None = None,
    ) -> ForkchoiceUpdateResponse:
        """`engine_forkchoiceUpdatedVX`: Updates the forkchoice state of the execution client."""
        method = f"forkchoiceUpdatedV{version}"
        result = self.post_request(
            ctx,
            method,
            to_json(forkchoice_state),
            to_json(payload_attributes) if payload_attributes is not None else None,
            extra_headers=extra_headers,
        )
        return validate_result(ForkchoiceUpdateResponse, result, f"engine_{method}")

    def get_payload(
        self,
        ctx: CallContext,
        payload_id: Bytes,
        *,
        version: int = 1,
        extra_headers: Dict[str, str] | None = None,
    ) -> ExecutionPayload:
        """
        `engine_getPayloadVX`: Retrieves a payload that was requested through
        `engine_forkchoiceUpdatedVX`.
        """
        method = f"getPayloadV{version}"
        result = self.post_request(ctx, method, f"{payload_id}", extra_headers=extra_headers)
        if version == 1:
            return validate_result(ExecutionPayload, result, f"engine_{method}")
        return validate_result(GetPayloadResponse, result, f"engine_{method}").execution_payload

    def new_payload(
        self,
        ctx: CallContext,
        payload: ExecutionPayload,
        *extra_params: Any,
        version: int = 1,
        extra_headers: Dict[str, str] | None = None,
    ) -> PayloadStatus:
        """`engine_newPayloadVX`: Attempts to execute the given payload on an execution client."""
        method = f"newPayloadV{version}"
        result = self.post_request(
            ctx,
            method,
            to_json(payload),
            *[to_json(param) for param in extra_params],
            extra_headers=extra_headers,
        )
        return validate_result(PayloadStatus, result, f"engine_{method}")

    def exchange_transition_configuration(
        self, ctx: CallContext, transition_configuration: TransitionConfiguration
    ) -> TransitionConfiguration:
        """
        `engine_exchangeTransitionConfigurationV1`: Exchanges the terminal block configuration.
        Sent without a bearer token.
        """
        method = "exchangeTransitionConfigurationV1"
        result = self.post_request(
            ctx, method, to_json(transition_configuration), authenticated=False
        )
        return validate_result(TransitionConfiguration, result, f"engine_{method}")
