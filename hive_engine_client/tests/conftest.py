"""Fixtures providing an in-process fake execution client for the engine client tests."""

import json
import threading
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Callable, Dict, List

import pytest
import requests

from hive_engine_base_types import Address, Hash

from ..auth import verify_token
from ..block_number import from_block_number_arg
from ..client import EngineClient
from ..connection import DEFAULT_JWT_SECRET, ConnectionHandle
from ..errors import AuthorizationError

UNAUTHENTICATED_METHODS = {"engine_exchangeTransitionConfigurationV1"}


class JSONRPCFault(Exception):
    """Raised by fake node handlers to answer with a JSON-RPC error object."""

    def __init__(self, code: int, message: str):
        """Initialize the fault with the error code and message to send back."""
        super().__init__(message)
        self.code = code
        self.message = message


def make_response(status_code: int, body: Any, *, raw: bytes | None = None) -> requests.Response:
    """Build a `requests.Response` as returned by a real HTTP round trip."""
    response = requests.Response()
    response.status_code = status_code
    response.reason = "OK" if status_code == 200 else "Error"
    response.url = "http://fake-node/"
    response.encoding = "utf-8"
    response._content = raw if raw is not None else json.dumps(body).encode()
    return response


def make_header(number: int, block_hash: Hash, parent_hash: Hash, **extra: Any) -> Dict[str, Any]:
    """Return the JSON object a client returns for a block without transactions."""
    header = {
        "hash": str(block_hash),
        "parentHash": str(parent_hash),
        "sha3Uncles": str(Hash(0)),
        "miner": str(Address(0)),
        "stateRoot": str(Hash(0)),
        "transactionsRoot": str(Hash(0)),
        "receiptsRoot": str(Hash(0)),
        "logsBloom": "0x" + "00" * 256,
        "difficulty": "0x0",
        "number": hex(number),
        "gasLimit": hex(30_000_000),
        "gasUsed": "0x0",
        "timestamp": hex(1_700_000_000 + number * 12),
        "extraData": "0x",
        "mixHash": str(Hash(0)),
        "nonce": "0x0000000000000000",
        "baseFeePerGas": "0x7",
        "transactions": [],
        "uncles": [],
    }
    header.update(extra)
    return header


@dataclass
class RecordedRequest:
    """A request received by the fake node."""

    url: str
    body: Dict[str, Any]
    headers: Dict[str, str]
    timeout: float | None

    @property
    def method(self) -> str:
        """Return the JSON-RPC method of the request."""
        return self.body["method"]


@dataclass
class FakeNode:
    """
    Execution client stand-in answering JSON-RPC requests from registered handlers.

    Engine methods require a valid bearer token, like a real client does. The node keeps a
    simple chain of headers so nonce and header lookups can be exercised across new blocks and
    reorgs.
    """

    jwt_secret: bytes = DEFAULT_JWT_SECRET
    handlers: Dict[str, Callable[..., Any]] = field(default_factory=dict)
    received: List[RecordedRequest] = field(default_factory=list)
    chain: List[Dict[str, Any]] = field(default_factory=list)
    nonces: Dict[Address, int] = field(default_factory=dict)
    sessions: List["FakeSession"] = field(default_factory=list)
    hash_counter: count = field(default_factory=lambda: count(1))

    def __post_init__(self):
        """Register the eth handlers and create the genesis block."""
        self.chain.append(make_header(0, self.new_hash(), Hash(0)))
        self.handlers.setdefault("eth_getBlockByNumber", self.get_block_by_number)
        self.handlers.setdefault("eth_getTransactionCount", self.get_transaction_count)

    def new_hash(self) -> Hash:
        """Return a block hash never used before."""
        return Hash(0xB10C000 + next(self.hash_counter))

    @property
    def head(self) -> Dict[str, Any]:
        """Return the current head block."""
        return self.chain[-1]

    def mine(self, blocks: int = 1, **extra: Any) -> Dict[str, Any]:
        """Append `blocks` blocks to the chain and return the new head."""
        for _ in range(blocks):
            number = len(self.chain)
            self.chain.append(
                make_header(number, self.new_hash(), Hash(self.head["hash"]), **extra)
            )
        return self.head

    def reorg(self, depth: int) -> Dict[str, Any]:
        """Replace the last `depth` blocks with a sibling branch of the same length."""
        del self.chain[-depth:]
        return self.mine(depth)

    def method_calls(self, method: str) -> List[RecordedRequest]:
        """Return the requests received for `method`."""
        return [request for request in self.received if request.method == method]

    def get_block_by_number(self, block: str, full_txs: bool) -> Dict[str, Any] | None:
        """Serve `eth_getBlockByNumber` from the chain."""
        number = from_block_number_arg(block)
        if number is None or number < 0:
            return self.head
        if number >= len(self.chain):
            return None
        return self.chain[number]

    def get_transaction_count(self, address: str, block: str) -> str:
        """Serve `eth_getTransactionCount` from the nonce table."""
        return hex(self.nonces.get(Address(address), 0))

    def session_factory(self) -> "FakeSession":
        """Return a new session bound to this node."""
        session = FakeSession(self)
        self.sessions.append(session)
        return session

    def respond(
        self, url: str, body: Dict[str, Any], headers: Dict[str, str], timeout: float | None
    ) -> requests.Response:
        """Answer a JSON-RPC request the way an execution client does."""
        self.received.append(RecordedRequest(url, body, dict(headers), timeout))
        method = body["method"]
        if method.startswith("engine_") and method not in UNAUTHENTICATED_METHODS:
            authorization = headers.get("Authorization", "")
            if not authorization.startswith("Bearer "):
                return make_response(401, {"error": "missing token"})
            try:
                verify_token(authorization.removeprefix("Bearer "), self.jwt_secret)
            except AuthorizationError:
                return make_response(401, {"error": "invalid token"})

        envelope: Dict[str, Any] = {"jsonrpc": "2.0", "id": body["id"]}
        handler = self.handlers.get(method)
        if handler is None:
            envelope["error"] = {"code": -32601, "message": f"the method {method} does not exist"}
            return make_response(200, envelope)
        try:
            envelope["result"] = handler(*body["params"])
        except JSONRPCFault as fault:
            envelope["error"] = {"code": fault.code, "message": fault.message}
        return make_response(200, envelope)


class FakeSession:
    """Minimal `requests.Session` replacement that routes requests to a fake node."""

    def __init__(self, node: FakeNode):
        """Bind the session to `node`."""
        self.node = node
        self.closed = False

    def post(self, url, json=None, headers=None, timeout=None) -> requests.Response:
        """Deliver a POST request to the node."""
        return self.node.respond(url, json, headers or {}, timeout)

    def close(self) -> None:
        """Mark the session closed."""
        self.closed = True


@pytest.fixture
def fake_node() -> FakeNode:
    """Return a fresh fake node with a genesis block."""
    return FakeNode()


@pytest.fixture
def connection_handle() -> ConnectionHandle:
    """Return the connection handle of the client under test."""
    return ConnectionHandle(
        client_id="c0ffee",
        host="172.17.0.2",
        terminal_total_difficulty=131_072,
        enode_url="enode://abcd@172.17.0.2:30303",
    )


@pytest.fixture
def engine_client(fake_node: FakeNode, connection_handle: ConnectionHandle):
    """Return an engine client talking to the fake node."""
    client = EngineClient(
        connection_handle, rpc_timeout=2.0, session_factory=fake_node.session_factory
    )
    yield client
    client.close()


@pytest.fixture
def release_event():
    """Event used to unblock handlers that simulate a slow client."""
    event = threading.Event()
    yield event
    event.set()
