"""
Resolution of the parameters an execution client is started with, and construction of the
engine client once hive has started it.

Starting the container and waiting for its ports is done by the orchestrator; the starter only
prepares the parameters and files handed to it and connects to the result.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Sequence

import requests
from pydantic import BaseModel, field_validator

from hive_engine_base_types import to_number
from pytest_plugins.logging import get_logger

from .client import EngineClient
from .connection import (
    DEFAULT_JWT_SECRET,
    ENGINE_PORT_HTTP,
    ETH_PORT_HTTP,
    RPC_TIMEOUT,
    ConnectionHandle,
    parse_jwt_secret,
)
from .errors import ConfigurationError

if TYPE_CHECKING:
    from config import EnvConfig

logger = get_logger(__name__)

GENESIS_FILE = "/genesis.json"
CHAIN_FILE = "/chain.rlp"
CHAINS_DIR = "./chains"
TTD_PARAM = "HIVE_TERMINAL_TOTAL_DIFFICULTY"
BOOTNODE_PARAM = "HIVE_BOOTNODE"


def _load_genesis(genesis: Any) -> Mapping[str, Any]:
    if isinstance(genesis, Mapping):
        return genesis
    if hasattr(genesis, "read"):
        content = genesis.read()
        if hasattr(genesis, "seek"):
            genesis.seek(0)
        genesis = content
    if isinstance(genesis, str) and not genesis.lstrip().startswith("{"):
        genesis = Path(genesis)
    if isinstance(genesis, Path):
        try:
            genesis = genesis.read_text()
        except OSError as e:
            raise ConfigurationError(f"Unable to read genesis file: {e}") from e
    try:
        loaded = json.loads(genesis)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Unable to parse genesis file: {e}") from e
    if not isinstance(loaded, dict):
        raise ConfigurationError("Genesis file does not contain a JSON object")
    return loaded


def calculate_real_ttd(genesis: Any, ttd_offset: int) -> int:
    """
    Return the terminal total difficulty counted from the genesis block: the genesis
    difficulty plus `ttd_offset`.

    `genesis` may be a path, JSON text or bytes, a readable file object or a mapping.
    """
    genesis_data = _load_genesis(genesis)
    if "difficulty" not in genesis_data:
        raise ConfigurationError("Genesis file has no difficulty field")
    try:
        difficulty = to_number(genesis_data["difficulty"])
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Invalid genesis difficulty {genesis_data['difficulty']!r}"
        ) from e
    return difficulty + ttd_offset


@dataclass
class StartParameters:
    """Environment and files to start a client with, plus the TTD it will use."""

    params: Dict[str, str] = field(default_factory=dict)
    files: Dict[str, Any] = field(default_factory=dict)
    terminal_total_difficulty: int | None = None


class EngineClientStarter(BaseModel):
    """Parameters used to launch a client and connect an engine client to it."""

    client_type: str | None = None
    chain_file: str | None = None
    terminal_total_difficulty: int | None = None
    engine_port: int = ENGINE_PORT_HTTP
    eth_port: int = ETH_PORT_HTTP
    jwt_secret: bytes = DEFAULT_JWT_SECRET
    rpc_timeout: float = RPC_TIMEOUT

    @field_validator("engine_port", "eth_port", mode="before")
    @classmethod
    def default_port(cls, value, info):
        """Replace an unset (zero) port with the port hive clients listen on."""
        if not value:
            return ENGINE_PORT_HTTP if info.field_name == "engine_port" else ETH_PORT_HTTP
        return value

    @field_validator("jwt_secret", mode="before")
    @classmethod
    def default_jwt_secret(cls, value):
        """Substitute the default secret when none is given; hex strings are decoded."""
        return parse_jwt_secret(value)

    @classmethod
    def from_env(cls, env: "EnvConfig", **kwargs: Any) -> "EngineClientStarter":
        """Create a starter from the `env.yaml` defaults; keyword arguments take precedence."""
        defaults = env.engine_client
        values: Dict[str, Any] = {
            "engine_port": defaults.engine_port,
            "eth_port": defaults.eth_port,
            "jwt_secret": defaults.jwt_secret,
            "rpc_timeout": defaults.rpc_timeout,
        }
        return cls(**(values | kwargs))

    def resolve_client_type(self, available: Sequence[str]) -> str:
        """Return the configured client type, or the first one the simulator offers."""
        if self.client_type:
            return self.client_type
        if not available:
            raise ConfigurationError(
                "Client type was not supplied and the simulator returned no client types"
            )
        return available[0]

    def prepare(
        self,
        client_params: Mapping[str, str],
        client_files: Mapping[str, Any],
        boot_enode_urls: Sequence[str] = (),
    ) -> StartParameters:
        """
        Resolve the parameters and files a client must be started with.

        The inputs are not modified. Raises `ConfigurationError` when no genesis file is
        supplied or the terminal total difficulty parameter cannot be parsed.
        """
        params = dict(client_params)
        files = dict(client_files)

        if self.chain_file:
            files[CHAIN_FILE] = f"{CHAINS_DIR}/{self.chain_file}"
        if GENESIS_FILE not in files:
            raise ConfigurationError("Cannot start without genesis file")

        ttd = self.terminal_total_difficulty
        if ttd is None:
            if (ttd_str := params.get(TTD_PARAM)) is not None:
                try:
                    ttd = int(ttd_str, 10)
                except ValueError as e:
                    raise ConfigurationError(
                        f"Unable to parse TTD from parameters: {ttd_str!r}"
                    ) from e
        else:
            ttd = calculate_real_ttd(files[GENESIS_FILE], ttd)
            params[TTD_PARAM] = str(ttd)

        if boot_enode_urls:
            params[BOOTNODE_PARAM] = ",".join(boot_enode_urls)

        logger.debug(f"Resolved client start parameters: {params}")
        return StartParameters(params=params, files=files, terminal_total_difficulty=ttd)

    def connect(
        self,
        host: str,
        client_id: str,
        *,
        terminal_total_difficulty: int | None = None,
        enode_url: str | None = None,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ) -> EngineClient:
        """Return an engine client bound to a started client's engine and eth endpoints."""
        handle = ConnectionHandle(
            client_id=client_id,
            host=host,
            engine_port=self.engine_port,
            eth_port=self.eth_port,
            jwt_secret=self.jwt_secret,
            terminal_total_difficulty=terminal_total_difficulty,
            enode_url=enode_url,
        )
        logger.info(f"Connecting engine client to {client_id} at {host}")
        return EngineClient(handle, rpc_timeout=self.rpc_timeout, session_factory=session_factory)
