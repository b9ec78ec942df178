"""Resolved connection parameters of one execution client under test."""

from pydantic import BaseModel, ConfigDict, field_validator

from .auth import secret_bytes
from .errors import AuthorizationError, ConfigurationError

ENGINE_PORT_HTTP = 8551
ETH_PORT_HTTP = 8545

DEFAULT_JWT_SECRET = b"secretsecretsecretsecretsecretse"
"""Secret every hive client container is configured with."""

RPC_TIMEOUT = 10.0
"""Seconds allowed for each lookup made on behalf of a test, e.g. while resolving nonces."""


def parse_jwt_secret(value: bytes | str | None) -> bytes:
    """
    Return the secret as raw bytes, substituting the default secret when none is given.

    Strings are decoded as the hex found in `jwtsecret` files.
    """
    if value is None:
        return DEFAULT_JWT_SECRET
    if isinstance(value, str):
        try:
            return secret_bytes(value)
        except AuthorizationError as e:
            raise ConfigurationError(str(e)) from e
    return value


class ConnectionHandle(BaseModel):
    """Identity and endpoints of a started client; immutable once created."""

    model_config = ConfigDict(frozen=True)

    client_id: str
    host: str
    engine_port: int = ENGINE_PORT_HTTP
    eth_port: int = ETH_PORT_HTTP
    jwt_secret: bytes = DEFAULT_JWT_SECRET
    terminal_total_difficulty: int | None = None
    enode_url: str | None = None

    @field_validator("jwt_secret", mode="before")
    @classmethod
    def validate_jwt_secret(cls, value):
        """Accept the secret as raw bytes or as a hex string."""
        return parse_jwt_secret(value)

    @property
    def engine_url(self) -> str:
        """Return the URL of the authenticated engine endpoint."""
        return f"http://{self.host}:{self.engine_port}/"

    @property
    def eth_url(self) -> str:
        """Return the URL of the general eth endpoint."""
        return f"http://{self.host}:{self.eth_port}/"
