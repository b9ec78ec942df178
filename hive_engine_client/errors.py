"""Error kinds raised by the engine client."""

from typing import Any


class EngineClientError(Exception):
    """Base class of every error raised by the engine client."""

    pass


class ConfigurationError(EngineClientError):
    """A required startup input is missing or malformed."""

    pass


class AuthorizationError(EngineClientError):
    """An authentication token could not be produced or did not verify."""

    pass


class SigningError(AuthorizationError):
    """The shared secret was rejected while signing a token; no request was sent."""

    pass


class NotFoundError(EngineClientError):
    """The node serviced the lookup successfully but returned no result."""

    pass


class TransportError(EngineClientError):
    """Network or RPC level failure while talking to the node."""

    pass


class RPCTimeoutError(TransportError):
    """The call's deadline expired before the node answered."""

    pass


class RPCCancelledError(TransportError):
    """The call's context was cancelled before the node answered."""

    pass


class ResponseDecodeError(TransportError):
    """The node answered with a payload that does not have the expected shape."""

    pass


class JSONRPCError(TransportError):
    """Model to parse a JSON-RPC error response."""

    code: int
    message: str
    data: Any

    def __init__(self, code: int | str, message: str, data: Any = None, **kwargs):
        """Initialize the JSONRPCError."""
        self.code = int(code)
        self.message = message
        self.data = data
        super().__init__(code, message)

    def __str__(self) -> str:
        """Return string representation of the JSONRPCError."""
        if self.data is not None:
            return f"JSONRPCError(code={self.code}, message={self.message}, data={self.data})"
        return f"JSONRPCError(code={self.code}, message={self.message})"
