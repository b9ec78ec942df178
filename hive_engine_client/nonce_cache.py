"""
Per-account nonce tracking for transactions sent by engine tests.

Tests usually send several transactions from the same account within one or two blocks.
Asking the node for the nonce every time would return a stale value for transactions still in
the pool, so the cache increments its last value instead, as long as the chain has not moved
away from the block the value was computed at.
"""

import threading
from dataclasses import dataclass
from typing import Callable, Dict, Protocol, TypeVar

from hive_engine_base_types import Address, Hash
from pytest_plugins.logging import get_logger

logger = get_logger(__name__)


class ChainHead(Protocol):
    """The header fields the cache needs to judge whether an entry is still usable."""

    hash: Hash
    parent_hash: Hash
    number: int


H = TypeVar("H", bound=ChainHead)


@dataclass
class AccountTransactionInfo:
    """Nonce last handed out for an account and the head it was handed out at."""

    previous_block: Hash
    previous_nonce: int


class NonceCache:
    """
    Next-nonce tracker keyed by account address.

    An entry is reused while the current head is the block it was recorded at or that block's
    direct child; any other head (a reorg or more than one new block) forces an authoritative
    lookup. Calls for the same account are serialized, calls for different accounts are not.
    """

    def __init__(self) -> None:
        """Create an empty cache."""
        self._entries: Dict[Address, AccountTransactionInfo] = {}
        self._account_locks: Dict[Address, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, account: Address) -> threading.Lock:
        with self._locks_guard:
            return self._account_locks.setdefault(account, threading.Lock())

    def next_nonce(
        self,
        account: Address,
        head_lookup: Callable[[], H],
        nonce_lookup: Callable[[H], int],
    ) -> int:
        """
        Return the nonce to use for the next transaction sent by `account`.

        `head_lookup` is called on every invocation. `nonce_lookup` is only called when the
        cached entry is missing or stale and receives the head the lookup must be made at.
        Errors from either callable propagate and leave the cache untouched.
        """
        account = Address(account)
        with self._lock_for(account):
            head = head_lookup()
            info = self._entries.get(account)
            if info is not None and info.previous_block in (head.hash, head.parent_hash):
                nonce = info.previous_nonce + 1
                self._entries[account] = AccountTransactionInfo(
                    previous_block=head.hash, previous_nonce=nonce
                )
                logger.debug(f"Nonce {nonce} for {account} from cache at block {head.number}")
                return nonce

            nonce = nonce_lookup(head)
            if info is not None:
                logger.info(
                    f"Cached nonce for {account} recorded at {info.previous_block} is stale at "
                    f"block {head.number} ({head.hash}), using nonce {nonce} from the client"
                )
            self._entries[account] = AccountTransactionInfo(
                previous_block=head.hash, previous_nonce=nonce
            )
            return nonce

    def get(self, account: Address) -> AccountTransactionInfo | None:
        """Return the entry recorded for `account`, if any."""
        return self._entries.get(Address(account))

    def __contains__(self, account: object) -> bool:
        """Return whether an entry exists for `account`."""
        try:
            return Address(account) in self._entries
        except (TypeError, ValueError):
            return False

    def __len__(self) -> int:
        """Return the number of accounts tracked."""
        return len(self._entries)
