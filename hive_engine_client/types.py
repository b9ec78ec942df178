"""Types used in the `eth` and `engine` namespaces' requests and responses."""

from enum import Enum
from typing import List

from pydantic import Field

from hive_engine_base_types import (
    Address,
    Bloom,
    Bytes,
    CamelModel,
    Hash,
    HeaderNonce,
    HexNumber,
)


class ForkchoiceState(CamelModel):
    """Represents the forkchoice state of the beacon chain."""

    head_block_hash: Hash = Field(Hash(0))
    safe_block_hash: Hash = Field(Hash(0))
    finalized_block_hash: Hash = Field(Hash(0))


class Withdrawal(CamelModel):
    """Represents a withdrawal included in payload attributes and execution payloads."""

    index: HexNumber
    validator_index: HexNumber
    address: Address
    amount: HexNumber


class PayloadAttributes(CamelModel):
    """Represents the attributes used to request building of a new payload."""

    timestamp: HexNumber
    prev_randao: Hash
    suggested_fee_recipient: Address
    withdrawals: List[Withdrawal] | None = None
    parent_beacon_block_root: Hash | None = None


class PayloadStatusEnum(str, Enum):
    """Represents the status of a payload after execution."""

    VALID = "VALID"
    INVALID = "INVALID"
    SYNCING = "SYNCING"
    ACCEPTED = "ACCEPTED"
    INVALID_BLOCK_HASH = "INVALID_BLOCK_HASH"


class PayloadStatus(CamelModel):
    """Represents the status of a payload after execution."""

    status: PayloadStatusEnum
    latest_valid_hash: Hash | None = None
    validation_error: str | None = None


class ForkchoiceUpdateResponse(CamelModel):
    """Represents the response of a forkchoice update."""

    payload_status: PayloadStatus
    payload_id: Bytes | None = None


class ExecutionPayload(CamelModel):
    """
    Represents an execution payload as exchanged through `engine_newPayload` and
    `engine_getPayload`.

    The withdrawals and blob gas fields are only present from the forks that introduced them.
    """

    parent_hash: Hash
    fee_recipient: Address
    state_root: Hash
    receipts_root: Hash
    logs_bloom: Bloom
    prev_randao: Hash
    number: HexNumber = Field(..., alias="blockNumber")
    gas_limit: HexNumber
    gas_used: HexNumber
    timestamp: HexNumber
    extra_data: Bytes
    base_fee_per_gas: HexNumber
    block_hash: Hash
    transactions: List[Bytes]
    withdrawals: List[Withdrawal] | None = None
    blob_gas_used: HexNumber | None = None
    excess_blob_gas: HexNumber | None = None


class GetPayloadResponse(CamelModel):
    """Represents the envelope returned by `engine_getPayloadV2` and later versions."""

    execution_payload: ExecutionPayload
    block_value: HexNumber | None = None


class TransitionConfiguration(CamelModel):
    """Represents the terminal block configuration exchanged before the merge transition."""

    terminal_total_difficulty: HexNumber
    terminal_block_hash: Hash = Field(Hash(0))
    terminal_block_number: HexNumber = Field(HexNumber(0))


class BlockHeader(CamelModel):
    """Represents the header fields of an `eth_getBlockByNumber` response."""

    hash: Hash
    parent_hash: Hash
    ommers_hash: Hash = Field(..., alias="sha3Uncles")
    fee_recipient: Address = Field(..., alias="miner")
    state_root: Hash
    transactions_root: Hash
    receipts_root: Hash
    logs_bloom: Bloom
    difficulty: HexNumber
    number: HexNumber
    gas_limit: HexNumber
    gas_used: HexNumber
    timestamp: HexNumber
    extra_data: Bytes
    mix_hash: Hash
    nonce: HeaderNonce
    base_fee_per_gas: HexNumber | None = None
    withdrawals_root: Hash | None = None
    blob_gas_used: HexNumber | None = None
    excess_blob_gas: HexNumber | None = None
    parent_beacon_block_root: Hash | None = None


class TotalDifficulty(CamelModel):
    """Auxiliary shape holding only the cumulative difficulty that clients add to a block."""

    total_difficulty: HexNumber


class TotalDifficultyHeader(BlockHeader):
    """Represents a block header together with the block's total difficulty."""

    total_difficulty: HexNumber
