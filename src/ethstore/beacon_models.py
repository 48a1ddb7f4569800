"""Pydantic models for the Beacon API responses the gateway reads.

Only the fields used by the calculation are declared; everything else in the
payloads is ignored.
"""

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt

from src.ethstore.models import BLSPubkey, ValidatorStatus


class GenesisResponse(BaseModel):
    """Response of /eth/v1/beacon/genesis."""

    class Data(BaseModel):
        genesis_time: NonNegativeInt

    data: Data


class SpecResponse(BaseModel):
    """Response of /eth/v1/config/spec."""

    class Data(BaseModel):
        SECONDS_PER_SLOT: int = Field(..., gt=0)
        SLOTS_PER_EPOCH: int = Field(..., gt=0)

        model_config = ConfigDict(extra="allow")

    data: Data


class FinalityCheckpointsResponse(BaseModel):
    """Response of /eth/v1/beacon/states/{state_id}/finality_checkpoints."""

    class Data(BaseModel):
        class Checkpoint(BaseModel):
            epoch: NonNegativeInt
            root: str

        previous_justified: Checkpoint
        current_justified: Checkpoint
        finalized: Checkpoint

    data: Data


class BeaconValidator(BaseModel):
    """One entry of /eth/v1/beacon/states/{state_id}/validators."""

    class Validator(BaseModel):
        pubkey: BLSPubkey
        effective_balance: NonNegativeInt
        slashed: bool
        activation_epoch: NonNegativeInt
        exit_epoch: NonNegativeInt

    index: NonNegativeInt
    balance: NonNegativeInt
    status: ValidatorStatus
    validator: Validator


class ValidatorsResponse(BaseModel):
    """Response of /eth/v1/beacon/states/{state_id}/validators."""

    data: list[BeaconValidator]


class DepositData(BaseModel):
    pubkey: BLSPubkey
    amount: NonNegativeInt


class BlockDeposit(BaseModel):
    data: DepositData


class ExecutionPayload(BaseModel):
    """Execution payload of a post-merge beacon block."""

    block_number: NonNegativeInt
    block_hash: str
    fee_recipient: str
    base_fee_per_gas: NonNegativeInt | None = None
    transactions: list[str] = Field(default_factory=list)


class BlockBody(BaseModel):
    deposits: list[BlockDeposit] = Field(default_factory=list)
    execution_payload: ExecutionPayload | None = None


class BlockMessage(BaseModel):
    slot: NonNegativeInt
    proposer_index: NonNegativeInt
    body: BlockBody


class BlockResponse(BaseModel):
    """Response of /eth/v2/beacon/blocks/{block_id}."""

    class Data(BaseModel):
        message: BlockMessage

    version: str | None = None
    data: Data


__all__ = [
    "BeaconValidator",
    "BlockResponse",
    "ExecutionPayload",
    "FinalityCheckpointsResponse",
    "GenesisResponse",
    "SpecResponse",
    "ValidatorsResponse",
]
