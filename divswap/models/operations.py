"""Pydantic models for operation requests and their results.

An operation log is an ordered list of these requests; the Exchange applies
them one at a time, in order, without retries. Scenario files are JSON
documents validated into a Scenario.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from divswap.models.types import Address, Uint256

# Pools are referenced by identifier or by position in Registry.get_pools()
PoolRef = Address | int


class _Operation(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class CreateAsset(_Operation):
    """Register a new in-memory asset, optionally minting an initial supply."""

    kind: Literal["create_asset"] = "create_asset"
    address: Address
    symbol: str = ""
    holder: Address | None = None
    supply: Uint256 = 0


class AssetTransfer(_Operation):
    """Plain asset transfer between accounts (or straight into a pool account)."""

    kind: Literal["asset_transfer"] = "asset_transfer"
    asset: Address
    sender: Address
    to: Address
    amount: Uint256


class AssetApprove(_Operation):
    """Allow a spender (usually a pool) to pull an owner's asset."""

    kind: Literal["asset_approve"] = "asset_approve"
    asset: Address
    owner: Address
    spender: PoolRef
    amount: Uint256


class AddOwner(_Operation):
    kind: Literal["add_owner"] = "add_owner"
    caller: Address
    account: Address


class RenounceOwner(_Operation):
    kind: Literal["renounce_owner"] = "renounce_owner"
    caller: Address


class CreatePool(_Operation):
    kind: Literal["create_pool"] = "create_pool"
    caller: Address
    asset_a: Address = Field(alias="assetA")
    asset_b: Address = Field(alias="assetB")


class ProvideLiquidity(_Operation):
    kind: Literal["provide_liquidity"] = "provide_liquidity"
    caller: Address
    pool: PoolRef
    amount_a: Uint256 = Field(alias="amountA")
    amount_b: Uint256 = Field(alias="amountB")


class RemoveLiquidity(_Operation):
    kind: Literal["remove_liquidity"] = "remove_liquidity"
    caller: Address
    pool: PoolRef
    shares: Uint256


class Swap(_Operation):
    kind: Literal["swap"] = "swap"
    caller: Address
    pool: PoolRef
    amount_in: Uint256 = Field(alias="amountIn")
    asset_in: Address = Field(alias="assetIn")


class TransferShares(_Operation):
    kind: Literal["transfer_shares"] = "transfer_shares"
    caller: Address
    pool: PoolRef
    to: Address
    amount: Uint256


class PayoutDividends(_Operation):
    kind: Literal["payout_dividends"] = "payout_dividends"
    caller: Address
    pool: PoolRef


class ReceiveProfits(_Operation):
    kind: Literal["receive_profits"] = "receive_profits"
    caller: Address
    pool: PoolRef
    amount: Uint256
    asset: Address


Operation = Annotated[
    CreateAsset
    | AssetTransfer
    | AssetApprove
    | AddOwner
    | RenounceOwner
    | CreatePool
    | ProvideLiquidity
    | RemoveLiquidity
    | Swap
    | TransferShares
    | PayoutDividends
    | ReceiveProfits,
    Field(discriminator="kind"),
]


class Scenario(BaseModel):
    """A registry owner plus the ordered operations to replay."""

    owner: Address
    operations: list[Operation] = Field(default_factory=list)


class OperationResult(BaseModel):
    """Outcome of one applied operation.

    Failed operations carry the error code and message; they changed nothing.
    """

    index: int
    kind: str
    ok: bool
    value: Any = None
    error: str | None = None
    detail: str | None = None
