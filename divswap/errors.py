"""Error taxonomy for registry and pool operations.

Every error carries a stable `code` (the short reason string callers and
scenario results use). All of them abort the triggering operation with no
partial state change; none are retried by the core.
"""


class DivSwapError(Exception):
    """Base error for registry and pool operations."""

    code = "error"

    def __init__(self, message: str | None = None, *, code: str | None = None) -> None:
        if code is not None:
            self.code = code
        super().__init__(message or self.code)


class Unauthorized(DivSwapError):
    """Caller is not an owner of the registry."""

    code = "unauthorized"


class AlreadyExists(DivSwapError):
    """A pool for this unordered asset pair is already registered."""

    code = "already-exists"


class InvalidAsset(DivSwapError):
    """Pool assets are identical or not registered asset ledgers."""

    code = "invalid-asset"


class OnlyOwnerViolation(DivSwapError):
    """The last remaining owner tried to renounce."""

    code = "only-owner"


class WrongProportion(DivSwapError):
    """Deposit amounts do not match the current reserve ratio exactly."""

    code = "wrong-proportion"


class InsufficientShares(DivSwapError):
    """Caller holds fewer shares than requested, or the pool has none."""

    code = "insufficient-shares"


class InsufficientBalance(DivSwapError):
    """Share transfer exceeds the sender's balance."""

    code = "insufficient-balance"


class InsufficientAllowance(InsufficientBalance):
    """Delegated share transfer exceeds the approved allowance."""

    code = "insufficient-allowance"


class UnknownAsset(DivSwapError):
    """Asset is not one of the pool's pair."""

    code = "unknown-asset"


class UnknownPool(DivSwapError):
    """No pool is registered under this identifier."""

    code = "unknown-pool"


class TransferFailed(DivSwapError):
    """An external asset pull or push failed."""

    code = "transfer-failed"


class NoLiquidity(DivSwapError):
    """Operation would mint zero shares or trade against empty reserves."""

    code = "no-liquidity"


class ReentrancyError(DivSwapError):
    """A pool operation was entered while another one was in progress."""

    code = "reentrant-call"


class InsufficientOutput(DivSwapError):
    """Swap would pay out nothing for a non-zero input."""

    code = "insufficient-output"
