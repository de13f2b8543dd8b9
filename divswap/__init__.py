"""DivSwap - constant product exchange that pays swap fees out as dividends."""

from divswap.engine import Exchange
from divswap.pools import Pool, Registry

__version__ = "0.1.0"
__all__ = ["Exchange", "Pool", "Registry", "__version__"]
