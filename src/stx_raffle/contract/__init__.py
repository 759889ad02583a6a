"""Contract call dispatch and read-only queries."""

from .config import ContractConfig
from .dispatcher import ContractCallDispatcher
from .reader import ContractReader

__all__ = ["ContractCallDispatcher", "ContractConfig", "ContractReader"]
