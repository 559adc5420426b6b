"""Domain models and types for cashreg.

This package contains the functional core:
- Pure functions with no side effects
- No I/O operations
- Easy to test
- Business logic separated from infrastructure
"""

from cashreg.domain.errors import ChangeError, InvalidAmountError, MalformedInputError
from cashreg.domain.models import DENOMINATIONS, Cents, ChangeRequest, ChangeResult, Denomination, PolicyConfig

__all__ = [
    "DENOMINATIONS",
    "Cents",
    "ChangeError",
    "ChangeRequest",
    "ChangeResult",
    "Denomination",
    "InvalidAmountError",
    "MalformedInputError",
    "PolicyConfig",
]
