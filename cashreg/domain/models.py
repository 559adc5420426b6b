"""Domain type definitions for cashreg.

These types describe the change calculation:
- Cents: Amount in cents (minor units)
- Denomination: A coin or note with a fixed cent value
- ChangeRequest / ChangeResult: Input and output of a calculation
- PolicyConfig: Settings that choose between decomposition strategies
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import NewType

# Money amounts are handled as cents (minor units) to avoid floating point errors
Cents = NewType("Cents", int)

DEFAULT_RANDOM_DIVISOR = 3
DEFAULT_COUNTRY = "US"


@dataclass(frozen=True)
class Denomination:
    """Immutable currency unit."""

    name: str
    value: Cents
    plural: str


# Canonical order, largest first. Greedy iteration and display both rely on it.
DENOMINATIONS: tuple[Denomination, ...] = (
    Denomination("dollar", Cents(100), "dollars"),
    Denomination("quarter", Cents(25), "quarters"),
    Denomination("dime", Cents(10), "dimes"),
    Denomination("nickel", Cents(5), "nickels"),
    Denomination("penny", Cents(1), "pennies"),
)


@dataclass(frozen=True)
class ChangeRequest:
    """Immutable change request (amounts in dollars)."""

    amount_owed: Decimal
    amount_paid: Decimal


@dataclass(frozen=True)
class ChangeResult:
    """Immutable change breakdown.

    Denominations map name to count in canonical order; zero counts are omitted.
    """

    denominations: dict[str, int]
    total: Decimal

    @property
    def cents(self) -> Cents:
        """Total reconstructed from the denomination counts."""
        values = {d.name: d.value for d in DENOMINATIONS}
        return Cents(sum(values[name] * count for name, count in self.denominations.items()))


@dataclass(frozen=True)
class PolicyConfig:
    """Immutable policy configuration.

    country and special_cases are carried for future currency tables and
    are not consulted by any calculation yet.
    """

    random_divisor: int = DEFAULT_RANDOM_DIVISOR
    country: str = DEFAULT_COUNTRY
    special_cases: tuple[str, ...] = ()
