"""Pure functions for change calculation.

This module contains the functional core for making change:
- No I/O operations (no network, no console, no files)
- No shared state; configuration is passed in explicitly
- Randomness comes from an injectable source
- Easy to test

Amounts enter as dollars (Decimal) and are decomposed in cents (Cents type).
"""

import logging
import random
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Protocol

from cashreg.domain.errors import InvalidAmountError, MalformedInputError
from cashreg.domain.models import (
    DEFAULT_RANDOM_DIVISOR,
    DENOMINATIONS,
    Cents,
    ChangeRequest,
    ChangeResult,
    PolicyConfig,
)

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

# Whole-dollar digits allowed; keeps cent arithmetic inside the default 28-digit context
MAX_AMOUNT_DIGITS = 15

_default_rng = random.Random()


class RandomSource(Protocol):
    """Source of uniform integers; random.Random satisfies it."""

    def randint(self, a: int, b: int) -> int:
        """Return a uniform integer N with a <= N <= b."""
        ...


def parse_amount(value: object, label: str = "amount") -> Decimal:
    """Parse a dollar amount from user input.

    Args:
        value: Number or numeric string.
        label: Field name used in error messages.

    Returns:
        Non-negative finite Decimal.

    Raises:
        MalformedInputError: If the value is missing, non-numeric, non-finite, negative or too large.
    """
    if value is None or isinstance(value, bool):
        raise MalformedInputError(f"{label} must be a number")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int | float):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation as e:
            raise MalformedInputError(f"{label} must be a number: {value!r}") from e
    else:
        raise MalformedInputError(f"{label} must be a number")

    if not amount.is_finite():
        raise MalformedInputError(f"{label} must be finite")
    if amount < 0:
        raise MalformedInputError(f"{label} must not be negative")
    if amount.adjusted() >= MAX_AMOUNT_DIGITS:
        raise MalformedInputError(f"{label} must be less than 10**{MAX_AMOUNT_DIGITS}")

    return amount


def to_cents(amount: Decimal) -> Cents:
    """Round a dollar amount to the nearest cent (ties away from zero) and convert to cents.

    Raises:
        MalformedInputError: If the amount is too large to hold in cents.
    """
    try:
        return Cents(int(amount.quantize(CENT, rounding=ROUND_HALF_UP) * 100))
    except InvalidOperation as e:
        raise MalformedInputError(f"amount out of range: {amount}") from e


def cents_to_dollars(cents: int) -> Decimal:
    """Convert cents back to a two-place dollar amount."""
    return (Decimal(cents) / 100).quantize(CENT)


def minimum_change(cents: int) -> ChangeResult:
    """Break cents into the fewest coins using the greedy algorithm.

    Greedy is optimal for the canonical dollar/quarter/dime/nickel/penny set.

    Args:
        cents: Non-negative amount in cents.

    Returns:
        ChangeResult with zero counts omitted.

    Raises:
        ValueError: If cents is negative.
    """
    if cents < 0:
        raise ValueError(f"Cannot make change for negative amount: {cents}")

    denominations: dict[str, int] = {}
    remaining = cents

    for denom in DENOMINATIONS:
        count, remaining = divmod(remaining, denom.value)
        if count > 0:
            denominations[denom.name] = count

    return ChangeResult(denominations=denominations, total=cents_to_dollars(cents))


def randomize_change(cents: int, rng: RandomSource | None = None) -> ChangeResult:
    """Break cents into a random valid combination of coins.

    Every denomination except the penny gets a uniform count between zero and
    the most that still fits; pennies absorb whatever is left.

    Args:
        cents: Positive amount in cents.
        rng: Random source. Defaults to a module-level random.Random.

    Returns:
        ChangeResult whose counts always add up to cents.

    Raises:
        ValueError: If cents is not positive.
    """
    if cents <= 0:
        raise ValueError(f"Randomized change needs a positive amount: {cents}")

    rng = rng or _default_rng
    denominations: dict[str, int] = {}
    remaining = cents

    *coins, penny = DENOMINATIONS
    for denom in coins:
        max_count = remaining // denom.value
        count = rng.randint(0, max_count)
        if count > 0:
            denominations[denom.name] = count
            remaining -= count * denom.value

    if remaining > 0:
        denominations[penny.name] = remaining

    return ChangeResult(denominations=denominations, total=cents_to_dollars(cents))


def should_randomize(cents: int, divisor: int) -> bool:
    """Check whether the change amount selects the randomized strategy.

    A non-positive divisor falls back to the default divisor.
    """
    if divisor <= 0:
        divisor = DEFAULT_RANDOM_DIVISOR
    return cents % divisor == 0


def calculate_change(
    request: ChangeRequest,
    config: PolicyConfig | None = None,
    rng: RandomSource | None = None,
) -> ChangeResult:
    """Calculate the change due for a request.

    Args:
        request: Amounts owed and paid.
        config: Policy snapshot. Defaults to PolicyConfig().
        rng: Random source for the randomized strategy.

    Returns:
        ChangeResult for paid - owed.

    Raises:
        InvalidAmountError: If amount paid is less than amount owed.
    """
    config = config or PolicyConfig()

    change_cents = to_cents(request.amount_paid - request.amount_owed)

    if change_cents < 0:
        raise InvalidAmountError("amount paid must be greater than or equal to amount owed")

    if change_cents == 0:
        return ChangeResult(denominations={}, total=cents_to_dollars(0))

    if should_randomize(change_cents, config.random_divisor):
        logger.debug("Randomizing change for %d cents (divisor %d)", change_cents, config.random_divisor)
        return randomize_change(change_cents, rng)

    logger.debug("Minimum change for %d cents (divisor %d)", change_cents, config.random_divisor)
    return minimum_change(change_cents)


def format_change(result: ChangeResult) -> str:
    """Format change for display.

    Args:
        result: Change breakdown.

    Returns:
        Comma-joined counts in canonical order (e.g., "3 quarters,4 pennies").
    """
    parts = []
    for denom in DENOMINATIONS:
        count = result.denominations.get(denom.name, 0)
        if count > 0:
            name = denom.name if count == 1 else denom.plural
            parts.append(f"{count} {name}")
    return ",".join(parts)
