"""Pure functions for parsing and processing change requests in bulk.

Batches are all-or-nothing: the first invalid entry aborts the whole batch
and no partial results are returned.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from cashreg.domain.change import RandomSource, calculate_change, format_change, parse_amount
from cashreg.domain.errors import ChangeError, MalformedInputError
from cashreg.domain.models import ChangeRequest, ChangeResult, PolicyConfig


@dataclass(frozen=True)
class ChangeResponse:
    """Immutable calculation outcome ready for serialization."""

    request: ChangeRequest
    result: ChangeResult
    formatted: str

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the wire field names."""
        return {
            "amountOwed": float(self.request.amount_owed),
            "amountPaid": float(self.request.amount_paid),
            "change": float(self.result.total),
            "denominations": dict(self.result.denominations),
            "formattedChange": self.formatted,
        }


def parse_change_payload(payload: Any) -> ChangeRequest:
    """Parse a single JSON request object.

    Args:
        payload: Decoded JSON with amountOwed and amountPaid.

    Returns:
        ChangeRequest.

    Raises:
        MalformedInputError: If the payload is not an object or an amount is invalid.
    """
    if not isinstance(payload, dict):
        raise MalformedInputError("Invalid request body")

    return ChangeRequest(
        amount_owed=parse_amount(payload.get("amountOwed", 0), "amountOwed"),
        amount_paid=parse_amount(payload.get("amountPaid", 0), "amountPaid"),
    )


def parse_batch_payload(payload: Any) -> list[ChangeRequest]:
    """Parse a JSON array of request objects."""
    if not isinstance(payload, list):
        raise MalformedInputError("Invalid request body")

    requests = []
    for index, item in enumerate(payload, 1):
        try:
            requests.append(parse_change_payload(item))
        except ChangeError as e:
            raise type(e)(f"entry {index}: {e.detail}") from e
    return requests


def parse_change_line(line: str) -> ChangeRequest:
    """Parse one "owed,paid" line.

    Raises:
        MalformedInputError: If the line does not have exactly two fields or a field is not a number.
    """
    parts = line.split(",")
    if len(parts) != 2:
        raise MalformedInputError(f"Invalid line format: {line}")

    owed_raw, paid_raw = parts
    try:
        owed = parse_amount(owed_raw, "amount owed")
    except MalformedInputError as e:
        raise MalformedInputError(f"Invalid amount owed: {owed_raw.strip()}") from e
    try:
        paid = parse_amount(paid_raw, "amount paid")
    except MalformedInputError as e:
        raise MalformedInputError(f"Invalid amount paid: {paid_raw.strip()}") from e

    return ChangeRequest(amount_owed=owed, amount_paid=paid)


def parse_change_lines(content: str) -> list[ChangeRequest]:
    """Parse newline-delimited "owed,paid" lines.

    Args:
        content: File content. Blank lines are skipped.

    Returns:
        Requests in file order.

    Raises:
        MalformedInputError: On the first malformed line.
    """
    return [parse_change_line(line.strip()) for line in content.splitlines() if line.strip()]


def build_response(request: ChangeRequest, result: ChangeResult) -> ChangeResponse:
    """Pair a request with its result and display string."""
    return ChangeResponse(request=request, result=result, formatted=format_change(result))


def process_requests(
    requests: list[ChangeRequest],
    config: PolicyConfig | None = None,
    rng: RandomSource | None = None,
) -> list[ChangeResponse]:
    """Calculate change for every request, in order.

    Args:
        requests: Parsed requests.
        config: Policy snapshot shared by the whole batch.
        rng: Random source for the randomized strategy.

    Returns:
        One response per request.

    Raises:
        ChangeError: For the first failing entry, with its 1-based position in the message.
    """
    responses = []
    for index, request in enumerate(requests, 1):
        try:
            result = calculate_change(request, config, rng)
        except ChangeError as e:
            raise type(e)(f"entry {index}: {e.detail}") from e
        responses.append(build_response(request, result))
    return responses


def total_change(responses: list[ChangeResponse]) -> Decimal:
    """Sum the change handed out across a batch."""
    return sum((r.result.total for r in responses), Decimal("0.00"))
