"""Error taxonomy for change calculation."""


class ChangeError(ValueError):
    """Validation failure reported to the caller with a stable code."""

    code = "CHANGE_ERROR"

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


class InvalidAmountError(ChangeError):
    """Amount paid is less than amount owed."""

    code = "INVALID_AMOUNT"


class MalformedInputError(ChangeError):
    """Request body, CSV line, or field could not be parsed."""

    code = "MALFORMED_INPUT"
