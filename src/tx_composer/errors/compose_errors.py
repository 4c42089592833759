"""ComposerError — base exception class for all tx-composer errors."""

from __future__ import annotations


class ComposerError(Exception):
    """Base error for all transaction composition operations.

    Attributes:
        message: Human-readable error description.
        status_code: Suggested HTTP status code.
        code: Machine-readable error code string.
        field: Name of the input field the error belongs to, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 500,
        code: str = "composer-error",
        field: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.field = field
