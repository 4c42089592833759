"""Collaborator errors — LCD endpoints, coin conversion, persistence."""

from __future__ import annotations

from tx_composer.errors.compose_errors import ComposerError


class EndpointError(ComposerError):
    """The remote LCD endpoint could not be reached or returned garbage."""

    def __init__(self, message: str, *, status_code: int = 502) -> None:
        super().__init__(message, status_code=status_code, code="endpoint-error", field="lcd")


class CodeHashLookupError(ComposerError):
    """The contract code hash could not be resolved."""

    def __init__(self, message: str, *, status_code: int = 502) -> None:
        super().__init__(
            message, status_code=status_code, code="code-hash-lookup-error", field="code_hash"
        )


class CoinConversionError(ComposerError):
    """A display amount could not be converted to base units."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=400, code="coin-conversion-error", field="amount")


class ValidatorLoadError(ComposerError):
    """The bonded validator set could not be loaded."""

    def __init__(self, message: str, *, status_code: int = 502) -> None:
        super().__init__(message, status_code=status_code, code="validator-load-error")


class PersistenceError(ComposerError):
    """The transaction store rejected or failed to write a draft."""

    def __init__(self, message: str, *, status_code: int = 500) -> None:
        super().__init__(message, status_code=status_code, code="persistence-error")
