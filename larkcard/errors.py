"""
Exception types raised by larkcard.
"""
from typing import Optional


class LarkCardError(Exception):
    """Base class for all larkcard errors."""


class ConfigError(LarkCardError):
    """Raised when a configuration file or value cannot be used."""


class CardPublishError(LarkCardError):
    """
    Raised when the chat platform rejects a create or edit request.

    Attributes:
        code: Platform error code from the response body, if any
        status_code: HTTP status code, if the request reached the server
    """

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code

    def __str__(self) -> str:
        details = []
        if self.status_code is not None:
            details.append(f"http={self.status_code}")
        if self.code is not None:
            details.append(f"code={self.code}")
        base = super().__str__()
        if details:
            return f"{base} ({', '.join(details)})"
        return base
