"""
Exceptions raised by aawire.
"""


class AgencyError(Exception):
    """Base class for all errors raised while talking to the news-wire API."""


class InvalidConfiguration(AgencyError, ValueError):
    """Raised when configuration input is not a key-value mapping or cannot be loaded."""


class AuthenticationError(AgencyError):
    """Raised when the search envelope reports that the credentials were rejected."""

    def __init__(self, message: str = "The API rejected the supplied credentials (code 401)"):
        super().__init__(message)


class NoDataFoundError(AgencyError):
    """Raised when the search envelope reports any code other than 200 or 401."""

    def __init__(self, code=None, message: str = ""):
        self.code = code
        super().__init__(message or f"No data found (response code {code})")


class MalformedResponseError(AgencyError, ValueError):
    """Raised when a search response does not match the expected envelope."""


class MalformedDocumentError(AgencyError):
    """Raised when a NewsML document cannot be parsed."""
