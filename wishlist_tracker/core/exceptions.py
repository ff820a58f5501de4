"""Custom exception classes for the application."""

from typing import Optional


class WishlistTrackerError(Exception):
    """Base exception for all wishlist tracker errors."""

    code: str = "error"
    retryable: bool = False

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# Transport errors (page acquisition)
# ---------------------------------------------------------------------------


class TransportError(WishlistTrackerError):
    """Raised when a product page cannot be fetched."""

    code = "transport_error"

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        super().__init__(message)


class ScrapeTimeoutError(TransportError):
    """Raised when the website does not answer within the timeout."""

    code = "timeout"
    retryable = True

    def __init__(self, url: Optional[str] = None):
        super().__init__(
            "Request timeout - the website took too long to respond.", url=url
        )


class AccessDeniedError(TransportError):
    """Raised on HTTP 403, usually bot protection."""

    code = "access_denied"

    def __init__(self, url: Optional[str] = None):
        super().__init__(
            "Access denied (403) - website is blocking automated requests.", url=url
        )


class PageNotFoundError(TransportError):
    """Raised on HTTP 404."""

    code = "not_found"

    def __init__(self, url: Optional[str] = None):
        super().__init__(
            "Product not found (404) - URL invalid or product removed.", url=url
        )


class ServerUnavailableError(TransportError):
    """Raised on HTTP 5xx responses."""

    code = "server_unavailable"
    retryable = True

    def __init__(self, status_code: int, url: Optional[str] = None):
        self.status_code = status_code
        super().__init__(
            f"Website server error ({status_code}) - please try again later.", url=url
        )


class NetworkError(TransportError):
    """Raised for connection failures and unexpected HTTP statuses."""

    code = "network_error"
    retryable = True

    def __init__(self, detail: str, url: Optional[str] = None):
        super().__init__(f"Failed to fetch product page: {detail}", url=url)


# ---------------------------------------------------------------------------
# Content errors
# ---------------------------------------------------------------------------


class ExtractionError(WishlistTrackerError):
    """Raised when a fetched page does not yield a usable product."""

    code = "extraction_error"


class TitleMissingError(ExtractionError):
    """Raised when no product title can be resolved from the page."""

    code = "title_missing"

    def __init__(self, url: Optional[str] = None):
        self.url = url
        super().__init__(
            "Failed to extract product title - page may not be accessible "
            "or scraping blocked."
        )


class ConfigurationError(WishlistTrackerError):
    """Raised when a site is misconfigured, e.g. dynamic rendering without a render config."""

    code = "configuration_error"


class NotFoundError(WishlistTrackerError):
    """Raised when a requested resource is not found."""

    code = "item_not_found"

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} with identifier '{identifier}' not found")
