# storefront/core/errors.py
"""
Domain exceptions. Services and repositories raise these; `main.py` renders them
as `{"detail": ...}` responses with the mapped status code.
"""


class StorefrontError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class InvalidInput(StorefrontError):
    """Malformed identifier, non-positive quantity, empty cart at checkout..."""
    status_code = 400


class NotFound(StorefrontError):
    status_code = 404


class StoreUnavailable(StorefrontError):
    """Document store (or catalog) I/O failure. Not retried at this layer."""
    status_code = 503

    def __init__(self, detail: str = "Storage temporarily unavailable"):
        super().__init__(detail)


class PaymentError(StorefrontError):
    status_code = 502
