# app/domain/errors.py


class ShopError(Exception):
    """Base error for the cart and catalog use cases."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ShopError):
    """Malformed, missing or negative input."""

    status_code = 400


class NotFoundError(ShopError):
    """Referenced product or cart does not exist."""

    status_code = 404


class ConflictError(ShopError):
    """Duplicate product name or a cart in the wrong state."""

    status_code = 400


class ConcurrencyError(ConflictError):
    """Cart locked or modified by another request."""

    status_code = 409


class ComputationError(ShopError):
    status_code = 500


class StoreError(ShopError):
    status_code = 500
