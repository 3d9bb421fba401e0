# backend/services/exceptions.py
from fastapi import status


class MovementError(Exception):
    """Base class for rejected stock movements.

    Every subclass carries the HTTP status the API answers with, so routes
    only need a single exception handler.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Failed to create transaction"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# Malformed input, rejected before touching the database
class InvalidMovementError(MovementError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid transaction payload"


# The product has no stock row
class StockNotFoundError(MovementError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Stock not found"


# OUT movement larger than the quantity on hand
class InsufficientStockError(MovementError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Insufficient stock"


# Lock, write or commit failure; the transaction was rolled back
class MovementFailedError(MovementError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Failed to create transaction"
