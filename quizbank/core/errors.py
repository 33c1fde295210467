"""
Error taxonomy shared by services and the API layer.

Each error carries the HTTP status the API responds with; the message is
what the client sees in the ``{"error": ...}`` body.
"""
from fastapi import status

class QuizBankError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Something went wrong"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

class InvalidArgument(QuizBankError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"

class Unauthorized(QuizBankError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid token"

class NotFound(QuizBankError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"

class Conflict(QuizBankError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Already exists"

class StorageFailure(QuizBankError):
    default_message = "Storage operation failed"

class IdentityProviderError(QuizBankError):
    default_message = "Identity provider request failed"
