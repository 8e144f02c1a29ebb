from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(ServiceError):
    """Invalid actor, amount, category or student. Nothing was written."""

    def __init__(self, message: str, status_code: int = status.HTTP_422_UNPROCESSABLE_ENTITY) -> None:
        super().__init__(message, status_code)


class StudentNotFound(ValidationError):
    def __init__(self, message: str = "Student not found") -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class DuplicateTransactionCode(ServiceError):
    def __init__(self, transaction_code: str) -> None:
        super().__init__(
            f"Transaction code {transaction_code} already exists",
            status.HTTP_409_CONFLICT,
        )
        self.transaction_code = transaction_code


class LedgerConflict(ServiceError):
    """The ledger changed between read and commit."""

    def __init__(self, message: str = "Ledger was modified concurrently, please retry") -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)


class AuthorizationError(ServiceError):
    def __init__(self, message: str = "Staff member is not authorized for finance") -> None:
        super().__init__(message, status.HTTP_403_FORBIDDEN)
