"""Application-specific exceptions for consistent error handling."""

from typing import Any

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Application error with standardized error code."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | list[Any] | None = None,
    ):
        """Initialize application error."""
        super().__init__(
            status_code=status_code,
            detail={
                "code": code,
                "message": message,
                "details": details,
            },
        )
        self.code = code
        self.message = message
        self.details = details


class InputValidationError(AppError):
    """Bad input, rejected before any state mutation."""

    def __init__(self, message: str, details: dict[str, Any] | list[Any] | None = None):
        super().__init__(status.HTTP_422_UNPROCESSABLE_ENTITY, "VALIDATION_ERROR", message, details)


class NotFoundError(AppError):
    """Session, progress or exchange is absent (or not owned by the caller)."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(status.HTTP_404_NOT_FOUND, "NOT_FOUND", message, details)


class SessionAlreadyTerminal(AppError):
    """Learning session is COMPLETED or ABANDONED."""

    def __init__(self, session_id: Any, current_status: str):
        super().__init__(
            status.HTTP_409_CONFLICT,
            "SESSION_ALREADY_TERMINAL",
            f"Session is already {current_status}",
            {"session_id": str(session_id), "status": current_status},
        )


class ExerciseIndexOutOfRange(AppError):
    """Exercise index does not exist in the session."""

    def __init__(self, index: int, total: int):
        super().__init__(
            status.HTTP_404_NOT_FOUND,
            "EXERCISE_INDEX_OUT_OF_RANGE",
            f"Exercise index {index} is out of range",
            {"index": index, "total_exercises": total},
        )


class UnknownRewardKind(AppError):
    """Trigger kind missing from the reward catalog."""

    def __init__(self, kind: str):
        super().__init__(
            status.HTTP_400_BAD_REQUEST,
            "UNKNOWN_REWARD_KIND",
            f"Unknown reward kind: {kind}",
            {"kind": kind},
        )


class LedgerUnavailable(AppError):
    """Ledger could not be reached, failed or timed out."""

    def __init__(self, message: str = "Ledger unavailable", details: dict[str, Any] | None = None):
        super().__init__(status.HTTP_503_SERVICE_UNAVAILABLE, "LEDGER_UNAVAILABLE", message, details)


class InsufficientCapacity(AppError):
    """Ledger reward pool cannot cover the credit."""

    def __init__(self, message: str = "Reward pool exhausted", details: dict[str, Any] | None = None):
        super().__init__(status.HTTP_409_CONFLICT, "INSUFFICIENT_CAPACITY", message, details)


class CatalogConfigError(ValueError):
    """Reward catalog failed startup validation."""


# Ledger and catalog failures a best-effort reward grant absorbs
REWARD_FAILURES = (LedgerUnavailable, InsufficientCapacity, UnknownRewardKind)