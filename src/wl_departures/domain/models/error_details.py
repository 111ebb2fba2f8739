"""Error details domain model."""

from pydantic import BaseModel, ConfigDict


class ErrorDetails(BaseModel):
    """Why a departure load failed."""

    model_config = ConfigDict(frozen=True)

    reason: str
    error_type: str | None = None  # Exception class name, e.g. "ValidationError"
    status_code: int | None = None

    @classmethod
    def from_exception(cls, error: Exception) -> "ErrorDetails":
        """Build details from an exception raised during a load."""
        status_code = getattr(error, "status", None)
        return cls(
            reason=str(error) or error.__class__.__name__,
            error_type=error.__class__.__name__,
            status_code=status_code if isinstance(status_code, int) else None,
        )
