from pydantic import BaseModel


class ErrorMessage(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """Validation, rate-limit and upstream errors."""

    error: ErrorMessage


class ErrorCodeResponse(BaseModel):
    """Auth and deployment errors carry a bare code string."""

    error: str
