from pydantic import BaseModel


class FieldError(BaseModel):
    """A recoverable, field-scoped validation failure."""

    field: str
    message: str


class CalculationError(BaseModel):
    """Quote unavailable for the given inputs. Returned, never raised."""

    message: str
