from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, field_validator, model_validator

# bounds the length of format(value, "f")
MAX_DIGITS = 15
MAX_EXPONENT = 6


def in_range(value: Decimal) -> bool:
    if not value.is_finite():
        return False
    _, digits, exponent = value.as_tuple()
    return len(digits) <= MAX_DIGITS and -MAX_DIGITS <= exponent <= MAX_EXPONENT

# --- Measurement ---

class Measurement(BaseModel):
    date: date
    value: Decimal = Field(allow_inf_nan=False)

    @field_validator("value")
    @classmethod
    def _bounded(cls, v: Decimal) -> Decimal:
        if not in_range(v):
            raise ValueError(f"value {v} has too many digits or too large an exponent")
        return v

    def to_line(self) -> str:
        return f"{self.date.isoformat()} {format(self.value, 'f')}"

# --- Axis Range ---

class AutoRange(BaseModel):
    kind: Literal["auto"] = "auto"


class ExplicitRange(BaseModel):
    kind: Literal["explicit"] = "explicit"
    start: Decimal
    end: Decimal

    @model_validator(mode="after")
    def _ordered(self):
        if self.start > self.end:
            raise ValueError(f"range start {self.start} is above end {self.end}")
        return self


RangeSpec = Annotated[Union[AutoRange, ExplicitRange], Field(discriminator="kind")]

# --- Render Parameters ---

class RenderParams(BaseModel):
    date_start: date
    date_end: date
    weight_range: RangeSpec = Field(default_factory=AutoRange)
    data_file: Path
    output: Path

    @model_validator(mode="after")
    def _ordered(self):
        if self.date_start > self.date_end:
            raise ValueError(f"date_start {self.date_start} is after date_end {self.date_end}")
        return self
