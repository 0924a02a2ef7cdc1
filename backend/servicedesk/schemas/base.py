# backend/servicedesk/schemas/base.py
from datetime import datetime, timezone
from typing import Annotated, ClassVar, Tuple

from pydantic import AfterValidator, BaseModel, ConfigDict, field_validator, model_validator


def naive_utc(v: datetime) -> datetime:
    """Columns hold naive UTC; an offset-bearing value is converted, a naive one is taken as UTC."""
    if v.tzinfo is None:
        return v
    return v.astimezone(timezone.utc).replace(tzinfo=None)


UtcDateTime = Annotated[datetime, AfterValidator(naive_utc)]


class WriteModel(BaseModel):
    """
    Base of every create/update payload.

    Unknown keys (ids, numbers, derived totals) are refused, text is
    trimmed and blank optional text is stored as NULL.
    """
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    # may be left out of a partial update, never sent as null
    NOT_NULL: ClassVar[Tuple[str, ...]] = ()

    @field_validator("*")
    @classmethod
    def _blank_is_null(cls, v):
        if isinstance(v, str) and not v:
            return None
        return v

    @model_validator(mode="after")
    def _refuse_nulls(self):
        for name in self.NOT_NULL:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self
