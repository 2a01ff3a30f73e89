from datetime import datetime
from typing import Annotated, Optional

from pydantic import Field, StringConstraints, field_validator

from valkyrie.schemas.user_schema import CamelModel
from valkyrie.utils.datetime import ensure_utc


class GuildInput(CamelModel):
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=30)] = Field(
        ..., description="Guild name (3-30)"
    )


class GuildResponse(CamelModel):
    id: str
    name: str
    owner_id: str
    icon: Optional[str] = None
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)
