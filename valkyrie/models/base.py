from datetime import datetime

from sqlalchemy.types import TIMESTAMP
from sqlalchemy import func
from sqlmodel import SQLModel, Field

from valkyrie.utils.datetime import utc_now
from valkyrie.utils.id_generator import generate_id


class BaseModel(SQLModel):
    """
    Columns shared by every table:
    - created_at: insert time (UTC)
    - updated_at: last update time (UTC)
    """
    __abstract__ = True

    created_at: datetime = Field(
        default_factory=utc_now,
        index=True,
        sa_type=TIMESTAMP(timezone=True),
        sa_column_kwargs={
            "nullable": False,
            "server_default": func.now(),
        },
    )

    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_type=TIMESTAMP(timezone=True),
        sa_column_kwargs={
            "nullable": False,
            "server_default": func.now(),
            "onupdate": utc_now,
        },
    )


class AbstractEntity(BaseModel):
    """
    Base for tables with their own identity: a snowflake string id generated
    on construction, before the row is inserted.
    """
    __abstract__ = True

    id: str = Field(
        default_factory=generate_id,
        primary_key=True,
        max_length=32,
    )
