import uuid
from datetime import datetime, timezone

from sqlalchemy import BigInteger, Integer
from sqlmodel import SQLModel

# SQLite only autoincrements INTEGER primary keys
BigIntPK = BigInteger().with_variant(Integer, "sqlite")


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp, the convention for every datetime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class BaseModel(SQLModel):
    pass
