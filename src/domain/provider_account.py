"""Provider Account Domain Entity

Maps a messaging provider account id to the tenant that connected it.
"""

from datetime import datetime
from sqlmodel import Field, Column
from sqlalchemy import DateTime, String
from src.domain.base import BaseModel, utcnow


class ProviderAccount(BaseModel, table=True):
    __tablename__ = "provider_accounts"

    account_id: str = Field(sa_column=Column(String(255), primary_key=True))
    provider: str = Field(default="unipile")
    tenant_id: str = Field(index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
