from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

from shortlink_app.services.short_id_validator import validate_short_id


class LinkCreate(BaseModel):
    long_url: HttpUrl = Field(..., description="The original URL to be shortened")
    custom_id: Optional[str] = Field(None, description="Optional caller-chosen short id")

    @field_validator("custom_id")
    @classmethod
    def check_custom_id(cls, value: Optional[str]) -> Optional[str]:
        message = validate_short_id(value)
        if message is not None:
            raise ValueError(message)
        return value


class LinkRecord(BaseModel):
    """Domain view of a stored link

    Stores return it, the service serves it and the cache holds its JSON.
    from_attributes=True lets it read straight from the SQLAlchemy model.
    """
    id: str
    target_url: str
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("expires_at", "created_at", "updated_at")
    @classmethod
    def assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        """SQLite hands back naive datetimes; every timestamp here is UTC"""
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """A record is expired once now reaches expires_at"""
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return self.expires_at <= now


class LinkResponse(BaseModel):
    id: str
    target_url: str
    short_url: str
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
