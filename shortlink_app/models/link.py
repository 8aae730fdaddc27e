from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from shortlink_app.database.connection import Base


class Link(Base):
    """
    Link model: a short id mapped to its target URL.

    The id is either chosen by the caller or generated, and never changes
    after creation. A NULL expires_at means the link never expires.
    """
    __tablename__ = "links"

    id = Column(String, primary_key=True)  # No length cap, custom ids are unbounded
    target_url = Column(Text, nullable=False)
    # Indexed for the sweeper's "expires_at <= now" scan
    expires_at = Column(DateTime(timezone=True), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
