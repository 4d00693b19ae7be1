from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from common import global_config
from src.db.models import Base


class TemplateRow(Base):
    """
    Meme templates: a base image plus gallery metadata.
    Read-only from this application; usage_count is maintained elsewhere.
    """

    __tablename__ = global_config.data_store.templates_table
    __table_args__ = ({"schema": "public"},)

    template_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    image_url = Column(String, nullable=False)
    thumbnail_url = Column(String, nullable=False)
    usage_count = Column(Integer, nullable=False, default=0)
    category_id = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=True, default=True)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=True,
    )
