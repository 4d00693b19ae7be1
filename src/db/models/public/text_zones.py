from sqlalchemy import Column, Index, Integer, String

from common import global_config
from src.db.models import Base


class TextZoneRow(Base):
    """
    Positioned text slots, many per template.
    Placement columns hold percentage strings such as "60%"; font_size holds "24px".
    """

    __tablename__ = global_config.data_store.text_zones_table
    __table_args__ = (
        Index("idx_text_zones_template_id", "template_id"),
        {"schema": "public"},
    )

    zone_id = Column(Integer, primary_key=True, autoincrement=True)
    template_id = Column(Integer, nullable=False)
    zone_name = Column(String, nullable=False)
    x_position = Column(String, nullable=False)
    y_position = Column(String, nullable=False)
    width = Column(String, nullable=False)
    height = Column(String, nullable=False)
    font_size = Column(String, nullable=False)
    text_color = Column(String, nullable=False, default="#FFFFFF")
    text_align = Column(String, nullable=True)
    max_characters = Column(Integer, nullable=True)
    font_family = Column(String, nullable=True)
