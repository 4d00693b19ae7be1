from sqlalchemy.orm import DeclarativeBase


# Declarative base for SQLAlchemy 2.0 style
class Base(DeclarativeBase):  # type: ignore
    pass


default_schema = "public"

# Import all models so the metadata knows every table
from src.db.models.public.templates import TemplateRow  # noqa: E402
from src.db.models.public.text_zones import TextZoneRow  # noqa: E402

__all__ = [
    "Base",
    "default_schema",
    "TemplateRow",
    "TextZoneRow",
]
