from src.db.models.public.templates import TemplateRow
from src.db.models.public.text_zones import TextZoneRow

__all__ = [
    "TemplateRow",
    "TextZoneRow",
]
