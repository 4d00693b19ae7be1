from collections import Counter
from typing import Iterable, List

from loguru import logger as log
from pydantic import BaseModel, ConfigDict

from src.services.meme.templates.models import Template, TextValues, TextZone


class ZoneSelection(BaseModel):
    """Result of picking a template: its zones and fresh, empty text values."""

    model_config = ConfigDict(frozen=True)

    template: Template
    zones: List[TextZone]
    text_values: TextValues


def zones_for_template(template_id: int, zones: Iterable[TextZone]) -> List[TextZone]:
    """Zones owned by template_id, in input order."""
    return [zone for zone in zones if zone.template_id == template_id]


def select_template(template: Template, zones: Iterable[TextZone]) -> ZoneSelection:
    """
    Resolve the zones of a newly selected template.

    Zones sharing a name map to a single text value (last one wins); both zones
    remain in the selection and draw that value.
    """
    owned = zones_for_template(template.template_id, zones)

    text_values: TextValues = {}
    for zone in owned:
        text_values[zone.zone_name] = ""

    duplicates = [name for name, count in Counter(z.zone_name for z in owned).items() if count > 1]
    if duplicates:
        log.warning(
            f"Template {template.template_id} ({template.name}) has duplicate zone names: {duplicates}"
        )

    return ZoneSelection(template=template, zones=owned, text_values=text_values)
