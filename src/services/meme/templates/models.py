import re
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from common import global_config

# Leading decimal number, the same prefix a lenient float parse would accept
_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_leading_number(value: Optional[str]) -> Optional[float]:
    """Parse the numeric prefix of strings like "60%" or "24px".

    Returns None when the value has no leading number.
    """
    if value is None:
        return None
    match = _LEADING_NUMBER.match(str(value))
    if not match:
        return None
    return float(match.group(1))


def percent_to_ratio(value: Optional[str]) -> float:
    """Convert "50%" to 0.5; anything unparseable collapses to 0."""
    number = parse_leading_number(value)
    if number is None:
        return 0.0
    return number / 100


class Template(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    template_id: int
    name: str
    image_url: str
    thumbnail_url: str
    usage_count: int = 0
    created_at: datetime
    category_id: Optional[int] = None
    updated_at: Optional[datetime] = None
    is_active: Optional[bool] = None


class TextZone(BaseModel):
    """A named text slot on a template.

    Position and size arrive as percentage strings and are normalised once,
    at construction, into ratios of the rendered surface.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    zone_id: int
    template_id: int
    zone_name: str
    x_position: str
    y_position: str
    width: str
    height: str
    font_size: str
    text_color: str
    text_align: Optional[Literal["left", "center", "right"]] = None
    max_characters: Optional[int] = None
    font_family: Optional[str] = None

    x_ratio: float = 0.0
    y_ratio: float = 0.0
    width_ratio: float = 0.0
    height_ratio: float = 0.0
    font_px: int = 0

    @model_validator(mode="after")
    def _normalise_placement(self) -> "TextZone":
        # frozen models need object.__setattr__ for derived fields
        object.__setattr__(self, "x_ratio", percent_to_ratio(self.x_position))
        object.__setattr__(self, "y_ratio", percent_to_ratio(self.y_position))
        object.__setattr__(self, "width_ratio", percent_to_ratio(self.width))
        object.__setattr__(self, "height_ratio", percent_to_ratio(self.height))

        size = parse_leading_number(self.font_size)
        if size is None or size <= 0:
            font_px = global_config.compositor.default_font_px
        else:
            font_px = max(1, int(round(size)))
        object.__setattr__(self, "font_px", font_px)
        return self

    def anchor(self, width: int, height: int) -> tuple[float, float]:
        """Pixel anchor of this zone on a width x height surface."""
        return self.x_ratio * width, self.y_ratio * height


TextValues = dict[str, str]
