from typing import Iterable, Mapping, Optional

from loguru import logger as log
from PIL import Image, ImageDraw

from common import global_config
from src.services.meme.render.image_source import ImageSource
from src.services.meme.render.typography import anchor_for, load_font
from src.services.meme.templates.models import Template, TextZone

Surface = Image.Image


class Compositor:
    """Paints a template image and its zone texts onto a raster surface."""

    def __init__(self, image_source: Optional[ImageSource] = None):
        self.image_source = image_source or ImageSource()
        config = global_config.compositor
        self.fill_color = config.fill_color
        self.stroke_color = config.stroke_color
        self.stroke_width = config.stroke_width
        self.use_zone_colors = config.use_zone_colors

    async def render(
        self,
        template: Template,
        zones: Iterable[TextZone],
        text_values: Mapping[str, str],
    ) -> Surface:
        """
        Render template plus zone text into a new RGBA surface.

        Raises:
            ImageLoadError: If the template image cannot be loaded
        """
        image = await self.image_source.load(template.image_url)
        return self.compose(image, template, zones, text_values)

    def compose(
        self,
        image: Image.Image,
        template: Template,
        zones: Iterable[TextZone],
        text_values: Mapping[str, str],
    ) -> Surface:
        # Surface takes the image's natural size; the image sits at the origin unscaled
        surface = Image.new("RGBA", image.size)
        surface.paste(image.convert("RGBA"), (0, 0))
        draw = ImageDraw.Draw(surface)

        drawn = 0
        for zone in zones:
            if zone.template_id != template.template_id:
                continue
            text = text_values.get(zone.zone_name) or ""
            if not text:
                continue
            self.draw_zone(draw, surface.size, zone, text)
            drawn += 1

        log.debug(
            f"Composited {drawn} zone(s) onto template {template.template_id} "
            f"({surface.width}x{surface.height})"
        )
        return surface

    def draw_zone(
        self,
        draw: ImageDraw.ImageDraw,
        size: tuple[int, int],
        zone: TextZone,
        text: str,
    ) -> None:
        width, height = size
        xy = zone.anchor(width, height)
        font = load_font(zone.font_px, zone.font_family)
        anchor = anchor_for(zone.text_align)
        fill = zone.text_color if self.use_zone_colors else self.fill_color

        # Outline first so the fill pass always sits on top
        draw.text(
            xy,
            text,
            font=font,
            anchor=anchor,
            fill=self.stroke_color,
            stroke_width=self.stroke_width,
            stroke_fill=self.stroke_color,
        )
        draw.text(xy, text, font=font, anchor=anchor, fill=fill)
