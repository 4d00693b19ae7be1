import pytest
from PIL import Image, ImageChops, ImageDraw

from src.services.meme.errors import ImageLoadError
from src.services.meme.render.compositor import Compositor
from src.services.meme.render.image_source import ImageSource
from tests.unit.meme.meme_test_base import MemeTestBase, make_template, make_zone


class TestCompositor(MemeTestBase):
    @pytest.fixture()
    def compositor(self):
        return Compositor(ImageSource(timeout_seconds=5, cache_size=4))

    @pytest.mark.asyncio
    async def test_empty_values_render_bare_image(self, compositor, template, image_path):
        zones = [make_zone(1), make_zone(2, zone_name="bottom", y="90%")]

        surface = await compositor.render(template, zones, {"top": "", "bottom": ""})

        source = Image.open(image_path).convert("RGBA")
        assert surface.size == (200, 100)
        assert surface.mode == "RGBA"
        assert surface.tobytes() == source.tobytes()

    @pytest.mark.asyncio
    async def test_template_without_zones_renders_bare_image(self, compositor, template, image_path):
        surface = await compositor.render(template, [], {})
        assert surface.tobytes() == Image.open(image_path).convert("RGBA").tobytes()

    @pytest.mark.asyncio
    async def test_glyph_centered_on_zone_anchor(self, compositor, template, image_path):
        zone = make_zone(1, zone_name="top", x="50%", y="20%", font_size="24px")

        surface = await compositor.render(template, [zone], {"top": "HELLO"})

        base = Image.open(image_path).convert("RGB")
        left, top, right, bottom = ImageChops.difference(surface.convert("RGB"), base).getbbox()
        # Centered horizontally on x=100, sitting on the y=20 baseline
        assert abs((left + right) / 2 - 100) <= 3
        assert abs(bottom - 20) <= 4
        assert top < 20

    @pytest.mark.asyncio
    async def test_outline_drawn_before_fill(self, compositor, template, monkeypatch):
        calls = []
        original_text = ImageDraw.ImageDraw.text

        def spy(draw, xy, text, *args, **kwargs):
            calls.append((xy, text, kwargs))
            return original_text(draw, xy, text, *args, **kwargs)

        monkeypatch.setattr(ImageDraw.ImageDraw, "text", spy)
        zone = make_zone(1, zone_name="top", x="50%", y="20%")

        await compositor.render(template, [zone], {"top": "HELLO"})

        outline_call, fill_call = [c for c in calls if c[1] == "HELLO"][:2]
        assert outline_call[0] == pytest.approx((100.0, 20.0))
        assert outline_call[2]["fill"] == "#000000"
        assert outline_call[2]["stroke_width"] == 1
        assert outline_call[2]["anchor"] == "ms"
        assert fill_call[0] == pytest.approx((100.0, 20.0))
        assert fill_call[2]["fill"] == "#FFFFFF"
        assert fill_call[2].get("stroke_width", 0) == 0

    @pytest.mark.asyncio
    async def test_zones_of_other_templates_are_ignored(self, compositor, template, image_path):
        foreign = make_zone(9, template_id=2, zone_name="top")

        surface = await compositor.render(template, [foreign], {"top": "SHOULD NOT DRAW"})

        assert surface.tobytes() == Image.open(image_path).convert("RGBA").tobytes()

    @pytest.mark.asyncio
    async def test_duplicate_names_draw_shared_value_in_both_zones(self, compositor, template, image_path):
        zones = [
            make_zone(1, zone_name="caption", x="50%", y="30%"),
            make_zone(2, zone_name="caption", x="50%", y="90%"),
        ]

        surface = await compositor.render(template, zones, {"caption": "HI"})

        base = Image.open(image_path).convert("RGB")
        diff = ImageChops.difference(surface.convert("RGB"), base)
        assert diff.crop((0, 0, 200, 50)).getbbox() is not None
        assert diff.crop((0, 60, 200, 100)).getbbox() is not None

    @pytest.mark.asyncio
    async def test_missing_image_raises(self, compositor, tmp_path):
        template = make_template(1, image_url=str(tmp_path / "missing.png"))
        with pytest.raises(ImageLoadError):
            await compositor.render(template, [], {})

    def test_compose_with_zone_color(self, template):
        compositor = Compositor(ImageSource(timeout_seconds=1, cache_size=0))
        compositor.use_zone_colors = True
        zone = make_zone(1, zone_name="top", x="50%", y="60%", font_size="40px")
        zone = zone.model_copy(update={"text_color": "#FF0000"})
        image = Image.new("RGB", (200, 100), color=(0, 0, 255))

        surface = compositor.compose(image, template, [zone], {"top": "III"})

        colors = {color for _, color in surface.getcolors(maxcolors=100000)}
        assert (255, 0, 0, 255) in colors
