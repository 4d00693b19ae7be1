from src.services.meme.zones.resolver import select_template, zones_for_template
from tests.test_template import TestTemplate
from tests.unit.meme.meme_test_base import make_template, make_zone


class TestZoneResolver(TestTemplate):
    def setup_zones(self):
        return [
            make_zone(1, template_id=1, zone_name="top"),
            make_zone(2, template_id=2, zone_name="left"),
            make_zone(3, template_id=1, zone_name="bottom"),
            make_zone(4, template_id=2, zone_name="right"),
        ]

    def test_filters_by_template_in_input_order(self):
        zones = self.setup_zones()
        selection = select_template(make_template(1), zones)

        assert [z.zone_id for z in selection.zones] == [1, 3]
        assert selection.text_values == {"top": "", "bottom": ""}

    def test_switching_template_resets_values(self):
        zones = self.setup_zones()
        first = select_template(make_template(1), zones)
        first.text_values["top"] = "leftover"

        second = select_template(make_template(2), zones)

        assert second.text_values == {"left": "", "right": ""}
        assert "top" not in second.text_values

    def test_template_without_zones(self):
        selection = select_template(make_template(7), self.setup_zones())
        assert selection.zones == []
        assert selection.text_values == {}

    def test_duplicate_zone_names_collapse_to_one_value(self):
        zones = [
            make_zone(1, zone_name="caption", y="10%"),
            make_zone(2, zone_name="caption", y="90%"),
        ]

        selection = select_template(make_template(1), zones)

        # Both zones survive; the shared name holds a single value
        assert [z.zone_id for z in selection.zones] == [1, 2]
        assert selection.text_values == {"caption": ""}
        assert select_template(make_template(1), zones) == selection

    def test_zones_for_template(self):
        assert [z.zone_id for z in zones_for_template(2, self.setup_zones())] == [2, 4]
