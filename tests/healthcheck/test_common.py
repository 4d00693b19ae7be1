from tests.test_template import TestTemplate
from common import global_config


class TestCommonHealthCheck(TestTemplate):
    """Test that the common configuration loads."""

    def test_dot_global_config_health_check_enabled(self):
        """
        Test that the dot_global_config_health_check flag is set to True.

        This test ensures that the configuration system is working correctly.
        The value is set to True in global_config.yaml and should be properly loaded.
        """
        assert global_config.dot_global_config_health_check is True, (
            "The dot_global_config_health_check flag should be set to True in global_config.yaml. "
            "This indicates that the YAML configuration is being properly loaded."
        )

    def test_render_defaults(self):
        """The compositor defaults draw a black outline under a white fill."""
        assert global_config.compositor.fill_color == "#FFFFFF"
        assert global_config.compositor.stroke_color == "#000000"
        assert global_config.compositor.stroke_width == 1
        assert global_config.export.filename_suffix == "_meme"
        assert global_config.data_store.backend in ("database", "file")

    def test_templates_file_resolves_under_root(self):
        path = global_config.templates_file_path()
        assert path.is_absolute()
        assert path.name == "templates.json"
