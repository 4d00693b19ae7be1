import json
from pathlib import Path
from typing import List, Optional

from loguru import logger as log
from pydantic import ValidationError

from common import global_config
from src.services.meme.errors import DataFetchError
from src.services.meme.templates.models import Template, TextZone


class TemplateLoader:
    """Reads templates and text zones from a local JSON snapshot.

    The file mirrors the two remote tables:
    {"templates": [...], "text_zones": [...]}
    """

    def __init__(self, templates_file: Optional[Path] = None):
        if templates_file is None:
            self.templates_file = global_config.templates_file_path()
        else:
            self.templates_file = templates_file

    def _read(self) -> dict:
        if not self.templates_file.exists():
            log.warning(f"Template snapshot not found: {self.templates_file}")
            return {}

        try:
            with open(self.templates_file, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise DataFetchError(
                f"Could not read template snapshot {self.templates_file}: {e}"
            ) from e

        if not isinstance(data, dict):
            raise DataFetchError(
                f"Template snapshot is not an object: {self.templates_file}"
            )
        return data

    def fetch_templates(self) -> List[Template]:
        rows = self._read().get("templates", [])
        try:
            return [Template(**row) for row in rows]
        except (TypeError, ValidationError) as e:
            raise DataFetchError(f"Invalid template row: {e}") from e

    def fetch_text_zones(self) -> List[TextZone]:
        rows = self._read().get("text_zones", [])
        try:
            return [TextZone(**row) for row in rows]
        except (TypeError, ValidationError) as e:
            raise DataFetchError(f"Invalid text zone row: {e}") from e

    def get_template(self, template_id: int) -> Optional[Template]:
        for template in self.fetch_templates():
            if template.template_id == template_id:
                return template
        return None
