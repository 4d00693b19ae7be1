"""
Data providers for the two reference tables.

Both tables are read with full, unfiltered scans; filtering by template happens
in memory in the zone resolver.
"""

from typing import Callable, ContextManager, List, Optional, Protocol

from loguru import logger as log
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from common import global_config
from src.db.database import use_db_session
from src.db.models import TemplateRow, TextZoneRow
from src.services.meme.errors import DataFetchError
from src.services.meme.templates.loader import TemplateLoader
from src.services.meme.templates.models import Template, TextZone


class DataProvider(Protocol):
    def fetch_templates(self) -> List[Template]: ...

    def fetch_text_zones(self) -> List[TextZone]: ...


class DatabaseDataProvider:
    """Reads the templates and text_zones tables through SQLAlchemy."""

    def __init__(
        self, session_scope: Optional[Callable[[], ContextManager[Session]]] = None
    ):
        self._session_scope = session_scope or use_db_session

    def fetch_templates(self) -> List[Template]:
        try:
            with self._session_scope() as db:
                rows = db.query(TemplateRow).order_by(TemplateRow.template_id).all()
                templates = [Template.model_validate(row) for row in rows]
        except (SQLAlchemyError, ValidationError) as e:
            raise DataFetchError(f"Error fetching templates: {e}") from e

        log.debug(f"Fetched {len(templates)} templates")
        return templates

    def fetch_text_zones(self) -> List[TextZone]:
        try:
            with self._session_scope() as db:
                rows = db.query(TextZoneRow).order_by(TextZoneRow.zone_id).all()
                zones = [TextZone.model_validate(row) for row in rows]
        except (SQLAlchemyError, ValidationError) as e:
            raise DataFetchError(f"Error fetching text zones: {e}") from e

        log.debug(f"Fetched {len(zones)} text zones")
        return zones


def get_data_provider() -> DataProvider:
    """Pick the provider configured under data_store.backend."""
    backend = global_config.data_store.backend
    if backend == "file":
        return TemplateLoader()
    return DatabaseDataProvider()
