from contextlib import contextmanager
from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from common import global_config
from src.db import database
from src.db.models import Base, TemplateRow, TextZoneRow
from src.services.meme.errors import DataFetchError
from src.services.meme.templates.loader import TemplateLoader
from src.services.meme.templates.provider import DatabaseDataProvider, get_data_provider
from tests.test_template import TestTemplate


def sqlite_scope(create_tables: bool = True):
    # SQLite has no "public" schema; translate it away
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        execution_options={"schema_translate_map": {"public": None}},
    )
    if create_tables:
        Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine)

    @contextmanager
    def scope():
        db = factory()
        try:
            yield db
        finally:
            db.close()

    return scope


class TestDatabaseDataProvider(TestTemplate):
    @pytest.fixture()
    def session_scope(self):
        scope = sqlite_scope()
        created = datetime(2025, 1, 1, tzinfo=timezone.utc)
        with scope() as db:
            db.add_all(
                [
                    TemplateRow(
                        template_id=2,
                        name="Second",
                        image_url="https://example.com/2.png",
                        thumbnail_url="https://example.com/2t.png",
                        usage_count=7,
                        created_at=created,
                    ),
                    TemplateRow(
                        template_id=1,
                        name="First",
                        image_url="https://example.com/1.png",
                        thumbnail_url="https://example.com/1t.png",
                        usage_count=0,
                        created_at=created,
                    ),
                    TextZoneRow(
                        zone_id=5,
                        template_id=1,
                        zone_name="top_text",
                        x_position="50%",
                        y_position="10%",
                        width="90%",
                        height="20%",
                        font_size="24px",
                        text_color="#FFFFFF",
                    ),
                    TextZoneRow(
                        zone_id=6,
                        template_id=2,
                        zone_name="bottom_text",
                        x_position="50%",
                        y_position="90%",
                        width="90%",
                        height="20%",
                        font_size="30px",
                        text_color="#FFFFFF",
                        text_align="right",
                    ),
                ]
            )
            db.commit()
        return scope

    def test_fetch_templates(self, session_scope):
        templates = DatabaseDataProvider(session_scope).fetch_templates()

        assert [t.template_id for t in templates] == [1, 2]
        assert templates[1].name == "Second"
        assert templates[1].usage_count == 7

    def test_fetch_text_zones_unfiltered(self, session_scope):
        zones = DatabaseDataProvider(session_scope).fetch_text_zones()

        assert [(z.zone_id, z.template_id) for z in zones] == [(5, 1), (6, 2)]
        assert zones[0].y_ratio == pytest.approx(0.1)
        assert zones[1].font_px == 30
        assert zones[1].text_align == "right"

    def test_missing_tables_raise_fetch_error(self):
        provider = DatabaseDataProvider(sqlite_scope(create_tables=False))
        with pytest.raises(DataFetchError):
            provider.fetch_templates()
        with pytest.raises(DataFetchError):
            provider.fetch_text_zones()

    def test_unconfigured_database(self, monkeypatch):
        monkeypatch.setattr(global_config, "DATABASE_URI", None)
        database.get_engine.cache_clear()
        database.get_session_factory.cache_clear()

        with pytest.raises(DataFetchError):
            DatabaseDataProvider().fetch_templates()

    def test_backend_selection(self, monkeypatch):
        monkeypatch.setattr(global_config.data_store, "backend", "file")
        assert isinstance(get_data_provider(), TemplateLoader)

        monkeypatch.setattr(global_config.data_store, "backend", "database")
        assert isinstance(get_data_provider(), DatabaseDataProvider)
