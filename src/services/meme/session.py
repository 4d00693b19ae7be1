"""
Composition session: owns the selected template, its text values and the
rendered surface, and serialises renders so only the newest one lands.
"""

import asyncio
from pathlib import Path
from typing import Callable, List, Optional

from human_id import generate_id
from loguru import logger as log

from common import global_config
from src.services.meme.errors import DataFetchError, ImageLoadError, UnknownZoneError
from src.services.meme.export.exporter import CopyResult, Exporter, meme_filename
from src.services.meme.render.compositor import Compositor, Surface
from src.services.meme.templates.models import Template, TextValues, TextZone
from src.services.meme.templates.provider import DataProvider, get_data_provider
from src.services.meme.zones.resolver import select_template
from src.utils.context import session_id
from src.utils.logging_config import setup_logging

setup_logging()

Notifier = Callable[[str], None]


def _log_notice(message: str) -> None:
    log.info(message)


class CompositionSession:
    def __init__(
        self,
        provider: Optional[DataProvider] = None,
        compositor: Optional[Compositor] = None,
        exporter: Optional[Exporter] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.session_id = generate_id()
        self.provider = provider or get_data_provider()
        self.compositor = compositor or Compositor()
        self.exporter = exporter or Exporter()
        self.notify = notifier or _log_notice

        self.templates: List[Template] = []
        self.text_zones: List[TextZone] = []

        self.selected_template: Optional[Template] = None
        self.zones: List[TextZone] = []
        self.text_values: TextValues = {}
        self.surface: Optional[Surface] = None
        self.last_error: Optional[Exception] = None

        self._render_task: Optional[asyncio.Task] = None
        self._render_generation = 0

    @property
    def is_generating(self) -> bool:
        return self._render_task is not None and not self._render_task.done()

    # Data loading

    async def _fetch_templates(self) -> None:
        try:
            self.templates = await asyncio.to_thread(self.provider.fetch_templates)
        except DataFetchError as e:
            log.error(f"Error fetching templates: {e}")

    async def _fetch_text_zones(self) -> None:
        try:
            self.text_zones = await asyncio.to_thread(self.provider.fetch_text_zones)
        except DataFetchError as e:
            log.error(f"Error fetching text zones: {e}")

    async def load(self) -> None:
        """Fetch both tables concurrently; a failed fetch keeps its previous contents."""
        session_id.set(self.session_id)
        await asyncio.gather(self._fetch_templates(), self._fetch_text_zones())
        log.info(
            f"Loaded {len(self.templates)} templates and {len(self.text_zones)} text zones"
        )

    # Selection and text entry

    async def select_template(self, template: Template) -> None:
        session_id.set(self.session_id)
        selection = select_template(template, self.text_zones)
        self.selected_template = selection.template
        self.zones = selection.zones
        self.text_values = dict(selection.text_values)
        log.info(
            f"Selected template {template.template_id} ({template.name}) "
            f"with {len(self.zones)} zone(s)"
        )
        self._schedule_render()

    def deselect_template(self) -> None:
        self._cancel_render()
        self.selected_template = None
        self.zones = []
        self.text_values = {}
        self.surface = None
        self.last_error = None

    def _max_length(self, zone_name: str) -> int:
        limits = [
            zone.max_characters
            for zone in self.zones
            if zone.zone_name == zone_name and zone.max_characters
        ]
        if limits:
            return min(limits)
        return global_config.export.max_text_length

    async def set_text(self, zone_name: str, value: str) -> None:
        """
        Update one zone's text and re-render.

        Raises:
            UnknownZoneError: If the selected template has no zone with this name
        """
        if zone_name not in self.text_values:
            raise UnknownZoneError(zone_name)
        self.text_values[zone_name] = value[: self._max_length(zone_name)]
        self._schedule_render()

    # Rendering

    def _cancel_render(self) -> None:
        self._render_generation += 1
        if self._render_task is not None and not self._render_task.done():
            self._render_task.cancel()
        self._render_task = None

    def _schedule_render(self) -> None:
        if self.selected_template is None:
            return
        self._cancel_render()
        generation = self._render_generation
        self._render_task = asyncio.get_running_loop().create_task(
            self._render(
                generation,
                self.selected_template,
                list(self.zones),
                dict(self.text_values),
            )
        )

    async def _render(
        self,
        generation: int,
        template: Template,
        zones: List[TextZone],
        text_values: TextValues,
    ) -> Optional[Surface]:
        try:
            surface = await self.compositor.render(template, zones, text_values)
        except ImageLoadError as e:
            if generation == self._render_generation:
                self.last_error = e
                log.error(str(e))
            return None

        if generation != self._render_generation:
            log.debug(f"Discarding stale render of template {template.template_id}")
            return None

        self.surface = surface
        self.last_error = None
        return surface

    async def wait_for_render(self) -> Optional[Surface]:
        """Wait for the in-flight render, if any, and return the current surface."""
        task = self._render_task
        while task is not None:
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                current = asyncio.current_task()
                # Only a superseded render is absorbed, never our own cancellation
                if not task.cancelled() or (current is not None and current.cancelling()):
                    raise
            # A newer render may have replaced the one we were waiting on
            if task is self._render_task:
                break
            task = self._render_task
        return self.surface

    # Export

    def download(self, directory: Optional[Path] = None) -> Optional[Path]:
        if self.surface is None or self.selected_template is None:
            log.warning("Nothing to download: no rendered meme")
            return None
        filename = meme_filename(self.selected_template.name)
        return self.exporter.download(self.surface, filename, directory)

    async def copy_to_clipboard(self) -> Optional[CopyResult]:
        if self.surface is None:
            log.warning("Nothing to copy: no rendered meme")
            return None
        result = await asyncio.to_thread(self.exporter.copy_to_clipboard, self.surface)
        self.notify(result.message)
        return result
