import base64
import re
from io import BytesIO
from pathlib import Path
from typing import Optional

from loguru import logger as log
from pydantic import BaseModel

from common import global_config
from src.services.meme.errors import CopyError, ExportError
from src.services.meme.export.clipboard import ClipboardBackend, SubprocessClipboard
from src.services.meme.render.compositor import Surface

COPY_SUCCEEDED_MESSAGE = "Meme copied to clipboard!"
COPY_FAILED_MESSAGE = "Copy failed - try download instead"


class CopyResult(BaseModel):
    ok: bool
    message: str
    error: Optional[str] = None


def meme_filename(template_name: str) -> str:
    """Drake Hotline Bling -> Drake_Hotline_Bling_meme.png"""
    # Separators would point outside the output directory
    stem = re.sub(r"[\s/\\]+", "_", template_name)
    return f"{stem}{global_config.export.filename_suffix}.png"


def to_png_bytes(surface: Surface) -> bytes:
    buffer = BytesIO()
    try:
        surface.save(buffer, format="PNG")
    except (OSError, ValueError) as e:
        raise ExportError(f"Could not encode surface as PNG: {e}") from e
    return buffer.getvalue()


def to_data_url(surface: Surface) -> str:
    encoded = base64.b64encode(to_png_bytes(surface)).decode("ascii")
    return f"data:image/png;base64,{encoded}"


class Exporter:
    """Saves rendered surfaces to disk or the system clipboard."""

    def __init__(
        self,
        clipboard: Optional[ClipboardBackend] = None,
        output_dir: Optional[Path] = None,
    ):
        self.clipboard = clipboard or SubprocessClipboard()
        self.output_dir = output_dir or Path(global_config.export.output_dir)

    def download(
        self, surface: Surface, filename: str, directory: Optional[Path] = None
    ) -> Path:
        """Write the surface as a PNG file and return its path."""
        name = Path(filename).name
        if name in ("", ".", ".."):
            raise ExportError(f"Invalid meme filename: {filename!r}")
        target_dir = directory or self.output_dir
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / name
        path.write_bytes(to_png_bytes(surface))
        log.info(f"Saved meme to {path}")
        return path

    def copy_to_clipboard(self, surface: Surface) -> CopyResult:
        """Place the surface on the clipboard as a single PNG item. Never raises."""
        try:
            self.clipboard.write_png(to_png_bytes(surface))
        except (CopyError, ExportError) as e:
            log.error(f"Failed to copy: {e}")
            return CopyResult(ok=False, message=COPY_FAILED_MESSAGE, error=str(e))

        log.info("Meme copied to clipboard")
        return CopyResult(ok=True, message=COPY_SUCCEEDED_MESSAGE)
