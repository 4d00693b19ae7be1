"""System clipboard backends for PNG images."""

import os
import platform
import shutil
import subprocess
import tempfile
from typing import Optional, Protocol, Sequence

from loguru import logger as log

from common import global_config
from src.services.meme.errors import CopyError


class ClipboardBackend(Protocol):
    def write_png(self, data: bytes) -> None: ...


def _decode(data: Optional[bytes]) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace").strip()


class SubprocessClipboard:
    """Places a PNG on the clipboard through the platform's clipboard tool."""

    def __init__(
        self,
        command: Optional[Sequence[str]] = None,
        timeout_seconds: Optional[float] = None,
    ):
        self.command = list(command) if command else global_config.export.clipboard_command
        self.timeout_seconds = (
            timeout_seconds
            if timeout_seconds is not None
            else global_config.export.clipboard_timeout_seconds
        )

    def _linux_command(self) -> Optional[list[str]]:
        if os.environ.get("WAYLAND_DISPLAY") and shutil.which("wl-copy"):
            return ["wl-copy", "--type", "image/png"]
        if shutil.which("xclip"):
            return ["xclip", "-selection", "clipboard", "-t", "image/png", "-i"]
        return None

    def _run(self, command: list[str], data: Optional[bytes]) -> None:
        try:
            result = subprocess.run(
                command,
                input=data,
                capture_output=True,
                timeout=self.timeout_seconds,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise CopyError(f"Clipboard command {command[0]} failed: {e}") from e
        if result.returncode != 0:
            raise CopyError(
                f"Clipboard command {command[0]} exited with {result.returncode}: "
                f"{_decode(result.stderr)}"
            )

    def _write_macos(self, data: bytes) -> None:
        # osascript can only read the image back from a file
        try:
            with tempfile.NamedTemporaryFile(suffix=".png", delete=False) as handle:
                path = handle.name
                handle.write(data)
        except OSError as e:
            raise CopyError(f"Could not stage clipboard image: {e}") from e
        try:
            script = f'set the clipboard to (read (POSIX file "{path}") as «class PNGf»)'
            self._run(["osascript", "-e", script], None)
        finally:
            os.unlink(path)

    def write_png(self, data: bytes) -> None:
        if self.command:
            self._run(self.command, data)
            return

        system = platform.system().lower()
        if system == "darwin":
            self._write_macos(data)
            return
        if system == "linux":
            command = self._linux_command()
            if command:
                log.debug(f"Writing {len(data)} bytes to clipboard via {command[0]}")
                self._run(command, data)
                return

        raise CopyError(f"No image clipboard available on {platform.system()}")
