class MemeError(Exception):
    """Base class for meme composition failures."""


class DataFetchError(MemeError):
    """A template or text-zone table could not be read."""


class ImageLoadError(MemeError):
    """A template image could not be fetched, decoded or loaded in time."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to load template image {url}: {reason}")
        self.url = url
        self.reason = reason


class UnknownZoneError(MemeError, KeyError):
    """Text was written for a zone the selected template does not own."""

    def __init__(self, zone_name: str):
        super().__init__(zone_name)
        self.zone_name = zone_name

    def __str__(self) -> str:
        return f"No text zone named {self.zone_name!r} on the selected template"


class ExportError(MemeError):
    """The rendered surface could not be exported."""


class CopyError(ExportError):
    """The platform refused or failed the clipboard write."""
