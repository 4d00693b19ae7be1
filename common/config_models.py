"""
Pydantic models for global configuration structure.
This module defines all the nested configuration models used by the Config class.
Each model corresponds to a section in the global_config.yaml file and provides
type validation and structure for the configuration data.
"""

from typing import Literal, Optional

from pydantic import BaseModel


class LoggingLocationConfig(BaseModel):
    """Location information display configuration for logging."""

    enabled: bool
    show_file: bool
    show_function: bool
    show_line: bool
    show_for_info: bool
    show_for_debug: bool
    show_for_warning: bool
    show_for_error: bool


class LoggingFormatConfig(BaseModel):
    """Logging format configuration."""

    show_time: bool
    show_session_id: bool
    location: LoggingLocationConfig


class LoggingLevelsConfig(BaseModel):
    """Logging level configuration."""

    debug: bool
    info: bool
    warning: bool
    error: bool
    critical: bool


class LoggingConfig(BaseModel):
    """Complete logging configuration."""

    verbose: bool
    format: LoggingFormatConfig
    levels: LoggingLevelsConfig


class DataStoreConfig(BaseModel):
    """Where templates and text zones are read from."""

    backend: Literal["database", "file"]
    templates_file: str
    templates_table: str
    text_zones_table: str


class CompositorConfig(BaseModel):
    """Text compositing configuration."""

    font_family: str
    font_paths: list[str]
    default_font_px: int
    fill_color: str
    stroke_color: str
    stroke_width: int
    use_zone_colors: bool
    image_timeout_seconds: float
    image_cache_size: int
    user_agent: str


class ExportConfig(BaseModel):
    """File and clipboard export configuration."""

    output_dir: str
    filename_suffix: str
    max_text_length: int
    clipboard_timeout_seconds: float
    clipboard_command: Optional[list[str]] = None
