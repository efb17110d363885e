"""Common utilities for addon-mirror."""

from .config import MirrorConfig, load_config, load_typed_config
from .errors import (
    AddonMirrorError,
    FetchError,
    IntegrityError,
    NotFoundError,
    ReloadError,
    StoreError,
    TemplateError,
)
from .logger import configure_logging, get_logger, setup_logger

__all__ = [
    "AddonMirrorError",
    "FetchError",
    "IntegrityError",
    "MirrorConfig",
    "NotFoundError",
    "ReloadError",
    "StoreError",
    "TemplateError",
    "configure_logging",
    "get_logger",
    "load_config",
    "load_typed_config",
    "setup_logger",
]
