# doc_catalog/core/config_manager.py

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .models import SortField, SortOrder

# A dedicated logger for the module that manages the application's settings.
logger = logging.getLogger(__name__)


def default_home() -> Path:
    """The directory holding settings, data and logs (overridable via DOC_CATALOG_HOME)."""
    return Path(os.environ.get("DOC_CATALOG_HOME") or Path.home() / ".doc_catalog")


def default_config_path() -> Path:
    return default_home() / "settings.json"


@dataclass
class AppConfig:
    data_file: Path
    log_file: Path
    default_sort_field: SortField = SortField.MODIFIED_AT
    default_sort_order: SortOrder = SortOrder.DESC

    @classmethod
    def defaults(cls, home: Optional[Path] = None) -> "AppConfig":
        home = home or default_home()
        return cls(data_file=home / "documents.json", log_file=home / "app.log")


def _apply(config: AppConfig, data: Dict[str, Any], base_dir: Path) -> AppConfig:
    """Overlays the recognised keys of a settings object onto `config`."""
    if "data_file" in data:
        config.data_file = (base_dir / Path(data["data_file"]).expanduser()).resolve()
    if "log_file" in data:
        config.log_file = (base_dir / Path(data["log_file"]).expanduser()).resolve()
    if "default_sort_field" in data:
        config.default_sort_field = SortField(data["default_sort_field"])
    if "default_sort_order" in data:
        config.default_sort_order = SortOrder(data["default_sort_order"])
    return config


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """
    Loads the application settings.

    A missing file simply means defaults. A file that cannot be parsed is
    logged and ignored, so a typo in the settings never stops the catalog
    from starting. Relative paths are resolved against the file's directory.

    Args:
        config_path: The settings.json to read (default: ~/.doc_catalog/settings.json).
    """
    config_path = config_path or default_config_path()
    config = AppConfig.defaults()

    if not config_path.exists():
        logger.debug(f"No settings file at {config_path}. Using defaults.")
        return config

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}.")
        config = _apply(config, data, config_path.parent)
        logger.info(f"Loaded settings from {config_path}.")
    except (OSError, ValueError) as e:
        logger.error(f"Error parsing settings file {config_path}: {e}. Using defaults.", exc_info=True)
        config = AppConfig.defaults()

    return config
