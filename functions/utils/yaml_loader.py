"""
functions/utils/yaml_loader.py

Reads the mapping files under parameters/.

A missing, unreadable or non-mapping file yields {} and a log event;
callers fall back to their own defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import structlog
import yaml

logger = structlog.get_logger(__name__)

PARAMETERS_DIR = Path(__file__).resolve().parents[2] / "parameters"


def load_yaml_mapping(path: Path, *, kind: str) -> Dict[str, Any]:
    if not path.exists():
        logger.warning(f"{kind}_yaml_missing", path=str(path))
        return {}

    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.error(f"{kind}_yaml_load_error", path=str(path), error=str(exc))
        return {}

    if not isinstance(data, dict):
        logger.warning(f"{kind}_yaml_not_mapping", path=str(path), type=type(data).__name__)
        return {}

    logger.info(f"{kind}_yaml_loaded", path=str(path), key_count=len(data))
    return data
