"""Configuration loading for the CLI.

Options come from an optional YAML/JSON file and from command-line flags;
flags win. The result is a validated ``DedupeOptions``.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import replace
from typing import Any, Dict, Optional

import yaml

from common.errors import InvalidConfiguration
from constants import Constants
from versioning.models import DedupeOptions

logger = logging.getLogger(__name__)

# argparse dest -> option key
_FLAG_KEYS = (
    ("STRATEGY", "strategy"),
    ("SCOPES", "include_scopes"),
    ("PACKAGES", "include_packages"),
    ("EXCLUDE", "exclude_packages"),
    ("EXCLUDE_SCOPES", "exclude_scopes"),
    ("INCLUDE_PRERELEASE", "include_prerelease"),
)


def load_config_file(config_path: Optional[str]) -> Dict[str, Any]:
    """Load options from a YAML or JSON file.

    A top-level ``dedupe:`` section is used when present, otherwise the whole
    document.

    Raises:
        InvalidConfiguration: if the file is missing or not a mapping.
    """
    if not config_path:
        return {}
    if not os.path.isfile(config_path):
        raise InvalidConfiguration(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            if config_path.lower().endswith(".json"):
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (yaml.YAMLError, ValueError) as e:
        raise InvalidConfiguration(f"Failed to load config {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidConfiguration(f"Config file {config_path} must contain a mapping")
    section = data.get(Constants.CONFIG_SECTION, data)
    if not isinstance(section, dict):
        raise InvalidConfiguration(f"'{Constants.CONFIG_SECTION}' section must be a mapping")
    logger.debug("Loaded configuration from %s", config_path)
    return section


def build_options(args: Any, file_config: Optional[Dict[str, Any]] = None) -> DedupeOptions:
    """Merge file configuration and CLI flags into validated options."""
    merged = DedupeOptions.from_mapping(file_config or {})
    overrides = {}
    for dest, key in _FLAG_KEYS:
        value = getattr(args, dest, None)
        if value is not None:
            overrides[key] = value

    return replace(merged, **overrides).validate()
