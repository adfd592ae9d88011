"""
Loading distributor configuration from YAML files.

"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from apportion.library.config.models import DistributorConfig
from apportion.library.error_messages import format_error
from apportion.library.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def apply_overrides(data: dict[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """
    Set dotted keys in a nested configuration dictionary.

    Parameters
    ----------
    data
        Raw configuration, modified in place
    overrides
        Mapping of dotted paths to values, e.g. ``{"sampler.seed": 42}``

    Returns
    -------
    dict[str, Any]
        The updated configuration
    """
    for dotted_key, value in overrides.items():
        *parents, leaf = dotted_key.split(".")
        node = data
        for part in parents:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[leaf] = value
    return data


def parse_distributor_config(
    data: Mapping[str, Any] | None,
    overrides: Mapping[str, Any] | None = None,
    source: str = "<config>",
) -> DistributorConfig:
    """
    Validate a raw configuration mapping.

    Raises
    ------
    ConfigurationError
        If the mapping does not describe a valid distributor
    """
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ConfigurationError(
            format_error(
                "invalid_config",
                path=source,
                detail=f"Expected a mapping at the top level, got {type(data).__name__}.",
            )
        )
    raw = apply_overrides(dict(data), overrides or {})
    try:
        return DistributorConfig.model_validate(raw)
    except PydanticValidationError as e:
        raise ConfigurationError(
            format_error("invalid_config", path=source, detail=str(e))
        ) from e


def load_distributor_config(
    path: str | Path,
    overrides: Mapping[str, Any] | None = None,
) -> DistributorConfig:
    """
    Load and validate a distributor configuration file.

    Parameters
    ----------
    path
        YAML file to read
    overrides
        Dotted-key values applied on top of the file contents

    Returns
    -------
    DistributorConfig
        The validated configuration

    Raises
    ------
    ConfigurationError
        If the file is missing, is not valid YAML or fails validation
    """
    path = Path(path)
    logger.debug("Loading distributor config from %s", path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(format_error("config_not_found", path=path)) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(
            format_error("invalid_config", path=path, detail=str(e))
        ) from e
    return parse_distributor_config(data, overrides, source=str(path))
