# --------------------------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for license information.
# --------------------------------------------------------------------------------------------

"""
Property file loader for agent transport settings
"""

import logging
from typing import Dict, Optional

from .exceptions import ConfigurationOpenError, ConfigurationReadError


def load_configuration(path: Optional[str], logger: Optional[logging.Logger] = None) -> Dict[str, str]:
    """
    Read key=value pairs from a property file.

    Lines without '=' and lines with an empty key are ignored. Keys and values
    are trimmed; a repeated key keeps the last value.

    Args:
        path: Property file path. Empty or None yields an empty mapping.
        logger: Optional logger instance

    Returns:
        Mapping of keys to values

    Raises:
        ConfigurationOpenError: If the file cannot be opened
        ConfigurationReadError: If the file cannot be fully read
    """
    logger = logger or logging.getLogger("k8s_ci_troubleshoot.config_source")
    config: Dict[str, str] = {}

    if not path:
        return config

    try:
        handle = open(path, "r", encoding="utf-8")  # pylint: disable=consider-using-with
    except OSError as e:
        raise ConfigurationOpenError(f"Error opening configuration file {path}: {e}") from e

    with handle:
        try:
            for line in handle:
                key, sep, value = line.partition("=")
                if not sep:
                    continue
                key = key.strip()
                if key:
                    config[key] = value.strip()
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigurationReadError(f"Error reading configuration file {path}: {e}") from e

    logger.debug("Loaded %d settings from %s", len(config), path)
    return config
