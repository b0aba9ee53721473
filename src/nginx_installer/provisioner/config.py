"""Settings loading."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError
from pydantic import ValidationError

from nginx_installer.errors import PreconditionError
from nginx_installer.models.config import InstallerSettings


logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "NGINX_INSTALLER_CONFIG"


def _read_yaml(file_path: Path) -> Dict[str, Any]:
    """Read and parse a YAML file."""
    yaml = YAML(typ="safe")
    data = yaml.load(file_path.read_text())
    return data or {}


def load_settings(config_file: Optional[Path] = None) -> InstallerSettings:
    """Load settings from config_file, or $NGINX_INSTALLER_CONFIG, or defaults."""
    if config_file is None:
        env_value = os.environ.get(CONFIG_ENV_VAR)
        if not env_value:
            return InstallerSettings()
        config_file = Path(env_value)

    if not config_file.is_file():
        raise PreconditionError(f"Settings file not found: {config_file}")

    try:
        data = _read_yaml(config_file)
        settings = InstallerSettings(**data)
    except YAMLError as e:
        raise PreconditionError(f"Invalid YAML in {config_file}: {e}") from e
    except (ValidationError, TypeError) as e:
        raise PreconditionError(f"Invalid settings in {config_file}: {e}") from e

    logger.debug(f"Loaded settings from {config_file}")
    return settings
