"""
Settings loader - Reads settings.yaml and overlays credentials from the environment.
"""

import logging
import os
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from nacos_watch.exceptions import SettingsError
from nacos_watch.models.auth import AuthMode
from nacos_watch.models.settings import ClientSettings

logger = logging.getLogger('settings')

DEFAULT_SETTINGS_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
    'config',
    'settings.yaml'
)

# Environment variable -> attribute on ClientSettings / Credentials
ENV_OVERRIDES = {
    'NACOS_ENDPOINT': 'endpoint',
    'NACOS_ADDRESS_SERVER': 'address_server',
    'NACOS_AUTH_MODE': 'auth_mode',
}
ENV_CREDENTIALS = {
    'NACOS_USERNAME': 'username',
    'NACOS_PASSWORD': 'password',
    'NACOS_ACCESS_KEY_ID': 'access_key_id',
    'NACOS_ACCESS_KEY_SECRET': 'access_key_secret',
}


def _load_yaml(path: str) -> Dict[str, Any]:
    """Load a YAML settings file; a missing file yields an empty document."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning(f"Settings file not found, using defaults: {path}")
        return {}
    except yaml.YAMLError as e:
        raise SettingsError(f"Error parsing YAML file {path}: {e}") from e

    if not isinstance(data, dict):
        raise SettingsError(f"Settings file {path} must contain a mapping")
    return data


def load_settings(
    path: Optional[str] = None,
    env: Optional[Dict[str, str]] = None,
    use_dotenv: bool = True
) -> ClientSettings:
    """
    Build client settings from a YAML file and the environment.

    Environment values win over the file, so secrets can stay out of it.

    Args:
        path: Path to settings.yaml (defaults to config/settings.yaml)
        env: Environment mapping, defaults to os.environ
        use_dotenv: Load a .env file into the environment first

    Returns:
        ClientSettings

    Raises:
        SettingsError: If the file is malformed or a value is invalid
    """
    if use_dotenv and env is None:
        load_dotenv()
    if env is None:
        env = dict(os.environ)

    document = _load_yaml(path or DEFAULT_SETTINGS_PATH)
    try:
        settings = ClientSettings.from_dict(document)
    except (TypeError, ValueError) as e:
        raise SettingsError(f"Invalid settings: {e}") from e

    for var, attr in ENV_OVERRIDES.items():
        if env.get(var):
            setattr(settings, attr, env[var])
    for var, attr in ENV_CREDENTIALS.items():
        if env.get(var):
            setattr(settings.credentials, attr, env[var])

    try:
        settings.auth_mode = AuthMode.from_value(settings.auth_mode)
    except ValueError as e:
        raise SettingsError(str(e)) from e

    if not settings.endpoint and not settings.address_server:
        raise SettingsError('Either server.endpoint or server.address_server must be set')

    return settings
