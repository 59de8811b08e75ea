"""
Configuration Loading

YAML based configuration for the versifi client.

Key Features:
- config.yaml with ${VAR} / ${VAR:default} environment substitution
- .env loading through python-dotenv (never overrides the real environment)
- Credential fallback to VERSIFI_API_KEY / VERSIFI_API_SECRET
- Typed msgspec structs, validated on load

Usage:
    from versifi.config import load_config

    config = load_config()                    # search standard locations
    config = load_config("deploy/config.yaml")
    ws_config = config.websocket
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, Optional, Type, TypeVar, Union

import msgspec
import yaml
from dotenv import load_dotenv

from versifi.infrastructure.exceptions.system import ConfigurationError
from versifi.infrastructure.logging import get_logger
from versifi.infrastructure.logging.structs import LoggingConfig
from .structs import Credentials, RestConfig, VersifiConfig, WebSocketConfig

T = TypeVar('T')

# Pre-compiled regex patterns
ENV_VAR_PATTERN = re.compile(r'\$\{([^}]+)\}')
ENV_VAR_DEFAULT_PATTERN = re.compile(r'^([^:]+):(.*)$')

API_KEY_ENV = 'VERSIFI_API_KEY'
API_SECRET_ENV = 'VERSIFI_API_SECRET'
CONFIG_PATH_ENV = 'VERSIFI_CONFIG'

logger = get_logger('versifi.config')


def guess_file_paths(file_name: str) -> list[Path]:
    """Possible locations of a configuration file, in search order."""
    return [
        Path.cwd() / file_name,                           # Current working directory
        Path(__file__).parent.parent.parent.parent / file_name,  # Project root
        Path.home() / file_name,                          # User home directory (fallback)
    ]


def substitute_env_vars(content: str) -> str:
    """
    Substitute environment variables in configuration content.

    Supports syntax:
    - ${VAR_NAME} - environment variable, empty when unset
    - ${VAR_NAME:default} - optional with default value
    """
    def replace_var(match):
        var_expr = match.group(1)

        default_match = ENV_VAR_DEFAULT_PATTERN.match(var_expr)
        if default_match:
            var_name, default_value = default_match.groups()
            env_value = os.getenv(var_name.strip())
            if env_value is None:
                return default_value
            return env_value

        var_name = var_expr.strip()
        env_value = os.getenv(var_name)
        if env_value is None:
            logger.warning("Environment variable not set - using empty value", variable=var_name)
            return ""
        return env_value

    return ENV_VAR_PATTERN.sub(replace_var, content)


def load_env_file(env_file: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """Load the first .env file found. Returns its path, or None."""
    candidates = [Path(env_file)] if env_file else guess_file_paths('.env')
    for env_path in candidates:
        if env_path.exists():
            load_dotenv(dotenv_path=env_path, override=False)
            logger.info("Loaded environment variables", path=str(env_path))
            return env_path
    if env_file:
        raise ConfigurationError(f"Env file not found: {env_file}", "env_file")
    logger.debug("No .env file found - using system environment variables only")
    return None


def _find_config_file(path: Optional[Union[str, Path]]) -> Optional[Path]:
    if path:
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}", "config_file")
        return config_path

    env_path = os.getenv(CONFIG_PATH_ENV)
    if env_path:
        return _find_config_file(env_path)

    for config_path in guess_file_paths('config.yaml'):
        if config_path.exists():
            return config_path
    return None


def _read_yaml(config_path: Path) -> Dict[str, Any]:
    try:
        raw_content = config_path.read_text(encoding='utf-8')
        config_data = yaml.safe_load(substitute_env_vars(raw_content))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}", str(config_path)) from e
    except OSError as e:
        raise ConfigurationError(f"Failed to read {config_path}: {e}", str(config_path)) from e

    if config_data is None:
        return {}
    if not isinstance(config_data, dict):
        raise ConfigurationError(f"Top level of {config_path} must be a mapping", str(config_path))
    return config_data


def parse_section(data: Optional[Dict[str, Any]], struct_type: Type[T], section: str) -> T:
    """
    Convert one config.yaml section into its struct.

    Values are converted leniently so "5" and 5 both load as numbers.

    Raises:
        ConfigurationError: If a value has the wrong type or fails validation
    """
    try:
        result = msgspec.convert(data or {}, struct_type, strict=False)
    except msgspec.ValidationError as e:
        raise ConfigurationError(f"Invalid {section} configuration: {e}", section) from e

    validate = getattr(result, 'validate', None)
    if validate is not None:
        try:
            validate()
        except ValueError as e:
            raise ConfigurationError(f"Invalid {section} configuration: {e}", section) from e
    return result


def parse_credentials(data: Optional[Dict[str, Any]]) -> Credentials:
    """Credentials from config.yaml, falling back to the environment per field."""
    data = data or {}
    api_key = data.get('api_key') or os.getenv(API_KEY_ENV, '')
    secret_key = data.get('secret_key') or os.getenv(API_SECRET_ENV, '')
    if bool(api_key) != bool(secret_key):
        raise ConfigurationError(
            "Both api_key and secret_key must be provided together or both empty",
            "credentials"
        )
    return Credentials(api_key=str(api_key), secret_key=str(secret_key))


def load_config(path: Optional[Union[str, Path]] = None,
                env_file: Optional[Union[str, Path]] = None) -> VersifiConfig:
    """
    Load the client configuration.

    Args:
        path: Explicit config.yaml path. Defaults to $VERSIFI_CONFIG, then
            the standard search locations. Without any file the defaults
            plus environment credentials are used.
        env_file: Explicit .env path. Defaults to the standard search locations.

    Raises:
        ConfigurationError: On unreadable files, bad YAML or invalid values
    """
    load_env_file(env_file)

    config_path = _find_config_file(path)
    if config_path is None:
        logger.info("No config.yaml found - using defaults and environment")
        config_data: Dict[str, Any] = {}
    else:
        config_data = _read_yaml(config_path)
        logger.info("Configuration loaded", path=str(config_path))

    logging_data = config_data.get('logging')
    config = VersifiConfig(
        credentials=parse_credentials(config_data.get('credentials')),
        rest=parse_section(config_data.get('rest'), RestConfig, 'rest'),
        websocket=parse_section(config_data.get('websocket'), WebSocketConfig, 'websocket'),
        logging=parse_section(logging_data, LoggingConfig, 'logging') if logging_data else None,
    )

    if not config.credentials.is_configured():
        logger.warning("API credentials not configured - private endpoints will be rejected")
    return config
