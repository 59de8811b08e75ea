from .structs import (
    Credentials,
    WebSocketConfig,
    RestConfig,
    VersifiConfig,
    DEFAULT_REST_URL,
    DEFAULT_WS_URL,
)
from .config_manager import (
    load_config,
    load_env_file,
    substitute_env_vars,
    parse_section,
    parse_credentials,
)

__all__ = [
    'Credentials',
    'WebSocketConfig',
    'RestConfig',
    'VersifiConfig',
    'DEFAULT_REST_URL',
    'DEFAULT_WS_URL',
    'load_config',
    'load_env_file',
    'substitute_env_vars',
    'parse_section',
    'parse_credentials',
]
