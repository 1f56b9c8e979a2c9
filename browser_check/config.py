"""
Service configuration - YAML file with environment overrides
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

import yaml
from loguru import logger
from pydantic import BaseModel, Field, field_validator

from .errors import ConfigurationError


ENDPOINT_ENV_VAR = 'BROWSER_WS_ENDPOINT_PRIVATE'
CONFIG_PATH_ENV_VAR = 'BROWSER_CHECK_CONFIG'
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / 'config' / 'service_config.yaml'

# Environment variable -> config field
ENV_OVERRIDES = {
    ENDPOINT_ENV_VAR: 'ws_endpoint',
    'PORT': 'port',
    'HOST': 'host',
    'LOG_LEVEL': 'log_level',
    'BROWSER_TEST_TARGET_URL': 'target_url',
}

WAIT_STRATEGIES = ('load', 'domcontentloaded', 'networkidle', 'commit')

# Levels understood by both loguru and uvicorn
LOG_LEVELS = ('TRACE', 'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

ENDPOINT_SCHEMES = ('ws', 'wss', 'http', 'https')
REDACTED_ENDPOINT = '***'

# Query parameters that carry credentials in browserless-style endpoints
SECRET_PARAMS = {'token', 'apikey', 'api_key', 'key'}


class ServiceConfig(BaseModel):
    """Runtime configuration for the browser check service."""

    ws_endpoint: Optional[str] = None
    host: str = '0.0.0.0'
    port: int = Field(default=3000, ge=1, le=65535)
    target_url: str = 'https://example.com'
    connect_timeout: int = Field(default=15, gt=0)  # seconds
    navigation_timeout: int = Field(default=30, gt=0)  # seconds
    wait_until: str = 'networkidle'
    run_on_startup: bool = True
    log_level: str = 'INFO'
    log_file: Optional[str] = None

    @field_validator('ws_endpoint')
    @classmethod
    def blank_endpoint_is_unset(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    @field_validator('wait_until')
    @classmethod
    def check_wait_strategy(cls, value: str) -> str:
        if value not in WAIT_STRATEGIES:
            raise ValueError(f"wait_until must be one of {', '.join(WAIT_STRATEGIES)}")
        return value

    @field_validator('log_level')
    @classmethod
    def check_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return value

    @property
    def connect_timeout_ms(self) -> int:
        return self.connect_timeout * 1000

    @property
    def navigation_timeout_ms(self) -> int:
        return self.navigation_timeout * 1000


def _read_yaml(path: Path) -> Dict[str, Any]:
    with open(path, 'r') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return data


def load_config(
    path: Optional[Path] = None,
    environ: Optional[Dict[str, str]] = None
) -> ServiceConfig:
    """
    Load configuration.

    Values come from the YAML config file (if present) and are then
    overridden by environment variables.

    Args:
        path: Config file path (defaults to $BROWSER_CHECK_CONFIG or config/service_config.yaml)
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Validated ServiceConfig
    """
    if environ is None:
        environ = dict(os.environ)

    if path is None:
        env_path = environ.get(CONFIG_PATH_ENV_VAR)
        path = Path(env_path) if env_path else DEFAULT_CONFIG_PATH

    values: Dict[str, Any] = {}
    if path.exists():
        values.update(_read_yaml(path))
        logger.debug(f"Loaded config file {path}")
    elif path != DEFAULT_CONFIG_PATH:
        logger.warning(f"Config file not found: {path}, using defaults")

    for env_var, field_name in ENV_OVERRIDES.items():
        if env_var in environ:
            values[field_name] = environ[env_var]

    return ServiceConfig(**values)


def check_endpoint(endpoint: str) -> None:
    """
    Reject endpoints that cannot be parsed as a ws(s)/http(s) URL.

    Raises:
        ConfigurationError: If the endpoint is malformed
    """
    try:
        parsed = urlparse(endpoint)
        parsed.port
    except ValueError as e:
        raise ConfigurationError(f"{ENDPOINT_ENV_VAR} is not a valid URL: {e}") from e

    if parsed.scheme not in ENDPOINT_SCHEMES or not parsed.hostname:
        raise ConfigurationError(
            f"{ENDPOINT_ENV_VAR} must be a {'/'.join(ENDPOINT_SCHEMES)} URL with a host"
        )


def redact_endpoint(endpoint: Optional[str]) -> Optional[str]:
    """Mask credentials embedded in an endpoint URL for logging."""
    if not endpoint:
        return endpoint

    try:
        parsed = urlparse(endpoint)
        netloc = parsed.netloc
        if parsed.password:
            netloc = netloc.replace(f":{parsed.password}@", ":***@")
    except ValueError:
        return REDACTED_ENDPOINT

    query = parse_qsl(parsed.query, keep_blank_values=True)
    masked = [(k, '***' if k.lower() in SECRET_PARAMS else v) for k, v in query]

    return urlunparse(parsed._replace(netloc=netloc, query=urlencode(masked, safe='*')))
