"""
FramesEngine Configuration
==========================

Settings for the parsers, the proxy application and signature checks.

Values are resolved in three layers, later layers winning:
    defaults  <  YAML file  <  environment

The YAML file is taken from FRAMES_CONFIG when set, otherwise the first of
./frames.yaml, ./config.yaml found in the working directory.

Environment Overrides:
    FRAMES_STRICT          -> parsing.strict
    FRAMES_PARSE_MANIFEST  -> parsing.parse_manifest
    FRAMES_PROXY_TIMEOUT   -> proxy.request_timeout_seconds
    FRAMES_HUB_URL         -> signer.hub_url
    NEYNAR_API_KEY         -> signer.hub_api_key
    FRAMES_LOG_LEVEL       -> logging.level
    FRAMES_LOG_FORMAT      -> logging.format
    PORT / FRAMES_PORT     -> server.port

Example:
    from frames_engine.config import settings

    print(settings.parsing.strict)
    print(settings.signer.approval_poll_interval_seconds)
"""

import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

import yaml
from pydantic import BaseModel, Field

from frames_engine import __version__


logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")

CONFIG_PATH_ENV = "FRAMES_CONFIG"
DEFAULT_CONFIG_FILES = ("frames.yaml", "config.yaml")


# =============================================================================
# Configuration Models
# =============================================================================

class EngineConfig(BaseModel):
    """Engine identification."""

    name: str = Field(default="frames-engine", description="Engine name")
    version: str = Field(
        default=__version__,
        description="Library version tag written as frames.js:version",
    )


class ParsingConfig(BaseModel):
    """Parser behaviour."""

    strict: bool = Field(
        default=False,
        description="JSON dialect: non-https URLs are errors instead of warnings",
    )
    parse_manifest: bool = Field(
        default=False,
        description="Fetch and validate the domain manifest of JSON dialect frames",
    )
    manifest_well_known_path: str = Field(
        default="/.well-known/farcaster.json",
        description="Manifest path on the frame origin",
    )
    manifest_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Manifest fetch timeout",
    )


class ProxyConfig(BaseModel):
    """Outbound requests made by the proxy application."""

    request_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Timeout for requests to frame servers",
    )
    user_agent: str = Field(
        default=f"frames-engine/{__version__}",
        description="User-Agent sent to frame servers",
    )


class SignerConfig(BaseModel):
    """Signature verification and signer approval."""

    hub_url: str = Field(
        default="https://hub-api.neynar.com",
        description="Hub HTTP API used for app key checks",
    )
    hub_api_key: Optional[str] = Field(default=None, description="Hub API key")
    approval_poll_interval_seconds: float = Field(
        default=2.0,
        gt=0,
        description="Signer approval polling interval",
    )


class ServerConfig(BaseModel):
    """Bind address of the proxy application."""

    host: str = Field(default="0.0.0.0", description="Interface to listen on")
    port: int = Field(default=8080, ge=1, le=65535, description="Listen port")


class LoggingConfig(BaseModel):
    """Root logger setup."""

    level: str = Field(default="INFO", description="Root log level name")
    format: str = Field(default="json", description="json (one object per line) or text")


class Settings(BaseModel):
    """
    All FramesEngine settings.

    Build with load_config(); the module level `settings` instance is what
    the proxy application uses.
    """

    engine: EngineConfig = Field(default_factory=EngineConfig)
    parsing: ParsingConfig = Field(default_factory=ParsingConfig)
    proxy: ProxyConfig = Field(default_factory=ProxyConfig)
    signer: SignerConfig = Field(default_factory=SignerConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Loading
# =============================================================================

def _env_flag(value: str) -> bool:
    return value.strip().lower() in _TRUE_VALUES


# (variable, section, key, conversion); earlier entries win for the same key
_ENV_OVERRIDES: Tuple[Tuple[str, str, str, Callable[[str], Any]], ...] = (
    ("FRAMES_STRICT", "parsing", "strict", _env_flag),
    ("FRAMES_PARSE_MANIFEST", "parsing", "parse_manifest", _env_flag),
    ("FRAMES_PROXY_TIMEOUT", "proxy", "request_timeout_seconds", float),
    ("FRAMES_HUB_URL", "signer", "hub_url", str),
    ("NEYNAR_API_KEY", "signer", "hub_api_key", str),
    ("PORT", "server", "port", int),
    ("FRAMES_PORT", "server", "port", int),
    ("FRAMES_LOG_LEVEL", "logging", "level", str),
    ("FRAMES_LOG_FORMAT", "logging", "format", str),
)


def _find_config_file() -> Optional[Path]:
    explicit = os.environ.get(CONFIG_PATH_ENV)
    if explicit:
        return Path(explicit)

    for name in DEFAULT_CONFIG_FILES:
        candidate = Path(name)
        if candidate.is_file():
            return candidate
    return None


def _read_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level of a config file must be a mapping")
    return data


def _apply_environment(data: Dict[str, Any]) -> None:
    """Overlay FRAMES_* (and PORT) variables onto data in place."""
    applied = set()

    for variable, section, key, convert in _ENV_OVERRIDES:
        raw = os.environ.get(variable)
        if not raw or (section, key) in applied:
            continue

        data.setdefault(section, {})[key] = convert(raw)
        applied.add((section, key))
        logger.debug(f"{variable} overrides {section}.{key}")


def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Resolve settings from defaults, a YAML file and the environment.

    Args:
        config_path: YAML file to read. When None, FRAMES_CONFIG and then
            the default file names are tried. A path that does not exist
            is skipped.

    Returns:
        Settings: Validated settings

    Raises:
        ValueError: If the file is not a mapping or a value fails validation
    """
    path = Path(config_path) if config_path is not None else _find_config_file()

    data: Dict[str, Any] = {}
    if path is not None and path.is_file():
        logger.info(f"Reading settings from {path}")
        data = _read_yaml(path)
    else:
        logger.debug("No settings file, using defaults and environment")

    _apply_environment(data)

    return Settings.model_validate(data)


def setup_logging(settings: Settings) -> None:
    """Install the root handler with the configured level and format."""
    level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        line = '{"ts": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "msg": "%(message)s"}'
    else:
        line = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

    logging.basicConfig(level=level, format=line, datefmt="%Y-%m-%dT%H:%M:%S")


# =============================================================================
# Module Settings
# =============================================================================

settings = load_config()
