import os
from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel

from .domain.errors import ConfigError
from .registry.client import DEFAULT_BASE_URL, AuthType

CONFIG_DIR = Path.home() / ".glpkg"
CONFIG_FILE = CONFIG_DIR / "config"

URL_KEY = "GLPKG_URL"
TOKEN_KEY = "GLPKG_TOKEN"
AUTH_TYPE_KEY = "GLPKG_AUTH_TYPE"


class Settings(BaseModel):
    """resolved connection settings."""
    base_url: str = DEFAULT_BASE_URL
    token: Optional[str] = None
    auth_type: AuthType = AuthType.PRIVATE_TOKEN


def _read_config(config_file: Path) -> Dict[str, str]:
    config = {}
    if not config_file.exists():
        return config
    try:
        with open(config_file, "r") as f:
            for line in f:
                line = line.strip()
                if "=" in line:
                    key, value = line.split("=", 1)
                    config[key] = value
    except (IOError, PermissionError, OSError):
        # if we can't read the file, treat as not configured
        return {}
    return config


def get_setting(key: str, config_file: Optional[Path] = None) -> Optional[str]:
    """get a single value from the config file."""
    return _read_config(config_file or CONFIG_FILE).get(key)


def set_setting(key: str, value: str, config_file: Optional[Path] = None):
    """set a value in the config file, preserving other config values."""
    config_file = config_file or CONFIG_FILE
    config = _read_config(config_file)
    config[key] = value

    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, "w") as f:
            for k, v in config.items():
                f.write(f"{k}={v}\n")
    except (IOError, PermissionError, OSError) as e:
        raise ConfigError(f"failed to write config file: {e}") from e


def parse_auth_type(value: str) -> AuthType:
    try:
        return AuthType(value.strip().lower())
    except ValueError:
        choices = ", ".join(t.value for t in AuthType)
        raise ConfigError(f"unknown auth type '{value}', expected one of: {choices}")


def load_settings(
    url: Optional[str] = None,
    token: Optional[str] = None,
    auth_type: Optional[str] = None,
    config_file: Optional[Path] = None,
    environ: Optional[Dict[str, str]] = None,
) -> Settings:
    """
    resolve connection settings.

    precedence, highest first: explicit arguments, GLPKG_* environment
    variables, the config file, GitLab CI variables, built-in defaults.
    """
    env = os.environ if environ is None else environ
    config = _read_config(config_file or CONFIG_FILE)

    def pick(explicit, key):
        return explicit or env.get(key) or config.get(key)

    resolved_url = pick(url, URL_KEY)
    resolved_token = pick(token, TOKEN_KEY)
    resolved_auth = pick(auth_type, AUTH_TYPE_KEY)

    # inside a CI job fall back to the job's own api url and token
    if not resolved_url and env.get("CI_API_V4_URL"):
        resolved_url = env["CI_API_V4_URL"]
    if not resolved_token and env.get("CI_JOB_TOKEN"):
        resolved_token = env["CI_JOB_TOKEN"]
        resolved_auth = resolved_auth or AuthType.JOB_TOKEN.value

    settings = Settings(token=resolved_token)
    if resolved_url:
        settings.base_url = resolved_url
    if resolved_auth:
        settings.auth_type = parse_auth_type(resolved_auth)
    return settings
