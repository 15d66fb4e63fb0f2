"""Runtime settings for SchoolRoute.

Settings come from an optional YAML file and are then overridden by
environment variables (a ``.env`` file in the working directory is loaded
first) so secrets never have to live in the settings file itself.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml
from dotenv import load_dotenv

from schoolroute.core.errors import ConfigError
from schoolroute.core.logger import LOG_LEVEL_ENV


load_dotenv(override=False)

SECRET_KEY_ENV = "ENCRYPTION_SECRET_KEY"
ROOT_ENV = "SCHOOLROUTE_ROOT"
SETTINGS_PATH_ENV = "SCHOOLROUTE_SETTINGS"

DEFAULT_ROOT = Path.home() / "SchoolRoute"
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings.

    Attributes:
        encryption_secret_key: Passphrase used to seal stored documents.
        data_root: Persistence root holding ``store/`` and ``logs/``.
        log_level: Name of the logging level applied by the CLI.
    """

    encryption_secret_key: str | None
    data_root: Path = DEFAULT_ROOT
    log_level: str = DEFAULT_LOG_LEVEL

    def require_secret_key(self) -> str:
        """Return the secret key or fail loudly when it is not configured."""

        if not self.encryption_secret_key:
            raise ConfigError(
                f"Nenhuma chave de criptografia foi definida. Defina {SECRET_KEY_ENV}."
            )
        return self.encryption_secret_key


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Arquivo de configuração não encontrado: {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigError("O arquivo de configuração deve conter um mapeamento")
    return data


def _validate_log_level(value: str) -> str:
    level = value.strip().upper()
    if not isinstance(getattr(logging, level, None), int):
        raise ConfigError(f"Unknown log level: {value}")
    return level


def resolve_settings(
    path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Build :class:`Settings` from an optional YAML file plus environment overrides."""

    env = os.environ if environ is None else environ
    file_path = path or env.get(SETTINGS_PATH_ENV)
    raw: Dict[str, Any] = _load_yaml(Path(file_path)) if file_path else {}

    secret = env.get(SECRET_KEY_ENV) or raw.get("encryption_secret_key")
    root_value = env.get(ROOT_ENV) or raw.get("data_root")
    level_value = env.get(LOG_LEVEL_ENV) or raw.get("log_level") or DEFAULT_LOG_LEVEL

    data_root = Path(str(root_value)).expanduser() if root_value else DEFAULT_ROOT
    return Settings(
        encryption_secret_key=str(secret) if secret else None,
        data_root=data_root.resolve(),
        log_level=_validate_log_level(str(level_value)),
    )


__all__ = ["Settings", "resolve_settings", "SECRET_KEY_ENV", "ROOT_ENV", "LOG_LEVEL_ENV"]
