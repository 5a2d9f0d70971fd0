"""Helpers to locate, load and persist the stream settings document."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from dotenv import dotenv_values

from .schema import FIELDS, BuildVariant
from .settings import StreamSettings

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent
SETTINGS_FILENAME = "stream_settings.json"
SETTINGS_PATH_ENV = "STREAMING_SETTINGS_PATH"

ENV_PREFIX = "STREAM_"
ENV_KEYS: Dict[str, str] = {spec.key: f"{ENV_PREFIX}{spec.name.upper()}" for spec in FIELDS}

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = "8900"

VariantArg = Union[BuildVariant, str, None]


def settings_path(env: Optional[Mapping[str, str]] = None) -> Path:
    """Return the settings document path, honouring ``STREAMING_SETTINGS_PATH``."""

    values = os.environ if env is None else env
    override = values.get(SETTINGS_PATH_ENV)
    if override and override.strip():
        return Path(override.strip())
    return CONFIG_DIR / SETTINGS_FILENAME


def load_stream_settings(path: Optional[Path] = None, variant: VariantArg = None) -> StreamSettings:
    """Read the settings document tolerantly.

    The record is returned even when the file is missing or partial; callers
    decide what to do through :meth:`StreamSettings.is_complete`.
    """

    settings = StreamSettings(variant)
    settings.read_from_file(path or settings_path())
    return settings


def save_stream_settings(settings: StreamSettings, path: Optional[Path] = None) -> bool:
    """Persist ``settings``, creating the parent directory when needed.

    Returns ``False`` when the record is incomplete or on I/O errors.
    """

    target = path or settings_path()
    if not settings.is_complete():
        return False
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.error("No se pudo crear el directorio %s: %s", target.parent, exc)
        return False
    return settings.write_to_file(target)


def env_payload(env: Mapping[str, Any]) -> Dict[str, Any]:
    """Extract the ``STREAM_*`` variables of ``env`` as a settings payload."""

    payload: Dict[str, Any] = {}
    for key, var in ENV_KEYS.items():
        value = env.get(var)
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        payload[key] = value.strip() if isinstance(value, str) else value
    return payload


def stream_settings_from_env(env: Mapping[str, Any], variant: VariantArg = None) -> StreamSettings:
    """Create settings from environment variables; absent variables stay unassigned."""

    return StreamSettings.from_mapping(env_payload(env), variant)


def default_stream_settings(variant: VariantArg = None) -> StreamSettings:
    """Return a complete template with every field at its default value."""

    settings = StreamSettings(variant)
    for name in settings.field_names():
        settings.set_field(name, settings.get_field(name))
    settings.set_host(DEFAULT_HOST)
    settings.set_port(DEFAULT_PORT)
    return settings


def load_env_file(path: Path) -> Mapping[str, str]:
    """Load key/value pairs from a dotenv file."""

    values = dotenv_values(str(path))
    return {k: v for k, v in values.items() if v is not None}
