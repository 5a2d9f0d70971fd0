"""Stream settings record, build variants and persistence helpers."""

from .schema import (
    Attenuator,
    BuildVariant,
    Channel,
    Coupling,
    DataFormat,
    DataType,
    Protocol,
    Resolution,
    active_variant,
)
from .settings import StreamSettings, UnsupportedFieldError
from .store import (
    default_stream_settings,
    load_env_file,
    load_stream_settings,
    save_stream_settings,
    settings_path,
    stream_settings_from_env,
)

__all__ = [
    "active_variant",
    "Attenuator",
    "BuildVariant",
    "Channel",
    "Coupling",
    "DataFormat",
    "DataType",
    "Protocol",
    "Resolution",
    "StreamSettings",
    "UnsupportedFieldError",
    "default_stream_settings",
    "load_env_file",
    "load_stream_settings",
    "save_stream_settings",
    "settings_path",
    "stream_settings_from_env",
]
