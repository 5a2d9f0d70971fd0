"""Stream settings record with per-field assignment tracking and JSON persistence."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Set, Union

from . import schema
from .jsonio import parse_json_document, write_json_document
from .schema import (
    Attenuator,
    BuildVariant,
    Channel,
    Coupling,
    DataFormat,
    DataType,
    FieldSpec,
    Protocol,
    Resolution,
    fields_for,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class UnsupportedFieldError(AttributeError):
    """Raised when a field is accessed that the build variant does not provide."""


class StreamSettings:
    """Configuration of a streaming session for one hardware build variant.

    Every field starts at its default value and unassigned. Setters store the
    value and mark the field as assigned; getters return the stored value
    whether or not it was assigned. The record is complete once every field
    of its variant has been assigned, and only complete records are written
    to disk.

    ``variant`` defaults to :func:`streaming.config.schema.active_variant`.
    """

    def __init__(self, variant: Union[BuildVariant, str, None] = None) -> None:
        self.variant = BuildVariant.parse(variant) if variant is not None else schema.active_variant()
        self._fields: Dict[str, FieldSpec] = {spec.name: spec for spec in fields_for(self.variant)}
        self._values: Dict[str, Any] = {
            name: spec.store(spec.default) for name, spec in self._fields.items()
        }
        self._assigned: Set[str] = set()

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        variant: Union[BuildVariant, str, None] = None,
    ) -> "StreamSettings":
        settings = cls(variant)
        settings.apply_mapping(data)
        return settings

    # Completeness ----------------------------------------------------------
    def reset(self) -> None:
        """Forget every assignment; values are kept."""

        self._assigned.clear()

    def is_complete(self) -> bool:
        return all(name in self._assigned for name in self._fields)

    def is_assigned(self, name: str) -> bool:
        self._spec(name)
        return name in self._assigned

    def field_names(self) -> List[str]:
        return list(self._fields)

    def assigned_fields(self) -> List[str]:
        return [name for name in self._fields if name in self._assigned]

    def missing_fields(self) -> List[str]:
        return [name for name in self._fields if name not in self._assigned]

    # Generic access --------------------------------------------------------
    def get_field(self, name: str) -> Any:
        spec = self._spec(name)
        return spec.load(self._values[name])

    def set_field(self, name: str, value: Any) -> None:
        spec = self._spec(name)
        self._values[name] = spec.store(value)
        self._assigned.add(name)

    def _spec(self, name: str) -> FieldSpec:
        spec = self._fields.get(name)
        if spec is None:
            raise UnsupportedFieldError(
                f"el campo '{name}' no existe en la variante {self.variant.value}"
            )
        return spec

    # Accessors -------------------------------------------------------------
    def set_host(self, host: str) -> None:
        self.set_field("host", host)

    def get_host(self) -> str:
        return self.get_field("host")

    def set_port(self, port: str) -> None:
        self.set_field("port", port)

    def get_port(self) -> str:
        return self.get_field("port")

    def set_protocol(self, protocol: Protocol) -> None:
        self.set_field("protocol", protocol)

    def get_protocol(self) -> Protocol:
        return self.get_field("protocol")

    def set_samples(self, samples: int) -> None:
        self.set_field("samples", samples)

    def get_samples(self) -> int:
        return self.get_field("samples")

    def set_format(self, data_format: DataFormat) -> None:
        self.set_field("format", data_format)

    def get_format(self) -> DataFormat:
        return self.get_field("format")

    def set_type(self, data_type: DataType) -> None:
        self.set_field("type", data_type)

    def get_type(self) -> DataType:
        return self.get_field("type")

    def set_channels(self, channels: Channel) -> None:
        self.set_field("channels", channels)

    def get_channels(self) -> Channel:
        return self.get_field("channels")

    def set_resolution(self, resolution: Resolution) -> None:
        self.set_field("resolution", resolution)

    def get_resolution(self) -> Resolution:
        return self.get_field("resolution")

    def set_decimation(self, decimation: int) -> None:
        self.set_field("decimation", decimation)

    def get_decimation(self) -> int:
        return self.get_field("decimation")

    def set_attenuator(self, attenuator: Attenuator) -> None:
        self.set_field("attenuator", attenuator)

    def get_attenuator(self) -> Attenuator:
        return self.get_field("attenuator")

    def set_calibration(self, calibration: bool) -> None:
        self.set_field("calibration", calibration)

    def get_calibration(self) -> bool:
        return self.get_field("calibration")

    def set_coupling(self, coupling: Coupling) -> None:
        self.set_field("coupling", coupling)

    def get_coupling(self) -> Coupling:
        return self.get_field("coupling")

    # Serialisation ---------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON payload for the fields of this variant."""

        return {spec.key: spec.encode(self.get_field(name)) for name, spec in self._fields.items()}

    def apply_mapping(self, data: Mapping[str, Any]) -> List[str]:
        """Assign every recognised key of ``data`` and return the keys applied.

        Unknown keys are ignored. Values that cannot be converted are logged
        and leave their field unassigned.
        """

        applied: List[str] = []
        for name, spec in self._fields.items():
            if spec.key not in data:
                continue
            raw = data[spec.key]
            try:
                value = spec.coerce(raw)
            except (TypeError, ValueError) as exc:
                logger.warning("Valor inválido para '%s' (%r): %s", spec.key, raw, exc)
                continue
            self.set_field(name, value)
            applied.append(spec.key)
        return applied

    def write_to_file(self, path: PathLike) -> bool:
        """Write the settings as JSON to ``path`` if the record is complete."""

        if not self.is_complete():
            return False
        target = Path(path)
        try:
            write_json_document(target, self.to_dict())
        except (OSError, ValueError) as exc:
            logger.error("No se pudo escribir %s: %s", target, exc)
            return False
        return True

    def read_from_file(self, path: PathLike) -> bool:
        """Load the settings stored at ``path`` and report whether they are complete.

        Assignments are reset once the file is open; a document that cannot
        be parsed leaves the record with no field assigned.
        """

        source = Path(path)
        try:
            fh = source.open("r", encoding="utf-8")
        except OSError as exc:
            logger.error("No se pudo abrir %s: %s", source, exc)
            return False

        self.reset()
        with fh:
            try:
                payload = parse_json_document(fh)
            except ValueError as exc:
                logger.error("Error al interpretar el JSON de %s: %s", source, exc)
                return False
            except OSError as exc:
                logger.error("No se pudo leer %s: %s", source, exc)
                return False

        self.apply_mapping(payload)
        return self.is_complete()

    # Dunder helpers --------------------------------------------------------
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StreamSettings):
            return NotImplemented
        return (
            self.variant == other.variant
            and self._values == other._values
            and self._assigned == other._assigned
        )

    def __repr__(self) -> str:
        values = ", ".join(f"{name}={self.get_field(name)!r}" for name in self._fields)
        return (
            f"StreamSettings(variant={self.variant.value}, "
            f"complete={self.is_complete()}, {values})"
        )


def copy_assigned(source: StreamSettings, target: StreamSettings) -> List[str]:
    """Copy the assigned fields of ``source`` into ``target`` where both have them."""

    copied: List[str] = []
    for name in source.assigned_fields():
        if name in target.field_names():
            target.set_field(name, source.get_field(name))
            copied.append(name)
    return copied
