"""Build variants, wire enums and the field table of the stream settings record."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Callable, Dict, FrozenSet, Mapping, Tuple, Type

logger = logging.getLogger(__name__)

U32_MASK = 0xFFFFFFFF
_SIGN_BIT = 0x80000000

VARIANT_ENV = "STREAMING_BUILD_VARIANT"


class BuildVariant(str, Enum):
    """Hardware profile the streaming server is built for."""

    BASE = "base"
    ATTENUATED = "attenuated"
    HIGH_RES = "high_res"

    @classmethod
    def parse(cls, value: Any) -> "BuildVariant":
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower().replace("-", "_")
        text = _VARIANT_ALIASES.get(text, text)
        for member in cls:
            if member.value == text:
                return member
        raise ValueError(f"variante de hardware desconocida: {value!r}")


# Names of the board build macros the variants come from.
_VARIANT_ALIASES = {
    "z10": BuildVariant.ATTENUATED.value,
    "z20": BuildVariant.BASE.value,
    "z20_250_12": BuildVariant.HIGH_RES.value,
    "highres": BuildVariant.HIGH_RES.value,
}


# Integer codes below are the on-disk format; never renumber them.
class Protocol(IntEnum):
    TCP = 0
    UDP = 1


class DataFormat(IntEnum):
    WAV = 0
    TDMS = 1
    CSV = 2


class DataType(IntEnum):
    RAW = 1
    VOLT = 2


class Channel(IntEnum):
    CH1 = 1
    CH2 = 2
    BOTH = 3


class Resolution(IntEnum):
    BIT_8 = 1
    BIT_16 = 2


class Attenuator(IntEnum):
    A_1_1 = 1
    A_1_20 = 2


class Coupling(IntEnum):
    AC = 1
    DC = 2


def to_signed32(value: int) -> int:
    """Reinterpret the low 32 bits of ``value`` as a signed integer."""

    value = int(value) & U32_MASK
    if value & _SIGN_BIT:
        return value - (U32_MASK + 1)
    return value


def to_unsigned32(value: int) -> int:
    return int(value) & U32_MASK


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    raise ValueError(f"no se puede convertir {type(value).__name__} a texto")


def _as_int(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        try:
            return int(value)
        except (OverflowError, ValueError) as exc:
            raise ValueError(f"{value!r} no es un entero válido") from exc
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            return _as_int(float(text))
    raise ValueError(f"no se puede convertir {type(value).__name__} a entero")


def _as_bool(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "si", "sí"}
    raise ValueError(f"no se puede convertir {type(value).__name__} a booleano")


def _enum_coercer(enum_cls: Type[IntEnum]) -> Callable[[Any], IntEnum]:
    def coerce(value: Any) -> IntEnum:
        if isinstance(value, str):
            name = value.strip().upper()
            if name in enum_cls.__members__:
                return enum_cls[name]
        code = _as_int(value)
        try:
            return enum_cls(code)
        except ValueError as exc:
            raise ValueError(f"{code} no es un código válido de {enum_cls.__name__}") from exc

    coerce.__name__ = f"as_{enum_cls.__name__.lower()}"
    return coerce


def _identity(value: Any) -> Any:
    return value


def _as_code(value: IntEnum) -> int:
    return int(value)


_ALL = frozenset(BuildVariant)
_ATTENUATED = frozenset({BuildVariant.ATTENUATED, BuildVariant.HIGH_RES})
_HIGH_RES = frozenset({BuildVariant.HIGH_RES})


@dataclass(frozen=True)
class FieldSpec:
    """Describe one settings field and how it moves between Python and JSON.

    ``store`` normalises a setter argument into the stored representation,
    ``load`` turns the stored representation into what the getter returns,
    ``coerce`` converts a decoded JSON value into a setter argument and
    ``encode`` turns a getter result into a JSON value.
    """

    name: str
    default: Any
    store: Callable[[Any], Any]
    coerce: Callable[[Any], Any]
    encode: Callable[[Any], Any] = _identity
    load: Callable[[Any], Any] = _identity
    variants: FrozenSet[BuildVariant] = _ALL

    @property
    def key(self) -> str:
        return self.name

    def applies_to(self, variant: BuildVariant) -> bool:
        return variant in self.variants


def _enum_field(name: str, enum_cls: Type[IntEnum], default: IntEnum, variants=_ALL) -> FieldSpec:
    return FieldSpec(
        name=name,
        default=default,
        store=enum_cls,
        coerce=_enum_coercer(enum_cls),
        encode=_as_code,
        variants=variants,
    )


FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("host", "", store=str, coerce=_as_str),
    FieldSpec("port", "", store=str, coerce=_as_str),
    _enum_field("protocol", Protocol, Protocol.TCP),
    # Stored as an unsigned word; -1 (unbounded) reads back through the sign bit.
    FieldSpec(
        "samples",
        -1,
        store=to_unsigned32,
        coerce=lambda value: to_signed32(_as_int(value)),
        load=to_signed32,
    ),
    _enum_field("format", DataFormat, DataFormat.WAV),
    _enum_field("type", DataType, DataType.RAW),
    _enum_field("channels", Channel, Channel.CH1),
    _enum_field("resolution", Resolution, Resolution.BIT_8),
    FieldSpec(
        "decimation",
        1,
        store=to_unsigned32,
        coerce=lambda value: to_unsigned32(_as_int(value)),
    ),
    _enum_field("attenuator", Attenuator, Attenuator.A_1_1, variants=_ATTENUATED),
    FieldSpec("calibration", False, store=bool, coerce=_as_bool, variants=_ATTENUATED),
    _enum_field("coupling", Coupling, Coupling.AC, variants=_HIGH_RES),
)

FIELDS_BY_NAME: Dict[str, FieldSpec] = {spec.name: spec for spec in FIELDS}


def fields_for(variant: BuildVariant) -> Tuple[FieldSpec, ...]:
    """Return the fields present on ``variant`` in declaration order."""

    return tuple(spec for spec in FIELDS if spec.applies_to(variant))


def keys_for(variant: BuildVariant) -> Tuple[str, ...]:
    return tuple(spec.key for spec in fields_for(variant))


def variant_from_env(env: Mapping[str, str]) -> BuildVariant:
    """Resolve the build variant configured through ``STREAMING_BUILD_VARIANT``."""

    raw = env.get(VARIANT_ENV)
    if raw is None or not raw.strip():
        return BuildVariant.ATTENUATED
    try:
        return BuildVariant.parse(raw)
    except ValueError:
        logger.warning(
            "Valor inválido para %s (%r); usando %s",
            VARIANT_ENV,
            raw,
            BuildVariant.ATTENUATED.value,
        )
        return BuildVariant.ATTENUATED


ACTIVE_VARIANT: BuildVariant = variant_from_env(os.environ)


def active_variant() -> BuildVariant:
    """Return the process-wide build variant as currently configured."""

    return ACTIVE_VARIANT
