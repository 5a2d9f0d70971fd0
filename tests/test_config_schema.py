"""Unit tests for build variants, wire enums and value coercion."""

from __future__ import annotations

import logging

import pytest

import streaming.config
from streaming.config import schema
from streaming.config.schema import (
    FIELDS_BY_NAME,
    Attenuator,
    BuildVariant,
    Channel,
    Coupling,
    DataFormat,
    DataType,
    Protocol,
    Resolution,
    keys_for,
    to_signed32,
    to_unsigned32,
    variant_from_env,
)

BASE_KEYS = (
    "host",
    "port",
    "protocol",
    "samples",
    "format",
    "type",
    "channels",
    "resolution",
    "decimation",
)


def test_enum_codes_match_wire_format():
    assert [int(m) for m in Protocol] == [0, 1]
    assert [int(m) for m in DataFormat] == [0, 1, 2]
    assert [int(m) for m in DataType] == [1, 2]
    assert [int(m) for m in Channel] == [1, 2, 3]
    assert [int(m) for m in Resolution] == [1, 2]
    assert [int(m) for m in Attenuator] == [1, 2]
    assert [int(m) for m in Coupling] == [1, 2]


def test_keys_per_variant():
    assert keys_for(BuildVariant.BASE) == BASE_KEYS
    assert keys_for(BuildVariant.ATTENUATED) == BASE_KEYS + ("attenuator", "calibration")
    assert keys_for(BuildVariant.HIGH_RES) == BASE_KEYS + ("attenuator", "calibration", "coupling")


@pytest.mark.parametrize(
    "text, expected",
    [
        ("base", BuildVariant.BASE),
        ("ATTENUATED", BuildVariant.ATTENUATED),
        ("high-res", BuildVariant.HIGH_RES),
        ("Z20", BuildVariant.BASE),
        ("z10", BuildVariant.ATTENUATED),
        ("Z20_250_12", BuildVariant.HIGH_RES),
        (BuildVariant.HIGH_RES, BuildVariant.HIGH_RES),
    ],
)
def test_build_variant_parse(text, expected):
    assert BuildVariant.parse(text) is expected


def test_build_variant_parse_rejects_unknown_names():
    with pytest.raises(ValueError, match="variante de hardware desconocida"):
        BuildVariant.parse("z30")


def test_variant_from_env_defaults_to_attenuated():
    assert variant_from_env({}) is BuildVariant.ATTENUATED
    assert variant_from_env({"STREAMING_BUILD_VARIANT": "  "}) is BuildVariant.ATTENUATED
    assert variant_from_env({"STREAMING_BUILD_VARIANT": "base"}) is BuildVariant.BASE


def test_variant_from_env_warns_on_unknown_value(caplog):
    with caplog.at_level(logging.WARNING, logger="streaming.config.schema"):
        variant = variant_from_env({"STREAMING_BUILD_VARIANT": "desktop"})

    assert variant is BuildVariant.ATTENUATED
    assert "STREAMING_BUILD_VARIANT" in caplog.text


def test_signed_and_unsigned_word_conversions():
    assert to_signed32(0xFFFFFFFF) == -1
    assert to_signed32(0x7FFFFFFF) == 2**31 - 1
    assert to_signed32(0x80000000) == -(2**31)
    assert to_unsigned32(-1) == 0xFFFFFFFF
    assert to_unsigned32(2**32 + 5) == 5


@pytest.mark.parametrize(
    "raw, expected",
    [(None, ""), ("text", "text"), (True, "true"), (8900, "8900")],
)
def test_string_coercion(raw, expected):
    assert FIELDS_BY_NAME["port"].coerce(raw) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [(None, 0), (True, 1), (12.9, 12), (" 42 ", 42), ("1e3", 1000), (4294967295, -1)],
)
def test_samples_coercion(raw, expected):
    assert FIELDS_BY_NAME["samples"].coerce(raw) == expected


@pytest.mark.parametrize("raw", [[1], {"a": 1}, "many", float("nan")])
def test_integer_coercion_rejects_unconvertible_values(raw):
    with pytest.raises(ValueError):
        FIELDS_BY_NAME["decimation"].coerce(raw)


@pytest.mark.parametrize(
    "raw, expected",
    [(None, False), (0, False), (2, True), ("sí", True), ("no", False), ("other", False)],
)
def test_boolean_coercion(raw, expected):
    assert FIELDS_BY_NAME["calibration"].coerce(raw) is expected


def test_enum_coercion_accepts_codes_and_names():
    coerce = FIELDS_BY_NAME["format"].coerce

    assert coerce(1) is DataFormat.TDMS
    assert coerce("csv") is DataFormat.CSV
    assert coerce("2") is DataFormat.CSV
    with pytest.raises(ValueError, match="DataFormat"):
        coerce(9)


def test_active_variant_follows_reconfiguration(monkeypatch):
    monkeypatch.setattr(schema, "ACTIVE_VARIANT", BuildVariant.HIGH_RES)

    assert streaming.config.active_variant() is BuildVariant.HIGH_RES
    assert not hasattr(streaming.config, "ACTIVE_VARIANT")
