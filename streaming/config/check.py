"""Inspect the stream settings document and optionally initialise it."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Mapping, Optional

from . import schema
from .schema import BuildVariant
from .settings import StreamSettings, copy_assigned
from .store import (
    default_stream_settings,
    env_payload,
    load_env_file,
    load_stream_settings,
    save_stream_settings,
    settings_path,
)


def inspect_settings(path: Path, variant: BuildVariant) -> StreamSettings:
    """Load ``path`` and print which keys are still missing for ``variant``."""

    settings = load_stream_settings(path, variant)
    if settings.is_complete():
        print(f"✓ {path.name} está completo para la variante {variant.value}")
    else:
        missing = ", ".join(settings.missing_fields())
        print(f"✗ {path.name} está incompleto; faltan: {missing}")
    return settings


def initialise_settings(
    path: Path,
    variant: BuildVariant,
    env: Optional[Mapping[str, str]] = None,
) -> bool:
    """Write a complete document, keeping every key already assigned in ``path``.

    Missing keys are taken from ``env`` (``STREAM_*`` variables) when given,
    otherwise from the built-in defaults.
    """

    candidate = default_stream_settings(variant)
    if env:
        candidate.apply_mapping(env_payload(env))
    if path.exists():
        current = load_stream_settings(path, variant)
        copy_assigned(current, candidate)

    if not save_stream_settings(candidate, path):
        print(f"✗ No se pudo escribir {path}")
        return False
    print(f"✓ {path.name} inicializado para la variante {variant.value}")
    return True


def main(argv: list[str] | None = None) -> int:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--file",
        type=Path,
        default=None,
        help="Ruta del documento de configuración (por defecto stream_settings.json)",
    )
    parser.add_argument(
        "--variant",
        type=BuildVariant.parse,
        default=None,
        help="Variante de hardware: base, attenuated o high_res",
    )
    parser.add_argument(
        "--init",
        action="store_true",
        help="Completa el documento con valores de --env o valores por defecto",
    )
    parser.add_argument(
        "--env",
        type=Path,
        default=None,
        help="Archivo .env opcional con variables STREAM_*",
    )
    args = parser.parse_args(argv)

    path = args.file or settings_path()
    variant = args.variant or schema.active_variant()

    if path.exists():
        settings = inspect_settings(path, variant)
        if settings.is_complete():
            return 0
    else:
        print(f"! {path} no existe")

    if not args.init:
        return 1

    env_values: Mapping[str, str] = {}
    if args.env and args.env.exists():
        env_values = load_env_file(args.env)
    elif args.env:
        print(f"! {args.env} no existe; se usan valores por defecto")
    return 0 if initialise_settings(path, variant, env_values) else 1


if __name__ == "__main__":
    sys.exit(main())
