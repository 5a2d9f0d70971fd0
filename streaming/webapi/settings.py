"""Endpoints to read and update the stream settings document."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import anyio
from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import BaseModel, Field

from streaming.config import schema, store
from streaming.config.schema import BuildVariant, keys_for
from streaming.config.settings import StreamSettings

from .auth import require_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])

_settings_lock = asyncio.Lock()


class SettingsState(BaseModel):
    variant: str = Field(description="Variante de hardware activa")
    complete: bool = Field(description="Indica si todos los campos de la variante están asignados")
    missing: List[str] = Field(default_factory=list, description="Campos aún sin asignar")
    settings: Dict[str, Any] = Field(
        default_factory=dict,
        description="Campos asignados con su valor en formato JSON",
    )
    saved: Optional[bool] = Field(default=None, description="Resultado de la escritura en disco")


class VariantInfo(BaseModel):
    variant: str = Field(description="Variante de hardware activa")
    keys: List[str] = Field(description="Claves que componen un documento completo")


def _active_variant() -> BuildVariant:
    return schema.active_variant()


def _serialize(settings: StreamSettings, saved: Optional[bool] = None) -> SettingsState:
    payload = settings.to_dict()
    return SettingsState(
        variant=settings.variant.value,
        complete=settings.is_complete(),
        missing=settings.missing_fields(),
        settings={key: payload[key] for key in settings.assigned_fields()},
        saved=saved,
    )


def _load_current(path: Path, variant: BuildVariant) -> StreamSettings:
    if not path.exists():
        return StreamSettings(variant)
    return store.load_stream_settings(path, variant)


@router.get("", response_model=SettingsState)
async def get_stream_settings(_: None = Depends(require_token)) -> SettingsState:
    """Return the stored settings and their completeness."""

    path = store.settings_path()
    if not path.exists():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No existe el documento {path.name}",
        )
    settings = await anyio.to_thread.run_sync(store.load_stream_settings, path, _active_variant())
    return _serialize(settings)


@router.put("", response_model=SettingsState)
async def update_stream_settings(
    payload: Mapping[str, Any] = Body(..., description="Campos parciales del documento de streaming"),
    _: None = Depends(require_token),
) -> SettingsState:
    """Merge ``payload`` into the stored document and persist it once complete."""

    variant = _active_variant()
    unknown = set(payload.keys()) - set(keys_for(variant))
    if unknown:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Campos no soportados: {', '.join(sorted(unknown))}",
        )

    path = store.settings_path()
    async with _settings_lock:
        settings = await anyio.to_thread.run_sync(_load_current, path, variant)
        applied = settings.apply_mapping(payload)
        rejected = sorted(set(payload.keys()) - set(applied))
        if rejected:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Valores inválidos para: {', '.join(rejected)}",
            )
        if not settings.is_complete():
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={
                    "message": "La configuración está incompleta; no se guardó",
                    "missing": settings.missing_fields(),
                },
            )
        saved = await anyio.to_thread.run_sync(store.save_stream_settings, settings, path)

    if not saved:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"No se pudo escribir {path.name}",
        )
    logger.info("Configuración de streaming actualizada: %s", ", ".join(applied) or "sin cambios")
    return _serialize(settings, saved=True)


@router.get("/variant", response_model=VariantInfo)
async def get_build_variant(_: None = Depends(require_token)) -> VariantInfo:
    variant = _active_variant()
    return VariantInfo(variant=variant.value, keys=list(keys_for(variant)))
