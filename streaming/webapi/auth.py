"""Bearer-token guard for the settings API."""

from __future__ import annotations

import os
import secrets
from pathlib import Path
from typing import Optional

from fastapi import HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

TOKEN_ENV = "STREAMING_WEBAPI_TOKEN"
TOKEN_FILE_ENV = "STREAMING_WEBAPI_TOKEN_FILE"

_bearer_scheme = HTTPBearer(auto_error=False)


def _read_token_file(path: Path) -> Optional[str]:
    try:
        token = path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise RuntimeError(f"No se pudo leer el token desde {path}: {exc}") from exc
    return token or None


def configured_token() -> Optional[str]:
    """Return the expected token, or ``None`` when authentication is disabled."""

    token = os.environ.get(TOKEN_ENV, "").strip()
    if token:
        return token
    token_file = os.environ.get(TOKEN_FILE_ENV, "").strip()
    if token_file:
        return _read_token_file(Path(token_file))
    return None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def require_token(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer_scheme),
) -> None:
    expected = configured_token()
    if expected is None:
        return
    if credentials is None:
        raise _unauthorized("Token requerido")
    if credentials.scheme.lower() != "bearer" or not secrets.compare_digest(
        credentials.credentials, expected
    ):
        raise _unauthorized("Token inválido")
