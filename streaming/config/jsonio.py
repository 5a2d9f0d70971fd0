"""Low-level JSON document helpers shared by the settings record and the store."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, TextIO


def parse_json_document(fh: TextIO) -> Dict[str, Any]:
    """Parse ``fh`` and return the top-level JSON object.

    Raises ``ValueError`` for malformed JSON, for documents nested too deeply
    to decode, or when the document is not an object.
    """

    try:
        data = json.load(fh)
    except RecursionError as exc:
        raise ValueError("el documento JSON está anidado demasiado profundo") from exc
    if not isinstance(data, dict):
        raise ValueError(f"se esperaba un objeto JSON, se encontró {type(data).__name__}")
    return data


def read_json_document(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as fh:
        return parse_json_document(fh)


def write_json_document(path: Path, payload: Mapping[str, Any]) -> None:
    """Replace ``path`` with ``payload`` serialised as a UTF-8 JSON document.

    The document is written to a sibling temporary file first and then moved
    over the target, so readers never observe a half-written file. The parent
    directory must already exist.
    """

    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        with tmp_path.open("w", encoding="utf-8") as fh:
            json.dump(dict(payload), fh, indent=4, ensure_ascii=False)
            fh.write("\n")
        os.replace(tmp_path, path)
    except Exception:
        tmp_path.unlink(missing_ok=True)
        raise
