"""JSON file helpers with atomic writes"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from polrisk.domain.exceptions import CorruptStateError


def read_json(path: Path) -> Any:
    """
    Read a JSON document.

    Raises:
        CorruptStateError: File is missing, unreadable or not valid JSON
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise CorruptStateError(f"{path}: file not found") from e
    except (OSError, ValueError) as e:
        raise CorruptStateError(f"{path}: unreadable JSON: {e}") from e


def _write_temp(path: Path, data: Any) -> Path:
    """Write data to a temp file beside path and return the temp path"""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
    except BaseException:
        os.unlink(tmp_name)
        raise
    return Path(tmp_name)


def atomic_write_json(path: Path, data: Any) -> None:
    """Replace path with data; readers see either the old or the new file"""
    tmp_path = _write_temp(path, data)
    try:
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def atomic_create_json(path: Path, data: Any) -> bool:
    """
    Create path with data unless it already exists.

    The temp file is hard-linked into place, which fails if the target exists,
    so an existing file is never overwritten.

    Returns:
        True if the file was created, False if it already existed
    """
    if path.exists():
        return False

    tmp_path = _write_temp(path, data)
    try:
        os.link(tmp_path, path)
    except FileExistsError:
        return False
    finally:
        tmp_path.unlink(missing_ok=True)
    return True
