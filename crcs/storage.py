"""
JSON persistence for credential and session records.

Thin I/O layer around the pydantic models: reads wrap every failure in
a typed error, writes go to a temporary file in the target directory and
are moved into place only when complete.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from .errors import MalformedCredential, MalformedSession, MissingOrUnreadableFile
from .models import Credential, Session

PathLike = Union[str, "os.PathLike[str]"]
_M = TypeVar("_M", bound=BaseModel)


def dumps(record: BaseModel) -> str:
    """Pretty JSON with ``C`` / ``SC`` aliases, as consumed by snarkjs."""
    return record.model_dump_json(by_alias=True, indent=2)


def _read_text(path: PathLike) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise MissingOrUnreadableFile(f"cannot read {os.fspath(path)}: {exc}") from exc


def _load(path: PathLike, model: Type[_M], error: Type[Exception]) -> _M:
    raw = _read_text(path)
    try:
        return model.model_validate(json.loads(raw))
    except (ValueError, ValidationError) as exc:
        raise error(f"invalid {model.__name__.lower()} in {os.fspath(path)}: {exc}") from exc


def write_atomic(path: PathLike, text: str) -> int:
    """Write *text* to *path* atomically; returns the number of bytes written."""
    target = Path(path)
    data = text.encode("utf-8")
    directory = target.parent
    try:
        fd, tmp = tempfile.mkstemp(dir=directory, prefix=f".{target.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp, target)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
    except OSError as exc:
        raise MissingOrUnreadableFile(f"cannot write {target}: {exc}") from exc
    return len(data)


def load_credential(path: PathLike) -> Credential:
    return _load(path, Credential, MalformedCredential)


def save_credential(credential: Credential, path: PathLike) -> int:
    return write_atomic(path, dumps(credential))


def load_session(path: PathLike) -> Session:
    return _load(path, Session, MalformedSession)


def save_session(session: Session, path: PathLike) -> int:
    return write_atomic(path, dumps(session))
