"""JSON-backed keyed document store with one shared instance per file."""

from __future__ import annotations

import copy
import json
import os
import tempfile
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Any, ClassVar, Self

from loguru import logger


def write_json_atomic(target: Path, content: object) -> None:
    """Replace ``target`` with ``content`` serialized as JSON in one rename."""
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(content, handle, ensure_ascii=False, indent=2)
            handle.write("\n")
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class ConfigFile:
    """A JSON document read from and written back to one file.

    Properties are addressed by a list of nested keys. Instances are shared
    through an explicit registry: ``open(path)`` hands back the instance already
    opened for the same resolved path, ``dispose()`` forgets it.
    """

    BASE: ClassVar[dict[str, Any]] = {}

    _registry: ClassVar[dict[tuple[type[ConfigFile], Path], ConfigFile]] = {}
    _registry_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, file_path: str | Path) -> None:
        self.path = Path(file_path)
        self.content: dict[str, Any] = {}
        self.read()

    @classmethod
    def open(cls, file_path: str | Path) -> Self:
        key = (cls, Path(file_path).expanduser().resolve())
        with cls._registry_lock:
            instance = cls._registry.get(key)
            if instance is None:
                instance = cls(key[1])
                cls._registry[key] = instance
            return instance  # type: ignore[return-value]

    @classmethod
    def dispose(cls, file_path: str | Path | None = None) -> None:
        """Forget the shared instance for ``file_path``, or every instance of this class."""
        with cls._registry_lock:
            if file_path is None:
                for key in [key for key in cls._registry if key[0] is cls]:
                    del cls._registry[key]
                return
            cls._registry.pop((cls, Path(file_path).expanduser().resolve()), None)

    @classmethod
    def with_content(cls, file_path: str | Path, content: dict[str, Any] | None = None) -> Self:
        """Write a fresh document (``BASE`` by default) and open it."""
        path = Path(file_path).expanduser().resolve()
        write_json_atomic(path, copy.deepcopy(cls.BASE if content is None else content))
        cls.dispose(path)
        return cls.open(path)

    @classmethod
    def exists(cls, file_path: str | Path) -> bool:
        return Path(file_path).expanduser().is_file()

    def read(self) -> None:
        if not self.path.exists():
            self.content = copy.deepcopy(self.BASE)
            return
        try:
            loaded = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error("config.read.error path={} error={}", self.path, e)
            loaded = None
        self.content = loaded if isinstance(loaded, dict) else copy.deepcopy(self.BASE)

    def write(self) -> None:
        write_json_atomic(self.path, self.content)

    def get_property(self, path: Sequence[str]) -> Any:
        current: Any = self.content
        for key in path:
            if not isinstance(current, dict) or key not in current:
                return None
            current = current[key]
        return current

    def set_property(self, path: Sequence[str], value: Any) -> None:
        if not path:
            raise ValueError("property path must not be empty")
        current = self.content
        for key in path[:-1]:
            child = current.get(key)
            if not isinstance(child, dict):
                child = {}
                current[key] = child
            current = child
        current[path[-1]] = value
