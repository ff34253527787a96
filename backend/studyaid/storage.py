"""Key/value persistence backends for generated content.

Each backend behaves like browser localStorage: string keys, string values,
whole-value reads and writes.
"""

from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

from .db import make_engine, make_session_factory
from .logging_config import get_logger
from .models import StorageRecord

logger = get_logger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class Storage(Protocol):
	def get_item(self, key: str) -> Optional[str]:
		...

	def set_item(self, key: str, value: str) -> None:
		...


class MemoryStorage:
	def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
		self._items: Dict[str, str] = dict(initial or {})

	def get_item(self, key: str) -> Optional[str]:
		return self._items.get(key)

	def set_item(self, key: str, value: str) -> None:
		self._items[key] = value


class FileStorage:
	"""Stores each key as ``<directory>/<key>.json``."""

	def __init__(self, directory: Union[str, Path]) -> None:
		self.directory = Path(directory).expanduser()

	def _path(self, key: str) -> Path:
		if not _SAFE_KEY.match(key):
			raise ValueError(f"Invalid storage key: {key!r}")
		return self.directory / f"{key}.json"

	def get_item(self, key: str) -> Optional[str]:
		path = self._path(key)
		if not path.exists():
			return None
		return path.read_text(encoding="utf-8")

	def set_item(self, key: str, value: str) -> None:
		path = self._path(key)
		self.directory.mkdir(parents=True, exist_ok=True)
		# Write then rename so a crash never leaves a half-written record
		fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
		try:
			with os.fdopen(fd, "w", encoding="utf-8") as fh:
				fh.write(value)
			os.replace(tmp_name, path)
		except BaseException:
			Path(tmp_name).unlink(missing_ok=True)
			raise
		logger.debug("storage_written", path=str(path), size=len(value))


class SqlStorage:
	def __init__(self, database_url: Optional[str] = None) -> None:
		self.engine = make_engine(database_url)
		self._sessions = make_session_factory(self.engine)

	def get_item(self, key: str) -> Optional[str]:
		with self._sessions() as db:
			row = db.get(StorageRecord, key)
			return row.value if row is not None else None

	def set_item(self, key: str, value: str) -> None:
		with self._sessions() as db:
			db.merge(StorageRecord(key=key, value=value))
			db.commit()

	def dispose(self) -> None:
		self.engine.dispose()
