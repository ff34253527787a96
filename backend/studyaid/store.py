"""Cache of generated study aids keyed by module and content type.

The store owns two maps: generated text per key and an in-flight flag per key.
Only ``generate`` mutates them. Every change to the text map is written back to
the storage backend as one JSON record, so a fresh store built on the same
backend sees the same entries.
"""

from __future__ import annotations

import json
from typing import Awaitable, Callable, Dict, List, NamedTuple, Optional

from .errors import GenerationInProgress, InvalidContentType
from .logging_config import get_logger
from .prompts import ContentType, parse_content_type
from .storage import MemoryStorage, Storage

logger = get_logger(__name__)

STORAGE_KEY = "generatedContent"

Generator = Callable[[str, ContentType, str], Awaitable[str]]
Listener = Callable[["ContentKey"], None]


class ContentKey(NamedTuple):
	module_id: str
	content_type: ContentType

	@classmethod
	def of(cls, module_id: str | int, content_type: ContentType | str) -> "ContentKey":
		return cls(str(module_id), parse_content_type(content_type))

	def serialize(self) -> str:
		return f"{self.module_id}-{self.content_type.value}"

	@classmethod
	def parse(cls, raw: str) -> "ContentKey":
		# Content type names never contain "-", so the last one is the separator
		module_id, sep, suffix = raw.rpartition("-")
		if not sep or not module_id:
			raise ValueError(f"Malformed content key: {raw!r}")
		return cls(module_id, parse_content_type(suffix))


class GeneratedContentStore:
	def __init__(
		self,
		generator: Generator,
		storage: Optional[Storage] = None,
		*,
		storage_key: str = STORAGE_KEY,
	) -> None:
		self._generator = generator
		self._storage: Storage = storage if storage is not None else MemoryStorage()
		self._storage_key = storage_key
		self._content: Dict[ContentKey, str] = {}
		self._loading: Dict[ContentKey, bool] = {}
		self._listeners: List[Listener] = []
		self._load()

	def _load(self) -> None:
		raw = self._storage.get_item(self._storage_key)
		if not raw:
			return
		try:
			data = json.loads(raw)
		except json.JSONDecodeError as err:
			logger.warning("stored_content_unreadable", key=self._storage_key, error=err.msg)
			return
		if not isinstance(data, dict):
			logger.warning("stored_content_unreadable", key=self._storage_key, error="not an object")
			return
		for raw_key, value in data.items():
			try:
				key = ContentKey.parse(raw_key)
			except (ValueError, InvalidContentType):
				logger.warning("stored_content_key_skipped", entry=raw_key)
				continue
			if isinstance(value, str):
				self._content[key] = value
		logger.debug("stored_content_loaded", entries=len(self._content))

	def _persist(self, content: Dict[ContentKey, str]) -> None:
		payload = {key.serialize(): value for key, value in content.items()}
		self._storage.set_item(self._storage_key, json.dumps(payload))

	def _notify(self, key: ContentKey) -> None:
		for listener in list(self._listeners):
			try:
				listener(key)
			except Exception:
				logger.exception("content_listener_failed", key=key.serialize())

	def subscribe(self, listener: Listener) -> Callable[[], None]:
		"""Call ``listener(key)`` when a key starts loading and again when it settles.

		The settle notification comes after the new text (if any) is stored, so
		listeners can read ``get`` and ``is_loading`` directly.
		"""
		self._listeners.append(listener)

		def unsubscribe() -> None:
			if listener in self._listeners:
				self._listeners.remove(listener)

		return unsubscribe

	async def generate(self, module_id: str | int, content_type: ContentType | str, source_content: str) -> str:
		key = ContentKey.of(module_id, content_type)
		if self._loading.get(key):
			raise GenerationInProgress(key.serialize())
		self._loading[key] = True
		self._notify(key)
		log = logger.bind(key=key.serialize())
		log.info("generation_started", source_chars=len(source_content or ""))
		try:
			text = await self._generator(key.module_id, key.content_type, source_content)
			updated = {**self._content, key: text}
			# Memory only changes once the record is written
			self._persist(updated)
			self._content = updated
			log.info("generation_stored", chars=len(text))
			return text
		except Exception as err:
			log.warning("generation_failed", error=str(err))
			raise
		finally:
			self._loading[key] = False
			self._notify(key)

	def get(self, module_id: str | int, content_type: ContentType | str) -> Optional[str]:
		try:
			key = ContentKey.of(module_id, content_type)
		except InvalidContentType:
			return None
		return self._content.get(key)

	def get_all(self) -> Dict[str, str]:
		return {key.serialize(): value for key, value in self._content.items()}

	def is_loading(self, module_id: str | int, content_type: ContentType | str) -> bool:
		try:
			key = ContentKey.of(module_id, content_type)
		except InvalidContentType:
			return False
		return self._loading.get(key, False)


def group_by_module(entries: Dict[str, str]) -> Dict[str, Dict[str, str]]:
	"""Reshape ``get_all()`` output into {module_id: {content_type: text}}."""
	grouped: Dict[str, Dict[str, str]] = {}
	for raw_key, value in entries.items():
		try:
			key = ContentKey.parse(raw_key)
		except (ValueError, InvalidContentType):
			continue
		grouped.setdefault(key.module_id, {})[key.content_type.value] = value
	return grouped
