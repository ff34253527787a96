from __future__ import annotations
import asyncio
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .canvas_client import ModuleItem
from .extraction import extract_text
from .logging_config import get_logger
from .prompts import ContentType
from .store import GeneratedContentStore

logger = get_logger(__name__)

PAGE_TYPE = "Page"


class PageFetcher(Protocol):
	async def fetch_page_content(self, page_url: str) -> Dict[str, Any]:
		...


class ModuleContentOrchestrator:
	"""Collects the text of one module's pages and feeds it to the content store.

	Page fetches run concurrently. Each item is fetched at most once at a time;
	a failed item is recorded in ``errors`` and left out of the corpus.
	"""

	def __init__(
		self,
		client: PageFetcher,
		store: GeneratedContentStore,
		module_id: str | int,
		items: Sequence[ModuleItem | Dict[str, Any]],
	) -> None:
		self.client = client
		self.store = store
		self.module_id = str(module_id)
		self.items: List[ModuleItem] = [
			item if isinstance(item, ModuleItem) else ModuleItem.model_validate(item) for item in items
		]
		self.page_contents: Dict[int, str] = {}
		self.errors: Dict[int, str] = {}
		self._in_flight: Dict[int, asyncio.Task] = {}
		self._active = True

	@property
	def page_items(self) -> List[ModuleItem]:
		return [item for item in self.items if item.type == PAGE_TYPE]

	@property
	def fetched(self) -> List[int]:
		return list(self.page_contents)

	def is_fetching(self, item_id: int) -> bool:
		return item_id in self._in_flight

	async def fetch_pages(self) -> Dict[int, str]:
		await asyncio.gather(*(self.fetch_page(item) for item in self.page_items))
		return dict(self.page_contents)

	async def fetch_page(self, item: ModuleItem) -> Optional[str]:
		if item.id in self.page_contents:
			return self.page_contents[item.id]
		task = self._in_flight.get(item.id)
		if task is None:
			task = asyncio.ensure_future(self._fetch(item))
			self._in_flight[item.id] = task
			task.add_done_callback(lambda _t, item_id=item.id: self._in_flight.pop(item_id, None))
		return await asyncio.shield(task)

	async def _fetch(self, item: ModuleItem) -> Optional[str]:
		log = logger.bind(module_id=self.module_id, item_id=item.id)
		if not item.url:
			log.warning("page_url_missing", title=item.title)
			self._record_error(item, f"No URL available for {item.title}")
			return None
		try:
			data = await self.client.fetch_page_content(item.url)
		except Exception as err:
			log.warning("page_fetch_failed", title=item.title, error=str(err))
			self._record_error(item, f"Failed to fetch content for {item.title}: {err}")
			return None
		body = data.get("body") if isinstance(data, dict) else None
		text = extract_text(body)
		if not self._active:
			log.debug("page_fetch_discarded")
			return text
		self.page_contents[item.id] = text
		self.errors.pop(item.id, None)
		log.debug("page_fetched", chars=len(text))
		return text

	def _record_error(self, item: ModuleItem, message: str) -> None:
		if self._active:
			self.errors[item.id] = message

	def corpus(self) -> str:
		item_lines = "\n".join(f"{item.title} ({item.type})" for item in self.items)
		pages = "\n\n".join(self.page_contents[item.id] for item in self.page_items if item.id in self.page_contents)
		return f"{item_lines}\n\n{pages}"

	async def generate(self, content_type: ContentType | str) -> str:
		await self.fetch_pages()
		return await self.store.generate(self.module_id, content_type, self.corpus())

	def close(self) -> None:
		# Late fetch completions must not touch a closed orchestrator
		self._active = False
