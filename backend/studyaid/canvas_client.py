from __future__ import annotations
import httpx
from typing import Any, Callable, Dict, List, Optional
from pydantic import BaseModel, ConfigDict

from .errors import UpstreamError
from .logging_config import get_logger
from .settings import settings

logger = get_logger(__name__)


class CanvasRecord(BaseModel):
	# Canvas returns many more fields than we model; keep them for passthrough
	model_config = ConfigDict(extra="allow")


class Course(CanvasRecord):
	id: int
	name: Optional[str] = None
	course_code: Optional[str] = None
	enrollment_term_id: Optional[int] = None
	start_at: Optional[str] = None
	end_at: Optional[str] = None
	total_students: Optional[int] = None
	is_public: Optional[bool] = None
	workflow_state: Optional[str] = None


class Module(CanvasRecord):
	id: int
	name: Optional[str] = None
	position: Optional[int] = None
	items_count: Optional[int] = None
	items_url: Optional[str] = None


class CompletionRequirement(CanvasRecord):
	type: str
	min_score: Optional[float] = None


class ModuleItem(CanvasRecord):
	id: int
	title: str = ""
	type: str = ""
	content_id: Optional[int] = None
	html_url: Optional[str] = None
	page_url: Optional[str] = None
	# API URL of the underlying object; for Page items this is what /api/content fetches
	url: Optional[str] = None
	external_url: Optional[str] = None
	completion_requirement: Optional[CompletionRequirement] = None


def extract_error_message(response: httpx.Response, fallback: Optional[str] = None) -> str:
	"""Best-effort message from a Canvas error body: {"errors": [{"message": ...}]}."""
	try:
		data = response.json()
	except ValueError:
		data = None
	if isinstance(data, dict):
		errors = data.get("errors")
		if isinstance(errors, list) and errors:
			first = errors[0]
			if isinstance(first, dict) and first.get("message"):
				return str(first["message"])
		if isinstance(errors, str) and errors:
			return errors
		if data.get("message"):
			return str(data["message"])
	return fallback or response.reason_phrase or f"Canvas request failed ({response.status_code})"


class CanvasClient:
	def __init__(
		self,
		api_key: str,
		*,
		base_url: Optional[str] = None,
		timeout: Optional[float] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		if not api_key:
			raise ValueError("Canvas API key is required")
		self.base_url = (base_url or settings.canvas_api_url).rstrip("/")
		self._headers = {"Authorization": f"Bearer {api_key}"}
		self._client = httpx.AsyncClient(
			timeout=timeout or settings.request_timeout,
			transport=transport,
		)

	async def list_courses(self) -> List[Dict[str, Any]]:
		return await self._get_json(
			f"{self.base_url}/courses",
			params={"enrollment_state": "active"},
			fallback="Failed to fetch courses",
		)

	async def list_modules(self, course_id: str | int) -> List[Dict[str, Any]]:
		return await self._get_json(
			f"{self.base_url}/courses/{course_id}/modules",
			fallback="Failed to fetch modules",
		)

	async def list_module_items(self, course_id: str | int, module_id: str | int) -> List[Dict[str, Any]]:
		return await self._get_json(
			f"{self.base_url}/courses/{course_id}/modules/{module_id}/items",
			fallback="Failed to fetch module items",
		)

	async def fetch_page(self, page_url: str) -> Any:
		# Page URLs come from module items and are absolute
		return await self._get_json(page_url, fallback=None, content_error=True)

	async def _get_json(
		self,
		url: str,
		*,
		params: Optional[Dict[str, Any]] = None,
		fallback: Optional[str],
		content_error: bool = False,
	) -> Any:
		logger.debug("canvas_request", url=url)
		r = await self._client.get(url, params=params, headers=self._headers)
		if r.is_error:
			if content_error:
				message = f"Failed to fetch content: {extract_error_message(r)}"
			else:
				message = extract_error_message(r, fallback)
			logger.warning("canvas_request_failed", url=url, status=r.status_code, message=message)
			raise UpstreamError(r.status_code, message, url=url)
		return r.json()

	async def aclose(self) -> None:
		await self._client.aclose()


def get_canvas_client_factory() -> Callable[[str], CanvasClient]:
	"""Dependency returning a client constructor; routers validate the apiKey before calling it."""
	return CanvasClient
