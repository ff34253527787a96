from __future__ import annotations
import httpx
from typing import Any, Dict, List, Optional

from .errors import UpstreamError
from .prompts import ContentType
from .settings import settings


class StudyAidClient:
	"""Async client for the proxy's /api endpoints, used by the CLI and the orchestrator."""

	def __init__(
		self,
		base_url: Optional[str] = None,
		api_key: Optional[str] = None,
		*,
		timeout: Optional[float] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.base_url = (base_url or settings.studyaid_server_url).rstrip("/")
		self.api_key = api_key
		# Generation can take a while; give it double the upstream timeout
		self._client = httpx.AsyncClient(
			base_url=self.base_url,
			timeout=timeout or settings.request_timeout * 2,
			transport=transport,
		)

	def _params(self) -> Dict[str, str]:
		return {"apiKey": self.api_key} if self.api_key else {}

	async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
		r = await self._client.request(method, path, **kwargs)
		if r.is_error:
			raise UpstreamError(r.status_code, _detail(r), url=str(r.request.url))
		return r.json()

	async def list_courses(self) -> List[Dict[str, Any]]:
		return await self._request("GET", "/api/courses", params=self._params())

	async def list_modules(self, course_id: str | int) -> List[Dict[str, Any]]:
		return await self._request("GET", f"/api/courses/{course_id}/modules", params=self._params())

	async def list_module_items(self, course_id: str | int, module_id: str | int) -> List[Dict[str, Any]]:
		return await self._request(
			"GET",
			f"/api/courses/{course_id}/modules/{module_id}/items",
			params=self._params(),
		)

	async def fetch_page_content(self, page_url: str) -> Dict[str, Any]:
		return await self._request("POST", "/api/content", params=self._params(), json={"pageUrl": page_url})

	async def generate_content(self, module_id: str, content_type: ContentType | str, content: str) -> str:
		data = await self._request(
			"POST",
			"/api/generate",
			json={"moduleId": module_id, "type": str(content_type), "content": content},
		)
		return data.get("content") or ""

	async def aclose(self) -> None:
		await self._client.aclose()

	async def __aenter__(self) -> "StudyAidClient":
		return self

	async def __aexit__(self, *exc_info: Any) -> None:
		await self.aclose()


def _detail(response: httpx.Response) -> str:
	try:
		data = response.json()
	except ValueError:
		return response.reason_phrase or f"Request failed ({response.status_code})"
	if isinstance(data, dict):
		detail = data.get("detail") or data.get("error")
		if isinstance(detail, str) and detail:
			return detail
	return response.reason_phrase or f"Request failed ({response.status_code})"
