from __future__ import annotations
import httpx
from typing import Any, Dict, List, Optional

from .errors import GenerationError
from .logging_config import get_logger
from .prompts import SYSTEM_PROMPT, ContentType, build_prompt
from .settings import settings

logger = get_logger(__name__)


class OpenAIClient:
	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		temperature: Optional[float] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.api_key = api_key or settings.openai_api_key
		if not self.api_key:
			raise ValueError("OPENAI_API_KEY is not configured")
		self.model = model or settings.openai_model
		self.temperature = settings.openai_temperature if temperature is None else temperature
		self.base_url = (base_url or settings.openai_base_url).rstrip("/") + "/chat/completions"
		self._headers = {
			"Authorization": f"Bearer {self.api_key}",
			"Content-Type": "application/json",
		}
		self._client = httpx.AsyncClient(timeout=settings.request_timeout, transport=transport)

	async def generate_study_aid(self, content_type: ContentType | str, content: str) -> str:
		prompt = build_prompt(content_type, content)
		return await self.chat([
			{"role": "system", "content": SYSTEM_PROMPT},
			{"role": "user", "content": prompt},
		])

	async def chat(self, messages: List[Dict[str, str]]) -> str:
		payload: Dict[str, Any] = {
			"model": self.model,
			"messages": messages,
			"temperature": self.temperature,
		}
		try:
			r = await self._client.post(self.base_url, headers=self._headers, json=payload)
			r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			logger.warning("openai_request_failed", status=http_err.response.status_code)
			raise GenerationError(_error_message(http_err.response)) from http_err
		except httpx.RequestError as net_err:
			logger.warning("openai_request_error", error=str(net_err))
			raise GenerationError(f"Generation request failed: {net_err}") from net_err
		try:
			data = r.json()
			choices = data.get("choices") or []
		except (ValueError, AttributeError) as err:
			raise GenerationError(f"Unexpected OpenAI response: {r.text}") from err
		if not choices:
			return ""
		message = choices[0].get("message") or {}
		return message.get("content") or ""

	async def aclose(self) -> None:
		await self._client.aclose()


def _error_message(response: httpx.Response) -> str:
	# OpenAI errors look like {"error": {"message": "..."}}
	try:
		data = response.json()
		message = data["error"]["message"]
		if message:
			return str(message)
	except (ValueError, KeyError, TypeError):
		pass
	return f"Generation failed ({response.status_code})"


def get_openai_client_factory():
	return OpenAIClient
