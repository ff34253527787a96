"""Test configuration."""

import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from studyaid.canvas_client import CanvasClient, get_canvas_client_factory
from studyaid.logging_config import configure_logging
from studyaid.main import app
from studyaid.openai_client import OpenAIClient, get_openai_client_factory

configure_logging("debug", console=True)

CANVAS_BASE = "https://canvas.test/api/v1"
OPENAI_BASE = "https://openai.test/v1"


class RecordingHandler:
	"""httpx.MockTransport handler that records requests and answers from a route table."""

	def __init__(self, routes: Optional[Dict[str, Callable[[httpx.Request], httpx.Response]]] = None) -> None:
		self.routes = dict(routes or {})
		self.requests: List[httpx.Request] = []

	def __call__(self, request: httpx.Request) -> httpx.Response:
		self.requests.append(request)
		handler = self.routes.get(request.url.path)
		if handler is None:
			return httpx.Response(404, json={"errors": [{"message": "The specified resource does not exist."}]})
		return handler(request)

	@property
	def calls(self) -> int:
		return len(self.requests)


def json_response(data: Any, status_code: int = 200) -> Callable[[httpx.Request], httpx.Response]:
	return lambda request: httpx.Response(status_code, json=data)


def chat_completion(content: str) -> Dict[str, Any]:
	return {"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


@pytest.fixture
def canvas_handler() -> RecordingHandler:
	return RecordingHandler()


@pytest.fixture
def openai_handler() -> RecordingHandler:
	return RecordingHandler()


@pytest.fixture
def client(canvas_handler: RecordingHandler, openai_handler: RecordingHandler):
	"""TestClient with upstream Canvas and OpenAI replaced by mock transports."""
	canvas_transport = httpx.MockTransport(canvas_handler)
	openai_transport = httpx.MockTransport(openai_handler)

	def canvas_factory() -> Callable[[str], CanvasClient]:
		return lambda api_key: CanvasClient(api_key, base_url=CANVAS_BASE, transport=canvas_transport)

	def openai_factory() -> Callable[[], OpenAIClient]:
		return lambda: OpenAIClient("sk-test", base_url=OPENAI_BASE, transport=openai_transport)

	app.dependency_overrides[get_canvas_client_factory] = canvas_factory
	app.dependency_overrides[get_openai_client_factory] = openai_factory
	try:
		with TestClient(app) as test_client:
			yield test_client
	finally:
		app.dependency_overrides.clear()


def sent_json(request: httpx.Request) -> Any:
	return json.loads(request.content)
