from typing import Callable

import httpx
from fastapi import APIRouter, Depends

from ..canvas_client import CanvasClient, get_canvas_client_factory
from ..errors import UpstreamError
from ..settings import settings

router = APIRouter(prefix="/api/debug", tags=["debug"])


def _presence(value) -> str:
	return "Set (hidden)" if value else "Not set"


@router.get("")
async def debug_info(make_client: Callable[[str], CanvasClient] = Depends(get_canvas_client_factory)):
	canvas_test = "Not tested"
	if settings.canvas_api_token:
		client = make_client(settings.canvas_api_token)
		try:
			await client.list_courses()
			canvas_test = "Success"
		except UpstreamError as e:
			canvas_test = f"Failed: {e.status_code} {e.message}"
		except httpx.HTTPError as e:
			canvas_test = f"Error: {e}"
		finally:
			await client.aclose()
	return {
		"config": {
			"canvasApiUrl": settings.canvas_api_url,
			"canvasApiToken": _presence(settings.canvas_api_token),
			"openaiApiKey": _presence(settings.openai_api_key),
		},
		"tests": {"canvasApiTest": canvas_test},
		"environment": settings.environment,
	}
