from __future__ import annotations
from typing import Any, Awaitable, Callable, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..canvas_client import CanvasClient, get_canvas_client_factory
from ..errors import UpstreamError
from ..logging_config import get_logger

router = APIRouter(prefix="/api/courses", tags=["courses"])

logger = get_logger(__name__)

ClientFactory = Callable[[str], CanvasClient]


async def _proxy(
	api_key: Optional[str],
	make_client: ClientFactory,
	call: Callable[[CanvasClient], Awaitable[List[Dict[str, Any]]]],
	fallback: str,
) -> List[Dict[str, Any]]:
	if not api_key:
		raise HTTPException(status_code=400, detail="API key is required")
	client = make_client(api_key)
	try:
		return await call(client)
	except UpstreamError as e:
		raise HTTPException(status_code=e.status_code, detail=e.message)
	except Exception as e:
		logger.exception("canvas_proxy_failed", error=str(e))
		raise HTTPException(status_code=500, detail=fallback)
	finally:
		await client.aclose()


@router.get("")
async def list_courses(
	api_key: Optional[str] = Query(default=None, alias="apiKey"),
	make_client: ClientFactory = Depends(get_canvas_client_factory),
):
	return await _proxy(api_key, make_client, lambda c: c.list_courses(), "Failed to fetch courses")


@router.get("/{course_id}/modules")
async def list_modules(
	course_id: str,
	api_key: Optional[str] = Query(default=None, alias="apiKey"),
	make_client: ClientFactory = Depends(get_canvas_client_factory),
):
	return await _proxy(api_key, make_client, lambda c: c.list_modules(course_id), "Failed to fetch modules")


@router.get("/{course_id}/modules/{module_id}/items")
async def list_module_items(
	course_id: str,
	module_id: str,
	api_key: Optional[str] = Query(default=None, alias="apiKey"),
	make_client: ClientFactory = Depends(get_canvas_client_factory),
):
	return await _proxy(
		api_key,
		make_client,
		lambda c: c.list_module_items(course_id, module_id),
		"Failed to fetch module items",
	)
