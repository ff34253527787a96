from __future__ import annotations
from typing import Callable, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field

from ..canvas_client import CanvasClient, get_canvas_client_factory
from ..errors import UpstreamError
from ..logging_config import get_logger

router = APIRouter(prefix="/api/content", tags=["content"])

logger = get_logger(__name__)


class PageContentRequest(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	page_url: Optional[str] = Field(default=None, alias="pageUrl")


@router.post("")
async def fetch_page_content(
	req: Optional[PageContentRequest] = None,
	api_key: Optional[str] = Query(default=None, alias="apiKey"),
	make_client: Callable[[str], CanvasClient] = Depends(get_canvas_client_factory),
):
	# Unlike the course endpoints a missing token answers 500 here; clients rely on it
	if not api_key:
		raise HTTPException(status_code=500, detail="Canvas API token is not configured")
	page_url = (req.page_url if req else None) or ""
	if not page_url.strip():
		raise HTTPException(status_code=400, detail="Page URL is required")
	client = make_client(api_key)
	try:
		return await client.fetch_page(page_url)
	except UpstreamError as e:
		raise HTTPException(status_code=e.status_code, detail=e.message)
	except Exception as e:
		logger.exception("page_fetch_failed", url=page_url)
		raise HTTPException(status_code=500, detail=str(e) or "Failed to fetch content")
	finally:
		await client.aclose()
