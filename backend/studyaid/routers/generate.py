from __future__ import annotations
from typing import Callable, Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from pydantic import AliasChoices, BaseModel, Field

from ..errors import InvalidContentType, StudyAidError
from ..logging_config import get_logger
from ..openai_client import OpenAIClient, get_openai_client_factory
from ..prompts import parse_content_type

router = APIRouter(prefix="/api/generate", tags=["generate"])

logger = get_logger(__name__)


class GenerateRequest(BaseModel):
	module_id: Optional[Union[str, int]] = Field(default=None, validation_alias=AliasChoices("moduleId", "module_id"))
	type: Optional[str] = Field(default=None, validation_alias=AliasChoices("type", "contentType", "content_type"))
	content: Optional[str] = Field(default=None, validation_alias=AliasChoices("content", "sourceContent"))


class GenerateResponse(BaseModel):
	content: str


@router.post("", response_model=GenerateResponse)
async def generate(
	req: GenerateRequest,
	make_client: Callable[[], OpenAIClient] = Depends(get_openai_client_factory),
):
	if not req.module_id or not req.type or not req.content:
		raise HTTPException(status_code=400, detail="Missing required fields: moduleId, type, content")
	try:
		content_type = parse_content_type(req.type)
	except InvalidContentType as e:
		raise HTTPException(status_code=400, detail=e.message)
	try:
		client = make_client()
	except ValueError as e:
		raise HTTPException(status_code=500, detail=str(e))
	try:
		text = await client.generate_study_aid(content_type, req.content)
		logger.info("content_generated", module_id=req.module_id, content_type=content_type.value, chars=len(text))
		return GenerateResponse(content=text)
	except StudyAidError as e:
		raise HTTPException(status_code=500, detail=e.message or "Failed to generate content")
	except Exception as e:
		logger.exception("generation_failed", module_id=req.module_id)
		raise HTTPException(status_code=500, detail=str(e) or "Failed to generate content")
	finally:
		await client.aclose()
