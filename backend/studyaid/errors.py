"""Error types shared by the proxy, the clients and the content store.

Every error carries the HTTP status code the proxy answers with, so routers can
translate them into HTTPException without a lookup table.
"""

from __future__ import annotations

from typing import Optional


class StudyAidError(Exception):
	status_code: int = 500

	def __init__(self, message: str, status_code: Optional[int] = None) -> None:
		super().__init__(message)
		self.message = message
		if status_code is not None:
			self.status_code = status_code


class InvalidContentType(StudyAidError):
	status_code = 400

	def __init__(self, value: object) -> None:
		super().__init__("Invalid type. Must be one of: summary, flashcards, quiz")
		self.value = value


class UpstreamError(StudyAidError):
	"""Non-success answer from Canvas or from the proxy itself."""

	def __init__(self, status_code: int, message: str, *, url: Optional[str] = None) -> None:
		super().__init__(message, status_code)
		self.url = url

	def __str__(self) -> str:
		return f"{self.status_code}: {self.message}"


class GenerationError(StudyAidError):
	status_code = 500


class GenerationInProgress(StudyAidError):
	status_code = 409

	def __init__(self, key: str) -> None:
		super().__init__(f"Generation already in progress for {key}")
		self.key = key


class ContentParseError(StudyAidError):
	"""Generated payload could not be parsed; the user should regenerate it."""

	status_code = 422
