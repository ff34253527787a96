from __future__ import annotations
import json
import re
from typing import Any, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ContentParseError


class Flashcard(BaseModel):
	front: str
	back: str


class QuizQuestion(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	question: str
	options: List[str] = Field(min_length=4, max_length=4)
	correct_answer: int = Field(alias="correctAnswer", ge=0, le=3)

	@field_validator("options", mode="before")
	@classmethod
	def _stringify_options(cls, value: Any) -> Any:
		if isinstance(value, list):
			return [str(v) for v in value]
		return value


class QuestionResult(BaseModel):
	question: str
	selected: Optional[int] = None
	correct_answer: int
	correct: bool


class QuizResult(BaseModel):
	score: int
	total: int
	percentage: float
	results: List[QuestionResult]


_LEADING_FENCE = re.compile(r"^\s*```[\w+-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?[ \t]*```\s*$")


def strip_code_fence(text: str) -> str:
	"""Drop a ```json ... ``` wrapper the model sometimes puts around JSON."""
	stripped = _LEADING_FENCE.sub("", text or "", count=1)
	stripped = _TRAILING_FENCE.sub("", stripped, count=1)
	return stripped.strip()


M = TypeVar("M", bound=BaseModel)


def _parse_array(text: str, model: Type[M], label: str) -> List[M]:
	try:
		data = json.loads(strip_code_fence(text))
	except json.JSONDecodeError as err:
		raise ContentParseError(f"Generated {label} are not valid JSON: {err.msg}") from err
	if not isinstance(data, list):
		raise ContentParseError(f"Generated {label} must be a JSON array")
	try:
		return [model.model_validate(item) for item in data]
	except ValidationError as err:
		raise ContentParseError(f"Generated {label} have an unexpected shape") from err


def parse_flashcards(text: str) -> List[Flashcard]:
	return _parse_array(text, Flashcard, "flashcards")


def parse_quiz(text: str) -> List[QuizQuestion]:
	return _parse_array(text, QuizQuestion, "quiz questions")


def score_quiz(questions: Sequence[QuizQuestion], answers: Sequence[Optional[int]]) -> QuizResult:
	# Missing or negative answers count as unanswered
	results: List[QuestionResult] = []
	score = 0
	for index, question in enumerate(questions):
		selected = answers[index] if index < len(answers) else None
		if selected is not None and selected < 0:
			selected = None
		correct = selected == question.correct_answer
		if correct:
			score += 1
		results.append(QuestionResult(
			question=question.question,
			selected=selected,
			correct_answer=question.correct_answer,
			correct=correct,
		))
	total = len(questions)
	percentage = round(score / total * 100, 2) if total else 0.0
	return QuizResult(score=score, total=total, percentage=percentage, results=results)
