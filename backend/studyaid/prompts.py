from __future__ import annotations
from enum import Enum
from typing import Any

from .errors import InvalidContentType


class ContentType(str, Enum):
	SUMMARY = "summary"
	FLASHCARDS = "flashcards"
	QUIZ = "quiz"

	def __str__(self) -> str:
		return self.value


def parse_content_type(value: Any) -> ContentType:
	if isinstance(value, ContentType):
		return value
	try:
		return ContentType(value)
	except ValueError:
		raise InvalidContentType(value) from None


SYSTEM_PROMPT = (
	"You are an expert educational content creator specializing in creating high-quality study materials. "
	"Your responses should be accurate, educational, and tailored to help students learn effectively."
)


def _summary_prompt(content: str) -> str:
	return (
		"Create a comprehensive summary of the following module content from a course. "
		"Focus on the main concepts, key points, and important takeaways. "
		"Make it educational and well-structured with headings and bullet points where appropriate.\n\n"
		f"Module Content:\n{content}"
	)


def _flashcards_prompt(content: str) -> str:
	return (
		"Create 10 educational flashcards for studying the following module content from a course. "
		"Each flashcard should have a 'front' with a question or concept, and a 'back' with the answer or explanation. "
		"Cover the most important concepts and ensure the content is accurate and educational.\n\n"
		f"Module Content:\n{content}\n\n"
		"Format your response as a valid JSON array of objects, each with 'front' and 'back' properties. Example:\n"
		"[\n"
		'  { "front": "What is X?", "back": "X is..." },\n'
		'  { "front": "When was Y developed?", "back": "Y was developed in..." }\n'
		"]"
	)


def _quiz_prompt(content: str) -> str:
	return (
		"Create a 5-question multiple-choice quiz based on the following module content from a course. "
		"Each question should have 4 possible answers with only one correct answer. "
		"Make the questions educational, challenging but fair, and cover important concepts from the material.\n\n"
		f"Module Content:\n{content}\n\n"
		"Format your response as a valid JSON array of objects, each with 'question', 'options' (array of 4 strings), "
		"and 'correctAnswer' (index of correct option, 0-3) properties. Example:\n"
		"[\n"
		"  {\n"
		'    "question": "What is X?",\n'
		'    "options": ["Option A", "Option B", "Option C", "Option D"],\n'
		'    "correctAnswer": 2\n'
		"  }\n"
		"]"
	)


_BUILDERS = {
	ContentType.SUMMARY: _summary_prompt,
	ContentType.FLASHCARDS: _flashcards_prompt,
	ContentType.QUIZ: _quiz_prompt,
}


def build_prompt(content_type: ContentType | str, content: str) -> str:
	return _BUILDERS[parse_content_type(content_type)](content)
