"""Command line front end: browse Canvas through the proxy and work with study aids."""

import asyncio
from pathlib import Path
from typing import Optional

import click
import httpx

from .api_client import StudyAidClient
from .canvas_client import Course, Module, ModuleItem
from .errors import ContentParseError, StudyAidError
from .logging_config import configure_logging
from .orchestrator import ModuleContentOrchestrator
from .payloads import parse_flashcards, parse_quiz, score_quiz
from .prompts import ContentType
from .settings import settings
from .storage import FileStorage
from .store import GeneratedContentStore, group_by_module

CONTENT_TYPES = click.Choice([t.value for t in ContentType])
ANSWER_LETTERS = "ABCD"


class Context:
	def __init__(self, server: str, api_key: Optional[str], store_dir: Path) -> None:
		self.server = server
		self.api_key = api_key
		self.store_dir = store_dir

	def client(self) -> StudyAidClient:
		return StudyAidClient(self.server, self.api_key)

	def store(self, client: Optional[StudyAidClient] = None) -> GeneratedContentStore:
		generator = client.generate_content if client is not None else _offline_generator
		return GeneratedContentStore(generator, FileStorage(self.store_dir))

	def require_key(self) -> str:
		if not self.api_key:
			raise click.UsageError("A Canvas API key is required (--api-key or CANVAS_API_KEY)")
		return self.api_key


async def _offline_generator(module_id: str, content_type: ContentType, content: str) -> str:
	raise StudyAidError("Generation needs a server connection")


def _run(coro):
	try:
		return asyncio.run(coro)
	except StudyAidError as e:
		raise click.ClickException(e.message)
	except httpx.HTTPError as e:
		raise click.ClickException(f"Could not reach the server: {e}")


@click.group()
@click.option("--server", default=lambda: settings.studyaid_server_url, show_default="STUDYAID_SERVER_URL", help="Proxy base URL")
@click.option("--api-key", envvar="CANVAS_API_KEY", default=None, help="Canvas access token")
@click.option("--store", "store_dir", type=click.Path(path_type=Path), default=lambda: settings.storage_dir, help="Directory for generated content")
@click.option("--verbose", is_flag=True, help="Log debug output")
@click.pass_context
def cli(ctx, server, api_key, store_dir, verbose):
	"""Canvas study aid tools."""
	configure_logging("debug" if verbose else "warning", console=True)
	ctx.obj = Context(server, api_key, store_dir)


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=8000, type=int, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host, port, reload):
	"""Run the proxy API."""
	import uvicorn

	click.echo(f"Starting Canvas Study Aids API on http://{host}:{port}")
	uvicorn.run("studyaid.main:app", host=host, port=port, reload=reload)


@cli.command()
@click.pass_obj
def courses(obj: Context):
	"""List active courses."""
	obj.require_key()

	async def _list():
		async with obj.client() as client:
			return await client.list_courses()

	for record in _run(_list()):
		course = Course.model_validate(record)
		click.echo(f"{course.id}\t{course.course_code or ''}\t{course.name or ''}")


@cli.command()
@click.argument("course_id")
@click.pass_obj
def modules(obj: Context, course_id):
	"""List a course's modules and their items."""
	obj.require_key()

	async def _list():
		async with obj.client() as client:
			mods = [Module.model_validate(m) for m in await client.list_modules(course_id)]
			items = await asyncio.gather(
				*(client.list_module_items(course_id, m.id) for m in mods),
				return_exceptions=True,
			)
			return mods, items

	mods, items = _run(_list())
	for module, module_items in zip(mods, items):
		click.echo(f"{module.id}\t{module.name or ''}")
		if isinstance(module_items, Exception):
			click.echo(f"\t(items unavailable: {module_items})")
			continue
		for record in module_items:
			item = ModuleItem.model_validate(record)
			click.echo(f"\t{item.id}\t{item.type}\t{item.title}")


@cli.command()
@click.argument("course_id")
@click.argument("module_id")
@click.argument("content_type", type=CONTENT_TYPES)
@click.option("--force", is_flag=True, help="Regenerate even if cached")
@click.pass_obj
def generate(obj: Context, course_id, module_id, content_type, force):
	"""Generate a study aid for a module and print it."""
	obj.require_key()

	async def _generate():
		async with obj.client() as client:
			store = obj.store(client)
			cached = store.get(module_id, content_type)
			if cached is not None and not force:
				return cached, {}
			items = await client.list_module_items(course_id, module_id)
			orchestrator = ModuleContentOrchestrator(client, store, module_id, items)
			try:
				text = await orchestrator.generate(content_type)
			finally:
				orchestrator.close()
			return text, orchestrator.errors

	text, errors = _run(_generate())
	for message in errors.values():
		click.echo(f"warning: {message}", err=True)
	_render(content_type, text)


@cli.command()
@click.argument("module_id")
@click.argument("content_type", type=CONTENT_TYPES)
@click.pass_obj
def show(obj: Context, module_id, content_type):
	"""Show a cached study aid."""
	text = obj.store().get(module_id, content_type)
	if text is None:
		raise click.ClickException(f"No {content_type} available for module {module_id}")
	_render(content_type, text)


@cli.command()
@click.argument("module_id")
@click.pass_obj
def quiz(obj: Context, module_id):
	"""Take a cached quiz and print the score."""
	text = obj.store().get(module_id, ContentType.QUIZ)
	if text is None:
		raise click.ClickException(f"No quiz available for module {module_id}")
	try:
		questions = parse_quiz(text)
	except ContentParseError as e:
		raise click.ClickException(f"Error displaying quiz: {e.message}. Please try generating again with --force.")

	answers = []
	for number, question in enumerate(questions, start=1):
		click.echo(f"{number}. {question.question}")
		for letter, option in zip(ANSWER_LETTERS, question.options):
			click.echo(f"   {letter}. {option}")
		choice = click.prompt("Answer", type=click.Choice(list(ANSWER_LETTERS), case_sensitive=False))
		answers.append(ANSWER_LETTERS.index(choice.upper()))

	result = score_quiz(questions, answers)
	click.echo(f"\nScore: {result.score}/{result.total} ({result.percentage:g}%)")
	for number, (question, outcome) in enumerate(zip(questions, result.results), start=1):
		if outcome.correct:
			click.echo(f"{number}. Correct")
		else:
			right = question.correct_answer
			click.echo(f"{number}. Incorrect (answer: {ANSWER_LETTERS[right]}. {question.options[right]})")


@cli.command()
@click.pass_obj
def dashboard(obj: Context):
	"""List every cached study aid grouped by module."""
	grouped = group_by_module(obj.store().get_all())
	if not grouped:
		click.echo("No generated content yet.")
		return
	for module_id in sorted(grouped):
		kinds = ", ".join(sorted(grouped[module_id]))
		click.echo(f"Module {module_id}: {kinds}")


def _render(content_type: str, text: str) -> None:
	try:
		if content_type == ContentType.FLASHCARDS.value:
			for number, card in enumerate(parse_flashcards(text), start=1):
				click.echo(f"{number}. {card.front}\n   -> {card.back}")
		elif content_type == ContentType.QUIZ.value:
			for number, question in enumerate(parse_quiz(text), start=1):
				click.echo(f"{number}. {question.question}")
				for index, option in enumerate(question.options):
					marker = "*" if index == question.correct_answer else " "
					click.echo(f"   {marker} {ANSWER_LETTERS[index]}. {option}")
		else:
			click.echo(text)
	except ContentParseError as e:
		raise click.ClickException(f"Error displaying {content_type}: {e.message}. Please try generating again with --force.")


def main() -> None:
	cli()


if __name__ == "__main__":
	main()
