"""Tests for the generated content store."""

import asyncio
import json

import pytest

from studyaid.errors import GenerationError, GenerationInProgress, InvalidContentType
from studyaid.prompts import ContentType
from studyaid.storage import MemoryStorage
from studyaid.store import STORAGE_KEY, ContentKey, GeneratedContentStore, group_by_module


class FakeGenerator:
	def __init__(self, result="generated", error=None):
		self.result = result
		self.error = error
		self.calls = []

	async def __call__(self, module_id, content_type, source):
		self.calls.append((module_id, content_type, source))
		if self.error is not None:
			raise self.error
		return self.result


class TestContentKey:
	def test_serialize(self):
		assert ContentKey.of(101, "summary").serialize() == "101-summary"

	def test_parse_uses_last_separator(self):
		key = ContentKey.parse("week-1-quiz-flashcards")
		assert key == ContentKey("week-1-quiz", ContentType.FLASHCARDS)

	def test_hyphenated_module_ids_do_not_collide(self):
		a = ContentKey.of("a-quiz", "summary")
		b = ContentKey.of("a", "quiz")
		assert a.serialize() != b.serialize()
		assert ContentKey.parse(a.serialize()) == a
		assert ContentKey.parse(b.serialize()) == b

	def test_parse_rejects_unknown_suffix(self):
		with pytest.raises(InvalidContentType):
			ContentKey.parse("101-translation")

	def test_parse_rejects_missing_module(self):
		with pytest.raises(ValueError):
			ContentKey.parse("summary")


class TestGeneratedContentStore:
	@pytest.mark.asyncio
	async def test_generate_stores_result(self):
		generator = FakeGenerator(result="## Summary\n...")
		store = GeneratedContentStore(generator)

		text = await store.generate("101", "summary", "Lecture notes...")

		assert text == "## Summary\n..."
		assert store.get("101", "summary") == "## Summary\n..."
		assert store.is_loading("101", "summary") is False
		assert generator.calls == [("101", ContentType.SUMMARY, "Lecture notes...")]

	def test_unknown_keys_are_absent(self):
		store = GeneratedContentStore(FakeGenerator())
		assert store.get("404", "quiz") is None
		assert store.is_loading("404", "quiz") is False

	def test_get_with_unrecognized_type_is_absent(self):
		store = GeneratedContentStore(FakeGenerator())
		assert store.get("101", "translation") is None
		assert store.is_loading("101", "translation") is False

	@pytest.mark.asyncio
	async def test_unrecognized_type_rejected_before_generation(self):
		generator = FakeGenerator()
		store = GeneratedContentStore(generator)

		with pytest.raises(InvalidContentType) as exc_info:
			await store.generate("101", "translation", "text")

		assert exc_info.value.status_code == 400
		assert generator.calls == []

	@pytest.mark.asyncio
	async def test_failure_keeps_previous_entry(self):
		generator = FakeGenerator(result="first")
		store = GeneratedContentStore(generator)
		await store.generate("7", "quiz", "notes")

		generator.error = GenerationError("upstream down")
		with pytest.raises(GenerationError):
			await store.generate("7", "quiz", "notes")

		assert store.get("7", "quiz") == "first"
		assert store.is_loading("7", "quiz") is False

	@pytest.mark.asyncio
	async def test_failure_on_fresh_key_leaves_it_absent(self):
		store = GeneratedContentStore(FakeGenerator(error=RuntimeError("boom")))
		with pytest.raises(RuntimeError):
			await store.generate("7", "summary", "notes")
		assert store.get("7", "summary") is None
		assert store.is_loading("7", "summary") is False

	@pytest.mark.asyncio
	async def test_regeneration_overwrites(self):
		generator = FakeGenerator(result="v1")
		store = GeneratedContentStore(generator)
		await store.generate("7", "summary", "notes")
		generator.result = "v2"
		await store.generate("7", "summary", "notes")

		assert store.get("7", "summary") == "v2"
		assert store.get_all() == {"7-summary": "v2"}

	@pytest.mark.asyncio
	async def test_loading_flag_during_generation(self):
		release = asyncio.Event()
		seen = []

		async def slow_generator(module_id, content_type, source):
			seen.append(store.is_loading(module_id, content_type))
			await release.wait()
			return "done"

		store = GeneratedContentStore(slow_generator)
		task = asyncio.create_task(store.generate("9", "flashcards", "notes"))
		await asyncio.sleep(0)

		assert store.is_loading("9", "flashcards") is True
		assert store.is_loading("9", "quiz") is False
		release.set()
		await task

		assert seen == [True]
		assert store.is_loading("9", "flashcards") is False

	@pytest.mark.asyncio
	async def test_concurrent_generate_for_same_key_is_rejected(self):
		release = asyncio.Event()
		calls = []

		async def slow_generator(module_id, content_type, source):
			calls.append(source)
			await release.wait()
			return source

		store = GeneratedContentStore(slow_generator)
		first = asyncio.create_task(store.generate("9", "quiz", "first"))
		await asyncio.sleep(0)

		with pytest.raises(GenerationInProgress) as exc_info:
			await store.generate("9", "quiz", "second")
		assert exc_info.value.status_code == 409
		assert store.is_loading("9", "quiz") is True

		release.set()
		assert await first == "first"
		assert calls == ["first"]
		assert store.get("9", "quiz") == "first"

	@pytest.mark.asyncio
	async def test_get_all_returns_snapshot(self):
		store = GeneratedContentStore(FakeGenerator(result="text"))
		await store.generate("1", "summary", "notes")

		snapshot = store.get_all()
		snapshot["1-summary"] = "tampered"
		snapshot["2-quiz"] = "injected"

		assert store.get("1", "summary") == "text"
		assert store.get("2", "quiz") is None
		assert store.get_all() == {"1-summary": "text"}


class TestPersistence:
	@pytest.mark.asyncio
	async def test_every_success_rewrites_the_record(self):
		storage = MemoryStorage()
		generator = FakeGenerator(result="a")
		store = GeneratedContentStore(generator, storage)

		await store.generate("1", "summary", "x")
		assert json.loads(storage.get_item(STORAGE_KEY)) == {"1-summary": "a"}

		generator.result = "b"
		await store.generate("2", "quiz", "y")
		assert json.loads(storage.get_item(STORAGE_KEY)) == {"1-summary": "a", "2-quiz": "b"}

	@pytest.mark.asyncio
	async def test_round_trip_into_fresh_store(self):
		storage = MemoryStorage()
		generator = FakeGenerator(result="cards")
		store = GeneratedContentStore(generator, storage)
		await store.generate("mod-1", "flashcards", "x")
		generator.result = "summary"
		await store.generate("mod-1", "summary", "x")

		reloaded = GeneratedContentStore(FakeGenerator(), storage)

		assert reloaded.get_all() == store.get_all()
		assert reloaded.get("mod-1", "flashcards") == "cards"

	@pytest.mark.asyncio
	async def test_failed_generation_does_not_write(self):
		storage = MemoryStorage()
		store = GeneratedContentStore(FakeGenerator(error=RuntimeError("x")), storage)
		with pytest.raises(RuntimeError):
			await store.generate("1", "summary", "x")
		assert storage.get_item(STORAGE_KEY) is None

	@pytest.mark.asyncio
	async def test_storage_failure_leaves_memory_and_record_unchanged(self):
		class BrokenStorage(MemoryStorage):
			def set_item(self, key, value):
				raise OSError("disk full")

		storage = BrokenStorage({STORAGE_KEY: json.dumps({"101-quiz": "old quiz"})})
		store = GeneratedContentStore(FakeGenerator(result="new text"), storage)

		with pytest.raises(OSError):
			await store.generate("101", "summary", "notes")
		with pytest.raises(OSError):
			await store.generate("101", "quiz", "notes")

		assert store.get("101", "summary") is None
		assert store.get("101", "quiz") == "old quiz"
		assert store.is_loading("101", "summary") is False
		assert json.loads(storage.get_item(STORAGE_KEY)) == {"101-quiz": "old quiz"}

	def test_loads_existing_record(self):
		storage = MemoryStorage({STORAGE_KEY: json.dumps({"101-summary": "s", "101-quiz": "q"})})
		store = GeneratedContentStore(FakeGenerator(), storage)
		assert store.get("101", "summary") == "s"
		assert store.get("101", "quiz") == "q"

	def test_skips_unrecognized_records(self):
		storage = MemoryStorage({STORAGE_KEY: json.dumps({"101-translation": "t", "101-summary": "s", "bad": "x"})})
		store = GeneratedContentStore(FakeGenerator(), storage)
		assert store.get_all() == {"101-summary": "s"}

	def test_corrupt_record_starts_empty(self):
		storage = MemoryStorage({STORAGE_KEY: "{not json"})
		store = GeneratedContentStore(FakeGenerator(), storage)
		assert store.get_all() == {}

	def test_custom_storage_key(self):
		storage = MemoryStorage({"other": json.dumps({"1-quiz": "q"})})
		assert GeneratedContentStore(FakeGenerator(), storage).get_all() == {}
		assert GeneratedContentStore(FakeGenerator(), storage, storage_key="other").get_all() == {"1-quiz": "q"}


class TestSubscriptions:
	@pytest.mark.asyncio
	async def test_listener_sees_start_and_settle(self):
		store = GeneratedContentStore(FakeGenerator(result="text"))
		events = []
		store.subscribe(lambda key: events.append((key.serialize(), store.is_loading(*key), store.get(*key))))

		await store.generate("5", "summary", "notes")

		assert events == [("5-summary", True, None), ("5-summary", False, "text")]

	@pytest.mark.asyncio
	async def test_listener_notified_on_failure(self):
		store = GeneratedContentStore(FakeGenerator(error=RuntimeError("x")))
		events = []
		store.subscribe(lambda key: events.append(store.is_loading(*key)))
		with pytest.raises(RuntimeError):
			await store.generate("5", "summary", "notes")
		assert events == [True, False]

	@pytest.mark.asyncio
	async def test_unsubscribe(self):
		store = GeneratedContentStore(FakeGenerator())
		events = []
		unsubscribe = store.subscribe(events.append)
		unsubscribe()
		unsubscribe()
		await store.generate("5", "summary", "notes")
		assert events == []

	@pytest.mark.asyncio
	async def test_failing_listener_does_not_break_generation(self):
		store = GeneratedContentStore(FakeGenerator(result="ok"))

		def broken(key):
			raise RuntimeError("listener bug")

		store.subscribe(broken)
		assert await store.generate("5", "summary", "notes") == "ok"
		assert store.is_loading("5", "summary") is False


def test_group_by_module():
	grouped = group_by_module({
		"101-summary": "s",
		"101-quiz": "q",
		"week-2-flashcards": "f",
		"junk": "x",
	})
	assert grouped == {
		"101": {"summary": "s", "quiz": "q"},
		"week-2": {"flashcards": "f"},
	}
