"""Unit tests for practice phrase sources."""

import random
import threading
from types import SimpleNamespace
from unittest import mock

import pytest

from typespeed import texts
from typespeed.config import Settings
from typespeed.texts import (
    DEFAULT_CORPUS,
    FixedTextSource,
    GeminiTextSource,
    RandomTextSource,
    build_text_source,
)


class FakeModel:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.prompts = []

    def generate_content(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


class TestFixedTextSource:
    """Tests for the constant phrase source."""

    def test_returns_same_phrase(self) -> None:
        source = FixedTextSource("cat")
        assert [source.next() for _ in range(3)] == ["cat", "cat", "cat"]

    def test_empty_phrase_rejected(self) -> None:
        with pytest.raises(ValueError):
            FixedTextSource("")


class TestRandomTextSource:
    """Tests for the corpus source."""

    def test_default_corpus(self) -> None:
        assert len(DEFAULT_CORPUS) == 10
        assert all(DEFAULT_CORPUS)

    def test_picks_from_corpus(self) -> None:
        source = RandomTextSource()
        for _ in range(20):
            assert source.next() in DEFAULT_CORPUS

    def test_seeded_generator_is_deterministic(self) -> None:
        first = RandomTextSource(DEFAULT_CORPUS, rng=random.Random(42))
        second = RandomTextSource(DEFAULT_CORPUS, rng=random.Random(42))
        assert [first.next() for _ in range(10)] == [second.next() for _ in range(10)]

    def test_single_item_corpus(self) -> None:
        source = RandomTextSource(["only one"])
        assert source.next() == "only one"

    def test_empty_corpus_rejected(self) -> None:
        with pytest.raises(ValueError):
            RandomTextSource([])

    def test_empty_phrase_in_corpus_rejected(self) -> None:
        with pytest.raises(ValueError):
            RandomTextSource(["fine", ""])

    def test_shared_between_threads(self) -> None:
        source = RandomTextSource(["a", "b", "c"], rng=random.Random(7))
        results = []

        def worker() -> None:
            for _ in range(200):
                results.append(source.next())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(results) == 1600
        assert set(results) <= {"a", "b", "c"}


class TestGeminiTextSource:
    """Tests for the Gemini backed source and its fallback."""

    def test_uses_model_response(self) -> None:
        model = FakeModel(text="  Pack my box\nwith five dozen liquor jugs.  ")
        source = GeminiTextSource(model, FixedTextSource("fallback"))
        assert source.next() == "Pack my box with five dozen liquor jugs."
        assert model.prompts == [texts.GEMINI_PROMPT]

    def test_falls_back_on_error(self) -> None:
        source = GeminiTextSource(FakeModel(error=RuntimeError("quota")), FixedTextSource("fallback"))
        assert source.next() == "fallback"

    def test_fallback_only_needs_next(self) -> None:
        """Any object with a next() method satisfies the source contract."""

        class Countdown:
            def __init__(self) -> None:
                self.calls = 0

            def next(self) -> str:
                self.calls += 1
                return f"phrase {self.calls}"

        fallback = Countdown()
        source = GeminiTextSource(FakeModel(error=RuntimeError("offline")), fallback)
        assert source.next() == "phrase 1"
        assert source.next() == "phrase 2"
        assert fallback.calls == 2

    @pytest.mark.parametrize("answer", ["", "   \n ", None])
    def test_falls_back_on_blank_answer(self, answer) -> None:
        source = GeminiTextSource(FakeModel(text=answer), FixedTextSource("fallback"))
        assert source.next() == "fallback"


class TestBuildTextSource:
    """Tests for choosing a source from settings."""

    def test_fixed_phrase_wins(self) -> None:
        source = build_text_source(Settings(phrase="cat", use_gemini=True, google_api_key="key"))
        assert isinstance(source, FixedTextSource)
        assert source.next() == "cat"

    def test_default_is_corpus(self) -> None:
        assert isinstance(build_text_source(Settings()), RandomTextSource)

    def test_gemini_without_key_uses_corpus(self) -> None:
        assert isinstance(build_text_source(Settings(use_gemini=True)), RandomTextSource)

    def test_gemini_with_key(self) -> None:
        with mock.patch.object(texts, "genai") as genai:
            source = build_text_source(Settings(use_gemini=True, google_api_key="key", gemini_model="m"))

        genai.configure.assert_called_once_with(api_key="key")
        genai.GenerativeModel.assert_called_once_with("m")
        assert isinstance(source, GeminiTextSource)
        assert isinstance(source.fallback, RandomTextSource)
