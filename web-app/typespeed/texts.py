import logging
import random
import threading
from typing import List, Optional, Protocol, Sequence

import google.generativeai as genai

from typespeed.config import Settings


DEFAULT_CORPUS = (
    "The quick brown fox jumps over the lazy dog while the wind blows softly through the quiet evening forest.",
    "Typing fast requires focus, rhythm, and regular practice. Start slow, stay accurate, and your speed will naturally improve over time.",
    "Every mistake is a lesson. Keep your hands relaxed, eyes on the screen, and trust your muscle memory.",
    "Technology changes quickly, but good typing skills remain useful for work, study, and everyday communication.",
    "Consistency matters more than talent. Ten minutes of daily typing can bring better results than long sessions once a week.",
    "In 2024, I practiced typing for 15 minutes a day and increased my speed from 42 to 68 words per minute.",
    "The meeting starts at 9:30, ends at 11:45, and includes 3 main topics and 12 action items.",
    "She bought 2 monitors, 1 keyboard, and 5 cables for $120, saving 20% during the sale.",
    "Version 3.1.4 was released after 27 tests, 8 bug fixes, and 0 critical errors.",
    "Room 404 is on floor 7, code 9832 opens the door, and the timer locks it again after 60 seconds.",
)

GEMINI_PROMPT = (
    "Write one English sentence of 15 to 25 words for a typing speed exercise. "
    "Mix common words with a few numbers and punctuation marks. "
    "Do not use quotes, markdown or line breaks. "
    "Return only the sentence."
)


class TextSource(Protocol):
    def next(self) -> str: ...


class FixedTextSource(TextSource):
    def __init__(self, phrase: str):
        if not phrase:
            raise ValueError("phrase must not be empty")
        self.phrase = phrase

    def next(self) -> str:
        return self.phrase


class RandomTextSource(TextSource):
    """
    Uniform pick from a fixed corpus.

    The generator can be injected so tests get a deterministic sequence. One
    instance may be shared by every connection: calls are serialized by a lock.
    """

    def __init__(self, corpus: Sequence[str] = DEFAULT_CORPUS, rng: Optional[random.Random] = None):
        if not corpus:
            raise ValueError("corpus must contain at least one phrase")
        if any(not phrase for phrase in corpus):
            raise ValueError("corpus must not contain empty phrases")
        self.corpus: List[str] = list(corpus)
        self._rng = rng if rng is not None else random.Random()
        self._lock = threading.Lock()

    def next(self) -> str:
        with self._lock:
            return self._rng.choice(self.corpus)


class GeminiTextSource(TextSource):
    def __init__(self, model, fallback: TextSource):
        self.model = model
        self.fallback = fallback

    @classmethod
    def from_api_key(cls, api_key: str, model_name: str, fallback: TextSource) -> "GeminiTextSource":
        genai.configure(api_key=api_key)
        return cls(genai.GenerativeModel(model_name), fallback)

    def next(self) -> str:
        try:
            response = self.model.generate_content(GEMINI_PROMPT)
            text = " ".join((response.text or "").split())
        except Exception as exc:
            logging.warning("Gemini API error: %s - using the local corpus", exc)
            return self.fallback.next()

        if not text:
            logging.warning("Gemini returned an empty phrase - using the local corpus")
            return self.fallback.next()
        return text


def build_text_source(settings: Settings, rng: Optional[random.Random] = None) -> TextSource:
    if settings.phrase:
        return FixedTextSource(settings.phrase)

    corpus_source = RandomTextSource(DEFAULT_CORPUS, rng=rng)
    if settings.use_gemini:
        if settings.google_api_key:
            logging.info("Using Gemini model %s for practice phrases", settings.gemini_model)
            return GeminiTextSource.from_api_key(settings.google_api_key, settings.gemini_model, corpus_source)
        logging.warning("GOOGLE_API_KEY not found. Gemini phrases disabled, add `GOOGLE_API_KEY` to your .env file.")
    return corpus_source
