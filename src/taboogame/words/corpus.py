"""Corpus loading — JSON word lists validated against schema.json."""

from __future__ import annotations

import json
from pathlib import Path

import jsonschema

from taboogame.core.errors import ConfigurationError
from taboogame.core.schemas import load_schema
from taboogame.words.engine import WordCard

_PACKAGE_DIR = Path(__file__).parent
_SCHEMA_PATH = _PACKAGE_DIR / "schema.json"
DEFAULT_CORPUS_PATH = _PACKAGE_DIR / "default_words.json"


def parse_corpus(raw: object) -> list[WordCard]:
    """Validate decoded JSON and convert it to WordCards."""
    schema = load_schema(_SCHEMA_PATH)
    try:
        jsonschema.validate(raw, schema)
    except jsonschema.ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ConfigurationError(f"Invalid corpus at {location}: {e.message}") from e

    cards = []
    for entry in raw:
        word = entry["word"].strip()
        if not word:
            raise ConfigurationError("Corpus entry has a blank word")
        cards.append(WordCard(word=word, taboo=tuple(t.strip() for t in entry["taboo"])))
    return cards


def load_corpus(path: Path) -> list[WordCard]:
    """Load a word corpus from a JSON file."""
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Corpus file not found: {path}")
    with open(path, encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Corpus file {path} is not valid JSON: {e}") from e
    return parse_corpus(raw)


def default_corpus() -> list[WordCard]:
    """Return the sample corpus bundled with the package."""
    return load_corpus(DEFAULT_CORPUS_PATH)
