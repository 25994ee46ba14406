"""Game configuration — settings dataclasses and YAML loader."""

import yaml
from dataclasses import dataclass, field
from pathlib import Path

from taboogame.core.errors import ConfigurationError
from taboogame.core.seed import check_seed

# Choices offered by the setup screen. The engine accepts any positive value.
ROUND_TIME_PRESETS = (45, 60, 90, 120)
MAX_SCORE_PRESETS = (5, 10, 15, 20, 30)

DEFAULT_ROUND_TIME_SECONDS = 60
DEFAULT_MAX_SCORE = 15
DEFAULT_SKIP_LIMIT = 3
DEFAULT_TEAM_NAMES = ("Team Fire", "Team Ice")
MAX_TEAM_NAME_LENGTH = 20


@dataclass(frozen=True)
class GameSettings:
    round_time_seconds: int = DEFAULT_ROUND_TIME_SECONDS
    max_score: int = DEFAULT_MAX_SCORE  # threshold, not a ceiling
    skip_limit: int = DEFAULT_SKIP_LIMIT

    def validate(self) -> None:
        """Raise ConfigurationError if any setting is out of range."""
        for name in ("round_time_seconds", "max_score", "skip_limit"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
        if self.round_time_seconds <= 0:
            raise ConfigurationError(
                f"round_time_seconds must be > 0, got {self.round_time_seconds}"
            )
        if self.max_score <= 0:
            raise ConfigurationError(f"max_score must be > 0, got {self.max_score}")
        if self.skip_limit < 0:
            raise ConfigurationError(f"skip_limit must be >= 0, got {self.skip_limit}")


@dataclass
class GameConfig:
    settings: GameSettings = field(default_factory=GameSettings)
    team_names: tuple[str, str] = DEFAULT_TEAM_NAMES
    seed: int | None = None
    corpus_path: Path | None = None  # None = bundled sample corpus
    log_dir: Path | None = None      # None = no JSONL game log


def normalize_team_names(names) -> tuple[str, str]:
    """Strip and check a pair of team names."""
    if isinstance(names, (str, bytes, dict)):
        raise ConfigurationError(f"Team names must be a list of two names, got {names!r}")
    try:
        names = list(names)
    except TypeError as e:
        raise ConfigurationError(f"Team names must be a list of two names, got {names!r}") from e
    if len(names) != 2:
        raise ConfigurationError(f"Exactly two team names required, got {len(names)}")
    cleaned = []
    for i, name in enumerate(names):
        if not isinstance(name, str):
            raise ConfigurationError(f"Team name {i + 1} must be a string, got {name!r}")
        name = name.strip()
        if not name:
            raise ConfigurationError(f"Team name {i + 1} is empty")
        if len(name) > MAX_TEAM_NAME_LENGTH:
            raise ConfigurationError(
                f"Team name {name!r} exceeds {MAX_TEAM_NAME_LENGTH} characters"
            )
        cleaned.append(name)
    return cleaned[0], cleaned[1]


def _section(raw: dict, name: str, path: Path) -> dict:
    value = raw.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"{path}: '{name}' must be a mapping, got {value!r}")
    return value


def _path_option(section: dict, key: str, path: Path) -> Path | None:
    value = section.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{path}: game.{key} must be a path string, got {value!r}")
    # Relative paths resolve against the config file's directory
    return path.parent / value


def load_config(path: Path) -> GameConfig:
    """Load game config from YAML file."""
    path = Path(path)
    with open(path) as f:
        try:
            raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Could not parse {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"{path}: top level must be a mapping")

    g = _section(raw, "game", path)
    s = _section(raw, "settings", path)

    settings = GameSettings(
        round_time_seconds=s.get("round_time_seconds", DEFAULT_ROUND_TIME_SECONDS),
        max_score=s.get("max_score", DEFAULT_MAX_SCORE),
        skip_limit=s.get("skip_limit", DEFAULT_SKIP_LIMIT),
    )
    settings.validate()

    team_names = normalize_team_names(raw.get("teams", DEFAULT_TEAM_NAMES))

    corpus_path = _path_option(g, "corpus", path)
    log_dir = _path_option(g, "log_dir", path)

    seed = g.get("seed")
    if seed is not None:
        check_seed(seed)

    return GameConfig(
        settings=settings,
        team_names=team_names,
        seed=seed,
        corpus_path=corpus_path,
        log_dir=log_dir,
    )
