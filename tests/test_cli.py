"""Tests for the terminal driver (python -m taboogame)."""

import argparse
import io
import json
import sys

import pytest
from rich.console import Console

from taboogame import __main__ as cli
from taboogame.core.errors import ConfigurationError
from taboogame.display import build_card_panel, build_scoreboard, make_time_bar


def _args(**overrides):
    defaults = dict(config=None, seed=None, corpus=None, log_dir=None, verbose=False)
    defaults.update(overrides)
    return argparse.Namespace(**defaults)


@pytest.fixture
def scripted_input(monkeypatch):
    """Feed a fixed list of responses to input()."""
    def install(responses):
        it = iter(responses)
        monkeypatch.setattr("builtins.input", lambda prompt="": next(it))
    return install


class TestBuildConfig:
    def test_defaults_without_config(self, monkeypatch):
        monkeypatch.delenv("TABOO_CONFIG", raising=False)
        monkeypatch.delenv("TABOO_SEED", raising=False)
        config = cli._build_config(_args())
        assert config.seed is None
        assert config.settings.max_score == 15

    def test_seed_from_environment(self, monkeypatch):
        monkeypatch.delenv("TABOO_CONFIG", raising=False)
        monkeypatch.setenv("TABOO_SEED", "17")
        assert cli._build_config(_args()).seed == 17

    def test_flag_beats_environment(self, monkeypatch):
        monkeypatch.delenv("TABOO_CONFIG", raising=False)
        monkeypatch.setenv("TABOO_SEED", "17")
        assert cli._build_config(_args(seed=3)).seed == 3

    def test_bad_seed_in_environment(self, monkeypatch):
        monkeypatch.delenv("TABOO_CONFIG", raising=False)
        monkeypatch.setenv("TABOO_SEED", "many")
        with pytest.raises(ConfigurationError):
            cli._build_config(_args())

    def test_out_of_range_seed_flag(self, monkeypatch):
        monkeypatch.delenv("TABOO_CONFIG", raising=False)
        with pytest.raises(ConfigurationError, match="between"):
            cli._build_config(_args(seed=1180591620717411303424))

    def test_out_of_range_seed_in_environment(self, monkeypatch):
        monkeypatch.delenv("TABOO_CONFIG", raising=False)
        monkeypatch.setenv("TABOO_SEED", str(2 ** 64))
        with pytest.raises(ConfigurationError, match="between"):
            cli._build_config(_args())

    def test_config_path_from_environment(self, monkeypatch, tmp_path):
        path = tmp_path / "taboo.yaml"
        path.write_text("settings:\n  max_score: 5\n")
        monkeypatch.setenv("TABOO_CONFIG", str(path))
        monkeypatch.delenv("TABOO_SEED", raising=False)
        assert cli._build_config(_args()).settings.max_score == 5

    def test_missing_config_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            cli._build_config(_args(config=tmp_path / "nope.yaml"))


class TestMain:
    def test_scripted_game(self, monkeypatch, tmp_path, scripted_input, capsys):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("TABOO_CONFIG", raising=False)
        monkeypatch.delenv("TABOO_SEED", raising=False)
        config = tmp_path / "taboo.yaml"
        config.write_text(
            "game:\n"
            "  seed: 1\n"
            "  log_dir: logs\n"
            "settings:\n"
            "  max_score: 1\n"
            "teams: [Owls, Foxes]\n"
        )
        monkeypatch.setattr(sys, "argv", ["taboogame", str(config)])
        scripted_input([
            "",    # pass the device
            "s",   # skip
            "c",   # correct -> 1 point
            "q",   # end the round
            "n",   # don't play again
        ])

        cli.main()

        out = capsys.readouterr().out
        assert "GAME OVER" in out
        assert "Owls WINS" in out
        assert "No skips left" not in out
        (log_file,) = (tmp_path / "logs").glob("*.jsonl")
        records = [json.loads(line) for line in log_file.read_text().splitlines()]
        assert records[-1]["record_type"] == "game_summary"
        assert records[-1]["winner"] == "Owls"

    def test_bad_corpus_exits(self, monkeypatch, tmp_path, capsys):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("TABOO_CONFIG", raising=False)
        corpus = tmp_path / "words.json"
        corpus.write_text("[]")
        monkeypatch.setattr(sys, "argv", ["taboogame", "--corpus", str(corpus)])
        with pytest.raises(SystemExit) as exc:
            cli.main()
        assert exc.value.code == 1
        assert "Error:" in capsys.readouterr().err


    def test_huge_seed_exits_cleanly(self, monkeypatch, tmp_path, capsys):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("TABOO_CONFIG", raising=False)
        monkeypatch.setattr(
            sys, "argv", ["taboogame", "--seed", "1180591620717411303424"]
        )
        with pytest.raises(SystemExit) as exc:
            cli.main()
        assert exc.value.code == 1
        assert "seed" in capsys.readouterr().err

    def test_malformed_config_exits_cleanly(self, monkeypatch, tmp_path, capsys):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("TABOO_CONFIG", raising=False)
        config = tmp_path / "taboo.yaml"
        config.write_text("settings: 5\n")
        monkeypatch.setattr(sys, "argv", ["taboogame", str(config)])
        with pytest.raises(SystemExit) as exc:
            cli.main()
        assert exc.value.code == 1
        assert "must be a mapping" in capsys.readouterr().err


class TestDisplay:
    def _render(self, renderable) -> str:
        console = Console(file=io.StringIO(), width=80)
        console.print(renderable)
        return console.file.getvalue()

    def test_card_panel(self, playing):
        out = self._render(build_card_panel(playing))
        card = playing.current_card
        assert card.word.upper() in out
        for term in card.taboo:
            assert term in out
        assert "Skips left: 3" in out
        assert "60s" in out

    def test_no_card_outside_round(self, controller):
        assert build_card_panel(controller) is None

    def test_scoreboard(self, playing):
        playing.record_correct()
        out = self._render(build_scoreboard(playing))
        assert "Team A" in out
        assert "Team B" in out
        assert ">" in out

    def test_time_bar_width(self):
        bar = make_time_bar(30, 60, width=20)
        assert bar.plain.count("█") == 10
        assert bar.plain.endswith(" 30s")
