"""CLI entry point: python -m taboogame [config.yaml]

Plays a two-team game in the terminal. The round clock runs in the
background; type c (correct), t (taboo) or s (skip) and press Enter while a
round is on.
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console

from taboogame.config import GameConfig, load_config
from taboogame.core.errors import ConfigurationError
from taboogame.core.seed import check_seed
from taboogame.display import (
    build_card_panel,
    build_final_panel,
    build_round_summary,
    build_scoreboard,
)
from taboogame.session import Phase, SessionController
from taboogame.words.corpus import default_corpus, load_corpus

_ROUND_KEYS = {
    "c": "record_correct",
    "t": "record_taboo",
    "s": "record_skip",
}


def _show_card(console: Console, controller: SessionController) -> None:
    panel = build_card_panel(controller)
    if panel is not None:
        console.print(panel)


def _play_round(console: Console, controller: SessionController) -> None:
    controller.start_round()
    _show_card(console, controller)
    while controller.phase is Phase.PLAYING:
        choice = input("(c)orrect / (t)aboo / (s)kip / (q)uit round > ").strip().lower()
        # The clock may have run out while we were waiting for input.
        if controller.phase is not Phase.PLAYING:
            break
        if choice == "q":
            controller.end_round()
            break
        method = _ROUND_KEYS.get(choice)
        if method is None:
            continue
        if not getattr(controller, method)() and choice == "s":
            console.print("No skips left.", style="yellow")
        _show_card(console, controller)
    console.print()
    console.print("Time!" if controller.time_left == 0 else "Round ended.", style="bold")
    console.print(build_round_summary(controller.history[-1]))
    console.print(build_scoreboard(controller))


def _play_game(console: Console, controller: SessionController) -> None:
    controller.begin_setup()
    controller.confirm_settings()
    s = controller.settings
    console.print(
        f"First to {s.max_score} points, {s.round_time_seconds}s rounds, "
        f"{s.skip_limit} skips per round."
    )
    while controller.phase is not Phase.GAME_OVER:
        team = controller.teams[controller.active_team]
        input(f"\nPass the device to {team.name}'s describer and press Enter... ")
        _play_round(console, controller)
        if controller.phase is Phase.POST_ROUND:
            controller.advance_turn()

    console.print(build_final_panel(controller.winner(), controller))
    if controller.game_log is not None:
        console.print(f"Game log: {controller.game_log.file_path}", style="dim")
    controller.return_home()


def _build_config(args) -> GameConfig:
    config_path = args.config or os.environ.get("TABOO_CONFIG")
    if config_path:
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigurationError(f"config file not found: {config_path}")
        config = load_config(config_path)
    else:
        config = GameConfig()

    if args.seed is not None:
        config.seed = check_seed(args.seed)
    elif os.environ.get("TABOO_SEED"):
        try:
            seed = int(os.environ["TABOO_SEED"])
        except ValueError as e:
            raise ConfigurationError(f"TABOO_SEED must be an integer: {e}") from e
        config.seed = check_seed(seed)
    if args.corpus:
        config.corpus_path = args.corpus
    if args.log_dir:
        config.log_dir = args.log_dir
    return config


def main() -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="taboogame",
        description="Two-team Taboo party game",
    )
    parser.add_argument(
        "config",
        type=Path,
        nargs="?",
        default=None,
        help="Path to game YAML config file (default: $TABOO_CONFIG)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Shuffle seed")
    parser.add_argument("--corpus", type=Path, default=None, help="Word corpus JSON file")
    parser.add_argument("--log-dir", type=Path, default=None, help="Write JSONL game logs here")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = _build_config(args)
        corpus = load_corpus(config.corpus_path) if config.corpus_path else default_corpus()
        controller = SessionController(
            corpus,
            settings=config.settings,
            team_names=config.team_names,
            seed=config.seed,
            log_dir=config.log_dir,
        )
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    console = Console()
    try:
        while True:
            _play_game(console, controller)
            again = input("\nPlay again? [y/N] ").strip().lower()
            if again != "y":
                break
    except (KeyboardInterrupt, EOFError):
        console.print()
    finally:
        controller.cancel_timer()


if __name__ == "__main__":
    main()
