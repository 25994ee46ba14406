"""Rich renderables for the terminal driver."""

from __future__ import annotations

from rich.align import Align
from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from taboogame.session import RoundResult, SessionController, Team

TEAM_COLORS = ["red", "cyan"]


def make_time_bar(time_left: int, total: int, width: int = 30) -> Text:
    """Horizontal bar showing the share of the round left."""
    filled = round(width * time_left / total) if total > 0 else 0
    color = "green" if time_left > total // 3 else "yellow" if time_left > 10 else "red"
    bar = Text()
    bar.append("█" * filled, style=color)
    bar.append("░" * (width - filled), style="dim")
    bar.append(f" {time_left:>3d}s", style=f"bold {color}")
    return bar


def build_scoreboard(controller: SessionController) -> Table:
    """Both teams with the active one marked."""
    table = Table(show_header=False, show_edge=False, pad_edge=False)
    table.add_column("marker", width=2, no_wrap=True)
    table.add_column("team", width=22, no_wrap=True)
    table.add_column("score", justify="right")
    for i, team in enumerate(controller.teams):
        marker = Text(">" if i == controller.active_team else " ", style="bold yellow")
        table.add_row(
            marker,
            Text(team.name, style=f"bold {TEAM_COLORS[i]}"),
            Text(str(team.score), style="bold"),
        )
    return table


def build_card_panel(controller: SessionController) -> Panel | None:
    """The current word, its taboo terms, the clock and skips left."""
    card = controller.current_card
    if card is None:
        return None

    word = Text(card.word.upper(), style="bold white")
    taboo = Text()
    for term in card.taboo:
        taboo.append(f"\n{term}", style="red")

    footer = Text()
    footer.append(f"Skips left: {controller.skips_remaining}", style="dim")
    footer.append("  |  ", style="dim")
    footer.append(f"Score: {controller.teams[controller.active_team].score}", style="bold")

    content = Group(
        make_time_bar(controller.time_left, controller.settings.round_time_seconds),
        Text(""),
        Align.center(word),
        Align.center(taboo),
        Text(""),
        footer,
    )
    color = TEAM_COLORS[controller.active_team]
    return Panel(content, title=f"[bold]Round {controller.round_number}[/bold]", border_style=color)


def build_round_summary(result: RoundResult) -> Text:
    text = Text()
    text.append(f"{result.team_name}", style=f"bold {TEAM_COLORS[result.team_index]}")
    text.append(f": {result.correct} correct, {result.taboo} taboo, {result.skips} skipped")
    text.append(f"  -> {result.score_after} points", style="bold")
    return text


def build_final_panel(winner: Team, controller: SessionController) -> Panel:
    """Final results panel shown when the game is over."""
    result = Text()
    result.append("\n")
    result.append(f"    {winner.name}", style="bold green")
    result.append(" WINS", style="bold green")
    scores = "  ".join(f"{t.name} {t.score}" for t in controller.teams)
    result.append(f"\n    {scores}\n", style="bold")
    result.append(f"\n    Rounds played: {controller.round_number}\n", style="dim")
    return Panel(
        Align.center(result),
        title="[bold white on red] GAME OVER [/bold white on red]",
        border_style="red",
    )
