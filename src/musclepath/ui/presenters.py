from __future__ import annotations

from collections.abc import Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..core.models import Node, NodeState, Section
from ..core.scoring import ScoreSnapshot

_STATE_STYLE = {
    NodeState.LOCKED: "dim",
    NodeState.AVAILABLE: "bold orange1",
    NodeState.COMPLETED: "green",
}


class MapPresenter:
    """Render the skill map and score header to a terminal."""

    def __init__(self, *, no_color: bool = False, console: Console | None = None):
        if console is not None:
            self.console = console
        elif no_color:
            self.console = Console(force_terminal=False, color_system=None)
        else:
            self.console = Console(force_terminal=True, color_system="auto")

    def show_score(self, score: ScoreSnapshot) -> None:
        header = Table.grid(padding=(0, 2))
        header.add_column(justify="left")
        header.add_column(justify="left")
        header.add_column(justify="left")
        header.add_row(
            f"[bold]Streak[/] {score.streak}",
            f"[bold orange1]Lives[/] {score.lives}",
            f"[bold]XP[/] {score.xp}",
        )
        self.console.print(header)
        self.console.print()

    def show_map(self, sections: Sequence[Section]) -> None:
        for section in sections:
            for unit in section.units:
                table = Table(box=box.SIMPLE_HEAVY, show_edge=False, expand=False)
                table.add_column("#", justify="right", style="dim")
                table.add_column("Node", justify="right")
                table.add_column("Kind")
                table.add_column("Exercise")
                table.add_column("State")
                table.add_column("Stars", justify="right")
                for position, node in enumerate(unit.nodes, start=1):
                    table.add_row(*self._node_row(position, node))
                self.console.print(
                    Panel(
                        table,
                        title=escape(f"{unit.info.label}: {unit.info.title}"),
                        title_align="left",
                        border_style="orange1",
                        expand=False,
                    )
                )

    @staticmethod
    def _node_row(position: int, node: Node) -> tuple[str, ...]:
        style = _STATE_STYLE[node.state]
        if node.exercise is None:
            exercise = "[dim]-[/]"
        else:
            tags = escape(", ".join(node.exercise.categories))
            title = escape(node.exercise.title)
            exercise = f"{title} [dim]({tags})[/]" if tags else title
        stars = "*" * node.stars if node.stars else ""
        return (
            str(position),
            str(node.id),
            node.kind.value,
            exercise,
            f"[{style}]{node.state.value}[/]",
            stars,
        )
