from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table as RichTable

from ..core.models import Player, SettlementResult, Table


def _money(amount: Decimal) -> str:
    return f"{amount:.2f}"


def _signed(amount: Decimal) -> str:
    if amount < 0:
        return f"[red]pays {_money(-amount)}[/]"
    if amount > 0:
        return f"[green]receives {_money(amount)}[/]"
    return _money(amount)


class RichPresenter:
    def __init__(self, *, no_color: bool = False, console: Console | None = None):
        if console is not None:
            self.console = console
        elif no_color:
            self.console = Console(force_terminal=False, color_system=None)
        else:
            self.console = Console(force_terminal=True, color_system="auto")

    def show_tables(self, tables: Sequence[Table], players: Mapping[str, Player], *, seed: int | None = None) -> None:
        if not tables:
            self.console.print("No players to seat.")
            return
        title = "Table draw" if seed is None else f"Table draw (seed {seed})"
        self.console.print(Panel(f"{len(tables)} table(s), {sum(len(t) for t in tables)} players", title=title))
        for table in tables:
            grid = RichTable(title=f"Table {table.table_id}", box=box.SIMPLE_HEAVY)
            grid.add_column("Seat", justify="right")
            grid.add_column("Player")
            for index, player_id in enumerate(table.players):
                player = players.get(player_id)
                name = player.name if player else player_id
                if player and player.priority:
                    name = f"[bold]{name}[/] (dealer)"
                grid.add_row(str(index + 1), name)
            self.console.print(grid)

    def show_settlement(
        self,
        result: SettlementResult,
        names: Mapping[str, str],
        scores: Mapping[str, float],
        ranks: Mapping[str, int | None],
    ) -> None:
        summary = (
            f"Gross: {_money(result.gross_total)}\n"
            f"Admin tax: {_money(result.admin_tax)} (rounding {_money(result.rounding_adjustment)})\n"
            f"Main event pot: {_money(result.main_event_pot)}\n"
            f"Prizes: {_money(result.prizes.first)} / {_money(result.prizes.second)} / {_money(result.prizes.third)}"
        )
        self.console.print(Panel(summary, title="Settlement", border_style="cyan", expand=False))

        grid = RichTable(box=box.SIMPLE_HEAVY)
        grid.add_column("Player")
        grid.add_column("Rank", justify="right")
        grid.add_column("Points", justify="right")
        grid.add_column("Paid", justify="right")
        grid.add_column("Prize", justify="right")
        grid.add_column("BBQ", justify="right")
        grid.add_column("Balance")
        for balance in result.balances:
            rank = ranks.get(balance.player_id)
            grid.add_row(
                names.get(balance.player_id, balance.player_id),
                "-" if rank is None else str(rank),
                f"{scores.get(balance.player_id, 0.0):.2f}",
                _money(balance.total_paid),
                _money(balance.prize_received),
                _money(balance.bbq_share),
                _signed(balance.net_balance),
            )
        self.console.print(grid)
