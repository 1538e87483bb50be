from typing import Optional

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from singbox_rules.tui.enums import UIStyle


class UISection:
    @staticmethod
    def wrap(title: str, body, style: str = UIStyle.BLUE.value, subtitle: Optional[str] = None) -> Panel:
        return Panel(body, title=title, subtitle=subtitle, border_style=style, padding=(0, 1))

    @staticmethod
    def note(title: str, body: str, style: str) -> Panel:
        return Panel(body, title=title, border_style=style, padding=(0, 1))

    @staticmethod
    def bullets(title: str, items: list[str], style: str) -> Panel:
        return UISection.note(title, "\n".join(f"- {escape(item)}" for item in items), style=style)

    @staticmethod
    def counts(counts: dict[str, object]) -> Table:
        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold")
        table.add_column(justify="right")
        for key, value in counts.items():
            table.add_row(key.replace("_", " "), str(value))
        return table
