"""
Keyguard Console Interface
===========================

Thin layer over :class:`rich.console.Console` so every command shares one
theme, banner, section rule, status-line format and table style.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Sequence

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.status import Status
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

KEYGUARD_THEME = Theme(
    {
        "keyguard.banner": "bold bright_cyan",
        "keyguard.section": "bold bright_magenta",
        "keyguard.success": "bold green",
        "keyguard.error": "bold red",
        "keyguard.info": "bold bright_blue",
        "keyguard.dim": "dim white",
        "keyguard.highlight": "bold bright_white",
        # hackability risk levels
        "keyguard.critical": "bold white on red",
        "keyguard.high": "bold red",
        "keyguard.medium": "bold yellow",
        "keyguard.low": "bold green",
    }
)

_LOGO = r"""
  _  __                                       _
 | |/ /___ _   _  __ _ _   _  __ _ _ __ __| |
 | ' // _ \ | | |/ _` | | | |/ _` | '__/ _` |
 | . \  __/ |_| | (_| | |_| | (_| | | | (_| |
 |_|\_\___|\__, |\__, |\__,_|\__,_|_|  \__,_|
           |___/ |___/
"""

_TAGLINE = "Password Strength & Attack Resistance Analyzer"


class KeyguardConsole:
    """Themed console shared by the CLI and the output renderers.

    Usage::

        con = KeyguardConsole()
        con.banner()
        con.section("Password Analysis")
        con.success("JSON report saved to: report.json")

    Args:
        quiet:  Drop everything printed (library and test use).
        record: Keep a copy of the output for ``export_text`` / ``export_html``.
    """

    def __init__(self, *, quiet: bool = False, record: bool = False) -> None:
        self._console = Console(
            theme=KEYGUARD_THEME, quiet=quiet, record=record, highlight=False
        )

    @property
    def rich(self) -> Console:
        return self._console

    def banner(self, version: str = "1.0.0") -> None:
        art = Text(_LOGO, style="keyguard.banner")
        art.append(f"\n{_TAGLINE}\n", style="keyguard.highlight")
        art.append(f"Version: {version}", style="keyguard.dim")
        self._console.print(
            Panel(Align.center(art), border_style="bright_cyan", padding=(1, 2))
        )

    def section(self, title: str) -> None:
        self._console.rule(f"  {title}  ", style="keyguard.section")
        self._console.print()

    # ------------------------------------------------------------------ #
    #  Status lines
    # ------------------------------------------------------------------ #

    def _status_line(self, style: str, tag: str, message: str) -> None:
        self._console.print(f"[{style}]{tag}[/{style}] {message}")

    def success(self, message: str) -> None:
        self._status_line("keyguard.success", "[✔] SUCCESS:", message)

    def error(self, message: str) -> None:
        self._status_line("keyguard.error", "[✘] ERROR:", message)

    def info(self, message: str) -> None:
        self._status_line("keyguard.info", "[ℹ] INFO:", message)

    # ------------------------------------------------------------------ #
    #  Tables & spinners
    # ------------------------------------------------------------------ #

    def table(
        self,
        title: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        *,
        styles: Sequence[str] = (),
    ) -> None:
        """Print *rows* under *columns*; cells are passed through ``str``.

        *styles* gives a Rich style per column, positionally; missing
        entries leave the column unstyled.
        """
        tbl = Table(
            title=title,
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            show_lines=True,
        )
        for idx, name in enumerate(columns):
            tbl.add_column(name, style=styles[idx] if idx < len(styles) else "")
        for row in rows:
            tbl.add_row(*map(str, row))
        self._console.print(tbl)

    @contextmanager
    def status(self, message: str) -> Iterator[Status]:
        """Spinner shown while the block runs."""
        with self._console.status(
            f"[keyguard.info]{message}[/keyguard.info]", spinner="dots"
        ) as spinner:
            yield spinner
