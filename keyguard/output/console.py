"""
Keyguard Console Output
========================

Rich-based renderers for analysis results: a 0-4 strength meter, the
crack-time table ranked by seconds, detected patterns, attack-resistance
bars, the hackability panel, suggestions and passphrases.

Uses the shared console infrastructure for consistent styling. All
user-derived text is escaped before it reaches Rich markup.

References:
    - Rich Library Documentation. https://rich.readthedocs.io/
"""

from __future__ import annotations

from typing import Optional, Sequence

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from shared.console import KeyguardConsole

from keyguard.analyzers.passphrase import calculate_passphrase_strength
from keyguard.core.models import (
    EnhancementResult,
    HistoryRecord,
    MemorablePassphrase,
    PasswordAnalysis,
)
from keyguard.output.report import SCORE_LABELS, mask_password


# ===================================================================== #
#  Colour Maps
# ===================================================================== #

_SCORE_STYLES: tuple[str, ...] = (
    "bold white on red",
    "bold red",
    "bold yellow",
    "bold green",
    "bold bright_green",
)

_RISK_STYLES: dict[str, str] = {
    "critical": "keyguard.critical",
    "high": "keyguard.high",
    "medium": "keyguard.medium",
    "low": "keyguard.low",
}


class KeyguardConsoleOutput:
    """Console output formatters for Keyguard results.

    Usage::

        output = KeyguardConsoleOutput(KeyguardConsole())
        output.display_analysis(analysis)
    """

    def __init__(self, console: Optional[KeyguardConsole] = None) -> None:
        self.console = console or KeyguardConsole()
        self._rich = self.console.rich

    # ------------------------------------------------------------------ #
    #  Analysis
    # ------------------------------------------------------------------ #

    def display_analysis(self, analysis: PasswordAnalysis) -> None:
        """Render every facet of *analysis*."""
        self.console.section("Password Analysis")
        self._strength_meter(analysis.score)
        self._details(analysis)
        self._crack_times(analysis)
        self._patterns(analysis)
        self._resistance(analysis)
        self._hackability(analysis)
        self._bullets("Suggestions", analysis.suggestions)
        self._bullets("Passphrase Alternatives", analysis.passphrase_suggestions)

    def _strength_meter(self, score: int) -> None:
        style = _SCORE_STYLES[score]
        meter = Text()
        meter.append("Score: ", style="bold")
        meter.append(f"{score}/4  ")
        for i in range(4):
            meter.append("████ " if i < score else "░░░░ ",
                         style=style if i < score else "dim")
        meter.append(f" {SCORE_LABELS[score].upper()}", style=style)
        self._rich.print(Panel(meter, title="Strength Meter", border_style="cyan"))

    def _details(self, analysis: PasswordAnalysis) -> None:
        tbl = Table(
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            show_lines=True,
        )
        tbl.add_column("Property", style="bold")
        tbl.add_column("Value")

        tbl.add_row("Password", escape(mask_password(analysis.ai_enhanced.original_password)))
        tbl.add_row("Length", str(analysis.length))
        tbl.add_row("Entropy", f"{analysis.entropy:.2f} bits")
        tbl.add_row("Uppercase", _yes_no(analysis.has_upper))
        tbl.add_row("Lowercase", _yes_no(analysis.has_lower))
        tbl.add_row("Digits", _yes_no(analysis.has_digit))
        tbl.add_row("Special", _yes_no(analysis.has_special))
        tbl.add_row("Leaked password", _yes_no(analysis.is_common))
        for label, value in analysis.time_to_crack.items():
            tbl.add_row(label, escape(value))
        self._rich.print(tbl)

    def _crack_times(self, analysis: PasswordAnalysis) -> None:
        ranked = sorted(
            analysis.crack_time_estimates.items(), key=lambda kv: kv[1].time_in_seconds
        )
        self.console.table(
            "Crack Time Estimates",
            ["Scenario", "Hashes / second", "Estimated Time"],
            [
                (label, f"{est.hashes_per_second:,.0f}", est.time_to_break)
                for label, est in ranked
            ],
            styles=["bold", "", ""],
        )

    def _patterns(self, analysis: PasswordAnalysis) -> None:
        if not analysis.ml_patterns and not analysis.common_patterns:
            return
        self._rich.print()
        self._rich.print("[bold]Patterns Detected:[/bold]")
        for pattern in analysis.ml_patterns:
            start, end = pattern.position
            self._rich.print(
                f"  [yellow]⚠[/yellow] {escape(f'[{pattern.type.value}]')} "
                f"{escape(pattern.description)} at {start}-{end} "
                f"({pattern.confidence:.0%} confidence)"
            )
        for label in analysis.common_patterns:
            self._rich.print(f"  [yellow]⚠[/yellow] {escape(label)}")

    def _resistance(self, analysis: PasswordAnalysis) -> None:
        res = analysis.attack_resistance
        tbl = Table(
            title="Attack Resistance",
            border_style="bright_cyan",
            header_style="bold bright_magenta",
        )
        tbl.add_column("Attack", style="bold")
        tbl.add_column("Resistance", width=30)
        tbl.add_column("Score", justify="right")
        for name, value in (
            ("Brute force", res.brute_force),
            ("Dictionary", res.dictionary),
            ("Pattern-based", res.pattern_based),
            ("AI-assisted", res.ai_attack),
            ("Overall", res.overall),
        ):
            tbl.add_row(name, _bar(value), f"{value}/100")
        self._rich.print(tbl)

    def _hackability(self, analysis: PasswordAnalysis) -> None:
        hack = analysis.hackability_score
        risk = hack.risk_level.value
        body = Text()
        body.append("Score: ", style="bold")
        body.append(f"{hack.score}/100  ")
        body.append(risk.upper(), style=_RISK_STYLES[risk])
        body.append("\nTime to hack: ", style="bold")
        body.append(hack.time_to_hack)
        for reason in hack.reasoning:
            body.append(f"\n  • {reason}")
        self._rich.print(Panel(body, title="Hackability", border_style="cyan"))

    def _bullets(self, title: str, items: Sequence[str]) -> None:
        if not items:
            return
        self._rich.print()
        self._rich.print(f"[bold]{title}:[/bold]")
        for item in items:
            self._rich.print(f"  [bright_cyan]•[/bright_cyan] {escape(item)}")

    # ------------------------------------------------------------------ #
    #  Rewriter / Passphrases
    # ------------------------------------------------------------------ #

    def display_enhancement(self, result: EnhancementResult) -> None:
        self.console.section("Enhanced Password")
        self._rich.print(
            Panel(
                Text(result.enhanced_password, style="keyguard.highlight"),
                title="Stronger Variant",
                border_style="cyan",
            )
        )
        self._bullets("Changes", result.improvements)
        self._rich.print(
            f"\n[bold]Estimated entropy gain:[/bold] +{result.strength_increase:.0f} bits"
        )

    def display_passphrases(self, phrases: Sequence[str]) -> None:
        self.console.section("Passphrases")
        self.console.table(
            "Generated Passphrases",
            ["#", "Passphrase", "Est. Strength"],
            [
                (i, escape(p), f"~{calculate_passphrase_strength(p)} bits")
                for i, p in enumerate(phrases, 1)
            ],
            styles=["dim", "keyguard.highlight", ""],
        )

    def display_memorable(self, items: Sequence[MemorablePassphrase]) -> None:
        self.console.section("Memorable Passphrases")
        self.console.table(
            "Passphrases with Hints",
            ["Passphrase", "Hint", "Est. Strength"],
            [
                (
                    escape(item.passphrase),
                    escape(item.hint),
                    f"~{calculate_passphrase_strength(item.passphrase)} bits",
                )
                for item in items
            ],
            styles=["keyguard.highlight", "", ""],
        )

    # ------------------------------------------------------------------ #
    #  Collaborators
    # ------------------------------------------------------------------ #

    def display_chat_reply(self, reply: str) -> None:
        self._rich.print(Panel(Text(reply), title="Assistant", border_style="cyan"))

    def display_history(self, records: Sequence[HistoryRecord]) -> None:
        self.console.section("Analysis History")
        if not records:
            self.console.info("No saved analyses.")
            return
        self.console.table(
            "Saved Analyses",
            ["ID", "Saved", "Score", "Length", "Entropy", "Leaked", "Hash"],
            [
                (
                    r.id if r.id is not None else "-",
                    r.created_at.strftime("%Y-%m-%d %H:%M") if r.created_at else "-",
                    f"{r.score}/4",
                    r.length,
                    f"{r.entropy:.1f}",
                    _yes_no(r.is_common),
                    r.password_hash[:12] + "…",
                )
                for r in records
            ],
        )


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def _bar(value: int, width: int = 25) -> str:
    filled = max(0, min(width, round(value / 100 * width)))
    colour = "red" if value < 40 else "yellow" if value < 70 else "green"
    return f"[{colour}]{'█' * filled}[/{colour}][dim]{'░' * (width - filled)}[/dim]"
