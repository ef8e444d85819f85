"""
Keyguard Report Generator
==========================

Generates HTML and JSON reports from a finished password analysis.
The HTML report uses inline CSS for portability (no external assets);
the JSON report is the camelCase analysis record plus report metadata.

The analysed password itself is replaced by a masked form (first and
last character) wherever the record carries it. The suggested stronger
variant is kept verbatim in ``aiEnhanced.enhancedPassword`` and in the
suggestion that proposes it; it is derived from the analysed password
and can reveal much of it, so treat a report as sensitive.

References:
    - OWASP Password Storage Cheat Sheet.
      https://cheatsheetseries.owasp.org/cheatsheets/Password_Storage_Cheat_Sheet.html
"""

from __future__ import annotations

import html
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from keyguard import __version__
from keyguard.core.models import PasswordAnalysis


def mask_password(password: str) -> str:
    """Show only the first and last character of *password*.

    >>> mask_password("hunter2"), mask_password("ab")
    ('h*****2', '**')
    """
    if len(password) <= 2:
        return "*" * len(password)
    return password[0] + "*" * (len(password) - 2) + password[-1]


def report_payload(analysis: PasswordAnalysis) -> dict[str, Any]:
    """JSON-ready camelCase dump of *analysis* with the password masked.

    The stronger variant stays readable unless it equals the original.
    """
    data = json.loads(analysis.model_dump_json(by_alias=True))
    original = analysis.ai_enhanced.original_password
    masked = mask_password(original)

    enhanced = data["aiEnhanced"]
    enhanced["originalPassword"] = masked
    if analysis.ai_enhanced.enhanced_password == original:
        enhanced["enhancedPassword"] = masked
    data["passwordMasked"] = masked
    return data


# ===================================================================== #
#  HTML Template
# ===================================================================== #

_HTML_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Keyguard Report - {title}</title>
    <style>
        :root {{
            --bg-primary: #0d1117;
            --bg-secondary: #161b22;
            --bg-tertiary: #21262d;
            --text-primary: #c9d1d9;
            --text-secondary: #8b949e;
            --accent-cyan: #58a6ff;
            --accent-green: #3fb950;
            --accent-yellow: #d29922;
            --accent-red: #f85149;
            --accent-purple: #bc8cff;
            --border: #30363d;
        }}
        * {{ margin: 0; padding: 0; box-sizing: border-box; }}
        body {{
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Helvetica, Arial, sans-serif;
            background: var(--bg-primary);
            color: var(--text-primary);
            line-height: 1.6;
            padding: 2rem;
        }}
        .container {{ max-width: 1000px; margin: 0 auto; }}
        .header {{
            text-align: center;
            padding: 2rem;
            border: 1px solid var(--accent-cyan);
            border-radius: 8px;
            margin-bottom: 2rem;
            background: var(--bg-secondary);
        }}
        .header h1 {{ color: var(--accent-cyan); font-size: 2rem; margin-bottom: 0.5rem; }}
        .header .subtitle {{ color: var(--text-secondary); font-size: 0.9rem; }}
        .section {{
            background: var(--bg-secondary);
            border: 1px solid var(--border);
            border-radius: 8px;
            padding: 1.5rem;
            margin-bottom: 1.5rem;
        }}
        .section h2 {{
            color: var(--accent-purple);
            font-size: 1.4rem;
            margin-bottom: 1rem;
            padding-bottom: 0.5rem;
            border-bottom: 1px solid var(--border);
        }}
        table {{ width: 100%; border-collapse: collapse; margin: 1rem 0; }}
        th, td {{ padding: 0.75rem 1rem; text-align: left; border: 1px solid var(--border); }}
        th {{ background: var(--bg-tertiary); color: var(--accent-cyan); font-weight: 600; }}
        tr:nth-child(even) {{ background: var(--bg-tertiary); }}
        .badge {{
            display: inline-block;
            padding: 0.25rem 0.75rem;
            border-radius: 4px;
            font-weight: 700;
            font-size: 0.85rem;
        }}
        .badge-low {{ background: rgba(63, 185, 80, 0.2); color: var(--accent-green); }}
        .badge-medium {{ background: rgba(210, 153, 34, 0.2); color: var(--accent-yellow); }}
        .badge-high {{ background: rgba(248, 81, 73, 0.2); color: var(--accent-red); }}
        .badge-critical {{ background: rgba(248, 81, 73, 0.4); color: #ff7b72; }}
        .meter {{
            height: 24px;
            background: var(--bg-tertiary);
            border-radius: 12px;
            overflow: hidden;
            border: 1px solid var(--border);
        }}
        .meter-fill {{ height: 100%; border-radius: 12px; }}
        ul {{ margin-left: 1.5rem; }}
        li {{ margin: 0.25rem 0; }}
        .footer {{
            text-align: center;
            padding: 1.5rem;
            color: var(--text-secondary);
            font-size: 0.8rem;
            border-top: 1px solid var(--border);
            margin-top: 2rem;
        }}
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>Keyguard</h1>
            <div class="subtitle">
                Password Analysis Report | {masked}<br>
                Generated: {timestamp}
            </div>
        </div>

        <div class="section">
            <h2>Strength</h2>
            <p>Score: <strong>{score}/4</strong> ({label})</p>
            <div class="meter"><div class="meter-fill" style="width: {meter_pct}%; background: {meter_colour};"></div></div>
            <table>
                <tr><th>Length</th><td>{length}</td><th>Entropy</th><td>{entropy:.1f} bits</td></tr>
                <tr><th>Character classes</th><td>{classes}</td><th>Leaked password</th><td>{is_common}</td></tr>
            </table>
        </div>

        <div class="section">
            <h2>Crack Time Estimates</h2>
            <table>
                <tr><th>Scenario</th><th>Hashes / second</th><th>Estimated time</th></tr>
                {crack_rows}
            </table>
        </div>

        <div class="section">
            <h2>Detected Patterns</h2>
            {patterns_html}
        </div>

        <div class="section">
            <h2>Attack Resistance</h2>
            <table>
                {resistance_rows}
            </table>
        </div>

        <div class="section">
            <h2>Hackability</h2>
            <p>Score: <strong>{hack_score}/100</strong>
               <span class="badge badge-{risk}">{risk_upper}</span>
               Time to hack: {time_to_hack}</p>
            {reasoning_html}
        </div>

        <div class="section">
            <h2>Suggestions</h2>
            {suggestions_html}
        </div>

        <div class="footer">
            Keyguard v{version} | Password Analysis Engine<br>
            Report generated {timestamp}
        </div>
    </div>
</body>
</html>
"""

SCORE_LABELS: tuple[str, ...] = ("Very Weak", "Weak", "Fair", "Strong", "Very Strong")
_SCORE_COLOURS: tuple[str, ...] = ("#f85149", "#ff7b72", "#d29922", "#3fb950", "#56d364")


class KeyguardReportGenerator:
    """Generates HTML and JSON reports from a :class:`PasswordAnalysis`.

    Usage::

        generator = KeyguardReportGenerator()
        generator.generate_html(analysis, Path("report.html"))
        generator.generate_json(analysis, Path("report.json"))
    """

    def generate_json(
        self,
        analysis: PasswordAnalysis,
        output_path: Optional[Path] = None,
    ) -> str:
        """Render *analysis* as a JSON report.

        Args:
            analysis: Finished analysis.
            output_path: Where to write the report; nothing is written
                when omitted.

        Returns:
            The JSON document.
        """
        report = {
            "reportMetadata": {
                "generatedAt": datetime.now(timezone.utc).isoformat(),
                "tool": "keyguard",
                "version": __version__,
            },
            "analysis": report_payload(analysis),
        }
        content = json.dumps(report, indent=2, ensure_ascii=False, allow_nan=False)
        if output_path is not None:
            _write(output_path, content)
        return content

    def generate_html(
        self,
        analysis: PasswordAnalysis,
        output_path: Optional[Path] = None,
        title: Optional[str] = None,
    ) -> str:
        """Render *analysis* as a self-contained HTML report."""
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
        masked = mask_password(analysis.ai_enhanced.original_password)
        hack = analysis.hackability_score

        content = _HTML_TEMPLATE.format(
            title=_escape(title or "Password Analysis"),
            masked=_escape(masked),
            timestamp=timestamp,
            score=analysis.score,
            label=SCORE_LABELS[analysis.score],
            meter_pct=(analysis.score + 1) * 20,
            meter_colour=_SCORE_COLOURS[analysis.score],
            length=analysis.length,
            entropy=analysis.entropy,
            classes=analysis.charset_count,
            is_common="Yes" if analysis.is_common else "No",
            crack_rows=self._crack_rows(analysis),
            patterns_html=self._patterns_html(analysis),
            resistance_rows=self._resistance_rows(analysis),
            hack_score=hack.score,
            risk=hack.risk_level.value,
            risk_upper=hack.risk_level.value.upper(),
            time_to_hack=_escape(hack.time_to_hack),
            reasoning_html=_bullet_list(hack.reasoning, "No specific weaknesses."),
            suggestions_html=self._suggestions_html(analysis),
            version=__version__,
        )
        if output_path is not None:
            _write(output_path, content)
        return content

    # ------------------------------------------------------------------ #
    #  Private HTML Builders
    # ------------------------------------------------------------------ #

    @staticmethod
    def _crack_rows(analysis: PasswordAnalysis) -> str:
        ordered = sorted(
            analysis.crack_time_estimates.items(), key=lambda kv: kv[1].time_in_seconds
        )
        return "\n".join(
            f"<tr><td>{_escape(label)}</td><td>{est.hashes_per_second:,.0f}</td>"
            f"<td>{_escape(est.time_to_break)}</td></tr>"
            for label, est in ordered
        )

    @staticmethod
    def _patterns_html(analysis: PasswordAnalysis) -> str:
        items = [
            f"{p.description} ({p.type.value}, {p.confidence:.0%} confidence, "
            f"characters {p.position[0]}-{p.position[1]})"
            for p in analysis.ml_patterns
        ]
        items.extend(f"Common pattern: {label}" for label in analysis.common_patterns)
        return _bullet_list(items, "No known patterns detected.")

    @staticmethod
    def _resistance_rows(analysis: PasswordAnalysis) -> str:
        res = analysis.attack_resistance
        rows = (
            ("Brute force", res.brute_force),
            ("Dictionary", res.dictionary),
            ("Pattern-based", res.pattern_based),
            ("AI-assisted", res.ai_attack),
            ("Overall", res.overall),
        )
        return "\n".join(
            f'<tr><th>{name}</th><td><div class="meter"><div class="meter-fill" '
            f'style="width: {value}%; background: var(--accent-cyan);"></div></div></td>'
            f"<td>{value}/100</td></tr>"
            for name, value in rows
        )

    @staticmethod
    def _suggestions_html(analysis: PasswordAnalysis) -> str:
        items = list(analysis.suggestions)
        items.extend(
            f"Passphrase idea: {phrase}" for phrase in analysis.passphrase_suggestions
        )
        return _bullet_list(items, "No suggestions.")


def _escape(text: str) -> str:
    return html.escape(text, quote=True)


def _bullet_list(items: list[str], empty: str) -> str:
    if not items:
        return f'<p style="color: var(--text-secondary);">{_escape(empty)}</p>'
    body = "\n".join(f"<li>{_escape(item)}</li>" for item in items)
    return f"<ul>\n{body}\n</ul>"


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
