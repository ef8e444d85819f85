"""Keyguard output formatters: Rich console rendering and HTML/JSON reports."""

from keyguard.output.console import KeyguardConsoleOutput
from keyguard.output.report import KeyguardReportGenerator, mask_password, report_payload

__all__ = [
    "KeyguardConsoleOutput",
    "KeyguardReportGenerator",
    "mask_password",
    "report_payload",
]
