"""
Keyguard Configuration Management
==================================

Centralized configuration for the Keyguard password analysis toolkit using
Python dataclasses and TOML-based persistence.

Secrets (API keys, bearer tokens) never live in the TOML file itself; each
section names the environment variable that holds them, following the
Twelve-Factor App methodology (Wiggins, 2011).

References:
    - Wiggins, A. (2011). The Twelve-Factor App. https://12factor.net/
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import os
import sys
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[no-redef]


# ---------------------------------------------------------------------------
# Default configuration file path relative to the project root
# ---------------------------------------------------------------------------
_DEFAULT_CONFIG_PATH: Path = Path(__file__).resolve().parent.parent / "keyguard.toml"


# ========================== Section Configs ================================


@dataclass(frozen=False, slots=True)
class AnalyzerConfig:
    """Parameters for the password analysis orchestrator.

    The defaults reproduce the reference behaviour: three passphrase
    alternatives per analysis, and a rewritten password suggested for
    every score below 3.
    """

    passphrase_suggestion_count: int = 3
    enhance_below_score: int = 3


@dataclass(frozen=False, slots=True)
class ChatConfig:
    """Settings for the remote chat assistant collaborator.

    Any OpenAI-compatible ``/chat/completions`` endpoint works.
    """

    api_url: str = "https://api.openai.com/v1"
    api_key_env: str = "OPENAI_API_KEY"
    model: str = "gpt-4o-mini"
    temperature: float = 0.7
    max_tokens: int = 800
    max_message_length: int = 500
    timeout: float = 30.0
    max_retries: int = 2

    @property
    def api_key(self) -> Optional[str]:
        """API key read from the environment variable named by *api_key_env*."""
        return os.environ.get(self.api_key_env) or None


@dataclass(frozen=False, slots=True)
class HistoryConfig:
    """Settings for the analysis-history persistence collaborator.

    The store speaks the PostgREST dialect (``/rest/v1/<table>``).
    """

    base_url: str = ""
    table: str = "password_history"
    api_key_env: str = "KEYGUARD_HISTORY_API_KEY"
    token_env: str = "KEYGUARD_HISTORY_TOKEN"
    user_id: str = ""
    timeout: float = 15.0
    max_retries: int = 2

    @property
    def api_key(self) -> Optional[str]:
        return os.environ.get(self.api_key_env) or None

    @property
    def token(self) -> Optional[str]:
        # Falls back to the project key when no per-user token is issued
        return os.environ.get(self.token_env) or self.api_key


# =========================== Global Settings ===============================


@dataclass(frozen=False, slots=True)
class GlobalConfig:
    """Global settings: logging verbosity, output directory and report format."""

    log_level: str = "WARNING"
    log_file: str = ""
    log_json: bool = False
    output_dir: str = "output"
    report_format: str = "html"
    debug: bool = False
    version: str = "1.0.0"


# =========================== Master Config =================================


@dataclass(frozen=False, slots=True)
class KeyguardConfig:
    """Master configuration aggregating every section.

    Usage:
        >>> config = KeyguardConfig.load()                  # from default path
        >>> config = KeyguardConfig.load("custom.toml")     # from custom path
        >>> print(config.chat.model)
        'gpt-4o-mini'
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    analyzer: AnalyzerConfig = field(default_factory=AnalyzerConfig)
    chat: ChatConfig = field(default_factory=ChatConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)

    # ------------------------------------------------------------------ #
    #  TOML Loading
    # ------------------------------------------------------------------ #

    @classmethod
    def load(cls, path: str | Path | None = None) -> KeyguardConfig:
        """Read a TOML file into a :class:`KeyguardConfig`.

        With no *path*, ``keyguard.toml`` beside the packages is used when
        present and the built-in defaults otherwise. Keys a section does
        not declare are dropped; absent keys keep their defaults.

        Raises:
            FileNotFoundError: An explicit *path* does not exist.
        """
        if path is None:
            if not _DEFAULT_CONFIG_PATH.is_file():
                return cls()
            config_path = _DEFAULT_CONFIG_PATH
        else:
            config_path = Path(path)
            if not config_path.is_file():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")

        raw: dict[str, Any] = tomllib.loads(config_path.read_text(encoding="utf-8"))
        return cls(
            **{
                attr: _section(section_cls, raw.get(table, {}))
                for attr, (table, section_cls) in _SECTIONS.items()
            }
        )

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict view of every section; secrets are not included."""
        return asdict(self)


# TOML table name and dataclass for each KeyguardConfig attribute
_SECTIONS: dict[str, tuple[str, type]] = {
    "global_settings": ("global", GlobalConfig),
    "analyzer": ("analyzer", AnalyzerConfig),
    "chat": ("chat", ChatConfig),
    "history": ("history", HistoryConfig),
}


def _section(section_cls: type, table: dict[str, Any]) -> Any:
    known = {f.name for f in fields(section_cls)}
    return section_cls(**{k: v for k, v in table.items() if k in known})


# ========================= Module-level convenience ========================

def get_config(path: str | Path | None = None) -> KeyguardConfig:
    """Process-wide configuration, loaded on first use.

    Passing *path* always reloads and replaces the cached instance.
    """
    if path is not None or not hasattr(get_config, "_cached"):
        get_config._cached = KeyguardConfig.load(path)  # type: ignore[attr-defined]
    return get_config._cached  # type: ignore[attr-defined]
