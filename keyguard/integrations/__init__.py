"""
Keyguard Integrations
======================

Async clients for the remote collaborators: the password security chat
assistant and the analysis history store. The analysis engine never
calls these; the engine facade and the CLI do.
"""

from keyguard.integrations.chat import ChatAssistant, build_chat_summary
from keyguard.integrations.history import HistoryStore, build_history_record, hash_password

__all__ = [
    "ChatAssistant",
    "HistoryStore",
    "build_chat_summary",
    "build_history_record",
    "hash_password",
]
