"""
Services package.

- ai: provider dispatch, fallback and response normalization
- formatting: presentation-boundary helpers for chat front ends
- channel_store: allow-list store for chat front ends
"""

from relay.services.channel_store import ChannelStore, InMemoryChannelStore, JsonFileChannelStore
from relay.services.formatting import CHAT_MESSAGE_LIMIT, truncate_for_chat

__all__ = [
    "CHAT_MESSAGE_LIMIT",
    "ChannelStore",
    "InMemoryChannelStore",
    "JsonFileChannelStore",
    "truncate_for_chat",
]
