# src/testatpoint/telemetry/logger/processors.py

"""
structlog processors shared by every renderer.
"""

import logging
from typing import Any

LOG_EMOJIS: dict[Any, str] = {
    logging.DEBUG: "🐛",
    logging.INFO: "ℹ️",
    logging.WARNING: "⚠️",
    logging.ERROR: "❌",
    logging.CRITICAL: "💥",
    "detect": "🔎",
    "build": "🛠️",
    "run": "🚀",
    "pass": "✅",
    "fail": "🚫",
    "time": "⏱️",
    "general": "➡️",
}


def add_emoji_processor(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Prefixes the event with an emoji chosen by `emoji_key` or the log level."""
    emoji_key = event_dict.get("emoji_key")
    level = logging._nameToLevel.get(str(event_dict.get("level", method_name)).upper(), logging.INFO)
    emoji = LOG_EMOJIS.get(emoji_key) if emoji_key else None
    emoji = emoji or LOG_EMOJIS.get(level, LOG_EMOJIS["general"])
    event = event_dict.get("event")
    if isinstance(event, str):
        event_dict["event"] = f"{emoji} {event}"
    return event_dict


def remove_extra_keys_processor(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.pop("emoji_key", None)
    return event_dict

# 🔼⚙️
