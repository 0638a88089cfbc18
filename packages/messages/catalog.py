"""Message catalog backed by ``messages.yaml``."""
from __future__ import annotations

from pathlib import Path
from typing import Dict

import yaml

_MESSAGES_PATH = Path(__file__).with_name("messages.yaml")

MESSAGES: Dict[str, str] = yaml.safe_load(_MESSAGES_PATH.read_text(encoding="utf-8"))


def format_message(key: str, *args: object) -> str:
    """Render the template stored under ``key`` with positional ``args``."""

    return MESSAGES[key].format(*args)


__all__ = ["MESSAGES", "format_message"]
