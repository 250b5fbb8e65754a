from __future__ import annotations

import re
from typing import Any


# Telegram MarkdownV2 reserved characters
RESERVED_CHARS = "_*[]()~`>#+-=|{}.!"

_RESERVED_RE = re.compile("([" + re.escape(RESERVED_CHARS) + "])")


def escape_markdown(value: Any) -> str:
    """
    Backslash-escape every MarkdownV2 reserved character in ``value``.

    ``None`` maps to an empty string; anything else is ``str()``-ed first.
    Callers escape each literal exactly once.
    """
    if value is None:
        return ""
    return _RESERVED_RE.sub(r"\\\1", str(value))
