"""
Rule-based game-account handle extraction.

Donors type their in-game handle into the name or message field in a few
common shapes. Each strategy looks for one shape; the first hit wins.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional

from app.schemas import HANDLE_PATTERN

SIGIL_RE = re.compile(r"@([A-Za-z0-9_]+)")
HANDLE_RE = re.compile(HANDLE_PATTERN)

DEFAULT_DONOR_NAME = "Anonim"


@dataclass(frozen=True)
class IdentityMatch:
    handle: str
    clean_name: str


@dataclass(frozen=True)
class IdentityResult:
    handle: Optional[str]
    clean_name: str
    strategy: Optional[str] = None


def is_valid_handle(value: Optional[str]) -> bool:
    return bool(value) and HANDLE_RE.fullmatch(value) is not None


# ---------------------------------------------------------------------------
# Individual strategies
# ---------------------------------------------------------------------------

def sigil_in_name(name: str, message: str) -> Optional[IdentityMatch]:
    """``@handle`` anywhere in the donor name; the first one loses its sigil."""
    m = SIGIL_RE.search(name)
    if not m:
        return None
    handle = m.group(1)
    clean = (name[: m.start()] + handle + name[m.end():]).strip()
    return IdentityMatch(handle=handle, clean_name=clean)


def leading_word_in_name(name: str, message: str) -> Optional[IdentityMatch]:
    """First word of the donor name, if it already looks like a handle."""
    words = name.split()
    if not words:
        return None
    first = words[0]
    # 1-2 character names are never taken as handles
    if HANDLE_RE.fullmatch(first) is None:
        return None
    return IdentityMatch(handle=first, clean_name=name)


def sigil_in_message(name: str, message: str) -> Optional[IdentityMatch]:
    """``@handle`` in the message text. The donor name is left as received."""
    m = SIGIL_RE.search(message)
    if not m:
        return None
    return IdentityMatch(handle=m.group(1), clean_name=name)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

Strategy = Callable[[str, str], Optional[IdentityMatch]]

IDENTITY_STRATEGIES: list[tuple[str, Strategy]] = [
    ("sigil_in_name", sigil_in_name),
    ("leading_word_in_name", leading_word_in_name),
    ("sigil_in_message", sigil_in_message),
]


def extract_identity(
    donor_name: Optional[str],
    message: Optional[str] = None,
    default_name: str = DEFAULT_DONOR_NAME,
) -> IdentityResult:
    """Run the strategies in order and return ``(handle, clean_name)``.

    An empty or missing donor name is replaced by ``default_name`` before any
    strategy sees it.
    """
    name = donor_name or default_name
    text = message or ""
    for strategy_name, fn in IDENTITY_STRATEGIES:
        found = fn(name, text)
        if found is not None:
            return IdentityResult(
                handle=found.handle,
                clean_name=found.clean_name,
                strategy=strategy_name,
            )
    return IdentityResult(handle=None, clean_name=name)
