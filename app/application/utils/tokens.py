from __future__ import annotations

from dataclasses import dataclass

SEPARATOR = "|"

POINT = "point"
TRAIN = "train"
WATCH_DAY = "watch-day"
WATCH_TRAIN = "watch-train"
UNWATCH = "unwatch"
CANCEL = "cancel"

_ARITY = {
    POINT: 1,
    TRAIN: 1,
    WATCH_DAY: 3,
    WATCH_TRAIN: 5,
    UNWATCH: 1,
    CANCEL: 0,
}


@dataclass(frozen=True)
class ChoiceToken:
    action: str
    args: tuple[str, ...] = ()


def encode(action: str, *args: str) -> str:
    return SEPARATOR.join((action, *args))


def decode(token: str) -> ChoiceToken | None:
    """Split a button token into action and arguments. Returns None for unknown or malformed tokens."""
    parts = (token or "").strip().split(SEPARATOR)
    action, args = parts[0], tuple(parts[1:])
    arity = _ARITY.get(action)
    if arity is None or len(args) != arity:
        return None
    if any(not arg for arg in args):
        return None
    return ChoiceToken(action=action, args=args)


def parse_index(raw: str) -> int | None:
    """Parse a 1-based list position. Returns None for anything that is not a positive integer."""
    raw = (raw or "").strip()
    if not raw.isdecimal():
        return None
    value = int(raw)
    return value if value > 0 else None
