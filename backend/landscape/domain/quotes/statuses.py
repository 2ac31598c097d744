from __future__ import annotations

from typing import Final, Iterable

QUOTE_STATUS_PENDING: Final[str] = "pending"
QUOTE_STATUS_REVIEWED: Final[str] = "reviewed"
QUOTE_STATUS_SENT: Final[str] = "sent"

QUOTE_STATUSES: Final[tuple[str, ...]] = (
    QUOTE_STATUS_PENDING,
    QUOTE_STATUS_REVIEWED,
    QUOTE_STATUS_SENT,
)

_ALLOWED_TRANSITIONS: Final[dict[str, set[str]]] = {
    QUOTE_STATUS_PENDING: {QUOTE_STATUS_REVIEWED, QUOTE_STATUS_SENT},
    QUOTE_STATUS_REVIEWED: {QUOTE_STATUS_SENT},
    QUOTE_STATUS_SENT: set(),
}


def is_valid_status(value: str) -> bool:
    return value in QUOTE_STATUSES


def allowed_next_statuses(current: str) -> set[str]:
    return _ALLOWED_TRANSITIONS.get(current, set())


def assert_valid_transition(current: str, target: str) -> None:
    if not is_valid_status(target):
        raise ValueError(f"Unknown quote request status: {target}")
    if current == target:
        return
    allowed = allowed_next_statuses(current)
    if not allowed:
        raise ValueError(f"Quote request is already in terminal status: {current}")
    if target not in allowed:
        raise ValueError(f"Cannot transition quote request from {current} to {target}")


def default_quote_status() -> str:
    return QUOTE_STATUS_PENDING


def statuses_for_filter() -> Iterable[str]:
    return QUOTE_STATUSES
