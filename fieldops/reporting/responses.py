"""Collapse append-only response history to the current value per slot."""

from __future__ import annotations

from collections.abc import Hashable, Iterable
from typing import Protocol, TypeVar


class TimestampedResponse(Protocol):
    visit_id: Hashable | None
    item_id: Hashable | None
    created_at: object


R = TypeVar("R", bound=TimestampedResponse)


def latest_responses(responses: Iterable[R]) -> dict[tuple[Hashable, Hashable], R]:
    """Return the response with the greatest ``created_at`` per (visit, item).

    Single pass. A later row only replaces the kept one when its timestamp is
    strictly greater, so on an exact tie the first row encountered wins.
    Rows without a visit or item id are ignored.
    """
    latest: dict[tuple[Hashable, Hashable], R] = {}
    for response in responses:
        if response.visit_id is None or response.item_id is None:
            continue
        key = (response.visit_id, response.item_id)
        kept = latest.get(key)
        if kept is None or response.created_at > kept.created_at:
            latest[key] = response
    return latest



def latest_by_item(responses: Iterable[R]) -> dict[Hashable, R]:
    """Current response per item for the responses of a single visit."""
    return {item_id: response for (_, item_id), response in latest_responses(responses).items()}
