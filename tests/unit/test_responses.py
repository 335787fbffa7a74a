"""Unit tests for latest-response reduction."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from itertools import permutations
from uuid import uuid4

from fieldops.reporting.models import ReportResponse
from fieldops.reporting.responses import latest_by_item, latest_responses

T0 = datetime(2024, 6, 1, 14, 0, tzinfo=timezone.utc)


def make_response(visit_id, item_id, minutes: int, text: str = "") -> ReportResponse:
    return ReportResponse(
        visit_id=visit_id,
        item_id=item_id,
        equipment_id=None,
        value_text=text,
        value_number=None,
        value_bool=None,
        created_at=T0 + timedelta(minutes=minutes),
    )


def test_latest_wins_regardless_of_input_order():
    visit_id, item_id = uuid4(), uuid4()
    responses = [make_response(visit_id, item_id, m, text=str(m)) for m in (1, 5, 3)]

    for ordering in permutations(responses):
        latest = latest_responses(ordering)
        assert list(latest) == [(visit_id, item_id)]
        assert latest[(visit_id, item_id)].value_text == "5"


def test_keys_are_independent_per_visit_and_item():
    visit_a, visit_b, item_1, item_2 = uuid4(), uuid4(), uuid4(), uuid4()
    responses = [
        make_response(visit_a, item_1, 1, "a1-old"),
        make_response(visit_a, item_1, 2, "a1-new"),
        make_response(visit_a, item_2, 1, "a2"),
        make_response(visit_b, item_1, 0, "b1"),
    ]

    latest = latest_responses(responses)

    assert len(latest) == 3
    assert latest[(visit_a, item_1)].value_text == "a1-new"
    assert latest[(visit_a, item_2)].value_text == "a2"
    assert latest[(visit_b, item_1)].value_text == "b1"


def test_identical_timestamps_keep_first_encountered():
    visit_id, item_id = uuid4(), uuid4()
    first = make_response(visit_id, item_id, 2, "first")
    second = make_response(visit_id, item_id, 2, "second")

    assert latest_responses([first, second])[(visit_id, item_id)] is first
    assert latest_responses([second, first])[(visit_id, item_id)] is second


def test_rows_without_ids_are_ignored():
    item_id = uuid4()
    orphan = make_response(None, item_id, 10)

    assert latest_responses([orphan]) == {}


def test_empty_input():
    assert latest_responses([]) == {}


def test_latest_by_item_for_one_visit():
    visit_id, item_1, item_2 = uuid4(), uuid4(), uuid4()
    responses = [
        make_response(visit_id, item_1, 4, "new"),
        make_response(visit_id, item_1, 1, "old"),
        make_response(visit_id, item_2, 2, "only"),
        make_response(visit_id, None, 9, "orphan"),
    ]

    latest = latest_by_item(responses)

    assert set(latest) == {item_1, item_2}
    assert latest[item_1].value_text == "new"
    assert latest[item_2].value_text == "only"
    assert latest_by_item([]) == {}
