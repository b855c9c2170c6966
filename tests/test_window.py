from __future__ import annotations

import math

import pytest

from annocurate.errors import InvalidNavigation
from annocurate.sentences import SentenceSpan
from annocurate.window import FIRST_PAGE, LAST_PAGE, WindowCursor


def _spans(count: int) -> list[SentenceSpan]:
    return [SentenceSpan(number=n, begin=(n - 1) * 10, end=(n - 1) * 10 + 9) for n in range(1, count + 1)]


def _bounds(cursor: WindowCursor) -> tuple[int, int]:
    return cursor.window.first, cursor.window.last


def test_pages_of_25_sentences_with_window_of_10() -> None:
    cursor = WindowCursor(_spans(25), 10)
    assert _bounds(cursor) == (1, 10)

    move = cursor.next_window()
    assert move.changed
    assert (move.window.first, move.window.last) == (11, 20)

    move = cursor.next_window()
    assert (move.window.first, move.window.last) == (21, 25)

    move = cursor.next_window()
    assert not move.changed
    assert move.boundary == LAST_PAGE
    assert _bounds(cursor) == (21, 25)
    assert cursor.page_count == 3
    assert cursor.page_number == 3


@pytest.mark.parametrize("count", [1, 4, 10])
def test_single_page_document_never_moves(count: int) -> None:
    cursor = WindowCursor(_spans(count), 10)
    expected = cursor.window
    for move in (cursor.next_window(), cursor.previous_window(), cursor.first_window(), cursor.last_window()):
        assert not move.changed
        assert move.window == expected
    assert expected.first == 1
    assert expected.last == count


def test_goto_lands_on_window_containing_sentence() -> None:
    cursor = WindowCursor(_spans(25), 10)
    for number in range(1, 26):
        cursor.goto_sentence_number(number)
        assert cursor.window_contains(number)
        assert cursor.anchor == ((number - 1) // 10) * 10 + 1


@pytest.mark.parametrize("number", [0, 26, -3])
def test_goto_out_of_range_fails_and_keeps_anchor(number: int) -> None:
    cursor = WindowCursor(_spans(25), 10)
    cursor.next_window()
    with pytest.raises(InvalidNavigation):
        cursor.goto_sentence_number(number)
    assert cursor.anchor == 11


@pytest.mark.parametrize("count,size", [(25, 10), (30, 10), (7, 3), (1, 4), (100, 7), (9, 1)])
def test_next_reaches_last_window_in_expected_steps(count: int, size: int) -> None:
    cursor = WindowCursor(_spans(count), size)
    steps = 0
    while cursor.next_window().changed:
        steps += 1
    assert steps == math.ceil(count / size) - 1
    assert cursor.window.last == count
    assert not cursor.next_window().changed


def test_previous_walks_back_to_first_window() -> None:
    cursor = WindowCursor(_spans(25), 10)
    cursor.last_window()
    assert cursor.anchor == 21
    assert cursor.previous_window().window.first == 11
    assert cursor.previous_window().window.first == 1
    move = cursor.previous_window()
    assert not move.changed
    assert move.boundary == FIRST_PAGE


def test_first_and_last_jumps_report_no_op() -> None:
    cursor = WindowCursor(_spans(25), 10)
    assert cursor.first_window().boundary == FIRST_PAGE
    assert cursor.last_window().changed
    move = cursor.last_window()
    assert not move.changed
    assert move.boundary == LAST_PAGE
    assert cursor.first_window().window.first == 1


def test_window_carries_character_bounds() -> None:
    spans = _spans(25)
    cursor = WindowCursor(spans, 10, anchor=21)
    window = cursor.window
    assert window.begin == spans[20].begin
    assert window.end == spans[24].end
    assert window.sentence_count == 25
    assert [span.number for span in cursor.visible_sentences()] == [21, 22, 23, 24, 25]


def test_anchor_is_aligned_to_its_block() -> None:
    cursor = WindowCursor(_spans(25), 10, anchor=14)
    assert cursor.anchor == 11


def test_empty_document_rejects_navigation() -> None:
    cursor = WindowCursor([], 10)
    assert cursor.page_count == 0
    with pytest.raises(InvalidNavigation):
        cursor.goto_sentence_number(1)
    with pytest.raises(InvalidNavigation):
        cursor.next_window()


def test_invalid_configuration() -> None:
    with pytest.raises(ValueError):
        WindowCursor(_spans(3), 0)
    with pytest.raises(InvalidNavigation):
        WindowCursor(_spans(3), 2, anchor=4)
