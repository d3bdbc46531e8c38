"""Shared fixtures: a board with helper builders for columns and cards."""

import pytest

from apps.board.ordering import OrderingEngine
from apps.core.models import Board, Card, Column


def titles(column):
    """Card titles of a column in display order."""
    return list(
        Card.objects.filter(column=column).order_by("position").values_list("title", flat=True)
    )


def positions(column):
    return sorted(Card.objects.filter(column=column).values_list("position", flat=True))


def layout(column):
    """[(title, position), ...] in display order."""
    return list(
        Card.objects.filter(column=column).order_by("position").values_list("title", "position")
    )


@pytest.fixture
def notifications():
    return []


@pytest.fixture
def engine(notifications):
    """Engine whose notifier records calls instead of touching the channel layer."""
    return OrderingEngine(notifier=lambda: notifications.append("board.updated"))


@pytest.fixture
def board(db):
    return Board.objects.create(id="board-1", title="My Kanban Board")


@pytest.fixture
def make_column(board):
    """Create a column at the end of the board, pre-filled with cards at 0..n-1.

    Card ids equal their titles so tests can refer to them directly.
    """

    def _make(title, *card_titles):
        position = Column.objects.filter(board=board).count()
        column = Column.objects.create(id=title, title=title, board=board, position=position)
        for index, card_title in enumerate(card_titles):
            Card.objects.create(id=card_title, title=card_title, column=column, position=index)
        return column

    return _make
