"""Tests for the seed management command."""

from io import StringIO

from django.core.management import call_command

from apps.core.models import Board, Card

from .conftest import layout


def run_seed(*args):
    out = StringIO()
    call_command("seed", *args, stdout=out)
    return out.getvalue()


def test_seed_creates_default_board(db):
    output = run_seed()
    board = Board.objects.get(pk="board-1")
    assert board.title == "My Kanban Board"
    assert "SISTEMA VERIFICADO" in output


def test_seed_keeps_existing_board(board):
    Board.objects.filter(pk="board-1").update(title="Renamed")
    output = run_seed()
    assert Board.objects.get(pk="board-1").title == "Renamed"
    assert "já existe" in output


def test_seed_reports_broken_column_without_fixing(make_column):
    todo = make_column("Todo", "A", "B")
    Card.objects.filter(pk="B").update(position=5)

    output = run_seed()

    assert "--reparar" in output
    assert layout(todo) == [("A", 0), ("B", 5)]


def test_seed_repairs_broken_column(make_column):
    todo = make_column("Todo", "A", "B", "C")
    Card.objects.filter(pk="A").update(position=3)

    output = run_seed("--reparar")

    assert "reparada" in output
    assert layout(todo) == [("B", 0), ("C", 1), ("A", 2)]
