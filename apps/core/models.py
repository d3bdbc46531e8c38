# apps/core/models.py

import uuid

from django.db import models


def gerar_id():
    """Gera identificador opaco (uuid4 em texto) para colunas e cards"""
    return str(uuid.uuid4())


class Board(models.Model):
    """
    Quadro Kanban

    O id é escolhido pelo cliente (ex: 'board-1'), por isso é texto
    e não um autoincremento.
    """

    id = models.CharField(primary_key=True, max_length=64, default=gerar_id)
    title = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'board'
        ordering = ['title']

    def __str__(self):
        return self.title


class Column(models.Model):
    """Coluna do board, ordenada por position (0..n-1 dentro do board)"""

    id = models.CharField(primary_key=True, max_length=64, default=gerar_id)
    title = models.CharField(max_length=255)
    position = models.PositiveIntegerField(default=0)
    board = models.ForeignKey(
        Board,
        on_delete=models.CASCADE,
        related_name='columns'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'board_column'
        ordering = ['position', 'id']
        indexes = [
            models.Index(fields=['board', 'position'], name='column_board_position_idx'),
        ]

    def __str__(self):
        return f"{self.title} - {self.board_id}"


class Card(models.Model):
    """
    Card de uma coluna

    Invariante: dentro de cada coluna as positions formam exatamente
    {0, 1, ..., n-1}. Só o OrderingEngine (apps.board.ordering) altera
    position; não existe unique em (column, position) porque o
    reindexamento em massa passa por estados intermediários repetidos.
    """

    id = models.CharField(primary_key=True, max_length=64, default=gerar_id)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    position = models.PositiveIntegerField(default=0)
    column = models.ForeignKey(
        Column,
        on_delete=models.CASCADE,
        related_name='cards'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'card'
        ordering = ['position', 'id']
        indexes = [
            models.Index(fields=['column', 'position'], name='card_column_position_idx'),
        ]

    def __str__(self):
        return f"{self.title} ({self.column_id}:{self.position})"
