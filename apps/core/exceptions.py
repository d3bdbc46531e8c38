# apps/core/exceptions.py

"""
Erros de domínio do Kanban

A camada HTTP (apps.board.views) traduz cada um para um status code:
NotFound -> 404, InvalidArgument -> 400, StorageError -> 500.
"""


class KanbanError(Exception):
    """Base de todos os erros de domínio"""

    status_code = 500


class NotFound(KanbanError):
    """Board, coluna ou card referenciado não existe"""

    status_code = 404


class InvalidArgument(KanbanError):
    """Posição, identificador ou payload malformado"""

    status_code = 400


class StorageError(KanbanError):
    """Falha de transação ou conexão com o banco"""

    status_code = 500
