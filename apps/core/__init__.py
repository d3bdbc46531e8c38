# apps/core/__init__.py

"""
Core - Aplicação base do Kanban

Contém:
- Models Board, Column e Card
- Erros de domínio (NotFound, InvalidArgument, StorageError)
- Admin e comando seed (board padrão + verificação de integridade)
"""
