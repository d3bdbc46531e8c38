# apps/board/__init__.py

"""
Board - API e tempo real do Kanban

Funcionalidades:
- Motor de ordenação (positions contíguas por coluna)
- API REST JSON para boards, colunas e cards
- WebSocket com o sinal board.updated
"""
