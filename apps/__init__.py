# apps/__init__.py

"""
Kanban Board - Aplicações Django

Este pacote contém todas as aplicações do sistema:
- core: Models (Board, Column, Card), erros de domínio e admin
- board: Motor de ordenação, API REST e WebSockets
"""

__version__ = '1.0.0'
