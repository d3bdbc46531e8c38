# apps/board/routing.py

from django.urls import re_path
from . import consumers

# Rotas WebSocket para a aplicação board
websocket_urlpatterns = [
    # Canal único de broadcast: board.updated
    re_path(r'ws/board/$', consumers.BoardConsumer.as_asgi()),
]
