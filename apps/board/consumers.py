# apps/board/consumers.py

import json
import logging

from channels.generic.websocket import AsyncWebsocketConsumer
from django.conf import settings
from django.utils import timezone

logger = logging.getLogger(__name__)


class BoardConsumer(AsyncWebsocketConsumer):
    """
    Consumer WebSocket para atualizações em tempo real do board Kanban

    Todos os clientes entram no mesmo grupo e recebem apenas o sinal
    board.updated, sem payload; o frontend refaz o GET do board.
    """

    async def connect(self):
        """Conecta o cliente ao grupo de broadcast"""
        self.group_name = settings.KANBAN_BROADCAST_GROUP

        await self.channel_layer.group_add(
            self.group_name,
            self.channel_name
        )
        await self.accept()

        logger.info(f"✅ WebSocket conectado: {self.channel_name}")

    async def disconnect(self, close_code):
        if hasattr(self, 'group_name'):
            await self.channel_layer.group_discard(
                self.group_name,
                self.channel_name
            )

        logger.info(f"🔌 WebSocket desconectado: {self.channel_name} ({close_code})")

    async def receive(self, text_data=None, bytes_data=None):
        """
        Mensagens do cliente

        Só existe o heartbeat (ping -> pong); o resto é ignorado.
        """
        try:
            data = json.loads(text_data or '')
        except json.JSONDecodeError:
            logger.error(f"❌ JSON inválido recebido via WebSocket de {self.channel_name}")
            return

        if isinstance(data, dict) and data.get('type') == 'ping':
            await self.send(text_data=json.dumps({
                'type': 'pong',
                'timestamp': timezone.now().isoformat()
            }))

    # === Handlers de eventos do grupo ===

    async def board_updated(self, event):
        """Repassa board.updated para o socket"""
        await self.send(text_data=json.dumps({'type': 'board.updated'}))
