# apps/board/notifier.py

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings

logger = logging.getLogger(__name__)

BOARD_UPDATED = 'board.updated'


def notify_changed():
    """
    Avisa todos os clientes conectados que o board mudou

    Sinal sem payload: o cliente apenas refaz o GET do board.
    Fire-and-forget: falha no channel layer é registrada em log e
    nunca chega até quem fez a mutação.
    """
    channel_layer = get_channel_layer()
    if channel_layer is None:
        logger.warning("⚠️  CHANNEL_LAYERS não configurado - board.updated não enviado")
        return

    try:
        async_to_sync(channel_layer.group_send)(
            settings.KANBAN_BROADCAST_GROUP,
            {'type': BOARD_UPDATED}
        )
    except Exception as e:
        logger.error(f"❌ Erro ao emitir board.updated: {str(e)}")
        return

    logger.info("📣 Mudança detectada, board.updated emitido")
