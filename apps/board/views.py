# apps/board/views.py

import json
import logging
from functools import wraps

from django.http import HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from apps.core.exceptions import InvalidArgument, KanbanError, NotFound, StorageError

from .ordering import OrderingEngine

logger = logging.getLogger(__name__)


# === Serialização ===

def board_payload(board):
    return {'id': board.pk, 'title': board.title}


def column_payload(column):
    return {
        'id': column.pk,
        'title': column.title,
        'position': column.position,
        'boardId': column.board_id,
    }


def card_payload(card):
    return {
        'id': card.pk,
        'title': card.title,
        'description': card.description,
        'position': card.position,
        'columnId': card.column_id,
    }


# === Helpers ===

def ler_json(request):
    """Corpo da requisição como dict; InvalidArgument se malformado"""
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InvalidArgument('JSON inválido')
    if not isinstance(data, dict):
        raise InvalidArgument('O corpo deve ser um objeto JSON')
    return data


def api_view(view_func):
    """
    Decorador das views da API

    Traduz erros de domínio em status HTTP:
    NotFound -> 404, InvalidArgument -> 400, StorageError -> 500
    """

    @wraps(view_func)
    def wrapped_view(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except StorageError:
            logger.exception(f"❌ {request.method} {request.path} - erro de banco")
            return JsonResponse({'error': 'Erro ao acessar o banco de dados'}, status=500)
        except KanbanError as e:
            logger.warning(f"⚠️  {request.method} {request.path} - {str(e)}")
            return JsonResponse({'error': str(e)}, status=e.status_code)

    return csrf_exempt(wrapped_view)


# === Health check ===

@require_GET
def health(request):
    return HttpResponse('Server is live and healthy')


# === Board ===

@api_view
@require_GET
def board_detail(request, board_id):
    """
    Estado completo do board: {board, columns, cards}

    Board inexistente responde 200 com board null (o frontend cria o
    board em seguida).
    """
    try:
        board, columns, cards = OrderingEngine().get_board(board_id)
    except NotFound:
        return JsonResponse({'board': None})

    return JsonResponse({
        'board': board_payload(board),
        'columns': [column_payload(column) for column in columns],
        'cards': [card_payload(card) for card in cards],
    })


@api_view
@require_POST
def board_create(request):
    """Cria o board se não existir: 201 criado, 200 já existia"""
    data = ler_json(request)
    board, created = OrderingEngine().create_board(data.get('id'), data.get('title'))
    return JsonResponse(board_payload(board), status=201 if created else 200)


# === Colunas ===

@api_view
@require_POST
def column_create(request):
    data = ler_json(request)
    if not data.get('boardId'):
        raise InvalidArgument('boardId é obrigatório')

    column = OrderingEngine().append_column(data['boardId'], data.get('title'))
    return JsonResponse(column_payload(column), status=201)


@api_view
@require_http_methods(['PUT', 'DELETE'])
def column_detail(request, column_id):
    """PUT renomeia, DELETE remove a coluna e seus cards"""
    engine = OrderingEngine()

    if request.method == 'DELETE':
        engine.delete_column(column_id)
        return HttpResponse(status=204)

    data = ler_json(request)
    column = engine.rename_column(column_id, data.get('title'))
    return JsonResponse(column_payload(column))


# === Cards ===

@api_view
@require_POST
def card_create(request):
    """
    Cria card no fim da coluna

    Qualquer 'position' enviada pelo cliente é ignorada; o servidor
    usa a quantidade atual de cards da coluna.
    """
    data = ler_json(request)
    if not data.get('columnId'):
        raise InvalidArgument('columnId é obrigatório')

    card = OrderingEngine().append_card(
        data['columnId'],
        data.get('title'),
        data.get('description') or '',
    )
    return JsonResponse(card_payload(card), status=201)


@api_view
@require_http_methods(['PUT', 'DELETE'])
def card_detail(request, card_id):
    """PUT edita título/descrição, DELETE remove (idempotente)"""
    engine = OrderingEngine()

    if request.method == 'DELETE':
        try:
            engine.delete_card(card_id)
        except NotFound:
            # Delete idempotente: nada a fazer, nada a notificar
            pass
        return HttpResponse(status=204)

    data = ler_json(request)
    card = engine.update_card(card_id, title=data.get('title'), description=data.get('description'))
    return JsonResponse(card_payload(card))


@api_view
@require_http_methods(['PUT'])
def card_move(request, card_id):
    """Drag-and-drop: {newColumnId, newPosition}"""
    data = ler_json(request)
    if not data.get('newColumnId'):
        raise InvalidArgument('newColumnId é obrigatório')
    if 'newPosition' not in data:
        raise InvalidArgument('newPosition é obrigatório')

    card = OrderingEngine().move_card(card_id, data['newColumnId'], data['newPosition'])
    return JsonResponse(card_payload(card))
