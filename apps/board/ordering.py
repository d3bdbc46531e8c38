# apps/board/ordering.py

"""
Motor de ordenação do Kanban

Mantém, para cada coluna, as positions dos cards exatamente em
{0, 1, ..., n-1} (sem buracos, sem repetição). O mesmo vale para as
colunas dentro de um board.

Regras:
- Toda operação roda em uma única transação (transaction.atomic)
- Antes de reindexar, a transação trava com SELECT ... FOR UPDATE as
  linhas "pai" afetadas (colunas para cards, board para colunas),
  sempre em ordem de pk. Dois moves na mesma coluna ficam serializados,
  moves em colunas diferentes não disputam lock.
- Cada mutação bem sucedida agenda exatamente um notify_changed()
  via transaction.on_commit
"""

import logging
from contextlib import contextmanager

from django.db import DEFAULT_DB_ALIAS, DatabaseError, transaction
from django.db.models import F

from apps.core.exceptions import InvalidArgument, NotFound, StorageError
from apps.core.models import Board, Card, Column

from .notifier import notify_changed

logger = logging.getLogger(__name__)

DEFAULT_BOARD_TITLE = 'My Kanban'


def _as_position(value):
    """Valida uma posição vinda do cliente (inteiro >= 0)"""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"Posição inválida: {value!r}")
    if value < 0:
        raise InvalidArgument(f"Posição não pode ser negativa: {value}")
    return value


def _as_id(value, field='id'):
    """Ids são strings opacas não vazias"""
    if not isinstance(value, str) or not value:
        raise InvalidArgument(f"{field} inválido: {value!r}")
    return value


def _as_title(value):
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgument("Título é obrigatório")
    return value


def is_contiguous(positions):
    """True se positions é exatamente {0, ..., n-1}"""
    positions = list(positions)
    return sorted(positions) == list(range(len(positions)))


class OrderingEngine:
    """
    Operações que alteram board, colunas e cards

    O handle do banco (alias em settings.DATABASES) e o notificador são
    passados explicitamente; o ciclo de vida da conexão fica com o Django.
    """

    def __init__(self, using=DEFAULT_DB_ALIAS, notifier=None):
        self.using = using
        self.notifier = notifier or notify_changed

    # === Infraestrutura ===

    @contextmanager
    def _atomic(self):
        """Transação única; erros de banco viram StorageError"""
        try:
            with transaction.atomic(using=self.using):
                yield
        except DatabaseError as e:
            logger.error(f"❌ Erro de banco, transação desfeita: {str(e)}")
            raise StorageError(str(e)) from e

    def _notify_on_commit(self):
        transaction.on_commit(self.notifier, using=self.using)

    def _cards(self):
        return Card.objects.using(self.using)

    def _columns(self):
        return Column.objects.using(self.using)

    @staticmethod
    def _shift(queryset, delta):
        """Desloca em um único UPDATE a position de todas as linhas do queryset"""
        return queryset.update(position=F('position') + delta)

    def _get_card(self, card_id, for_update=False):
        queryset = self._cards()
        if for_update:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(pk=card_id)
        except Card.DoesNotExist:
            raise NotFound(f"Card {card_id} não encontrado")

    def _get_column(self, column_id, for_update=False):
        queryset = self._columns()
        if for_update:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(pk=column_id)
        except Column.DoesNotExist:
            raise NotFound(f"Coluna {column_id} não encontrada")

    def _lock_board(self, board_id):
        try:
            return Board.objects.using(self.using).select_for_update().get(pk=board_id)
        except Board.DoesNotExist:
            raise NotFound(f"Board {board_id} não encontrado")

    def _lock_columns(self, *column_ids):
        """
        Trava as colunas em ordem de pk

        Retorna {pk: Column}. NotFound se alguma não existir.
        """
        wanted = sorted(set(column_ids))
        columns = {
            column.pk: column
            for column in self._columns().select_for_update().filter(pk__in=wanted).order_by('pk')
        }
        for column_id in wanted:
            if column_id not in columns:
                raise NotFound(f"Coluna {column_id} não encontrada")
        return columns

    def _lock_card(self, card_id, *other_column_ids):
        """
        Trava a coluna atual do card (e as extras) e relê o card sob lock

        Se outro move trocou o card de coluna entre a leitura e o lock,
        o conjunto de colunas travadas é ampliado e o card relido.
        """
        card = self._get_card(card_id)
        column_ids = {card.column_id, *other_column_ids}
        while True:
            columns = self._lock_columns(*column_ids)
            card = self._get_card(card_id, for_update=True)
            if card.column_id in columns:
                return card, columns
            column_ids.add(card.column_id)

    # === Cards ===

    def append_card(self, column_id, title, description=''):
        """
        Insere card no fim da coluna

        A posição é sempre a quantidade atual de cards da coluna,
        calculada aqui; o cliente não escolhe a posição.
        """
        column_id = _as_id(column_id, 'columnId')
        title = _as_title(title)
        with self._atomic():
            self._lock_columns(column_id)
            position = self._cards().filter(column_id=column_id).count()
            card = self._cards().create(
                title=title,
                description=description or '',
                position=position,
                column_id=column_id,
            )
            self._notify_on_commit()

        logger.info(f"🆕 Card {card.pk} criado na coluna {column_id} (posição {position})")
        return card

    def update_card(self, card_id, title=None, description=None):
        """Edita título/descrição; não mexe na ordenação"""
        if title is not None:
            title = _as_title(title)

        with self._atomic():
            card = self._get_card(card_id, for_update=True)
            update_fields = ['updated_at']
            if title is not None:
                card.title = title
                update_fields.append('title')
            if description is not None:
                card.description = description
                update_fields.append('description')
            card.save(update_fields=update_fields)
            self._notify_on_commit()

        logger.info(f"✏️  Card {card_id} atualizado")
        return card

    def delete_card(self, card_id):
        """
        Remove o card e fecha o buraco na coluna

        NotFound se o card não existir (nenhuma escrita é feita).
        """
        with self._atomic():
            card, _ = self._lock_card(card_id)
            column_id, position = card.column_id, card.position
            card.delete()
            shifted = self._shift(
                self._cards().filter(column_id=column_id, position__gt=position),
                -1
            )
            self._notify_on_commit()

        logger.info(f"🗑️  Card {card_id} removido da coluna {column_id} ({shifted} reindexados)")

    def move_card(self, card_id, new_column_id, new_position):
        """
        Move o card para new_position em new_column_id

        Mesma coluna: desloca o intervalo entre a posição antiga e a nova.
        Outra coluna: fecha o buraco na origem e abre espaço no destino.
        new_position deve estar em [0, tamanho do destino após o move].
        """
        new_column_id = _as_id(new_column_id, 'newColumnId')
        new_position = _as_position(new_position)

        with self._atomic():
            card, _ = self._lock_card(card_id, new_column_id)
            old_column_id, old_position = card.column_id, card.position
            same_column = old_column_id == new_column_id

            destination = self._cards().filter(column_id=new_column_id)
            count = destination.count()
            limit = count - 1 if same_column else count
            if new_position > limit:
                raise InvalidArgument(
                    f"Posição {new_position} fora do intervalo 0..{limit} da coluna {new_column_id}"
                )

            if same_column:
                if new_position > old_position:
                    # Descendo: quem estava entre as posições sobe uma casa
                    self._shift(
                        destination.filter(position__gt=old_position, position__lte=new_position),
                        -1
                    )
                elif new_position < old_position:
                    # Subindo: quem estava entre as posições desce uma casa
                    self._shift(
                        destination.filter(position__gte=new_position, position__lt=old_position),
                        1
                    )
            else:
                self._shift(
                    self._cards().filter(column_id=old_column_id, position__gt=old_position),
                    -1
                )
                self._shift(destination.filter(position__gte=new_position), 1)

            if not same_column or new_position != old_position:
                card.column_id = new_column_id
                card.position = new_position
                card.save(update_fields=['column', 'position', 'updated_at'])

            self._notify_on_commit()

        logger.info(
            f"🔀 Card {card_id} movido de {old_column_id}:{old_position} "
            f"para {new_column_id}:{new_position}"
        )
        return card

    def normalize_column(self, column_id):
        """
        Reescreve as positions da coluna como 0..n-1

        Mantém a ordem atual (empate decidido pelo id). Retorna quantos
        cards tiveram a posição alterada.
        """
        with self._atomic():
            self._lock_columns(column_id)
            changed = 0
            cards = self._cards().filter(column_id=column_id).order_by('position', 'pk')
            for index, card in enumerate(cards):
                if card.position != index:
                    self._cards().filter(pk=card.pk).update(position=index)
                    changed += 1
            if changed:
                self._notify_on_commit()

        if changed:
            logger.warning(f"🔧 Coluna {column_id} reindexada ({changed} cards corrigidos)")
        return changed

    def column_positions(self, column_id):
        """Positions atuais dos cards da coluna, na ordem de exibição"""
        return list(
            self._cards().filter(column_id=column_id).order_by('position', 'pk')
            .values_list('position', flat=True)
        )

    # === Colunas ===

    def append_column(self, board_id, title):
        """Cria coluna no fim do board"""
        board_id = _as_id(board_id, 'boardId')
        title = _as_title(title)
        with self._atomic():
            self._lock_board(board_id)
            position = self._columns().filter(board_id=board_id).count()
            column = self._columns().create(title=title, position=position, board_id=board_id)
            self._notify_on_commit()

        logger.info(f"🆕 Coluna {column.pk} criada no board {board_id} (posição {position})")
        return column

    def rename_column(self, column_id, title):
        title = _as_title(title)
        with self._atomic():
            column = self._get_column(column_id, for_update=True)
            column.title = title
            column.save(update_fields=['title', 'updated_at'])
            self._notify_on_commit()

        logger.info(f"✏️  Coluna {column_id} renomeada")
        return column

    def delete_column(self, column_id):
        """Remove a coluna (e seus cards) e fecha o buraco no board"""
        with self._atomic():
            board_id = self._get_column(column_id).board_id
            self._lock_board(board_id)
            column = self._get_column(column_id, for_update=True)
            position = column.position
            column.delete()
            self._shift(
                self._columns().filter(board_id=board_id, position__gt=position),
                -1
            )
            self._notify_on_commit()

        logger.info(f"🗑️  Coluna {column_id} removida do board {board_id}")

    # === Board ===

    def create_board(self, board_id=None, title=None):
        """
        Busca ou cria o board

        Retorna (board, created). Sem board_id um id novo é gerado.
        """
        if board_id is not None:
            board_id = _as_id(board_id)
        title = title or DEFAULT_BOARD_TITLE
        with self._atomic():
            boards = Board.objects.using(self.using)
            if board_id is None:
                board, created = boards.create(title=title), True
            else:
                board, created = boards.get_or_create(pk=board_id, defaults={'title': title})
            self._notify_on_commit()

        if created:
            logger.info(f"🆕 Board {board.pk} criado")
        return board, created

    def get_board(self, board_id):
        """
        Estado completo do board para o cliente

        Retorna (board, columns, cards) com colunas por position e cards
        por (position da coluna, position do card).
        """
        try:
            board = Board.objects.using(self.using).get(pk=board_id)
        except Board.DoesNotExist:
            raise NotFound(f"Board {board_id} não encontrado")

        columns = list(self._columns().filter(board=board).order_by('position', 'pk'))
        cards = list(
            self._cards().filter(column__board=board)
            .order_by('column__position', 'column_id', 'position', 'pk')
        )
        return board, columns, cards
