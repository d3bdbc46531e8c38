# apps/core/management/commands/seed.py

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.db import connection

from apps.board.ordering import OrderingEngine, is_contiguous
from apps.core.models import Column


class Command(BaseCommand):
    help = 'Garante o board padrão e verifica a ordenação contígua de todas as colunas'

    def add_arguments(self, parser):
        parser.add_argument(
            '--reparar',
            action='store_true',
            help='Reindexa (0..n-1) as colunas com positions quebradas',
        )

    def handle(self, *args, **options):
        self.stdout.write('🔍 Executando verificação de integridade do sistema...')

        engine = OrderingEngine()

        # Teste 1: Conectividade básica
        self._testar_conectividade_banco()

        # Passo 2: Board padrão
        board, created = engine.create_board(
            settings.KANBAN_DEFAULT_BOARD_ID,
            settings.KANBAN_DEFAULT_BOARD_TITLE,
        )
        if created:
            self.stdout.write(f'  🆕 Board padrão "{board.title}" criado ({board.pk})')
        else:
            self.stdout.write(f'  ✅ Board padrão já existe ({board.pk})')

        # Passo 3: Invariante de ordenação por coluna
        quebradas = self._verificar_colunas(engine)

        if not quebradas:
            self.stdout.write(self.style.SUCCESS('\n✅ SISTEMA VERIFICADO: todas as colunas estão contíguas'))
            return

        if not options['reparar']:
            self.stdout.write(
                self.style.WARNING(
                    f'\n⚠️  {len(quebradas)} coluna(s) com ordenação quebrada. '
                    'Execute com --reparar para reindexar.'
                )
            )
            return

        for column in quebradas:
            corrigidos = engine.normalize_column(column.pk)
            self.stdout.write(f'  🔧 {column.title}: {corrigidos} card(s) reposicionados')

        self.stdout.write(self.style.SUCCESS(f'\n✅ {len(quebradas)} coluna(s) reparada(s)'))

    def _testar_conectividade_banco(self):
        """Testa conectividade básica"""
        self.stdout.write('  🔗 Testando conectividade do banco...')

        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            result = cursor.fetchone()

            if result[0] != 1:
                raise CommandError("Banco não está respondendo corretamente")

    def _verificar_colunas(self, engine):
        """Retorna as colunas cujas positions não são exatamente 0..n-1"""
        self.stdout.write('  🏗️  Verificando ordenação dos cards...')

        quebradas = []
        for column in Column.objects.order_by('board_id', 'position'):
            positions = engine.column_positions(column.pk)
            if not is_contiguous(positions):
                self.stdout.write(
                    self.style.ERROR(f'  ❌ {column.title} ({column.pk}): positions {positions}')
                )
                quebradas.append(column)

        return quebradas
