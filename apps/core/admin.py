# apps/core/admin.py

from django.contrib import admin
from django.db import transaction
from django.db.models import Count

from apps.board.notifier import notify_changed
from apps.board.ordering import OrderingEngine

from .models import Board, Column, Card


class ColumnInline(admin.TabularInline):
    model = Column
    extra = 0
    can_delete = False
    fields = ['title', 'position']
    readonly_fields = ['title', 'position']
    ordering = ['position']

    def has_add_permission(self, request, obj=None):
        return False


class CardInline(admin.TabularInline):
    model = Card
    extra = 0
    can_delete = False
    fields = ['title', 'position']
    readonly_fields = ['title', 'position']
    ordering = ['position']

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Board)
class BoardAdmin(admin.ModelAdmin):
    """Admin de boards"""

    list_display = ['id', 'title', 'total_colunas', 'created_at']
    search_fields = ['id', 'title']
    inlines = [ColumnInline]

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(num_colunas=Count('columns'))

    def total_colunas(self, obj):
        return obj.num_colunas

    total_colunas.short_description = 'Colunas'
    total_colunas.admin_order_field = 'num_colunas'

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        transaction.on_commit(notify_changed)

    def delete_model(self, request, obj):
        super().delete_model(request, obj)
        transaction.on_commit(notify_changed)


@admin.register(Column)
class ColumnAdmin(admin.ModelAdmin):
    """
    Admin de colunas

    position e board são somente leitura: reordenação passa pelo
    OrderingEngine, que também avisa os clientes conectados
    """

    list_display = ['title', 'board', 'position', 'total_cards']
    list_filter = ['board']
    search_fields = ['title']
    ordering = ['board', 'position']
    readonly_fields = ['id', 'board', 'position']
    inlines = [CardInline]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(num_cards=Count('cards'))

    def total_cards(self, obj):
        return obj.num_cards

    total_cards.short_description = 'Cards'
    total_cards.admin_order_field = 'num_cards'

    def save_model(self, request, obj, form, change):
        OrderingEngine().rename_column(obj.pk, obj.title)


@admin.register(Card)
class CardAdmin(admin.ModelAdmin):
    list_display = ['title', 'column', 'position', 'updated_at']
    list_filter = ['column__board']
    search_fields = ['title', 'description']
    ordering = ['column', 'position']
    readonly_fields = ['id', 'column', 'position']

    # Criar e remover cards só pela API, que mantém a ordenação
    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def save_model(self, request, obj, form, change):
        OrderingEngine().update_card(obj.pk, title=obj.title, description=obj.description)
