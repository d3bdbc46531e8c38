# apps/board/urls.py

from django.urls import path
from . import views

app_name = 'board'

urlpatterns = [
    # Board
    path('board', views.board_create, name='board_create'),
    path('board/<str:board_id>', views.board_detail, name='board_detail'),

    # Colunas
    path('column', views.column_create, name='column_create'),
    path('column/<str:column_id>', views.column_detail, name='column_detail'),

    # Cards
    path('card', views.card_create, name='card_create'),
    path('card/<str:card_id>', views.card_detail, name='card_detail'),

    # Drag-and-drop
    path('card/<str:card_id>/move', views.card_move, name='card_move'),
]
