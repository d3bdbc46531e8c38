# config/urls.py

from django.contrib import admin
from django.urls import path, include

from apps.board import views as board_views

urlpatterns = [
    # Health check
    path('', board_views.health, name='health'),

    # Admin
    path('admin/', admin.site.urls),

    # API REST do Kanban
    path('api/', include('apps.board.urls')),
]

# Customizar títulos do admin
admin.site.site_header = 'Kanban Board Admin'
admin.site.site_title = 'Kanban Board'
admin.site.index_title = 'Administração do Sistema'
