import apps.core.models
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Board',
            fields=[
                ('id', models.CharField(default=apps.core.models.gerar_id, max_length=64, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'board',
                'ordering': ['title'],
            },
        ),
        migrations.CreateModel(
            name='Column',
            fields=[
                ('id', models.CharField(default=apps.core.models.gerar_id, max_length=64, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=255)),
                ('position', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('board', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='columns', to='core.board')),
            ],
            options={
                'db_table': 'board_column',
                'ordering': ['position', 'id'],
                'indexes': [models.Index(fields=['board', 'position'], name='column_board_position_idx')],
            },
        ),
        migrations.CreateModel(
            name='Card',
            fields=[
                ('id', models.CharField(default=apps.core.models.gerar_id, max_length=64, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, default='')),
                ('position', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('column', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='cards', to='core.column')),
            ],
            options={
                'db_table': 'card',
                'ordering': ['position', 'id'],
                'indexes': [models.Index(fields=['column', 'position'], name='card_column_position_idx')],
            },
        ),
    ]
