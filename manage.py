#!/usr/bin/env python
"""
Django's command-line utility for administrative tasks.

Kanban Board - API colaborativa
"""

import os
import sys


def main():
    """Run administrative tasks."""

    # Configuração padrão para desenvolvimento
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

    try:
        from django.core.management import call_command, execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Are you sure it's installed and "
            "available on your PYTHONPATH environment variable? Did you "
            "forget to activate a virtual environment?"
        ) from exc

    # Comandos customizados do Kanban
    if len(sys.argv) > 1:
        command = sys.argv[1]

        # Setup inicial: migrações + board padrão
        if command == 'setup':
            import django

            django.setup()

            print("🚀 Configurando Kanban Board...")
            print("📊 Aplicando migrações...")
            call_command('migrate', interactive=False)

            print("🌱 Garantindo board padrão...")
            call_command('seed')

            print("✅ Setup concluído!")
            return

        # Reset: apaga todos os dados e recria o board padrão
        elif command == 'reset':
            import django

            confirm = input("⚠️  Isso irá apagar TODOS os dados. Continuar? (y/N): ")
            if confirm.lower() == 'y':
                django.setup()
                print("🗑️  Resetando banco de dados...")
                call_command('flush', interactive=False)
                call_command('seed')
                print("✅ Reset concluído!")
            return

    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
