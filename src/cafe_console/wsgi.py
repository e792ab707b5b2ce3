"""
WSGI entrypoint: ``gunicorn cafe_console.wsgi:app``.
"""

from cafe_console.app import create_app

app = create_app()
