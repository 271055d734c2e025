"""WSGI entry point for gunicorn (``authcore.wsgi:app``)."""

from authcore import create_app

app = create_app()
