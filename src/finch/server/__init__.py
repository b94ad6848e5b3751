"""ASGI server integration — request intake and response sending."""
