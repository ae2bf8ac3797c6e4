"""
ASGI entry point.

    uvicorn billharmony.main:app --reload
"""
from billharmony.core.application import create_application
from billharmony.core.setup import setup_application

setup_application()

app = create_application()
