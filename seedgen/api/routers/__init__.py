"""
API Routers Package
Exposes all route modules for the service
"""

from . import corpus_router
from . import generation_router

__all__ = [
    "corpus_router",
    "generation_router",
]
