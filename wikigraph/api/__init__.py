"""API routers for the Wikigraph content graph service."""

from wikigraph.api.articles import router as articles_router
from wikigraph.api.graph import router as graph_router
from wikigraph.api.imports import router as imports_router
from wikigraph.api.versions import router as versions_router

__all__ = [
    "articles_router",
    "graph_router",
    "imports_router",
    "versions_router",
]
