"""HTTP API for capsulegen."""

from .routes import create_app, create_capsule_router, create_generate_router

__all__ = ["create_app", "create_capsule_router", "create_generate_router"]
