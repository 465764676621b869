"""HTTP routes for the generation engine.

Exposes the request contract (``POST /api/generate``) and read-only
catalog queries over FastAPI.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Body, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse

from capsulegen._version import get_version
from capsulegen.catalog import load_builtin_registry
from capsulegen.core.config import GenerationConfig
from capsulegen.core.errors import RequestValidationError
from capsulegen.core.ir import CapsuleDefinition, Target
from capsulegen.core.registry import CapsuleRegistry
from capsulegen.emit.runner import GenerationRunner

logger = logging.getLogger(__name__)

EXAMPLE_REQUEST: dict[str, Any] = {
    "name": "My App",
    "version": "1.0.0",
    "targets": ["web", "ios"],
    "theme": {"colors": {"primary": "#6366F1", "background": "#FFFFFF"}},
    "screens": [
        {
            "id": "home",
            "name": "Home",
            "root": {
                "id": "welcome-card",
                "capsuleId": "card",
                "props": {"title": "Welcome"},
                "children": [
                    {
                        "id": "start-button",
                        "capsuleId": "button",
                        "props": {"text": "Get Started", "onPress": "navigate"},
                        "children": [],
                    }
                ],
            },
        }
    ],
}


def capsule_summary(capsule: CapsuleDefinition) -> dict[str, Any]:
    """Catalog listing entry (no source code)."""
    return {
        "id": capsule.id,
        "name": capsule.name,
        "category": capsule.category,
        "description": capsule.description,
        "version": capsule.version,
        "tags": capsule.tags,
        "targets": [t.value for t in capsule.supported_targets],
    }


def capsule_detail(capsule: CapsuleDefinition) -> dict[str, Any]:
    """Full capsule schema including per-target declarations."""
    data = capsule.model_dump(by_alias=True, mode="json")
    data["targets"] = [t.value for t in capsule.supported_targets]
    return data


def create_generate_router(runner: GenerationRunner) -> APIRouter:
    """Create the generation router.

    Args:
        runner: Runner shared by all requests; it holds only immutable state.
    """
    router = APIRouter(prefix="/api/generate", tags=["Generation"])

    # Sync handler: generation is CPU-bound and runs in FastAPI's threadpool
    @router.post("")
    def generate(payload: Any = Body(None)) -> JSONResponse:
        """Generate project files for every requested target."""
        try:
            response = runner.run_request(payload)
        except RequestValidationError as e:
            logger.info("Rejected generation request: %s", e)
            return JSONResponse(
                status_code=400,
                content={"error": e.message, "details": e.details},
            )
        return JSONResponse(content=response.model_dump(by_alias=True, mode="json"))

    @router.get("")
    def describe() -> dict[str, Any]:
        """Describe the endpoint and show an example request."""
        return {
            "endpoint": "/api/generate",
            "method": "POST",
            "description": "Generate native project files from a composed screen description",
            "targets": [t.value for t in Target],
            "example": EXAMPLE_REQUEST,
        }

    return router


def create_capsule_router(registry: CapsuleRegistry) -> APIRouter:
    """Create the read-only catalog router."""
    router = APIRouter(prefix="/api/capsules", tags=["Catalog"])

    @router.get("")
    def list_capsules(
        target: Target | None = Query(None, description="Only capsules implemented for this target"),
        category: str | None = Query(None, description="Only capsules in this category"),
        q: str | None = Query(None, description="Free-text search"),
    ) -> dict[str, Any]:
        """List catalog capsules."""
        capsules = registry.search(q) if q else registry.list()
        capsules = [
            c
            for c in capsules
            if (target is None or registry.supports(c.id, target))
            and (category is None or c.category == category)
        ]
        return {
            "capsules": [capsule_summary(c) for c in capsules],
            "total": len(capsules),
            "categories": registry.categories(),
        }

    @router.get("/{capsule_id}")
    def get_capsule(capsule_id: str) -> dict[str, Any]:
        """Get one capsule's schema and supported targets."""
        capsule = registry.lookup(capsule_id)
        if capsule is None:
            raise HTTPException(status_code=404, detail=f"Capsule '{capsule_id}' not found")
        return capsule_detail(capsule)

    return router


def create_app(
    registry: CapsuleRegistry | None = None,
    config: GenerationConfig | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        registry: Capsule catalog (built-in catalog when not provided)
        config: Engine configuration (defaults when not provided)

    Returns:
        Configured FastAPI application
    """
    config = config or GenerationConfig()
    if registry is None:
        registry = load_builtin_registry(config.get_catalog_paths(Path.cwd()) or None)

    runner = GenerationRunner(registry, config)

    app = FastAPI(
        title="capsulegen",
        description="Multi-target source generation from composed UI capsules",
        version=get_version(),
    )

    @app.get("/health", tags=["System"], summary="Health check")
    def health() -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "healthy", "capsules": len(registry)}

    app.include_router(create_generate_router(runner))
    app.include_router(create_capsule_router(registry))
    return app
