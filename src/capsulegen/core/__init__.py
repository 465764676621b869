"""Core capsulegen functionality: IR, catalog registry, coercion, resolution, dependency aggregation."""

from . import ir
from .coercion import CoercedProp, PropCoercer
from .config import GenerationConfig, load_generation_config
from .dependencies import AggregatedDependencies, DependencyAggregator, version_key
from .errors import (
    CapsuleGenError,
    CatalogError,
    ConfigError,
    GenerationFailure,
    InvalidTransitionError,
    RequestValidationError,
)
from .registry import CapsuleRegistry
from .request import parse_request
from .resolver import Resolution, ResolvedNode, ResolvedScreen, TreeResolver

__all__ = [
    "ir",
    "CapsuleGenError",
    "CatalogError",
    "ConfigError",
    "GenerationFailure",
    "InvalidTransitionError",
    "RequestValidationError",
    "CapsuleRegistry",
    "CoercedProp",
    "PropCoercer",
    "TreeResolver",
    "Resolution",
    "ResolvedNode",
    "ResolvedScreen",
    "AggregatedDependencies",
    "DependencyAggregator",
    "version_key",
    "GenerationConfig",
    "load_generation_config",
    "parse_request",
]
