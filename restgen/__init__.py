"""REST slice generator package."""

from .hub import (
    GenerationResult,
    RestGenConfig,
    RestGenHub,
)
from .models import (
    ClassDescriptor,
    FieldSpec,
    GeneratedArtifact,
    GenerationContext,
    Message,
    RestGenError,
)

__all__ = [
    "ClassDescriptor",
    "FieldSpec",
    "GeneratedArtifact",
    "GenerationContext",
    "GenerationResult",
    "Message",
    "RestGenConfig",
    "RestGenError",
    "RestGenHub",
]
