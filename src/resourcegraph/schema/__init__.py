"""Schema synthesis: resource descriptors to GraphQL types."""

from .builder import synthesize_schema
from .context import SynthesisContext
from .registry import TypeRegistry, TypeRegistryEntry

__all__ = ["synthesize_schema", "SynthesisContext", "TypeRegistry", "TypeRegistryEntry"]
