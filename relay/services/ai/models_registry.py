"""
AI Models Registry - Static Model Catalog

Maps every model identifier the relay accepts to its display name and the
provider class that serves it. Loaded once at import and never mutated.
"""

from types import MappingProxyType

from relay.core.models import ProviderClass
from relay.services.ai.types import ModelDescriptor

DEFAULT_MODEL_ID = "dtempire"

# Order here is the order /api/models lists them in
_MODELS: tuple[ModelDescriptor, ...] = (
    ModelDescriptor("dtempire", "DTempire AI (Default)", ProviderClass.DEFAULT),
    ModelDescriptor("deepseek", "DeepSeek", ProviderClass.POOLED),
    ModelDescriptor("llama", "Llama", ProviderClass.POOLED),
    ModelDescriptor("nemotron", "Nemotron", ProviderClass.POOLED),
    ModelDescriptor("gemma", "Gemma", ProviderClass.POOLED),
    ModelDescriptor("qwen", "Qwen", ProviderClass.POOLED),
    ModelDescriptor("axentra", "Axentra", ProviderClass.POOLED),
    ModelDescriptor("grok", "Grok", ProviderClass.POOLED),
    ModelDescriptor("popcat", "PopCat", ProviderClass.POOLED),
    ModelDescriptor("claude", "Claude", ProviderClass.POOLED),
    ModelDescriptor("gpt5", "GPT-5", ProviderClass.POOLED),
    ModelDescriptor("img_flux", "Image Flux", ProviderClass.IMAGE_GEN),
    ModelDescriptor("img_turbo", "Image Turbo", ProviderClass.IMAGE_GEN),
    ModelDescriptor("img_gpt", "Image GPT", ProviderClass.IMAGE_GEN),
    ModelDescriptor("img_stable", "Image Stable", ProviderClass.IMAGE_GEN),
)


def _build_index(models: tuple[ModelDescriptor, ...]) -> MappingProxyType:
    index: dict[str, ModelDescriptor] = {}
    for descriptor in models:
        if descriptor.id in index:
            raise ValueError(f"Duplicate model id in registry: {descriptor.id}")
        index[descriptor.id] = descriptor
    return MappingProxyType(index)


class ModelsRegistry:
    """Read-only lookup from model id to descriptor."""

    def __init__(self, models: tuple[ModelDescriptor, ...] = _MODELS):
        self._index = _build_index(models)

    def resolve(self, model_id: str) -> ModelDescriptor | None:
        """Exact, case-sensitive lookup. Returns None for unknown ids."""
        return self._index.get(model_id)

    def model_ids(self) -> list[str]:
        return list(self._index)

    def list_models(self) -> dict[str, str]:
        """Return ``{id: display_name}`` in registry order."""
        return {d.id: d.display_name for d in self._index.values()}

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._index

    def __len__(self) -> int:
        return len(self._index)


# Global registry instance
registry = ModelsRegistry()


def resolve(model_id: str) -> ModelDescriptor | None:
    """Resolve a model id against the global registry."""
    return registry.resolve(model_id)
