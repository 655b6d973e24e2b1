"""Model registry: short model ids mapped to provider-side model references.

Built once at import and never mutated, so request handlers read it
without locking.
"""

from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True)
class ModelHandle:
    """A selectable Gemini model configuration."""
    key: str
    model: str  # base model name or "tunedModels/<id>" resource path


_MODELS = (
    ModelHandle(key="gemini-1.5-flash", model="gemini-1.5-flash"),
    ModelHandle(
        key="packagetestv2-nettsfkvxpqs",
        model="tunedModels/packagetestv2-nettsfkvxpqs",
    ),
)

MODEL_REGISTRY: MappingProxyType[str, ModelHandle] = MappingProxyType(
    {handle.key: handle for handle in _MODELS}
)


def get_model(name: str | None) -> ModelHandle | None:
    """Look up a model handle by id. Returns None for absent or unknown ids."""
    if not name:
        return None
    return MODEL_REGISTRY.get(name)


def available_models() -> list[str]:
    return list(MODEL_REGISTRY.keys())
