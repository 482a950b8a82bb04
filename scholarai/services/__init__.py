"""Service layer."""

from scholarai.services.ai_backend import AIBackend, GeminiBackend, Turn, build_backend
from scholarai.services.ai_gateway import FALLBACK_POLICIES, AIGateway, FallbackPolicy

__all__ = [
    "AIBackend",
    "AIGateway",
    "FALLBACK_POLICIES",
    "FallbackPolicy",
    "GeminiBackend",
    "Turn",
    "build_backend",
]
