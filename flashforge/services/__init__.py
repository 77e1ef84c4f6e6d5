"""Services layer: generation backends and their building blocks."""

from .ai_service import AIService, AIProvider, AIConfig
from .media_service import MediaService
from .gateway import BaseGateway, GenerationGateway, ProgressCallback
from .simulated_gateway import SimulatedGateway

__all__ = [
    "AIService",
    "AIProvider",
    "AIConfig",
    "MediaService",
    "BaseGateway",
    "GenerationGateway",
    "ProgressCallback",
    "SimulatedGateway",
]
