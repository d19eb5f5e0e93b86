# core - 流水线模块
from beamfront.backend.core.enhancer import MvdrEnhancer, EnhancementResult

__all__ = ["MvdrEnhancer", "EnhancementResult"]
