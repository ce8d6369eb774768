from src.worker.processors.base_processor import BaseProcessor
from src.worker.processors.side_effect_processor import SideEffectProcessor

__all__ = ["BaseProcessor", "SideEffectProcessor"]
