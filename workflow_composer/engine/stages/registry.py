from typing import Dict, List, Optional, Type, Any
from workflow_composer.core.logging import logger

# Pipeline order; each stage consumes the previous stage's output
STAGE_ORDER: List[str] = ["planner", "refiner", "optimizer", "finalizer"]

_STAGE_EXECUTOR_REGISTRY: Dict[str, Type[Any]] = {}

def register_stage(stage_name: str):
    """Decorator to register stage executors"""
    def decorator(cls):
        _STAGE_EXECUTOR_REGISTRY[stage_name] = cls
        logger.debug(f"Registered stage executor: {stage_name} -> {cls.__name__}")
        return cls
    return decorator

def get_stage_class(stage_name: str) -> Optional[Type[Any]]:
    return _STAGE_EXECUTOR_REGISTRY.get(stage_name)
