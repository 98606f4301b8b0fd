from typing import Dict, Type, Any
from workflow_composer.core.logging import logger
from workflow_composer.schemas.node import NodeKind

_NODE_SIMULATOR_REGISTRY: Dict[NodeKind, Type[Any]] = {}

def register_simulator(kind: NodeKind):
    """Decorator to register node simulators"""
    def decorator(cls):
        _NODE_SIMULATOR_REGISTRY[kind] = cls
        logger.debug(f"Registered node simulator: {kind.value} -> {cls.__name__}")
        return cls
    return decorator

def get_simulator_class(kind: NodeKind):
    return _NODE_SIMULATOR_REGISTRY.get(kind, _NODE_SIMULATOR_REGISTRY.get(NodeKind.GENERIC))
