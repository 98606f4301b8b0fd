from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import random

from pydantic import BaseModel

from workflow_composer.schemas.node import NodeParameters, parse_node_parameters

class NodeSimulation(BaseModel):
    success: bool
    output: Dict[str, Any] = {}
    errors: List[str] = []
    warnings: List[str] = []

class BaseNodeSimulator(ABC):
    def __init__(self, node: Dict[str, Any], rng: Optional[random.Random] = None):
        self.node = node
        self.node_id = node.get("id")
        self.name = node.get("name")
        self.node_type = node.get("type")
        self.parameters: NodeParameters = parse_node_parameters(node)
        self.rng = rng or random.Random()

    @staticmethod
    def now() -> str:
        return datetime.now(timezone.utc).isoformat()

    @abstractmethod
    def simulate(self) -> NodeSimulation:
        """
        Produce a synthetic output for this node without side effects.
        """
        pass

    def credential_warnings(self) -> List[str]:
        credentials = self.node.get("credentials")
        if not isinstance(credentials, dict):
            return []
        return [
            f"Node requires credential of type '{cred_type}' - not validated in dry run"
            for cred_type in credentials
        ]

    def run(self) -> NodeSimulation:
        result = self.simulate()
        warnings = self.credential_warnings()
        if warnings:
            result = result.model_copy(update={"warnings": result.warnings + warnings})
        return result
