from workflow_composer.engine.simulation.base import BaseNodeSimulator, NodeSimulation
from workflow_composer.engine.simulation.registry import register_simulator
from workflow_composer.schemas.node import NodeKind

@register_simulator(NodeKind.GENERIC)
class GenericNodeSimulator(BaseNodeSimulator):
    def simulate(self) -> NodeSimulation:
        return NodeSimulation(
            success=True,
            output={
                "simulated": True,
                "node_type": self.node_type,
                "parameters": self.node.get("parameters") or {},
                "execution_time": self.rng.randint(100, 1099),
            },
        )
