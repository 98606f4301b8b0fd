from workflow_composer.engine.simulation.base import BaseNodeSimulator, NodeSimulation
from workflow_composer.engine.simulation.registry import register_simulator
from workflow_composer.schemas.node import NodeKind, TriggerParameters

@register_simulator(NodeKind.TRIGGER)
class TriggerNodeSimulator(BaseNodeSimulator):
    def simulate(self) -> NodeSimulation:
        output = {
            "message": f"{self.name or 'Trigger'} activated",
            "trigger_type": self.node_type,
            "timestamp": self.now(),
        }
        if isinstance(self.parameters, TriggerParameters) and self.parameters.path:
            output["webhook_path"] = self.parameters.path
        return NodeSimulation(success=True, output=output)
