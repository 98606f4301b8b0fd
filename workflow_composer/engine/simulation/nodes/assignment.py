from typing import Any, Dict
from workflow_composer.engine.simulation.base import BaseNodeSimulator, NodeSimulation
from workflow_composer.engine.simulation.registry import register_simulator
from workflow_composer.schemas.node import NodeKind, AssignmentParameters

@register_simulator(NodeKind.ASSIGNMENT)
class AssignmentNodeSimulator(BaseNodeSimulator):
    def simulate(self) -> NodeSimulation:
        output: Dict[str, Any] = {}
        if isinstance(self.parameters, AssignmentParameters):
            for assignment in self.parameters.assignments.assignments:
                value = assignment.value
                output[assignment.name] = value if value not in (None, "") else "simulated_value"
        output["node_name"] = self.name
        return NodeSimulation(success=True, output=output)
