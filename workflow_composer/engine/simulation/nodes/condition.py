from workflow_composer.engine.simulation.base import BaseNodeSimulator, NodeSimulation
from workflow_composer.engine.simulation.registry import register_simulator
from workflow_composer.schemas.node import NodeKind, ConditionParameters

@register_simulator(NodeKind.CONDITION)
class ConditionNodeSimulator(BaseNodeSimulator):
    def simulate(self) -> NodeSimulation:
        # Conditions are not evaluated; the true branch is always reported
        condition = "simulated_condition"
        if isinstance(self.parameters, ConditionParameters) and self.parameters.conditions:
            condition = self.parameters.conditions

        return NodeSimulation(
            success=True,
            output={"condition_result": True, "path_taken": "true", "condition": condition},
        )
