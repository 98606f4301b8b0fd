from workflow_composer.engine.simulation.base import BaseNodeSimulator, NodeSimulation
from workflow_composer.engine.simulation.registry import register_simulator
from workflow_composer.schemas.node import NodeKind, HttpRequestParameters, GenericParameters

@register_simulator(NodeKind.HTTP_REQUEST)
class HttpRequestNodeSimulator(BaseNodeSimulator):
    def simulate(self) -> NodeSimulation:
        if isinstance(self.parameters, HttpRequestParameters):
            url, method = self.parameters.url, self.parameters.method
        elif isinstance(self.parameters, GenericParameters):
            url, method = self.parameters.values.get("url"), self.parameters.values.get("method", "GET")
        else:
            url, method = None, "GET"

        if not url:
            return NodeSimulation(success=False, errors=["HTTP Request node missing URL parameter"])

        # No request leaves the process: the response is synthetic
        return NodeSimulation(
            success=True,
            output={
                "statusCode": 200,
                "body": {"simulated": True, "url": url, "method": str(method).upper()},
                "headers": {"content-type": "application/json"},
            },
        )
