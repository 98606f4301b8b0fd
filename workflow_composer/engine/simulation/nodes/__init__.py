from .trigger import TriggerNodeSimulator
from .http_request import HttpRequestNodeSimulator
from .assignment import AssignmentNodeSimulator
from .condition import ConditionNodeSimulator
from .generic import GenericNodeSimulator

__all__ = [
    "TriggerNodeSimulator",
    "HttpRequestNodeSimulator",
    "AssignmentNodeSimulator",
    "ConditionNodeSimulator",
    "GenericNodeSimulator",
]
