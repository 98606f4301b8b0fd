from pydantic import BaseModel, ConfigDict, Field, ValidationError
from typing import List, Optional, Literal, Dict, Any, Union
from enum import Enum

class NodeKind(str, Enum):
    TRIGGER = "trigger"
    HTTP_REQUEST = "http_request"
    ASSIGNMENT = "assignment"
    CONDITION = "condition"
    GENERIC = "generic"

# Substrings of an n8n node type that mark an entry point
TRIGGER_TYPE_MARKERS = ("trigger", "webhook", "schedule", "manual", "cron")

def is_trigger_type(node_type: Any) -> bool:
    if not isinstance(node_type, str):
        return False
    lowered = node_type.lower()
    return any(marker in lowered for marker in TRIGGER_TYPE_MARKERS)

def classify_node_type(node_type: Any) -> NodeKind:
    """
    Map an n8n node type such as 'n8n-nodes-base.httpRequest' to a NodeKind.
    Only the part after the last '.' is compared, so scoped packages
    ('@n8n/n8n-nodes-base.set') resolve the same way.
    """
    if is_trigger_type(node_type):
        return NodeKind.TRIGGER
    if not isinstance(node_type, str):
        return NodeKind.GENERIC

    short_type = node_type.rsplit(".", 1)[-1].lower()
    if short_type == "httprequest":
        return NodeKind.HTTP_REQUEST
    if short_type == "set":
        return NodeKind.ASSIGNMENT
    if short_type in ("if", "switch", "filter"):
        return NodeKind.CONDITION
    return NodeKind.GENERIC

class BaseNodeParameters(BaseModel):
    model_config = ConfigDict(extra="allow")

class TriggerParameters(BaseNodeParameters):
    kind: Literal["trigger"] = "trigger"
    path: Optional[str] = None
    httpMethod: Optional[str] = None
    rule: Optional[Dict[str, Any]] = None

class HttpRequestParameters(BaseNodeParameters):
    kind: Literal["http_request"] = "http_request"
    url: Optional[str] = None
    method: str = "GET"
    sendBody: bool = False

class Assignment(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    value: Any = None
    type: Optional[str] = None

class AssignmentCollection(BaseModel):
    model_config = ConfigDict(extra="allow")

    assignments: List[Assignment] = []

class AssignmentParameters(BaseNodeParameters):
    kind: Literal["assignment"] = "assignment"
    assignments: AssignmentCollection = Field(default_factory=AssignmentCollection)

class ConditionParameters(BaseNodeParameters):
    kind: Literal["condition"] = "condition"
    conditions: Any = None

class GenericParameters(BaseModel):
    kind: Literal["generic"] = "generic"
    values: Dict[str, Any] = {}

NodeParameters = Union[
    TriggerParameters, HttpRequestParameters, AssignmentParameters,
    ConditionParameters, GenericParameters
]

_PARAMETER_MODELS = {
    NodeKind.TRIGGER: TriggerParameters,
    NodeKind.HTTP_REQUEST: HttpRequestParameters,
    NodeKind.ASSIGNMENT: AssignmentParameters,
    NodeKind.CONDITION: ConditionParameters,
}

def parse_node_parameters(node: Dict[str, Any]) -> NodeParameters:
    """
    Interpret a node's opaque parameters bag according to its type.
    Unknown types, and known types whose parameters do not fit the expected
    shape, fall back to GenericParameters.
    """
    raw = node.get("parameters") or {}
    if not isinstance(raw, dict):
        return GenericParameters(values={"value": raw})

    model = _PARAMETER_MODELS.get(classify_node_type(node.get("type")))
    if model is None:
        return GenericParameters(values=raw)

    data = {k: v for k, v in raw.items() if k != "kind"}
    try:
        return model(**data)
    except ValidationError:
        return GenericParameters(values=raw)
