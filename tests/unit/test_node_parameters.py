import pytest
from workflow_composer.schemas.node import (
    NodeKind,
    AssignmentParameters,
    GenericParameters,
    HttpRequestParameters,
    TriggerParameters,
    classify_node_type,
    is_trigger_type,
    parse_node_parameters,
)

@pytest.mark.parametrize("node_type,kind", [
    ("n8n-nodes-base.manualTrigger", NodeKind.TRIGGER),
    ("n8n-nodes-base.webhook", NodeKind.TRIGGER),
    ("n8n-nodes-base.scheduleTrigger", NodeKind.TRIGGER),
    ("n8n-nodes-base.httpRequest", NodeKind.HTTP_REQUEST),
    ("@n8n/n8n-nodes-base.set", NodeKind.ASSIGNMENT),
    ("n8n-nodes-base.if", NodeKind.CONDITION),
    ("n8n-nodes-base.switch", NodeKind.CONDITION),
    ("n8n-nodes-base.slack", NodeKind.GENERIC),
    (None, NodeKind.GENERIC),
])
def test_classify_node_type(node_type, kind):
    assert classify_node_type(node_type) == kind

def test_is_trigger_type():
    assert is_trigger_type("n8n-nodes-base.cron")
    assert not is_trigger_type("n8n-nodes-base.httpRequest")
    assert not is_trigger_type(42)

def test_parse_http_parameters():
    params = parse_node_parameters({
        "type": "n8n-nodes-base.httpRequest",
        "parameters": {"url": "https://example.com", "method": "POST", "timeout": 10},
    })
    assert isinstance(params, HttpRequestParameters)
    assert params.url == "https://example.com"
    assert params.method == "POST"

def test_parse_trigger_parameters():
    params = parse_node_parameters({"type": "n8n-nodes-base.webhook", "parameters": {"path": "hook"}})
    assert isinstance(params, TriggerParameters)
    assert params.path == "hook"

def test_parse_assignment_parameters():
    params = parse_node_parameters({
        "type": "n8n-nodes-base.set",
        "parameters": {"assignments": {"assignments": [{"name": "a", "value": 1}]}},
    })
    assert isinstance(params, AssignmentParameters)
    assert params.assignments.assignments[0].name == "a"

def test_malformed_known_parameters_fall_back_to_generic():
    params = parse_node_parameters({
        "type": "n8n-nodes-base.set",
        "parameters": {"assignments": {"assignments": [{"value": "no name"}]}},
    })
    assert isinstance(params, GenericParameters)

def test_unknown_type_is_generic():
    params = parse_node_parameters({"type": "n8n-nodes-base.slack", "parameters": {"channel": "#ops"}})
    assert isinstance(params, GenericParameters)
    assert params.values == {"channel": "#ops"}
