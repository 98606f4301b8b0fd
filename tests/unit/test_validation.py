import copy
import pytest
from workflow_composer.schemas.workflow import WorkflowDocument
from workflow_composer.services.validation_service import ValidationService, iter_connection_targets

def test_validate_valid_workflow(valid_document):
    report = ValidationService.validate(valid_document)
    assert report.is_valid
    assert report.errors == []
    assert report.node_count == 2
    assert report.connection_count == 1
    assert report.has_trigger

def test_validate_accepts_workflow_document_model(valid_document):
    report = ValidationService.validate(WorkflowDocument(**valid_document))
    assert report.is_valid

def test_validate_empty_nodes():
    report = ValidationService.validate({"name": "Empty", "nodes": [], "connections": {}})
    assert not report.is_valid
    assert any("at least one node" in e for e in report.errors)

def test_validate_missing_trigger(valid_document):
    document = copy.deepcopy(valid_document)
    document["nodes"] = [document["nodes"][1]]
    document["connections"] = {}
    report = ValidationService.validate(document)
    assert not report.is_valid
    assert any("must have at least one trigger node" in e for e in report.errors)

def test_validate_missing_top_level_fields():
    report = ValidationService.validate({"nodes": "nope"})
    assert "Workflow must have a name" in report.errors
    assert "Workflow must have a nodes array" in report.errors
    assert "Workflow must have a connections object" in report.errors

def test_validate_non_object_document():
    report = ValidationService.validate(["not", "a", "workflow"])
    assert not report.is_valid
    assert report.errors == ["Workflow document must be a JSON object"]

def test_validate_node_fields(valid_document):
    document = copy.deepcopy(valid_document)
    del document["nodes"][1]["type"]
    document["nodes"][1]["position"] = [1, "2"]
    report = ValidationService.validate(document)
    assert "Node 1 must have a type" in report.errors
    assert "Node 1 must have a position array with [x, y] coordinates" in report.errors

def test_validate_dangling_connection(valid_document):
    document = copy.deepcopy(valid_document)
    document["connections"]["Send Reply"] = {"main": [[{"node": "Ghost", "type": "main", "index": 0}]]}
    report = ValidationService.validate(document)
    assert not report.is_valid
    assert any("'Ghost'" in e for e in report.errors)

def test_validate_unknown_connection_source(valid_document):
    document = copy.deepcopy(valid_document)
    document["connections"] = {"Nowhere": {"main": [[{"node": "Send Reply"}]]}}
    report = ValidationService.validate(document)
    assert "Connection source node 'Nowhere' not found in nodes" in report.errors

def test_validate_connections_by_id(valid_document):
    document = copy.deepcopy(valid_document)
    document["connections"] = {"trigger-1": {"main": [[{"node": "http-1"}]]}}
    assert ValidationService.validate(document).is_valid

def test_validate_advisory_warnings(valid_document):
    report = ValidationService.validate(valid_document)
    assert not report.has_logging
    assert not report.has_error_handling
    assert len(report.warnings) == 2

    document = copy.deepcopy(valid_document)
    document["nodes"].append({
        "id": "err-1", "name": "Error Logger", "type": "n8n-nodes-base.errorTrigger", "position": [0, 0]
    })
    report = ValidationService.validate(document)
    assert report.has_logging
    assert report.has_error_handling
    assert report.warnings == []

def test_validate_is_deterministic(valid_document):
    first = ValidationService.validate(valid_document)
    second = ValidationService.validate(valid_document)
    assert first.errors == second.errors
    assert first.warnings == second.warnings

@pytest.mark.parametrize("entry,expected", [
    ({"main": [[{"node": "A"}, {"node": "B"}]]}, ["A", "B"]),
    ({"main": [[], [{"node": "C"}]]}, ["C"]),
    ({}, []),
])
def test_iter_connection_targets(entry, expected):
    assert list(iter_connection_targets(entry)) == expected

def test_validate_duplicate_node_ids(valid_document):
    document = copy.deepcopy(valid_document)
    duplicate = copy.deepcopy(document["nodes"][1])
    duplicate["name"] = "Send Second Reply"
    document["nodes"].append(duplicate)
    report = ValidationService.validate(document)
    assert not report.is_valid
    assert f"Duplicate node id '{duplicate['id']}'" in report.errors
