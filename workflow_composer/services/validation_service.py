from typing import List, Dict, Any, Iterator, Set, Union
from datetime import datetime, timezone
from numbers import Number

from workflow_composer.schemas.node import is_trigger_type
from workflow_composer.schemas.workflow import ValidationReport, WorkflowDocument

LOGGING_MARKERS = ("log", "monitor")
ERROR_MARKERS = ("error",)

def _text(value: Any) -> str:
    return value.lower() if isinstance(value, str) else ""

def _matches(node: Dict[str, Any], markers) -> bool:
    node_type, name = _text(node.get("type")), _text(node.get("name"))
    return any(m in node_type or m in name for m in markers)

def _is_coordinate(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)

def iter_connection_targets(value: Any) -> Iterator[Any]:
    """
    Walk a source node's connection entry, e.g.
    {"main": [[{"node": "Send", "type": "main", "index": 0}]]}
    and yield every referenced target node.
    """
    if isinstance(value, dict):
        if "node" in value:
            yield value["node"]
        for key, child in value.items():
            if key != "node":
                yield from iter_connection_targets(child)
    elif isinstance(value, list):
        for item in value:
            yield from iter_connection_targets(item)

class ValidationService:
    @staticmethod
    def validate(document: Union[WorkflowDocument, Dict[str, Any], Any]) -> ValidationReport:
        """
        Check a workflow document for structural and semantic problems.
        Pure: no I/O, and the same document always yields the same errors
        and warnings.
        """
        if isinstance(document, WorkflowDocument):
            document = document.model_dump()

        errors: List[str] = []
        warnings: List[str] = []

        if not isinstance(document, dict):
            return ValidationReport(
                is_valid=False,
                errors=["Workflow document must be a JSON object"],
                timestamp=datetime.now(timezone.utc),
            )

        # 1. Top-level fields
        name = document.get("name")
        if not isinstance(name, str) or not name.strip():
            errors.append("Workflow must have a name")

        nodes = document.get("nodes")
        if not isinstance(nodes, list):
            errors.append("Workflow must have a nodes array")
            nodes = []
        elif len(nodes) == 0:
            errors.append("Workflow must have at least one node (nodes array is empty)")

        connections = document.get("connections")
        if connections is None:
            errors.append("Workflow must have a connections object")
            connections = {}
        elif not isinstance(connections, dict):
            errors.append("Workflow connections must be an object keyed by source node")
            connections = {}

        # 2. Node fields
        valid_nodes = []
        seen_ids = set()
        for i, node in enumerate(nodes):
            if not isinstance(node, dict):
                errors.append(f"Node {i} must be an object")
                continue
            valid_nodes.append(node)

            for field in ("id", "name", "type"):
                value = node.get(field)
                if not isinstance(value, str) or not value.strip():
                    errors.append(f"Node {i} must have a {field}")

            node_id = node.get("id")
            if isinstance(node_id, str) and node_id.strip():
                if node_id in seen_ids:
                    errors.append(f"Duplicate node id '{node_id}'")
                seen_ids.add(node_id)

            position = node.get("position")
            if not (
                isinstance(position, (list, tuple))
                and len(position) == 2
                and all(_is_coordinate(c) for c in position)
            ):
                errors.append(f"Node {i} must have a position array with [x, y] coordinates")

        # 3. Entry point and advisory checks
        has_trigger = any(is_trigger_type(n.get("type")) for n in valid_nodes)
        if valid_nodes and not has_trigger:
            errors.append("Workflow must have at least one trigger node (manual, webhook or schedule)")

        has_logging = any(_matches(n, LOGGING_MARKERS) for n in valid_nodes)
        if not has_logging:
            warnings.append("Consider adding a logging or monitoring node to track executions")

        has_error_handling = any(_matches(n, ERROR_MARKERS) for n in valid_nodes)
        if not has_error_handling:
            warnings.append("Consider adding error handling nodes for better reliability")

        # 4. Connection integrity. n8n keys connections by node name, so a
        # reference resolves against ids and names alike.
        known: Set[str] = set()
        for n in valid_nodes:
            for field in ("id", "name"):
                if isinstance(n.get(field), str):
                    known.add(n[field])

        connection_count = 0
        for source, entry in connections.items():
            if source not in known:
                errors.append(f"Connection source node '{source}' not found in nodes")
            for target in iter_connection_targets(entry):
                connection_count += 1
                if not isinstance(target, str) or target not in known:
                    errors.append(f"Connection target node '{target}' (from '{source}') not found in nodes")

        return ValidationReport(
            is_valid=len(errors) == 0,
            errors=errors,
            warnings=warnings,
            node_count=len(nodes),
            connection_count=connection_count,
            has_trigger=has_trigger,
            has_error_handling=has_error_handling,
            has_logging=has_logging,
            timestamp=datetime.now(timezone.utc),
        )
