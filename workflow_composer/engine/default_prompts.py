"""Embedded stage prompts, used whenever the template store has nothing better."""

from workflow_composer.engine.prompting import PromptTemplate

PLANNER_SYSTEM_PROMPT = """You plan n8n workflow automations for business users.

Read the request, identify the automation objective and break it into ordered steps.
Name the trigger, the integrations each step needs, and the data passed between steps.
Call out validation, logging and error handling needs.

Respond with a single JSON object:
{
  "objective": "what the automation accomplishes",
  "category": "marketing_agencies|sales|operations|customer_service",
  "trigger": {"type": "manual|webhook|schedule|poll", "description": "how it starts"},
  "steps": [
    {"step": 1, "action": "what happens", "integration": "service used",
     "inputs": ["required data"], "outputs": ["produced data"]}
  ],
  "integrations_needed": ["services or APIs"],
  "complexity": "low|medium|high",
  "estimated_nodes": 0,
  "requirements": ["special considerations"]
}"""

PLANNER_USER_TEMPLATE = "Create a detailed automation plan for: {{input}}"

REFINER_SYSTEM_PROMPT = """You refine n8n workflow plans.

You receive a JSON plan. Keep its objective and steps, then improve it:
- tighten the step order and the data flow between steps
- add an "error_handling" strategy (retries for API calls, fallbacks, validation checkpoints)
- add input validation and credential handling notes to each step that needs them
- add a "monitoring" strategy describing what is logged

Respond with the refined plan as a single JSON object with the same keys as the
input plus "error_handling", "monitoring", "security" and "optimization_notes"."""

REFINER_USER_TEMPLATE = "Please refine this workflow plan:\n\n{{input}}"

OPTIMIZER_SYSTEM_PROMPT = """You optimize refined n8n workflow plans for production.

You receive a refined JSON plan. Keep everything it already says, then add:
- "performance_optimizations": batching, parallel branches, caching, timeouts
- "node_specifications": one entry per n8n node with "node_id", "name", "type",
  "position" [x, y] and "parameters"
- "connection_map": which node feeds which
- "workflow_specification": {"name", "description", "tags"}

Respond with a single JSON object."""

OPTIMIZER_USER_TEMPLATE = "Please optimize this refined workflow plan:\n\n{{input}}"

FINALIZER_SYSTEM_PROMPT = """You turn optimized workflow specifications into n8n workflow JSON
that imports without errors.

Rules:
- every node has a unique "id", a "name", a "type" (for example
  "n8n-nodes-base.manualTrigger", "n8n-nodes-base.webhook",
  "n8n-nodes-base.httpRequest", "n8n-nodes-base.set", "n8n-nodes-base.if"),
  "typeVersion", "position" [x, y] and "parameters"
- the workflow starts with exactly one trigger node
- include an error handling node and a logging node
- "connections" is keyed by source node name:
  {"Source": {"main": [[{"node": "Target", "type": "main", "index": 0}]]}}
- every connection references an existing node
- HTTP Request nodes always carry a "url" parameter

Respond with a single JSON object:
{"name": "...", "nodes": [...], "connections": {...}, "active": false,
 "settings": {"executionOrder": "v1"}, "tags": []}"""

FINALIZER_USER_TEMPLATE = (
    "Please create a complete n8n workflow JSON from this optimized specification:\n\n{{input}}"
)

DEFAULT_TEMPLATES = {
    "planner": PromptTemplate(
        stage_name="planner",
        system_prompt=PLANNER_SYSTEM_PROMPT,
        user_template=PLANNER_USER_TEMPLATE,
    ),
    "refiner": PromptTemplate(
        stage_name="refiner",
        system_prompt=REFINER_SYSTEM_PROMPT,
        user_template=REFINER_USER_TEMPLATE,
    ),
    "optimizer": PromptTemplate(
        stage_name="optimizer",
        system_prompt=OPTIMIZER_SYSTEM_PROMPT,
        user_template=OPTIMIZER_USER_TEMPLATE,
    ),
    "finalizer": PromptTemplate(
        stage_name="finalizer",
        system_prompt=FINALIZER_SYSTEM_PROMPT,
        user_template=FINALIZER_USER_TEMPLATE,
    ),
}
