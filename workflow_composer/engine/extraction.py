"""
Pull a JSON value out of free-form model output.

Strategies run from most to least reliable and the first one that parses wins:

1. json_fence - a ```json fenced block (tag matched case-insensitively)
2. fence      - any other fenced block
3. braces     - the text between the first '{' and the last '}'

Brace matching can pick up a partial object when the model wraps prose
around several braces, which is why it runs last.
"""
import json
import re
from typing import Any, Callable, Iterator, List, Optional, Tuple

from pydantic import BaseModel

_JSON_FENCE = re.compile(r"```[ \t]*json[ \t]*\r?\n?(.*?)```", re.IGNORECASE | re.DOTALL)
_ANY_FENCE = re.compile(r"```[^\n`]*\r?\n?(.*?)```", re.DOTALL)

class ExtractionResult(BaseModel):
    ok: bool
    value: Any = None
    strategy: Optional[str] = None
    errors: List[str] = []

    @classmethod
    def success(cls, value: Any, strategy: str) -> "ExtractionResult":
        return cls(ok=True, value=value, strategy=strategy)

    @classmethod
    def failure(cls, errors: List[str]) -> "ExtractionResult":
        return cls(ok=False, errors=errors)

    @property
    def failure_reason(self) -> str:
        return "; ".join(self.errors) or "no JSON found"

def _json_fence_candidates(text: str) -> Iterator[str]:
    for match in _JSON_FENCE.finditer(text):
        yield match.group(1)

def _any_fence_candidates(text: str) -> Iterator[str]:
    for match in _ANY_FENCE.finditer(text):
        yield match.group(1)

def _brace_candidates(text: str) -> Iterator[str]:
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        yield text[start:end + 1]

STRATEGIES: List[Tuple[str, Callable[[str], Iterator[str]]]] = [
    ("json_fence", _json_fence_candidates),
    ("fence", _any_fence_candidates),
    ("braces", _brace_candidates),
]

def _reject_constant(name: str):
    raise ValueError(f"non-standard JSON constant {name}")

def _loads(candidate: str) -> Any:
    return json.loads(candidate.strip(), parse_constant=_reject_constant)

def extract_json(raw_text: Any) -> ExtractionResult:
    """Never raises; check `ok` before using `value`."""
    if not isinstance(raw_text, str) or not raw_text.strip():
        return ExtractionResult.failure(["empty response"])

    errors: List[str] = []
    for name, candidates in STRATEGIES:
        found = False
        for candidate in candidates(raw_text):
            found = True
            try:
                return ExtractionResult.success(_loads(candidate), name)
            except json.JSONDecodeError as e:
                errors.append(f"{name}: {e.msg} at line {e.lineno} column {e.colno}")
            except ValueError as e:
                errors.append(f"{name}: {e}")
            except RecursionError:
                errors.append(f"{name}: JSON nested too deeply")
        if not found:
            errors.append(f"{name}: no candidate found")

    return ExtractionResult.failure(errors)
