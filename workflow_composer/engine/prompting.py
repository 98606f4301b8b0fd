import json
import re
from typing import Any, Dict, Optional

from pydantic import BaseModel

class PromptTemplate(BaseModel):
    stage_name: str
    system_prompt: str
    user_template: str
    source: str = "default"

class PromptContext:
    def __init__(self, variables: Optional[Dict[str, Any]] = None):
        self.data: Dict[str, Any] = variables or {}

    def get_variable(self, name: str) -> Any:
        return self.data.get(name)

    def set_variable(self, name: str, value: Any):
        self.data[name] = value

    @staticmethod
    def render_value(value: Any) -> str:
        """
        Strings are inserted as-is, everything else as indented JSON
        """
        if isinstance(value, str):
            return value
        return json.dumps(value, indent=2, ensure_ascii=False, default=str)

    def resolve_template(self, template: str) -> str:
        """
        Resolve {{name}} placeholders. Unknown names are left untouched.
        """
        if not template or not isinstance(template, str):
            return template

        def replace(match):
            name = match.group(1).strip()
            if name not in self.data or self.data[name] is None:
                return match.group(0)
            return self.render_value(self.data[name])

        return re.sub(r"\{\{([^}]+)\}\}", replace, template)

    def render(self, template: PromptTemplate) -> Dict[str, str]:
        return {
            "system_prompt": self.resolve_template(template.system_prompt),
            "user_prompt": self.resolve_template(template.user_template),
        }
