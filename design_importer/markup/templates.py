"""
``{{name}}`` placeholder handling for imported markup.
"""

import re
from typing import Dict, List

from pydantic import BaseModel

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


class TemplateVariable(BaseModel):
    name: str


def extract_variables(html: str) -> List[TemplateVariable]:
    """Unique placeholder names in order of first occurrence."""
    seen = set()
    variables = []
    for match in _PLACEHOLDER.finditer(html):
        name = match.group(1)
        if name not in seen:
            seen.add(name)
            variables.append(TemplateVariable(name=name))
    return variables


def resolve_variables(html: str, values: Dict[str, str]) -> str:
    """Substitute placeholders; names missing from ``values`` are left as is."""
    return _PLACEHOLDER.sub(
        lambda match: values[match.group(1)] if match.group(1) in values else match.group(0),
        html,
    )
