# docportal/llm/prompts/registry.py
"""
Versioned prompt templates, keyed by (name, version).

Templates use `{{name}}` placeholders. Rendering is strict: every
placeholder must be supplied, so a renamed variable fails loudly instead
of sending a literal `{{text}}` to the provider.
"""

import re
from dataclasses import dataclass

from docportal.llm.prompts import templates

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


@dataclass(frozen=True)
class PromptTemplate:
    name: str
    version: str
    template: str
    system: str | None = None

    @property
    def variables(self) -> frozenset[str]:
        return frozenset(_PLACEHOLDER.findall(self.template))


PROMPTS: dict[tuple[str, str], PromptTemplate] = {}


def register(prompt: PromptTemplate) -> PromptTemplate:
    key = (prompt.name, prompt.version)
    if key in PROMPTS:
        raise ValueError(f"Prompt already registered: {prompt.name}@{prompt.version}")
    PROMPTS[key] = prompt
    return prompt


register(
    PromptTemplate(
        name="analyze_document",
        version="v1",
        template=templates.ANALYZE_DOCUMENT_V1,
        system=templates.DOCUMENT_ANALYST_SYSTEM_V1,
    )
)


def get_prompt(name: str, version: str) -> PromptTemplate:
    try:
        return PROMPTS[(name, version)]
    except KeyError:
        known = ", ".join(sorted(f"{n}@{v}" for n, v in PROMPTS))
        raise KeyError(f"Unknown prompt: {name}@{version} (known: {known})") from None


def render(template: PromptTemplate, variables: dict) -> str:
    missing = template.variables - variables.keys()
    if missing:
        raise KeyError(f"Prompt {template.name}@{template.version} missing variables: {sorted(missing)}")
    return _PLACEHOLDER.sub(lambda m: str(variables[m.group(1)]), template.template)
