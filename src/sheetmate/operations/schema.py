"""Tool and text renderings of the operation vocabulary.

Both renderings are built from the same ``ActionSpec`` list, which is
derived from the operation models, so they always describe the same
actions.
"""

import copy
import json
from typing import Any, Optional

from pydantic import BaseModel, Field

from .models import (
    OPERATION_TYPES,
    CellFormat,
    CreateTable,
    FormatRange,
    Operation,
    SetCellValue,
    SetFormula,
    operations_to_wire,
)

BLOCK_LANGUAGE = "excel-json"


class ToolParameter(BaseModel):
    """Definition of an action parameter."""

    name: str
    type: str
    description: str
    required: bool = True
    default: Any = None
    enum: Optional[list[str]] = None
    json_schema: dict = Field(default_factory=dict)

    def to_property(self) -> dict:
        """JSON schema property for tool-calling providers."""
        prop = copy.deepcopy(self.json_schema)
        prop["description"] = self.description
        return prop

    def to_text(self) -> str:
        """One-line description for the text convention."""
        label = "required" if self.required else "optional"
        line = f"{self.name} ({self.type}, {label}): {self.description}"
        if self.enum:
            line += f" [one of: {', '.join(self.enum)}]"
        if not self.required and self.default not in (None, [], {}):
            line += f" (default: {json.dumps(self.default)})"
        return line


class ActionSpec(BaseModel):
    """An action the model may request, with its parameters."""

    name: str
    description: str
    parameters: list[ToolParameter] = Field(default_factory=list)

    def to_anthropic_schema(self) -> dict:
        """Convert to Anthropic tool schema format."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self._input_schema(),
        }

    def to_openai_schema(self) -> dict:
        """Convert to OpenAI/OpenRouter function tool format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self._input_schema(),
            },
        }

    def to_text(self) -> str:
        lines = [f"  - {self.name}: {self.description}"]
        for param in self.parameters:
            lines.append(f"      * {param.to_text()}")
        return "\n".join(lines)

    def _input_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {p.name: p.to_property() for p in self.parameters},
            "required": [p.name for p in self.parameters if p.required],
        }


def _resolve(schema: dict, defs: dict) -> dict:
    """Inline $refs, drop nullable branches and pydantic titles."""
    if "$ref" in schema:
        target = defs[schema["$ref"].split("/")[-1]]
        merged = {k: v for k, v in schema.items() if k != "$ref"}
        merged.update(target)
        return _resolve(merged, defs)

    if "allOf" in schema and len(schema["allOf"]) == 1:
        merged = {k: v for k, v in schema.items() if k != "allOf"}
        merged.update(schema["allOf"][0])
        return _resolve(merged, defs)

    if "anyOf" in schema:
        branches = [_resolve(b, defs) for b in schema["anyOf"] if b.get("type") != "null"]
        rest = {k: v for k, v in schema.items() if k != "anyOf"}
        if len(branches) == 1:
            rest.update(branches[0])
            return _resolve(rest, defs)
        rest["anyOf"] = branches
        schema = rest

    resolved = {}
    for key, value in schema.items():
        if key in ("title", "description"):
            continue
        if key == "properties":
            resolved[key] = {name: _resolve(prop, defs) for name, prop in value.items()}
        elif key == "items" and isinstance(value, dict):
            resolved[key] = _resolve(value, defs)
        else:
            resolved[key] = value
    # Nested objects keep their own property descriptions
    if "properties" in schema:
        for name, prop in schema["properties"].items():
            if "description" in prop:
                resolved["properties"][name]["description"] = prop["description"]
    return resolved


def _type_label(schema: dict) -> str:
    if "anyOf" in schema:
        return "|".join(_type_label(b) for b in schema["anyOf"])
    kind = schema.get("type", "any")
    if kind == "array" and "items" in schema:
        return f"array of {_type_label(schema['items'])}"
    return kind


def action_spec_for(model_cls: type[BaseModel]) -> ActionSpec:
    """Derive an ActionSpec from an operation model."""
    schema = model_cls.model_json_schema(by_alias=True)
    defs = schema.get("$defs", {})
    required = set(schema.get("required", []))

    parameters = []
    for name, prop in schema.get("properties", {}).items():
        if name == "action":
            continue
        json_schema = _resolve(prop, defs)
        parameters.append(
            ToolParameter(
                name=name,
                type=_type_label(json_schema),
                description=prop.get("description", ""),
                required=name in required,
                default=prop.get("default"),
                enum=json_schema.get("enum"),
                json_schema=json_schema,
            )
        )

    return ActionSpec(
        name=model_cls.model_fields["action"].default,
        description=(model_cls.__doc__ or "").strip(),
        parameters=parameters,
    )


def encode_block(operations: list[Operation]) -> str:
    """Render operations as a fenced block of the text convention."""
    payload = json.dumps(operations_to_wire(operations), indent=2)
    return f"```{BLOCK_LANGUAGE}\n{payload}\n```"


EXAMPLE_OPERATIONS = [
    SetCellValue(address="A1", value="Header"),
    SetFormula(address="B1", formula="=SUM(A1:A10)"),
    FormatRange(address="A1:C1", format=CellFormat(bold=True, fill="#FFFF00")),
    CreateTable(address="A1:C5", name="SalesTable"),
]


class OperationSchema:
    """Registry of the actions offered to the model."""

    def __init__(self, model_types: tuple = OPERATION_TYPES):
        self._actions: dict[str, ActionSpec] = {}
        for model_cls in model_types:
            self.register(action_spec_for(model_cls))

    def register(self, spec: ActionSpec):
        """Register an action."""
        self._actions[spec.name] = spec

    def get(self, name: str) -> Optional[ActionSpec]:
        """Get an action by name."""
        return self._actions.get(name)

    def list_actions(self) -> list[ActionSpec]:
        """List all registered actions."""
        return list(self._actions.values())

    def action_names(self) -> list[str]:
        return list(self._actions)

    def to_anthropic_tools(self) -> list[dict]:
        """Convert all actions to Anthropic tool format."""
        return [spec.to_anthropic_schema() for spec in self._actions.values()]

    def to_openai_tools(self) -> list[dict]:
        """Convert all actions to OpenAI function tool format."""
        return [spec.to_openai_schema() for spec in self._actions.values()]

    def to_text_convention(self) -> str:
        """Prompt text describing the fenced-block convention."""
        lines = [
            "PERFORMING ACTIONS:",
            "- When the user asks to edit the sheet, create tables, or write formulas, "
            "you MUST generate a JSON block.",
            f"- Use the `{BLOCK_LANGUAGE}` language identifier.",
            "- Format:",
            encode_block(EXAMPLE_OPERATIONS),
            f"- Supported actions: {', '.join(self._actions)}.",
            "- Action parameters:",
        ]
        lines.extend(spec.to_text() for spec in self._actions.values())
        lines.append("- ALWAYS explain what you are doing before or after the code block.")
        return "\n".join(lines)


operation_schema = OperationSchema()
