from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple


class ExecutorCategory(str, Enum):
    FILESYSTEM = "filesystem"
    WEB_SEARCH = "web_search"
    CODE_EXECUTION = "code_execution"
    DATABASE = "database"
    API_CALL = "api_call"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ParameterSchema:
    """
    JSON-schema style description of a tool's parameters.

    Only the top level is interpreted (property type tags and the
    required list). Everything else is passed to the model verbatim.
    """

    properties: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    required: Tuple[str, ...] = field(default_factory=tuple)
    type: str = "object"

    def __post_init__(self):
        if self.type != "object":
            raise ValueError("Parameter schema type must be 'object'.")

        if not isinstance(self.properties, dict):
            raise TypeError("properties must be a dictionary.")

        object.__setattr__(self, "required", tuple(self.required or ()))

        unknown = [r for r in self.required if r not in self.properties]
        if unknown:
            raise ValueError(f"Required fields missing from properties: {unknown}")

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type, "properties": self.properties}
        if self.required:
            data["required"] = list(self.required)
        return data


@dataclass(frozen=True)
class ToolSchema:
    """
    Model-facing description of a tool.

    Purely descriptive: it is rendered into prompts for discovery and
    used for parameter validation, but carries no execution logic.
    """

    name: str
    description: str
    parameters: ParameterSchema = field(default_factory=ParameterSchema)
    executor: ExecutorCategory = ExecutorCategory.CUSTOM

    def __post_init__(self):
        if not self.name or not isinstance(self.name, str):
            raise ValueError("Tool name must be a non-empty string.")

        if not isinstance(self.parameters, ParameterSchema):
            raise TypeError("parameters must be a ParameterSchema.")

        object.__setattr__(self, "executor", ExecutorCategory(self.executor))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters.to_dict(),
            "executor": self.executor.value,
        }
