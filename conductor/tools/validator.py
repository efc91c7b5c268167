from __future__ import annotations

from typing import Any, Dict

from .schema import ParameterSchema


class ParameterValidationError(Exception):
    """Raised when tool parameters violate the tool's parameter schema."""
    pass


class ParameterValidator:
    """
    Validates tool parameters against a ParameterSchema.

    Supports:
    - required fields
    - JSON type tags on top-level properties
    - `enum` constraints on top-level properties

    Unknown extra parameters are allowed and passed through.
    """

    TYPE_MAP = {
        "string": (str,),
        "integer": (int,),
        "number": (int, float),
        "boolean": (bool,),
        "object": (dict,),
        "array": (list, tuple),
    }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def validate(self, schema: ParameterSchema, parameters: Dict[str, Any]) -> Dict[str, Any]:

        if not isinstance(parameters, dict):
            raise ParameterValidationError("Parameters must be a JSON object.")

        self._check_required(schema, parameters)
        self._check_types(schema, parameters)

        return parameters

    # ------------------------------------------------------------------
    # Validation Steps
    # ------------------------------------------------------------------

    def _check_required(self, schema: ParameterSchema, parameters: Dict[str, Any]) -> None:
        missing = [key for key in schema.required if parameters.get(key) is None]
        if missing:
            raise ParameterValidationError(f"Missing required parameters: {missing}")

    def _check_types(self, schema: ParameterSchema, parameters: Dict[str, Any]) -> None:

        for key, spec in schema.properties.items():

            if key not in parameters or not isinstance(spec, dict):
                continue

            value = parameters[key]
            expected = spec.get("type")

            if isinstance(expected, str) and not self._matches_type(expected, value):
                raise ParameterValidationError(
                    f"Parameter '{key}' expected type {expected}, got {type(value).__name__}"
                )

            allowed = spec.get("enum")
            if isinstance(allowed, (list, tuple)) and value not in allowed:
                raise ParameterValidationError(
                    f"Parameter '{key}' must be one of {list(allowed)}, got {value!r}"
                )

    # ------------------------------------------------------------------
    # Type Matching
    # ------------------------------------------------------------------

    def _matches_type(self, expected: str, value: Any) -> bool:

        expected = expected.lower()

        if expected not in self.TYPE_MAP:
            return True  # Unknown tag → allow

        # bool is a subclass of int
        if expected in ("integer", "number") and isinstance(value, bool):
            return False

        return isinstance(value, self.TYPE_MAP[expected])
