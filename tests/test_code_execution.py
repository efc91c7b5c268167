"""Tests for the sandboxed code execution tool and its static guard."""

import os
import sys
import tempfile
from concurrent.futures import ThreadPoolExecutor

import pytest

from conductor.tools import ToolRegistry
from conductor.tools.builtin import SandboxedCodeExecutionTool, register_builtin_tools
from conductor.tools.builtin.sandbox_guard import SandboxGuard, SandboxViolation

pytestmark = [
    pytest.mark.sandbox,
    pytest.mark.skipif(not sys.platform.startswith("linux"), reason="sandbox limits need Linux"),
]


@pytest.fixture
def tool():
    return SandboxedCodeExecutionTool(timeout_ms=3000, memory_limit_mb=16)


def run_python(tool, code):
    return tool.execute({"language": "python", "code": code})


def sandbox_dirs():
    return {n for n in os.listdir(tempfile.gettempdir()) if n.startswith("conductor-sandbox-")}


# ========== Happy path ==========

def test_return_value_and_captured_output(tool):
    result = run_python(tool, 'print("hello", 1)\nlog("second")\nreturn 6 * 7')

    assert result.success
    assert result.result["return_value"] == 42
    assert result.result["output"] == ["hello 1", "second"]
    assert result.result["language"] == "python"
    assert result.result["execution_time_ms"] >= 0
    assert result.result["memory_used_mb"] >= 0


def test_code_without_return_yields_none(tool):
    result = run_python(tool, "total = sum(range(10))")

    assert result.success
    assert result.result["return_value"] is None


def test_functions_and_classes_are_allowed(tool):
    code = (
        "class Point:\n"
        "    def __init__(self, x):\n"
        "        self.x = x\n"
        "def double(p):\n"
        "    return p.x * 2\n"
        "return double(Point(21))\n"
    )

    result = run_python(tool, code)

    assert result.success, result.error
    assert result.result["return_value"] == 42


def test_non_json_return_value_is_repr(tool):
    result = run_python(tool, "return {1, 2}")

    assert result.success
    assert result.result["return_value"] == "{1, 2}"


# ========== Failure classification ==========

def test_timeout_is_classified():
    tool = SandboxedCodeExecutionTool(timeout_ms=300)

    result = run_python(tool, "while True:\n    pass")

    assert not result.success
    assert result.error == "Code execution timed out after 300ms"
    assert result.execution_time_ms >= 300


def test_memory_limit_is_classified(tool):
    result = run_python(tool, "data = bytearray(256 * 1024 * 1024)\nreturn len(data)")

    assert not result.success
    assert result.error == "Code exceeded memory limit of 16MB"


def test_runtime_error_is_script_error(tool):
    result = run_python(tool, 'raise ValueError("boom")')

    assert not result.success
    assert result.error == "Script error: ValueError: boom"


def test_error_text_mentioning_timeout_stays_script_error(tool):
    result = run_python(tool, 'raise RuntimeError("remote timeout")')

    assert result.error == "Script error: RuntimeError: remote timeout"


def test_syntax_error_is_script_error(tool):
    result = run_python(tool, "def broken(:\n    pass")

    assert not result.success
    assert result.error.startswith("Script error: SyntaxError")


def test_code_too_deep_for_the_parser_is_script_error(tool):
    before = sandbox_dirs()

    result = tool.execute({"language": "python", "code": "return " + "-" * 200000 + "1"})

    assert result.success is False
    assert result.error.startswith("Script error:")
    assert sandbox_dirs() == before


def test_null_byte_in_code_is_script_error(tool):
    result = run_python(tool, "return 1\x00")

    assert result.success is False
    assert result.error.startswith("Script error:")


def test_import_is_rejected_before_provisioning(tool):
    before = sandbox_dirs()

    result = run_python(tool, "import os\nreturn os.getcwd()")

    assert result.error == "Script error: Imports are not allowed"
    assert sandbox_dirs() == before


def test_open_is_unavailable(tool):
    result = run_python(tool, "return open('/etc/passwd').read()")

    assert not result.success
    assert result.error.startswith("Script error:")


def test_dunder_attribute_access_is_rejected(tool):
    result = run_python(tool, "return type(print).__name__")

    assert not result.success
    assert "__name__" in result.error


# ========== Lifecycle ==========

def test_repeated_timeouts_leave_no_sandboxes_behind():
    tool = SandboxedCodeExecutionTool(timeout_ms=200)
    before = sandbox_dirs()

    for _ in range(3):
        result = run_python(tool, "while True:\n    pass")
        assert result.error == "Code execution timed out after 200ms"

    assert sandbox_dirs() == before


def test_concurrent_executions_are_isolated(tool):
    snippets = [f"value = {i}\nfor _ in range(20000):\n    value = value\nreturn value" for i in range(4)]

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(lambda code: run_python(tool, code), snippets))

    assert [r.result["return_value"] for r in results] == [0, 1, 2, 3]


# ========== Language handling ==========

def test_javascript_is_declared_but_not_implemented(tool):
    result = tool.execute({"language": "javascript", "code": "return 1"})

    assert not result.success
    assert result.error == "JavaScript execution not implemented"
    assert result.execution_time_ms == 0


def test_unknown_language_fails_without_sandbox(tool):
    result = tool.execute({"language": "ruby", "code": "puts 1"})

    assert result.error == "Language 'ruby' not implemented"
    assert result.execution_time_ms == 0


def test_schema_declares_required_parameters(tool):
    schema = tool.get_schema()

    assert schema.name == "code_execution"
    assert set(schema.parameters.required) == {"language", "code"}
    assert "enum" not in schema.parameters.properties["language"]


# ========== Registry integration ==========

def test_registry_rejects_missing_code():
    registry = ToolRegistry()
    register_builtin_tools(registry)

    result = registry.execute_tool("code_execution", {"language": "python"})

    assert not result.success
    assert result.error.startswith("Invalid parameters")


def test_registry_routes_unsupported_language_to_tool():
    registry = ToolRegistry()
    register_builtin_tools(registry)

    result = registry.execute_tool("code_execution", {"language": "ruby", "code": "puts 1"})

    assert result.success is False
    assert result.error == "Language 'ruby' not implemented"
    assert result.execution_time_ms == 0


def test_run_wide_and_per_agent_configuration():
    registry = ToolRegistry()
    register_builtin_tools(registry, {"code_execution": {"timeout": 1000, "memory_limit": 32}})

    base = registry.get_tool("code_execution")
    scoped = registry.scoped(["code_execution"], {"code_execution": {"timeout": 250}})
    overridden = scoped.get_tool("code_execution")

    assert (base.timeout_ms, base.memory_limit_mb) == (1000, 32)
    assert (overridden.timeout_ms, overridden.memory_limit_mb) == (250, 32)


def test_invalid_limits_are_rejected():
    with pytest.raises(ValueError):
        SandboxedCodeExecutionTool(timeout_ms=0)
    with pytest.raises(ValueError):
        SandboxedCodeExecutionTool(memory_limit_mb=-1)


# ========== Static guard ==========

@pytest.mark.parametrize("code", [
    "import sys",
    "from os import path",
    "().__class__",
    "x = getattr",
    "__import__('os')",
    "def f():\n    global y\n    y = 1",
    "g = (i for i in [])\ng.gi_frame",
])
def test_guard_rejects_escape_constructs(code):
    with pytest.raises(SandboxViolation):
        SandboxGuard().check(code)


def test_guard_accepts_ordinary_code():
    SandboxGuard().check("items = [x * 2 for x in range(5)]\nreturn sum(items)")


def test_guard_rejects_deep_nesting():
    code = "x = " + "[" * 150 + "1" + "]" * 150

    with pytest.raises(SandboxViolation):
        SandboxGuard().check(code)
