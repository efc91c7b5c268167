from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional
import json
import logging
import math
import subprocess
import sys
import tempfile
import time

from ..provider import ToolProvider
from ..schema import ExecutorCategory, ParameterSchema, ToolSchema
from .sandbox_guard import SandboxGuard, SandboxViolation
from ...models import ToolResult

logger = logging.getLogger(__name__)

RUNNER_PATH = Path(__file__).with_name("_sandbox_runner.py")

DEFAULT_TIMEOUT_MS = 5000
DEFAULT_MEMORY_LIMIT_MB = 16


class SandboxLanguage(str, Enum):
    PYTHON = "python"
    JAVASCRIPT = "javascript"


class SandboxedCodeExecutionTool(ToolProvider):
    """
    Executes untrusted snippets in a disposable, resource-bounded sandbox.

    Every call provisions a fresh interpreter process in a throwaway
    working directory with an empty environment, enforces a wall-clock
    timeout and an address-space ceiling, and tears both down on every
    exit path. Submitted code runs as the body of an immediately invoked
    function; `print` and `log` append to the captured output and are the
    only capabilities exposed.

    Script failures never escape as exceptions. They are classified as
    timeout, memory-limit or script errors and returned as ToolResult
    failures.
    """

    def __init__(
        self,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        memory_limit_mb: int = DEFAULT_MEMORY_LIMIT_MB,
        python_executable: Optional[str] = None,
    ) -> None:
        if timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive.")
        if memory_limit_mb <= 0:
            raise ValueError("memory_limit_mb must be positive.")

        self.timeout_ms = int(timeout_ms)
        self.memory_limit_mb = int(memory_limit_mb)
        self.python_executable = python_executable or sys.executable
        self._guard = SandboxGuard()

        self._handlers: Dict[SandboxLanguage, Callable[[str], ToolResult]] = {
            SandboxLanguage.PYTHON: self._execute_python,
            SandboxLanguage.JAVASCRIPT: self._not_implemented,
        }

    # ------------------------------------------------------------------
    # ToolProvider Contract
    # ------------------------------------------------------------------

    def get_schema(self) -> ToolSchema:
        return ToolSchema(
            name="code_execution",
            description=(
                "Execute Python code in an isolated sandbox. The code runs as a "
                "function body: use `return` to produce a value and print() to log. "
                "Imports, files, network and environment are unavailable."
            ),
            parameters=ParameterSchema(
                properties={
                    "language": {
                        # No enum: unsupported languages must reach execute()
                        # and come back as "not implemented"
                        "type": "string",
                        "description": "Programming language: python (javascript is not implemented yet)",
                    },
                    "code": {
                        "type": "string",
                        "description": "Code to execute",
                    },
                },
                required=("language", "code"),
            ),
            executor=ExecutorCategory.CODE_EXECUTION,
        )

    def configure(self, overrides: Optional[Mapping[str, Any]]) -> "SandboxedCodeExecutionTool":
        if not overrides:
            return self

        return SandboxedCodeExecutionTool(
            timeout_ms=int(overrides.get("timeout", self.timeout_ms)),
            memory_limit_mb=int(overrides.get("memory_limit", self.memory_limit_mb)),
            python_executable=self.python_executable,
        )

    def execute(self, parameters: Dict[str, Any]) -> ToolResult:

        raw_language = parameters.get("language")

        try:
            language = SandboxLanguage(raw_language)
        except ValueError:
            return ToolResult.fail(f"Language '{raw_language}' not implemented", execution_time_ms=0)

        code = parameters.get("code")
        if not isinstance(code, str):
            return ToolResult.fail("Parameter 'code' must be a string", execution_time_ms=0)

        return self._handlers[language](code)

    # ------------------------------------------------------------------
    # Language Handlers
    # ------------------------------------------------------------------

    def _not_implemented(self, code: str) -> ToolResult:
        return ToolResult.fail("JavaScript execution not implemented", execution_time_ms=0)

    def _execute_python(self, code: str) -> ToolResult:

        start = time.monotonic()

        try:
            self._guard.check(code)
        except SyntaxError as e:
            return ToolResult.fail(f"Script error: SyntaxError: {e}", self._elapsed_ms(start))
        except SandboxViolation as e:
            return ToolResult.fail(f"Script error: {e}", self._elapsed_ms(start))
        except ValueError as e:
            return ToolResult.fail(f"Script error: ValueError: {e}", self._elapsed_ms(start))
        except (MemoryError, RecursionError) as e:
            # raised by the host parser itself, not by a running script
            return ToolResult.fail(
                f"Script error: {type(e).__name__}: code is nested too deeply to parse",
                self._elapsed_ms(start),
            )

        request = json.dumps({
            "code": code,
            "memory_limit_mb": self.memory_limit_mb,
            "cpu_seconds": math.ceil(self.timeout_ms / 1000) + 1,
        })

        logger.debug(
            "[SANDBOX] Provisioning | timeout=%dms | memory=%dMB",
            self.timeout_ms,
            self.memory_limit_mb,
        )

        try:
            with tempfile.TemporaryDirectory(prefix="conductor-sandbox-") as workdir:
                completed = subprocess.run(
                    [self.python_executable, "-I", "-S", str(RUNNER_PATH)],
                    input=request,
                    capture_output=True,
                    text=True,
                    cwd=workdir,
                    env={},
                    timeout=self.timeout_ms / 1000,
                )
        except subprocess.TimeoutExpired:
            return self._classified_failure("timeout", start)
        except OSError as e:
            return self._classified_failure(f"Sandbox could not start: {e}", start)

        elapsed = self._elapsed_ms(start)
        response = self._parse_response(completed.stdout)

        if response is None:
            detail = (completed.stderr or "").strip().splitlines()
            message = detail[-1] if detail else f"sandbox exited with code {completed.returncode}"
            return self._classified_failure(message, start)

        if not response.get("ok"):
            return self._classified_failure(
                response.get("error") or "unknown error",
                start,
                error_type=response.get("error_type"),
            )

        logger.debug("[SANDBOX] Completed in %dms", elapsed)

        return ToolResult.ok(
            {
                "return_value": response.get("return_value"),
                "output": list(response.get("logs") or []),
                "language": SandboxLanguage.PYTHON.value,
                "execution_time_ms": elapsed,
                "memory_used_mb": round(float(response.get("memory_used_mb") or 0.0), 2),
            },
            execution_time_ms=elapsed,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_response(stdout: str) -> Optional[Dict[str, Any]]:
        for line in reversed((stdout or "").splitlines()):
            line = line.strip()
            if not line:
                continue
            try:
                data = json.loads(line)
            except ValueError:
                return None
            return data if isinstance(data, dict) else None
        return None

    def _classified_failure(
        self,
        error_text: str,
        start: float,
        error_type: Optional[str] = None,
    ) -> ToolResult:
        lowered = error_text.lower()

        # A structured error from the runner is trusted over text matching
        if error_type is not None:
            lowered = "memory" if error_type == "MemoryError" else ""

        if "timeout" in lowered or "timed out" in lowered:
            message = f"Code execution timed out after {self.timeout_ms}ms"
        elif "memory" in lowered:
            message = f"Code exceeded memory limit of {self.memory_limit_mb}MB"
        else:
            message = f"Script error: {error_text}"

        logger.info("[SANDBOX] Execution failed: %s", message)
        return ToolResult.fail(message, self._elapsed_ms(start))

    @staticmethod
    def _elapsed_ms(start: float) -> int:
        return int((time.monotonic() - start) * 1000)
