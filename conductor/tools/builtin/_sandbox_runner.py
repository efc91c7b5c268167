"""
Child-process bootstrap for the Python code sandbox.

Started as ``python -I -S _sandbox_runner.py`` with an empty environment
and a throwaway working directory. Reads one JSON request from stdin::

    {"code": "...", "memory_limit_mb": 16, "cpu_seconds": 6}

and writes one JSON line to stdout::

    {"ok": true, "return_value": ..., "logs": [...], "memory_used_mb": 0.4}
    {"ok": false, "error_type": "MemoryError", "error": "...", "logs": [...]}

Only the standard library may be imported here: the runner is executed
as a plain script, outside the conductor package.
"""

import ast
import builtins
import json
import sys

try:
    import resource
except ImportError:  # pragma: no cover - non-POSIX hosts
    resource = None


SAFE_BUILTINS = (
    "abs", "all", "any", "ascii", "bin", "bool", "bytearray", "bytes",
    "callable", "chr", "complex", "dict", "divmod", "enumerate", "filter",
    "float", "format", "frozenset", "hash", "hex", "int", "isinstance",
    "issubclass", "iter", "len", "list", "map", "max", "min", "next",
    "object", "oct", "ord", "pow", "range", "repr", "reversed", "round",
    "set", "slice", "sorted", "str", "sum", "super", "tuple", "type", "zip",
    "True", "False", "None", "NotImplemented", "Ellipsis",
    "ArithmeticError", "AssertionError", "AttributeError", "Exception",
    "IndexError", "KeyError", "LookupError", "MemoryError", "NameError",
    "NotImplementedError", "OverflowError", "RecursionError", "RuntimeError",
    "StopIteration", "TypeError", "ValueError", "ZeroDivisionError",
)

ENTRYPOINT = "sandbox_main"


def _address_space_bytes():
    """Current virtual memory size of this process, or None if unknown."""
    try:
        with open("/proc/self/statm") as f:
            pages = int(f.read().split()[0])
    except (OSError, ValueError, IndexError):
        return None
    return pages * resource.getpagesize()


def _apply_limits(memory_limit_mb, cpu_seconds):
    if resource is None:
        return

    if cpu_seconds:
        resource.setrlimit(resource.RLIMIT_CPU, (cpu_seconds, cpu_seconds))

    baseline = _address_space_bytes()
    if baseline is not None and memory_limit_mb:
        limit = baseline + int(memory_limit_mb * 1024 * 1024)
        resource.setrlimit(resource.RLIMIT_AS, (limit, limit))


def _peak_rss_kb():
    if resource is None:
        return 0
    # ru_maxrss is kilobytes on Linux
    return resource.getrusage(resource.RUSAGE_SELF).ru_maxrss


def _jsonable(value):
    try:
        json.dumps(value)
        return value
    except (TypeError, ValueError):
        return repr(value)


def _compile(code):
    """Compile user code as the body of a function that is invoked once."""
    tree = ast.parse(code, filename="<sandbox>", mode="exec")
    wrapper = ast.parse(f"def {ENTRYPOINT}():\n    pass\n", mode="exec")
    wrapper.body[0].body = tree.body or [ast.Pass()]
    ast.fix_missing_locations(wrapper)
    return compile(wrapper, "<sandbox>", "exec")


def _build_globals(logs):

    def log(*args, sep=" ", **_ignored):
        logs.append(sep.join(str(a) for a in args))

    safe = {name: getattr(builtins, name) for name in SAFE_BUILTINS}
    safe["print"] = log
    safe["__build_class__"] = builtins.__build_class__

    return {"__builtins__": safe, "__name__": "sandbox", "log": log}


def main():
    request = json.loads(sys.stdin.read())
    logs = []

    try:
        program = _compile(request["code"])
    except SyntaxError as e:
        return {"ok": False, "error_type": "SyntaxError", "error": f"SyntaxError: {e}", "logs": logs}

    namespace = _build_globals(logs)
    exec(program, namespace)

    _apply_limits(request.get("memory_limit_mb"), request.get("cpu_seconds"))
    rss_before = _peak_rss_kb()

    try:
        value = namespace[ENTRYPOINT]()
    except MemoryError:
        return {"ok": False, "error_type": "MemoryError", "error": "MemoryError: memory limit exceeded", "logs": logs}
    except Exception as e:
        return {"ok": False, "error_type": type(e).__name__, "error": f"{type(e).__name__}: {e}", "logs": logs}

    memory_used_mb = max(0, _peak_rss_kb() - rss_before) / 1024

    return {
        "ok": True,
        "return_value": _jsonable(value),
        "logs": logs,
        "memory_used_mb": round(memory_used_mb, 2),
    }


if __name__ == "__main__":
    response = main()
    sys.stdout.write("\n" + json.dumps(response) + "\n")
    sys.stdout.flush()
