import ast


class SandboxViolation(ValueError):
    """Submitted code uses a construct the sandbox does not allow."""


class SandboxGuard(ast.NodeVisitor):
    """
    Static AST check run before any sandbox is provisioned.

    Rejects constructs that could reach outside the restricted builtins:
    imports, private and dunder attribute access, frame/code
    introspection attributes, and global/nonlocal rebinding.
    """

    BLOCKED_NAMES = {
        "__builtins__",
        "__import__",
        "__loader__",
        "__spec__",
        "globals",
        "locals",
        "vars",
        "getattr",
        "setattr",
        "delattr",
        "open",
        "exec",
        "eval",
        "compile",
        "breakpoint",
        "input",
    }

    BLOCKED_ATTRIBUTES = {
        "gi_frame",
        "gi_code",
        "cr_frame",
        "cr_code",
        "ag_frame",
        "ag_code",
        "f_globals",
        "f_locals",
        "f_builtins",
        "f_back",
        "f_code",
        "tb_frame",
        "tb_next",
        "func_globals",
        "mro",
        "format_map",
    }

    MAX_DEPTH = 100

    def check(self, code: str) -> ast.Module:
        tree = ast.parse(code, filename="<sandbox>", mode="exec")
        self._check_depth(tree)
        self.visit(tree)
        return tree

    # ---------------- Depth Guard ----------------

    def _check_depth(self, node, depth=0):
        if depth > self.MAX_DEPTH:
            raise SandboxViolation("Code is nested too deeply")
        for child in ast.iter_child_nodes(node):
            self._check_depth(child, depth + 1)

    # ---------------- Visitors ----------------

    def visit_Import(self, node):
        raise SandboxViolation("Imports are not allowed")

    def visit_ImportFrom(self, node):
        raise SandboxViolation("Imports are not allowed")

    def visit_Global(self, node):
        raise SandboxViolation("'global' is not allowed")

    def visit_Nonlocal(self, node):
        raise SandboxViolation("'nonlocal' is not allowed")

    def visit_Attribute(self, node):
        if node.attr.startswith("_") or node.attr in self.BLOCKED_ATTRIBUTES:
            raise SandboxViolation(f"Access to attribute '{node.attr}' is not allowed")
        self.generic_visit(node)

    def visit_Name(self, node):
        if node.id in self.BLOCKED_NAMES or node.id.startswith("__"):
            raise SandboxViolation(f"Use of name '{node.id}' is not allowed")
        self.generic_visit(node)
