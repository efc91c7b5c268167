from typing import Callable

from ..config import FeedbackLoopConfig

ConvergenceCheck = Callable[[str, int], bool]
"""(then_output, iteration) -> True when no further iteration is needed."""


class KeywordConvergence:
    """
    Converged once the "then" output contains a marker keyword.

    Matching is case-insensitive.
    """

    def __init__(self, keyword: str) -> None:
        if not keyword:
            raise ValueError("Convergence keyword must be non-empty.")
        self.keyword = keyword

    def __call__(self, output: str, iteration: int) -> bool:
        return self.keyword.lower() in (output or "").lower()

    def __repr__(self) -> str:
        return f"KeywordConvergence({self.keyword!r})"


def never_converge(output: str, iteration: int) -> bool:
    return False


def build_convergence_check(config: FeedbackLoopConfig) -> ConvergenceCheck:
    return KeywordConvergence(config.convergence_keyword)
