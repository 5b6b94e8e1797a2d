"""Check suites run before and after the fork, one module per EIP."""

from types import ModuleType
from typing import Dict, Iterable, Tuple

from fork_test_execution import TestCaseRegistry

from . import eip1559, eip2930, eip3198, eip3541
from .context import ForkCheckContext

SUITES: Dict[str, ModuleType] = {
    "eip1559": eip1559,
    "eip2930": eip2930,
    "eip3198": eip3198,
    "eip3541": eip3541,
}


def collect_cases(
    context: ForkCheckContext, suites: Iterable[str]
) -> Tuple[TestCaseRegistry, TestCaseRegistry]:
    """Return the pre-fork and post-fork cases of `suites`, in the order given."""
    pre_fork = TestCaseRegistry()
    post_fork = TestCaseRegistry()
    for name in suites:
        if name not in SUITES:
            raise KeyError(f"unknown suite {name!r}, expected one of {', '.join(SUITES)}")
        suite = SUITES[name]
        pre_fork = pre_fork + suite.pre_fork_cases(context)
        post_fork = post_fork + suite.post_fork_cases(context)
    return pre_fork, post_fork


__all__ = ["SUITES", "ForkCheckContext", "collect_cases"]
