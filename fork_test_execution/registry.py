"""Named, ordered test cases."""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, List, Sequence, Tuple, overload


@dataclass(frozen=True)
class TestCase:
    """A named validation: it passes by returning and fails by raising."""

    __test__ = False  # not a pytest test class

    name: str
    validate: Callable[[], Any]


class DuplicateTestCaseError(ValueError):
    """Two test cases of one registry share a name."""

    pass


class TestCaseRegistry(Sequence[TestCase]):
    """Immutable sequence of test cases, iterated in registration order."""

    __test__ = False  # not a pytest test class

    _cases: Tuple[TestCase, ...]

    def __init__(self, cases: Iterable[TestCase] = ()):
        """Bind the cases; names must be unique."""
        self._cases = tuple(cases)
        seen = set()
        for case in self._cases:
            if case.name in seen:
                raise DuplicateTestCaseError(f"duplicate test case name: {case.name}")
            seen.add(case.name)

    @overload
    def __getitem__(self, index: int) -> TestCase: ...

    @overload
    def __getitem__(self, index: slice) -> "TestCaseRegistry": ...

    def __getitem__(self, index):
        """Return one case, or a registry for a slice."""
        if isinstance(index, slice):
            return TestCaseRegistry(self._cases[index])
        return self._cases[index]

    def __len__(self) -> int:
        """Return the number of cases."""
        return len(self._cases)

    def __iter__(self) -> Iterator[TestCase]:
        """Iterate in registration order."""
        return iter(self._cases)

    def __add__(self, other: "TestCaseRegistry | Iterable[TestCase]") -> "TestCaseRegistry":
        """Return a registry with the cases of `other` appended."""
        return TestCaseRegistry([*self._cases, *other])

    @property
    def names(self) -> List[str]:
        """Return the case names in registration order."""
        return [case.name for case in self._cases]

    def __repr__(self) -> str:
        """Return a representation listing the case names."""
        return f"TestCaseRegistry({self.names})"
