"""
Document model: flat macros, hierarchical test suites and positions.
"""

from dataclasses import dataclass, field
from functools import total_ordering
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from ..exceptions import DocumentError
from .steps import Step


@total_ordering
@dataclass(frozen=True)
class Position:
    """
    Pointer into a document.

    Flat documents only use step_index; hierarchical documents also
    carry the test case index and id.
    """
    step_index: int
    test_case_index: Optional[int] = None
    test_case_id: Optional[str] = None

    @property
    def key(self) -> str:
        """Results map key: "<step>" or "<testCase>:<step>"."""
        if self.test_case_index is None:
            return str(self.step_index)
        return f"{self.test_case_index}:{self.step_index}"

    @property
    def sort_key(self) -> Tuple[int, int]:
        return (self.test_case_index if self.test_case_index is not None else 0, self.step_index)

    def __lt__(self, other: "Position") -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return self.sort_key < other.sort_key

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"stepIndex": self.step_index}
        if self.test_case_index is not None:
            data["testCaseIndex"] = self.test_case_index
            data["testCaseId"] = self.test_case_id
        return data


@dataclass(frozen=True)
class Macro:
    """Flat ordered sequence of steps."""
    steps: Tuple[Step, ...]
    description: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)
    context: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "steps", tuple(self.steps))


@dataclass(frozen=True)
class TestCase:
    """A named group of steps with dependency references to other test cases."""
    id: str
    steps: Tuple[Step, ...]
    description: str = ""
    depends: Tuple[str, ...] = ()

    # keep pytest from collecting this class
    __test__ = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "steps", tuple(self.steps))
        object.__setattr__(self, "depends", tuple(self.depends))


@dataclass(frozen=True)
class TestSuite:
    """
    Hierarchy of test cases.

    Dependency edges between test cases are ordering metadata for
    presentation; playback runs test cases in listed order.
    """
    test_cases: Tuple[TestCase, ...]
    description: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)
    context: Dict[str, Any] = field(default_factory=dict)

    __test__ = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "test_cases", tuple(self.test_cases))

    def get_test_case(self, test_case_id: str) -> Optional[TestCase]:
        for tc in self.test_cases:
            if tc.id == test_case_id:
                return tc
        return None

    def dependency_order(self) -> List[str]:
        """
        Test case ids in an order where every test case follows its dependencies.

        Ties keep document order.

        @throws DocumentError on unknown references or dependency cycles
        """
        ids = [tc.id for tc in self.test_cases]
        known = set(ids)
        pending: Dict[str, set] = {}
        for tc in self.test_cases:
            unknown = [d for d in tc.depends if d not in known]
            if unknown:
                raise DocumentError(f"test case '{tc.id}' depends on unknown test case(s): {unknown}")
            pending[tc.id] = set(tc.depends)

        ordered: List[str] = []
        done: set = set()
        while len(ordered) < len(ids):
            ready = [i for i in ids if i not in done and pending[i] <= done]
            if not ready:
                cycle = sorted(i for i in ids if i not in done)
                raise DocumentError(f"dependency cycle between test cases: {cycle}")
            for i in ready:
                ordered.append(i)
                done.add(i)
        return ordered


Document = Union[Macro, TestSuite]


def iter_positions(document: Document) -> Iterator[Tuple[Position, Step]]:
    """Yield (Position, Step) pairs in document order, flattening test cases."""
    if isinstance(document, Macro):
        for idx, step in enumerate(document.steps):
            yield Position(step_index=idx), step
    elif isinstance(document, TestSuite):
        for tc_idx, tc in enumerate(document.test_cases):
            for idx, step in enumerate(tc.steps):
                yield Position(step_index=idx, test_case_index=tc_idx, test_case_id=tc.id), step
    else:
        raise DocumentError(f"Unsupported document type: {type(document).__name__}")


def step_count(document: Document) -> int:
    """Total number of steps across the document."""
    if isinstance(document, Macro):
        return len(document.steps)
    return sum(len(tc.steps) for tc in document.test_cases)
