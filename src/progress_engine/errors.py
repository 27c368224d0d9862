"""Exceptions raised by Progress Engine.

The calculations themselves prefer degenerate-safe defaults (zero
completion, empty critical path) over raising; the exceptions below cover
the cases where no meaningful result exists.
"""

from __future__ import annotations


class ProgressEngineError(Exception):
    """Base class for all Progress Engine errors."""


class CyclicDependencyError(ProgressEngineError):
    """Raised when the activity dependency graph contains a cycle.

    Attributes:
        cycle: Activity IDs forming the cycle, with the first ID repeated
            at the end (e.g. ``["a", "b", "c", "a"]``).
    """

    def __init__(self, cycle: list[str]):
        self.cycle = cycle
        super().__init__(f"Cyclic dependency detected: {' -> '.join(cycle)}")


class ProjectLoadError(ProgressEngineError):
    """Raised when a project document cannot be read or validated.

    Attributes:
        source: Path or description of the document that failed to load.
    """

    def __init__(self, source: str, reason: str):
        self.source = source
        super().__init__(f"Could not load project from {source}: {reason}")
