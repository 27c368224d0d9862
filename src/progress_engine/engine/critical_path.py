"""Critical Path Method (CPM) calculator.

Runs the standard two-pass CPM over every activity of a project:

- **Forward pass** (topological order): early start is the latest start
  required by any predecessor, never earlier than day 0; early finish is
  early start plus duration.
- **Backward pass** (reverse topological order): sink activities finish
  at the project end (maximum early finish); every other activity's late
  finish is the earliest finish any successor allows.
- **Float**: ``late_start - early_start``; activities whose float is zero
  within ``FLOAT_TOLERANCE`` are critical.

Dependencies are stored on successor activities, so the calculator first
flattens the whole project into an activity map and an edge list. The
graph must be acyclic: a cycle raises ``CyclicDependencyError`` before any
dates are computed.

The calculation never mutates its input. ``mark_critical_path`` returns an
annotated copy of the project for consumers that render the
``is_on_critical_path`` flag.
"""

from __future__ import annotations

from collections import defaultdict, deque

import structlog

from progress_engine.errors import CyclicDependencyError
from progress_engine.models.project import (
    Activity,
    DependencyType,
    Project,
    TaskDependency,
)
from progress_engine.models.report import ActivitySchedule, CriticalPathResult

logger = structlog.get_logger(__name__)

# Absolute float below which an activity counts as critical
FLOAT_TOLERANCE = 0.001


class DependencyGraph:
    """Flattened activity network of a project.

    Attributes:
        activities: Activities keyed by ID, in discovery order.
        dependencies: Edges whose both ends exist in ``activities``.
        predecessors: Incoming edges keyed by successor ID.
        successors: Outgoing edges keyed by predecessor ID.
    """

    def __init__(self, project: Project) -> None:
        self.activities: dict[str, Activity] = {}
        self.dependencies: list[TaskDependency] = []
        self.predecessors: dict[str, list[TaskDependency]] = defaultdict(list)
        self.successors: dict[str, list[TaskDependency]] = defaultdict(list)
        self._logger = logger.bind(project_id=project.project_id)

        for activity in project.iter_activities():
            if activity.activity_id in self.activities:
                self._logger.warning(
                    "duplicate_activity_ignored",
                    activity_id=activity.activity_id,
                )
                continue
            self.activities[activity.activity_id] = activity

        for dep in project.iter_dependencies():
            if (
                dep.predecessor_id not in self.activities
                or dep.successor_id not in self.activities
            ):
                self._logger.warning(
                    "dangling_dependency_ignored",
                    dependency_id=dep.dependency_id,
                    predecessor_id=dep.predecessor_id,
                    successor_id=dep.successor_id,
                )
                continue
            self.dependencies.append(dep)
            self.predecessors[dep.successor_id].append(dep)
            self.successors[dep.predecessor_id].append(dep)

    def __len__(self) -> int:
        return len(self.activities)

    def topological_order(self) -> list[str]:
        """Return activity IDs with every predecessor before its successors.

        Uses Kahn's algorithm, seeded in discovery order so the result is
        deterministic.

        Raises:
            CyclicDependencyError: If the dependency graph contains a cycle.
        """
        in_degree = {aid: len(self.predecessors[aid]) for aid in self.activities}
        queue = deque(aid for aid, deg in in_degree.items() if deg == 0)
        order: list[str] = []

        while queue:
            aid = queue.popleft()
            order.append(aid)
            for dep in self.successors[aid]:
                in_degree[dep.successor_id] -= 1
                if in_degree[dep.successor_id] == 0:
                    queue.append(dep.successor_id)

        if len(order) != len(self.activities):
            remaining = {aid for aid, deg in in_degree.items() if deg > 0}
            raise CyclicDependencyError(self._find_cycle(remaining))

        return order

    def _find_cycle(self, remaining: set[str]) -> list[str]:
        """Extract one cycle from the nodes Kahn's algorithm could not order.

        Every remaining node still has a predecessor among the remaining
        nodes, so walking predecessors must eventually revisit a node.
        """
        node = next(aid for aid in self.activities if aid in remaining)
        path: list[str] = []
        position: dict[str, int] = {}

        while node not in position:
            position[node] = len(path)
            path.append(node)
            node = next(
                dep.predecessor_id
                for dep in self.predecessors[node]
                if dep.predecessor_id in remaining
            )

        # path runs against the edges; flip it to read predecessor -> successor
        cycle = path[position[node]:]
        cycle.reverse()
        cycle.append(cycle[0])
        return cycle


def _required_start(
    dep: TaskDependency,
    pred_early_start: float,
    pred_early_finish: float,
    duration: float,
) -> float:
    """Earliest start of a successor permitted by one dependency."""
    if dep.dependency_type is DependencyType.FINISH_TO_START:
        return pred_early_finish + dep.lag_time
    if dep.dependency_type is DependencyType.START_TO_START:
        return pred_early_start + dep.lag_time
    if dep.dependency_type is DependencyType.FINISH_TO_FINISH:
        return pred_early_finish - duration + dep.lag_time
    if dep.dependency_type is DependencyType.START_TO_FINISH:
        return pred_early_start - duration + dep.lag_time
    raise ValueError(f"Unsupported dependency type: {dep.dependency_type}")


def _required_finish(
    dep: TaskDependency,
    succ_late_start: float,
    succ_late_finish: float,
    duration: float,
) -> float:
    """Latest finish of a predecessor permitted by one dependency."""
    if dep.dependency_type is DependencyType.FINISH_TO_START:
        return succ_late_start - dep.lag_time
    if dep.dependency_type is DependencyType.START_TO_START:
        return succ_late_start - dep.lag_time + duration
    if dep.dependency_type is DependencyType.FINISH_TO_FINISH:
        return succ_late_finish - dep.lag_time
    if dep.dependency_type is DependencyType.START_TO_FINISH:
        return succ_late_finish - dep.lag_time + duration
    raise ValueError(f"Unsupported dependency type: {dep.dependency_type}")


def calculate_critical_path(project: Project) -> CriticalPathResult:
    """Calculate the critical path of a project.

    Args:
        project: Fully populated project graph. Not modified.

    Returns:
        ``CriticalPathResult`` with the critical activity IDs in discovery
        order, the project duration in days and the CPM dates of every
        activity. A project without activities yields an empty result.

    Raises:
        CyclicDependencyError: If the dependencies form a cycle.
    """
    graph = DependencyGraph(project)
    if not graph:
        return CriticalPathResult()

    order = graph.topological_order()

    early_start: dict[str, float] = {}
    early_finish: dict[str, float] = {}
    for aid in order:
        duration = graph.activities[aid].duration
        start = 0.0
        for dep in graph.predecessors[aid]:
            start = max(
                start,
                _required_start(
                    dep,
                    early_start[dep.predecessor_id],
                    early_finish[dep.predecessor_id],
                    duration,
                ),
            )
        early_start[aid] = start
        early_finish[aid] = start + duration

    project_end = max(early_finish.values())

    late_start: dict[str, float] = {}
    late_finish: dict[str, float] = {}
    for aid in reversed(order):
        duration = graph.activities[aid].duration
        outgoing = graph.successors[aid]
        if not outgoing:
            finish = project_end
        else:
            finish = min(
                _required_finish(
                    dep,
                    late_start[dep.successor_id],
                    late_finish[dep.successor_id],
                    duration,
                )
                for dep in outgoing
            )
        late_finish[aid] = finish
        late_start[aid] = finish - duration

    schedule: dict[str, ActivitySchedule] = {}
    critical_path: list[str] = []
    for aid in graph.activities:
        total_float = late_start[aid] - early_start[aid]
        is_critical = abs(total_float) < FLOAT_TOLERANCE
        if is_critical:
            critical_path.append(aid)
        schedule[aid] = ActivitySchedule(
            activity_id=aid,
            early_start=early_start[aid],
            early_finish=early_finish[aid],
            late_start=late_start[aid],
            late_finish=late_finish[aid],
            total_float=total_float,
            is_critical=is_critical,
        )

    logger.debug(
        "critical_path_calculated",
        project_id=project.project_id,
        activities=len(graph),
        dependencies=len(graph.dependencies),
        critical_count=len(critical_path),
        project_duration=project_end,
    )

    return CriticalPathResult(
        critical_path=critical_path,
        project_duration=project_end,
        schedule=schedule,
    )


def mark_critical_path(
    project: Project,
    result: CriticalPathResult | None = None,
) -> Project:
    """Return a copy of the project annotated with critical path membership.

    Every activity's ``is_on_critical_path`` flag in the copy is set to
    ``True`` or ``False``; the original project is left untouched.

    Args:
        project: Project to annotate.
        result: Previously computed result for this project. Calculated
            when omitted.

    Returns:
        Deep copy of ``project`` with the flags set.

    Raises:
        CyclicDependencyError: If ``result`` is omitted and the
            dependencies form a cycle.
    """
    if result is None:
        result = calculate_critical_path(project)

    annotated = project.model_copy(deep=True)
    for activity in annotated.iter_activities():
        activity.is_on_critical_path = result.is_critical(activity.activity_id)
    return annotated
