"""Frontier computation: which jobs may run now."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from .constants import DEFAULT_DEPTH_MULTIPLIER
from .exceptions import DependencyLevelTooDeep, JobNotFound
from .job import Job

logger = logging.getLogger(__name__)


class FrontierResolver:
    """Compute the set of jobs eligible to run from the current node states.

    Before returning a frontier the resolver assigns every node its dependency
    level (the longest chain of ancestors above it) with repeated relaxation
    sweeps over the edges. In an acyclic graph the levels settle after at most
    ``len(nodes)`` sweeps; in a cyclic one they keep growing, so the sweep
    counter doubles as a depth counter and is bounded by ``depth_limit``.
    Crossing the bound raises :class:`DependencyLevelTooDeep` instead of
    looping forever, whether or not the cycle is reachable from a root.
    """

    def __init__(
        self,
        nodes: Sequence[Job],
        depth_limit: Optional[int] = None,
        depth_multiplier: int = DEFAULT_DEPTH_MULTIPLIER,
    ) -> None:
        self._nodes = list(nodes)
        self._by_name: Dict[str, Job] = {job.name: job for job in self._nodes}
        minimum = max(len(self._nodes), 1)
        if depth_limit is None:
            depth_limit = minimum * max(depth_multiplier, 1)
        self.depth_limit = max(depth_limit, minimum)

    def resolve(self, name: str) -> Job:
        try:
            return self._by_name[name]
        except KeyError:
            raise JobNotFound(name) from None

    def dependency_levels(self) -> Dict[str, int]:
        """Return each job's level; roots sit at level 0."""
        levels = {job.name: 0 for job in self._nodes}
        depth = 0
        while True:
            changed = False
            for job in self._nodes:
                for parent in job.incoming:
                    if parent not in levels:
                        raise JobNotFound(parent)
                    candidate = levels[parent] + 1
                    if candidate > levels[job.name]:
                        levels[job.name] = candidate
                        changed = True
            if not changed:
                return levels
            depth += 1
            if depth > self.depth_limit:
                logger.error(
                    f"Dependency resolution exceeded depth limit {self.depth_limit} "
                    f"over {len(self._nodes)} jobs"
                )
                raise DependencyLevelTooDeep(depth, self.depth_limit)

    def levels(self) -> List[List[str]]:
        """Group job names by dependency level, in declaration order."""
        levels = self.dependency_levels()
        grouped: List[List[str]] = [[] for _ in range(max(levels.values(), default=-1) + 1)]
        for job in self._nodes:
            grouped[levels[job.name]].append(job.name)
        return grouped

    def next_jobs(self) -> List[Job]:
        """Return the jobs ready to run now, in declaration order."""
        self.dependency_levels()
        return [job for job in self._nodes if job.is_ready(self.resolve)]
