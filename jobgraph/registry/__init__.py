"""Type registries for job and workflow classes.

Jobs and workflows are persisted by their type identifier. The registries in
this module map those identifiers back to the classes that were defined in the
running process, so a stored workflow can be rebuilt without any reflection on
arbitrary import paths. Subclasses of :class:`~jobgraph.job.Job` and
:class:`~jobgraph.workflow.Workflow` register themselves when defined.
"""

from __future__ import annotations

import logging
from typing import Dict, Generic, List, Optional, Type, TypeVar

from ..exceptions import UnknownType

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TypeRegistry(Generic[T]):
    """Mapping from a type identifier to a class."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._types: Dict[str, Type[T]] = {}

    def register(self, name: str, cls: Type[T]) -> Type[T]:
        """Record ``cls`` under ``name``.

        Re-registering a name replaces the previous class; this happens when a
        module defining job types is reloaded.
        """
        previous = self._types.get(name)
        if previous is not None and previous is not cls:
            logger.debug(f"Replacing {self.kind} type '{name}' ({previous!r} -> {cls!r})")
        self._types[name] = cls
        return cls

    def get(self, name: str) -> Type[T]:
        """Return the class registered as ``name`` or raise ``UnknownType``."""
        try:
            return self._types[name]
        except KeyError:
            raise UnknownType(f"Unknown {self.kind} type: {name}") from None

    def find(self, name: str) -> Optional[Type[T]]:
        return self._types.get(name)

    def names(self) -> List[str]:
        return sorted(self._types)

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __len__(self) -> int:
        return len(self._types)


JOB_TYPES: TypeRegistry = TypeRegistry("job")
WORKFLOW_TYPES: TypeRegistry = TypeRegistry("workflow")


__all__ = [
    "TypeRegistry",
    "JOB_TYPES",
    "WORKFLOW_TYPES",
]
