"""
Per-run generation state.

A GenerationContext is created for every run and discarded afterwards,
so independent runs over the same (read-only) registry never share
mutable state.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, List, Set

from ...logging_config import get_logger
from .config import GeneratorConfig
from .schema import Registry, SchemaNode

logger = get_logger(__name__)


@dataclass(frozen=True)
class PendingSchema:
    """A synthesized type waiting to be emitted after its parent message."""

    name: str
    node: SchemaNode
    lineage: FrozenSet[str] = frozenset()


@dataclass
class GenerationContext:
    """Mutable state threaded through a single generation run."""

    registry: Registry
    config: GeneratorConfig

    visited: Set[str] = field(default_factory=set)
    pending: List[PendingSchema] = field(default_factory=list)
    queued: Set[str] = field(default_factory=set)
    blocks: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def mark_visited(self, name: str) -> bool:
        """Mark a type name as emitted; False if it already was."""
        if name in self.visited:
            return False
        self.visited.add(name)
        return True

    def enqueue(self, item: PendingSchema) -> bool:
        """Queue a nested schema unless it was already emitted or queued."""
        if item.name in self.visited or item.name in self.queued:
            return False
        self.queued.add(item.name)
        self.pending.append(item)
        return True

    def checkpoint(self) -> int:
        """Position in the pending queue before a message body is processed."""
        return len(self.pending)

    def take_pending(self, checkpoint: int) -> List[PendingSchema]:
        """Remove and return the entries queued since `checkpoint`, in order."""
        taken = self.pending[checkpoint:]
        del self.pending[checkpoint:]
        return taken

    def warn(self, message: str) -> None:
        """Record a non-fatal anomaly once and log it."""
        if message not in self.warnings:
            logger.warning(message)
            self.warnings.append(message)
