"""Creation chains: ordered actions that bring a resource into existence.

A chain starts UNKNOWN, is resolved to COMPLETE or INCOMPLETE, and may
later be confirmed FAILED after an execution proves it wrong. FAILED is
terminal; a changed situation calls for a new chain.
"""

import logging
from enum import Enum

from .actions import DbAction, RestCallAction

logger = logging.getLogger(__name__)


class CreationStatus(str, Enum):
    UNKNOWN = "UNKNOWN"
    COMPLETE = "COMPLETE"
    INCOMPLETE = "INCOMPLETE"
    FAILED = "FAILED"


class ResourceStatus(str, Enum):
    """Outcome of preparing the resources of a target call."""

    CREATED = "CREATED"
    NOT_ENOUGH_LENGTH = "NOT_ENOUGH_LENGTH"
    NOT_FOUND = "NOT_FOUND"
    NOT_FOUND_DEPENDENT = "NOT_FOUND_DEPENDENT"


class CreationStateError(RuntimeError):
    """Raised when a failed chain is asked to change status."""


class CreationChain:
    variant = "abstract"

    def __init__(self, actions: list | None = None):
        self.actions = list(actions or [])
        self.status = CreationStatus.UNKNOWN
        self.unresolved_path: str | None = None

    def participants(self) -> set[str]:
        return {a.get_name() for a in self.actions}

    def signature(self) -> str:
        return signature_of(self.participants())

    def is_complete(self) -> bool:
        return self.status == CreationStatus.COMPLETE

    def is_failed(self) -> bool:
        return self.status == CreationStatus.FAILED

    def _move_to(self, status: CreationStatus) -> None:
        if self.status == CreationStatus.FAILED:
            raise CreationStateError(f"{self.variant} chain {self.signature()!r} is already failed")
        self.status = status

    def confirm_complete(self) -> None:
        self._move_to(CreationStatus.COMPLETE)

    def confirm_incomplete(self, path: str) -> None:
        self._move_to(CreationStatus.INCOMPLETE)
        self.unresolved_path = path
        logger.debug("%s chain left incomplete at %s", self.variant, path)

    def confirm_failure(self) -> None:
        if self.status != CreationStatus.FAILED:
            logger.info("%s chain %r confirmed as failing", self.variant, self.signature())
        self.status = CreationStatus.FAILED

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.signature()!r}, {self.status.value})"


class PostCreationChain(CreationChain):
    """POST calls, outermost creator first."""

    variant = "post"

    def __init__(self, actions: list[RestCallAction] | None = None):
        super().__init__(actions)


class DBCreationChain(CreationChain):
    """Row insertions, identified by table name."""

    variant = "db"

    def __init__(self, actions: list[DbAction] | None = None):
        super().__init__(actions)

    def participants(self) -> set[str]:
        return {a.table for a in self.actions}


class CompositeCreationChain(CreationChain):
    """Row insertions followed by POST calls."""

    variant = "composite"

    def participants(self) -> set[str]:
        return {a.table if isinstance(a, DbAction) else a.get_name() for a in self.actions}


def signature_of(names) -> str:
    return ",".join(sorted(names))
