"""Workflow transition resolution.

Jira changes an issue's status by applying a transition, not by setting the
status field. Given the status the user asked for and the transitions Jira
currently allows for the issue, pick the transition to apply.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence


@dataclass(frozen=True)
class Transition:
    """A workflow edge available for an issue."""

    id: str
    to_state_name: str

    @classmethod
    def from_dict(cls, data: dict) -> "Transition":
        """Build from a Jira REST transition object."""
        return cls(
            id=str(data["id"]),
            to_state_name=(data.get("to") or {}).get("name", ""),
        )


@dataclass(frozen=True)
class TransitionChoice:
    """Outcome of resolving a target status.

    Either ``already_in_state`` is set (nothing to do) or ``transition_id``
    holds the transition to apply.
    """

    target: str
    transition_id: Optional[str] = None
    already_in_state: bool = False


class NoSuchTransition(Exception):
    """Raised when no available transition leads to the requested status."""

    def __init__(self, requested: str, available: Iterable[str]):
        self.requested = requested
        self.available = list(available)
        listed = ", ".join(f'"{name}"' for name in self.available)
        super().__init__(
            f"No transition found to status '{requested}'. Available statuses: {listed}"
        )


def resolve_transition(
    current_status: str,
    target_status: str,
    transitions: Sequence[Transition],
) -> TransitionChoice:
    """Resolve ``target_status`` to a transition id.

    Matching is exact and case-sensitive. When several transitions lead to
    statuses with the same name, the first one in ``transitions`` wins.

    Raises:
        NoSuchTransition: no transition leads to ``target_status``
    """
    if current_status == target_status:
        return TransitionChoice(target=target_status, already_in_state=True)

    for transition in transitions:
        if transition.to_state_name == target_status:
            return TransitionChoice(target=target_status, transition_id=transition.id)

    raise NoSuchTransition(target_status, [t.to_state_name for t in transitions])
