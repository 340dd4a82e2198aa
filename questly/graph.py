"""Static event graph validation.

The navigator tolerates broken content at play time (a dangling edge simply
ends the branch). This module finds the same problems ahead of time so
authors can fix them.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from questly.models import STAT_NAMES, Event

Severity = str

EVENT_ID_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$")


@dataclass(frozen=True, slots=True)
class Issue:
    severity: Severity
    code: str
    message: str
    context: dict[str, str] = field(default_factory=dict)


def format_issue(issue: Issue) -> str:
    context = " ".join(f"{key}={value}" for key, value in issue.context.items())
    suffix = f" ({context})" if context else ""
    return f"[{issue.severity}] {issue.code}: {issue.message}{suffix}"


def has_errors(issues: Iterable[Issue]) -> bool:
    return any(issue.severity == "ERROR" for issue in issues)


def validate_event_graph(events: Iterable[Event], start_event_id: str) -> list[Issue]:
    issues: list[Issue] = []
    by_id: dict[str, Event] = {}
    for event in events:
        if event.id in by_id:
            issues.append(
                Issue(
                    severity="ERROR",
                    code="DUPLICATE_EVENT_ID",
                    message="Several events share this id; the store returns the first match.",
                    context={"event_id": event.id},
                )
            )
            continue
        by_id[event.id] = event
        if not EVENT_ID_PATTERN.match(event.id):
            issues.append(
                Issue(
                    severity="WARNING",
                    code="INVALID_EVENT_ID",
                    message="Event ids should start with a letter and use only a-z, 0-9 and _.",
                    context={"event_id": event.id},
                )
            )

    if start_event_id not in by_id:
        issues.append(
            Issue(
                severity="ERROR",
                code="MISSING_START_EVENT",
                message="Start event does not exist.",
                context={"event_id": start_event_id},
            )
        )

    for event in by_id.values():
        _validate_options(event, by_id, issues)

    for event_id in sorted(set(by_id) - _reachable(by_id, start_event_id)):
        issues.append(
            Issue(
                severity="WARNING",
                code="UNREACHABLE_EVENT",
                message="Event cannot be reached from the start event.",
                context={"event_id": event_id},
            )
        )
    return issues


def _validate_options(event: Event, by_id: dict[str, Event], issues: list[Issue]) -> None:
    for index, option in enumerate(event.options):
        where = {"event_id": event.id, "option": str(index)}
        if option.next_event_id and option.next_event_id not in by_id:
            issues.append(
                Issue(
                    "ERROR",
                    "DANGLING_EDGE",
                    "Option points to a missing event; choosing it ends the branch.",
                    {**where, "referenced_id": option.next_event_id},
                )
            )
        requirement = option.requirement
        if requirement is not None and requirement.stat not in STAT_NAMES:
            issues.append(
                Issue(
                    "ERROR",
                    "UNKNOWN_STAT",
                    "Requirement names an unknown stat; characters count it as 0.",
                    {**where, "stat": requirement.stat},
                )
            )


def _reachable(by_id: dict[str, Event], start_event_id: str) -> set[str]:
    seen: set[str] = set()
    stack = [start_event_id]
    while stack:
        event_id = stack.pop()
        if event_id in seen or event_id not in by_id:
            continue
        seen.add(event_id)
        for option in by_id[event_id].options:
            if option.next_event_id:
                stack.append(option.next_event_id)
    return seen
