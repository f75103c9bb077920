from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from backend.models.answers import AuditResponse

# Global registry -- maps group -> rule_id -> Rule, in registration order
_REGISTRY: dict[str, dict[str, Rule]] = {}


@dataclass(frozen=True)
class Rule:
    """One independent generator rule.

    ``trigger`` decides whether the rule applies to a response; ``produce``
    builds its entries. ``produce`` also receives the entries emitted so far
    by earlier rules of the same group so it can skip duplicates.
    """

    id: str
    group: str
    description: str
    trigger: Callable[[AuditResponse], bool]
    produce: Callable[[AuditResponse, list[Any]], list[Any]]

    def apply(self, response: AuditResponse, produced: list[Any]) -> list[Any]:
        if not self.trigger(response):
            return []
        return self.produce(response, produced)


def _always(response: AuditResponse) -> bool:
    return True


def register_rule(
    rule_id: str,
    group: str,
    description: str,
    trigger: Optional[Callable[[AuditResponse], bool]] = None,
) -> Callable:
    """Decorator to register a produce function as a rule in ``group``.

    Rules in a group run in the order their modules register them.
    """

    def decorator(fn: Callable[[AuditResponse, list[Any]], list[Any]]) -> Callable:
        rule = Rule(
            id=rule_id,
            group=group,
            description=description,
            trigger=trigger or _always,
            produce=fn,
        )
        _REGISTRY.setdefault(group, {})[rule_id] = rule
        return fn

    return decorator


def get_rule(group: str, rule_id: str) -> Optional[Rule]:
    """Look up a rule by group and ID."""
    return _REGISTRY.get(group, {}).get(rule_id)


def get_rules(group: str) -> list[Rule]:
    """Rules of a group in registration order."""
    return list(_REGISTRY.get(group, {}).values())


def run_rules(group: str, response: AuditResponse) -> list[Any]:
    """Apply every rule of ``group`` in order and collect what they produce."""
    produced: list[Any] = []
    for rule in get_rules(group):
        produced.extend(rule.apply(response, produced))
    return produced
