"""Merge the internal and external rule bundles.

External-before-internal: each category is concatenated as
``external + internal`` and deduplicated keeping the first occurrence,
so a user rule that reuses a built-in id replaces the built-in rule.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from rulecat.models import RuleBundle

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable, Iterable

T = TypeVar("T")


def dedup_by(items: Iterable[T], key: Callable[[T], Hashable]) -> tuple[T, ...]:
    """Return *items* without repeated keys, keeping the first occurrence."""
    seen: set[Hashable] = set()
    result: list[T] = []
    for item in items:
        k = key(item)
        if k in seen:
            continue
        seen.add(k)
        result.append(item)
    return tuple(result)


def _by_id(item: object) -> Hashable:
    return item.id  # type: ignore[attr-defined, no-any-return]


def _by_signature(item: object) -> Hashable:
    return item.signature  # type: ignore[attr-defined, no-any-return]


def merge_bundles(internal: RuleBundle | None, external: RuleBundle | None) -> RuleBundle:
    """Merge *external* over *internal*.  ``None`` on either side is an empty bundle."""
    internal = internal or RuleBundle()
    external = external or RuleBundle()
    combined = external + internal
    return RuleBundle(
        sources=dedup_by(combined.sources, _by_id),
        sinks=dedup_by(combined.sinks, _by_id),
        collections=dedup_by(combined.collections, _by_id),
        policies=dedup_by(combined.policies, _by_id),
        exclusions=dedup_by(combined.exclusions, _by_id),
        threats=dedup_by(combined.threats, _by_id),
        semantics=dedup_by(combined.semantics, _by_signature),
    )


def internal_policy_ids(internal: RuleBundle | None) -> frozenset[str]:
    """Ids of the built-in policies and threats, used to tell them from custom ones."""
    if internal is None:
        return frozenset()
    return frozenset(p.id for p in internal.policies) | frozenset(t.id for t in internal.threats)
