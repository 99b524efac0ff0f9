"""Rule data models: taxonomy enums, rule records and the rule bundle."""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, field
from typing import Any, TypeVar

_E = TypeVar("_E", bound="_SegmentEnum")


class _SegmentEnum(enum.Enum):
    """Enum parsed from a path segment, falling back to ``UNKNOWN``."""

    @classmethod
    def from_segment(cls: type[_E], segment: str) -> _E:
        """Return the member whose name or value equals *segment* exactly.

        Never raises: unmatched segments map to ``UNKNOWN``.
        """
        for member in cls:
            if segment == member.name or segment == member.value:
                return member
        return cls["UNKNOWN"]


class CatLevelOne(_SegmentEnum):
    """Top-level rule category, taken from the first path segment."""

    SOURCES = "sources"
    SINKS = "sinks"
    COLLECTIONS = "collections"
    POLICIES = "policies"
    UNKNOWN = "unknown"


class NodeType(_SegmentEnum):
    """Kind of code node a sink rule targets."""

    REGULAR = "REGULAR"
    API = "api"
    UNKNOWN = "unknown"


class Language(_SegmentEnum):
    """Implementation language a rule document is written for."""

    JAVA = "java"
    JAVASCRIPT = "javascript"
    PYTHON = "python"
    GO = "go"
    RUBY = "ruby"
    KOTLIN = "kotlin"
    PHP = "php"
    CSHARP = "csharp"
    DEFAULT = "default"
    UNKNOWN = "unknown"


class PolicyOrThreatType(enum.Enum):
    POLICY = "POLICY"
    THREAT = "THREAT"


class PolicyAction(enum.Enum):
    ALLOW = "ALLOW"
    DENY = "DENY"


@dataclass(frozen=True)
class RuleInfo:
    """A source, sink, collection or exclusion rule."""

    id: str
    name: str = ""
    category: str = ""
    sensitivity: str = ""
    is_sensitive: bool = False
    domains: tuple[str, ...] = ()
    patterns: tuple[str, ...] = ()
    # Tag pairs in document order; ``dict(rule.tags)`` for a mapping view.
    tags: tuple[tuple[str, str], ...] = ()
    # Stamped from the document location by the parser.
    file: str = ""
    category_tree: tuple[str, ...] = ()
    cat_level_one: CatLevelOne = CatLevelOne.UNKNOWN
    cat_level_two: str = ""
    node_type: NodeType = NodeType.REGULAR
    language: Language = Language.UNKNOWN


@dataclass(frozen=True)
class PolicyDataFlow:
    """Source and sink id patterns a policy or threat applies to."""

    sources: tuple[str, ...] = ()
    sinks: tuple[str, ...] = ()


@dataclass(frozen=True)
class PolicyOrThreat:
    id: str
    name: str = ""
    policy_or_threat_type: PolicyOrThreatType = PolicyOrThreatType.POLICY
    description: str = ""
    fix: str = ""
    action: PolicyAction | None = None
    data_flow: PolicyDataFlow = field(default_factory=PolicyDataFlow)
    repositories: tuple[str, ...] = ()
    tags: tuple[tuple[str, str], ...] = ()
    file: str = ""
    category_tree: tuple[str, ...] = ()


@dataclass(frozen=True)
class Semantic:
    """Dataflow semantic for a method signature. Keyed by ``signature``."""

    signature: str
    flow: str = ""
    file: str = ""
    category_tree: tuple[str, ...] = ()
    language: Language = Language.UNKNOWN


@dataclass(frozen=True)
class Diagnostic:
    """A rule document that was rejected, with the reason."""

    file_path: str
    message: str


RULE_CATEGORIES: tuple[str, ...] = ("sources", "sinks", "collections", "exclusions")
POLICY_CATEGORIES: tuple[str, ...] = ("policies", "threats")
ALL_CATEGORIES: tuple[str, ...] = (
    "sources",
    "sinks",
    "collections",
    "policies",
    "exclusions",
    "threats",
    "semantics",
)


@dataclass(frozen=True)
class RuleBundle:
    """The seven rule categories of one document, one root, or a merge.

    Bundles concatenate per category with ``+``; ``RuleBundle()`` is the
    identity.  Order is significant: the merger keeps the first occurrence
    of an id.
    """

    sources: tuple[RuleInfo, ...] = ()
    sinks: tuple[RuleInfo, ...] = ()
    collections: tuple[RuleInfo, ...] = ()
    policies: tuple[PolicyOrThreat, ...] = ()
    exclusions: tuple[RuleInfo, ...] = ()
    threats: tuple[PolicyOrThreat, ...] = ()
    semantics: tuple[Semantic, ...] = ()

    def __add__(self, other: RuleBundle) -> RuleBundle:
        if not isinstance(other, RuleBundle):
            return NotImplemented
        return RuleBundle(
            sources=self.sources + other.sources,
            sinks=self.sinks + other.sinks,
            collections=self.collections + other.collections,
            policies=self.policies + other.policies,
            exclusions=self.exclusions + other.exclusions,
            threats=self.threats + other.threats,
            semantics=self.semantics + other.semantics,
        )

    def is_empty(self) -> bool:
        return self.total_entries() == 0

    def total_entries(self) -> int:
        return sum(len(getattr(self, name)) for name in ALL_CATEGORIES)

    def rules_used(self) -> int:
        """Count reported to metrics: every category except threats and semantics."""
        return (
            len(self.sources)
            + len(self.sinks)
            + len(self.collections)
            + len(self.policies)
            + len(self.exclusions)
        )

    def counts(self) -> dict[str, int]:
        return {name: len(getattr(self, name)) for name in ALL_CATEGORIES}

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        """Return a JSON-serialisable view with enums rendered as values."""
        return {
            name: [_plain_record(item) for item in getattr(self, name)]
            for name in ALL_CATEGORIES
        }


# Alias used by code that mirrors the rule document's top-level schema.
ConfigAndRules = RuleBundle


def _plain_record(item: Any) -> dict[str, Any]:
    data: dict[str, Any] = _plain(asdict(item))
    if "tags" in data:
        data["tags"] = dict(item.tags)
    return data


def _plain(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value
