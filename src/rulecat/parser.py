"""Parse one YAML rule document into a stamped :class:`RuleBundle`.

A document is a mapping with up to seven category lists::

    sources:
      - id: Data.Sensitive.AccountData.AccountPassword
        name: Account Password
        category: Account Data
        isSensitive: true
        sensitivity: high
        patterns:
          - "(?i).*password.*"
        tags:
          law: GDPR

A malformed document never aborts the walk: it is logged, reported as a
:class:`Diagnostic`, and contributes an empty bundle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

import yaml

from rulecat.errors import DocumentDecodeError
from rulecat.models import (
    ALL_CATEGORIES,
    Diagnostic,
    NodeType,
    PolicyAction,
    PolicyDataFlow,
    PolicyOrThreat,
    PolicyOrThreatType,
    RuleBundle,
    RuleInfo,
    Semantic,
)
from rulecat.taxonomy import Taxonomy, derive_taxonomy, require_depth
from rulecat.validator import is_valid_rule

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

# Categories whose entries must pass ``is_valid_rule`` to be kept. Elsewhere a
# missing identifier rejects the whole document.
_VALIDATED_CATEGORIES = frozenset({"sources", "sinks", "collections"})


@dataclass(frozen=True)
class ParsedDocument:
    """Result of parsing a single rule document."""

    bundle: RuleBundle = field(default_factory=RuleBundle)
    diagnostic: Diagnostic | None = None
    dropped: int = 0


def parse_document(full_path: Path, content: str | bytes, root: Path) -> ParsedDocument:
    """Decode *content* of the document at *full_path* below *root*."""
    file_path = str(full_path)
    taxonomy = derive_taxonomy(full_path.relative_to(root))
    logger.debug("Parsing %s", file_path)
    try:
        data = yaml.safe_load(content)
        bundle, dropped = _decode_bundle(data, file_path, taxonomy)
    except (yaml.YAMLError, DocumentDecodeError) as exc:
        logger.error("Error while parsing rule document %s: %s", file_path, exc)
        return ParsedDocument(diagnostic=Diagnostic(file_path=file_path, message=str(exc)))
    if dropped:
        logger.debug("Dropped %d invalid rules from %s", dropped, file_path)
    return ParsedDocument(bundle=bundle, dropped=dropped)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _decode_bundle(data: object, file_path: str, taxonomy: Taxonomy) -> tuple[RuleBundle, int]:
    if data is None:
        return RuleBundle(), 0
    if not isinstance(data, dict):
        msg = "rule document must be a YAML mapping"
        raise DocumentDecodeError(msg)

    sections: dict[str, list[dict[str, Any]]] = {}
    for name in ALL_CATEGORIES:
        sections[name] = _section(data, name)
        if sections[name]:
            require_depth(taxonomy, name)

    dropped = 0
    rules: dict[str, tuple[RuleInfo, ...]] = {}
    for name in ("sources", "sinks", "collections", "exclusions"):
        decoded = [
            _decode_rule(entry, f"{name}[{i}]", require_id=name not in _VALIDATED_CATEGORIES)
            for i, entry in enumerate(sections[name])
        ]
        if name in _VALIDATED_CATEGORIES:
            kept = [r for r in decoded if _is_valid(r, file_path)]
            dropped += len(decoded) - len(kept)
            decoded = kept
        rules[name] = tuple(_stamp_rule(r, name, file_path, taxonomy) for r in decoded)

    policies = tuple(
        _decode_policy(entry, f"policies[{i}]", PolicyOrThreatType.POLICY, file_path, taxonomy)
        for i, entry in enumerate(sections["policies"])
    )
    threats = tuple(
        _decode_policy(entry, f"threats[{i}]", PolicyOrThreatType.THREAT, file_path, taxonomy)
        for i, entry in enumerate(sections["threats"])
    )
    semantics = tuple(
        _decode_semantic(entry, f"semantics[{i}]", file_path, taxonomy)
        for i, entry in enumerate(sections["semantics"])
    )

    bundle = RuleBundle(
        sources=rules["sources"],
        sinks=rules["sinks"],
        collections=rules["collections"],
        policies=policies,
        exclusions=rules["exclusions"],
        threats=threats,
        semantics=semantics,
    )
    return bundle, dropped


def _section(data: dict[str, Any], name: str) -> list[dict[str, Any]]:
    raw = data.get(name)
    if raw is None:
        return []
    if not isinstance(raw, list):
        msg = f"'{name}' must be a list"
        raise DocumentDecodeError(msg)
    for idx, entry in enumerate(raw):
        if not isinstance(entry, dict):
            msg = f"{name}[{idx}] must be a mapping"
            raise DocumentDecodeError(msg)
    return raw


def _is_valid(rule: RuleInfo, file_path: str) -> bool:
    pattern = rule.patterns[0] if rule.patterns else ""
    return is_valid_rule(pattern, rule.id, file_path)


def _decode_rule(entry: dict[str, Any], context: str, *, require_id: bool) -> RuleInfo:
    read_id = _required_str if require_id else _str
    return RuleInfo(
        id=read_id(entry, "id", context),
        name=_str(entry, "name", context),
        category=_str(entry, "category", context),
        sensitivity=_str(entry, "sensitivity", context),
        is_sensitive=_bool(entry, "isSensitive", context),
        domains=_str_tuple(entry, "domains", context),
        patterns=_str_tuple(entry, "patterns", context),
        tags=_str_pairs(entry, "tags", context),
    )


def _stamp_rule(rule: RuleInfo, category: str, file_path: str, taxonomy: Taxonomy) -> RuleInfo:
    """Fill in location-derived fields for a rule in *category*."""
    stamped = replace(
        rule,
        file=file_path,
        category_tree=taxonomy.category_tree,
        cat_level_one=taxonomy.cat_level_one(),
        node_type=NodeType.REGULAR,
    )
    if category == "sinks":
        stamped = replace(
            stamped,
            cat_level_two=taxonomy.cat_level_two(),
            node_type=taxonomy.node_type(),
        )
    if category != "collections":
        stamped = replace(stamped, language=taxonomy.language)
    return stamped


def _decode_policy(
    entry: dict[str, Any],
    context: str,
    default_type: PolicyOrThreatType,
    file_path: str,
    taxonomy: Taxonomy,
) -> PolicyOrThreat:
    raw_type = _str(entry, "type", context)
    raw_action = _str(entry, "action", context)
    return PolicyOrThreat(
        id=_required_str(entry, "id", context),
        name=_str(entry, "name", context),
        policy_or_threat_type=(
            _enum(PolicyOrThreatType, raw_type, f"{context}.type") if raw_type else default_type
        ),
        description=_str(entry, "description", context),
        fix=_str(entry, "fix", context),
        action=_enum(PolicyAction, raw_action, f"{context}.action") if raw_action else None,
        data_flow=_decode_data_flow(entry.get("dataFlow"), f"{context}.dataFlow"),
        repositories=_str_tuple(entry, "repositories", context),
        tags=_str_pairs(entry, "tags", context),
        file=file_path,
        category_tree=taxonomy.category_tree,
    )


def _decode_data_flow(raw: object, context: str) -> PolicyDataFlow:
    if raw is None:
        return PolicyDataFlow()
    if not isinstance(raw, dict):
        msg = f"{context} must be a mapping"
        raise DocumentDecodeError(msg)
    return PolicyDataFlow(
        sources=_str_tuple(raw, "sources", context),
        sinks=_str_tuple(raw, "sinks", context),
    )


def _decode_semantic(
    entry: dict[str, Any], context: str, file_path: str, taxonomy: Taxonomy
) -> Semantic:
    return Semantic(
        signature=_required_str(entry, "signature", context),
        flow=_str(entry, "flow", context),
        file=file_path,
        category_tree=taxonomy.category_tree,
        language=taxonomy.language,
    )


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def _str(entry: dict[str, Any], key: str, context: str) -> str:
    value = entry.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        msg = f"{context}.{key} must be a string, got {type(value).__name__}"
        raise DocumentDecodeError(msg)
    return value


def _required_str(entry: dict[str, Any], key: str, context: str) -> str:
    value = _str(entry, key, context)
    if not value:
        msg = f"{context}.{key} is required"
        raise DocumentDecodeError(msg)
    return value


def _bool(entry: dict[str, Any], key: str, context: str) -> bool:
    value = entry.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        msg = f"{context}.{key} must be a boolean"
        raise DocumentDecodeError(msg)
    return value


def _str_tuple(entry: dict[str, Any], key: str, context: str) -> tuple[str, ...]:
    value = entry.get(key)
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        msg = f"{context}.{key} must be a list of strings"
        raise DocumentDecodeError(msg)
    return tuple(value)


def _str_pairs(entry: dict[str, Any], key: str, context: str) -> tuple[tuple[str, str], ...]:
    value = entry.get(key)
    if value is None:
        return ()
    if not isinstance(value, dict):
        msg = f"{context}.{key} must be a mapping"
        raise DocumentDecodeError(msg)
    # Tag values are free-form scalars; keep them as text.
    return tuple((str(k), "" if v is None else str(v)) for k, v in value.items())


def _enum(enum_cls: Any, raw: str, context: str) -> Any:
    try:
        return enum_cls(raw.upper())
    except ValueError:
        allowed = sorted(m.value for m in enum_cls)
        msg = f"{context}: invalid value '{raw}', must be one of {allowed}"
        raise DocumentDecodeError(msg) from None
