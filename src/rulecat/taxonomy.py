"""Derive rule taxonomy from a document's location under its rules root.

A document at ``sinks/api/thirdparty/java.yaml`` has the category tree
``("sinks", "api", "thirdparty", "java")``.  Segments are read by
position:

====  =================  ===========================
Seg   Meaning            Used for
====  =================  ===========================
1     top-level category sources, sinks, collections,
                         exclusions
2     sub-category       sinks (literal string)
3     node kind          sinks
last  language           sources, sinks, exclusions,
                         semantics
====  =================  ===========================
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePath, PurePosixPath

from rulecat.errors import TaxonomyError
from rulecat.models import CatLevelOne, Language, NodeType

# Minimum category-tree depth a document needs before entries of a given
# category can be stamped.
MIN_DEPTH: dict[str, int] = {
    "sources": 2,
    "sinks": 4,
    "collections": 2,
    "exclusions": 2,
}
_DEFAULT_MIN_DEPTH = 1


@dataclass(frozen=True)
class Taxonomy:
    category_tree: tuple[str, ...]
    language: Language

    @property
    def depth(self) -> int:
        return len(self.category_tree)

    def cat_level_one(self) -> CatLevelOne:
        return CatLevelOne.from_segment(self._segment(0))

    def cat_level_two(self) -> str:
        return self._segment(1)

    def node_type(self) -> NodeType:
        return NodeType.from_segment(self._segment(2))

    def _segment(self, index: int) -> str:
        if index < len(self.category_tree):
            return self.category_tree[index]
        return ""


def category_tree(relative_path: PurePath | str) -> tuple[str, ...]:
    """Split a root-relative path into segments, dropping the file extension."""
    rel = PurePosixPath(PurePath(relative_path).as_posix())
    parts = rel.parts
    if not parts:
        return ()
    return (*parts[:-1], PurePosixPath(parts[-1]).stem)


def derive_taxonomy(relative_path: PurePath | str) -> Taxonomy:
    """Return the category tree and declared language for *relative_path*.

    Total: an unrecognised last segment yields ``Language.UNKNOWN``.
    """
    tree = category_tree(relative_path)
    language = Language.from_segment(tree[-1]) if tree else Language.UNKNOWN
    return Taxonomy(category_tree=tree, language=language)


def require_depth(taxonomy: Taxonomy, category: str) -> None:
    """Raise :class:`TaxonomyError` if *taxonomy* is too shallow for *category*."""
    minimum = MIN_DEPTH.get(category, _DEFAULT_MIN_DEPTH)
    if taxonomy.depth < minimum:
        raise TaxonomyError(category, taxonomy.depth, minimum)
