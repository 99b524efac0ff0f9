"""Exception hierarchy for rule ingestion."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class RuleCatError(Exception):
    """Base user-facing error."""


class RulesPathError(RuleCatError):
    """A rules root is missing or cannot be read. Fatal for the run."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")


class DocumentDecodeError(RuleCatError):
    """A rule document does not match the expected schema."""


class TaxonomyError(DocumentDecodeError):
    """A rule document lives too shallow for the category it declares."""

    def __init__(self, category: str, depth: int, minimum: int) -> None:
        self.category = category
        self.depth = depth
        self.minimum = minimum
        super().__init__(
            f"'{category}' documents must be at least {minimum} path segments deep, "
            f"got {depth}"
        )


class CatalogueError(RuleCatError):
    """Base error for rule catalogue misuse."""


class CatalogueAlreadyLoadedError(CatalogueError):
    def __init__(self) -> None:
        super().__init__("Rule catalogue has already been loaded")


class CatalogueNotLoadedError(CatalogueError):
    def __init__(self) -> None:
        super().__init__("Rule catalogue has not been loaded yet")


class ConfigError(RuleCatError):
    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")
