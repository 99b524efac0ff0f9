"""Rule source configuration, read from ``rulecat.yml``."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml

from rulecat.errors import ConfigError

DEFAULT_CONFIG_NAME = "rulecat.yml"

_PATH_KEYS = ("internal_rules_path", "external_rules_path")


@dataclass(frozen=True)
class RulesConfig:
    """Where rules come from for one run."""

    internal_rules_path: Path | None = None
    external_rules_path: Path | None = None
    ignore_internal_rules: bool = False

    def merged_with(
        self,
        *,
        internal_rules_path: Path | None = None,
        external_rules_path: Path | None = None,
        ignore_internal_rules: bool | None = None,
    ) -> RulesConfig:
        """Return a copy with every non-``None`` override applied."""
        updated = self
        if internal_rules_path is not None:
            updated = replace(updated, internal_rules_path=internal_rules_path)
        if external_rules_path is not None:
            updated = replace(updated, external_rules_path=external_rules_path)
        if ignore_internal_rules is not None:
            updated = replace(updated, ignore_internal_rules=ignore_internal_rules)
        return updated


def load_config(path: Path) -> RulesConfig:
    """Read *path* into a :class:`RulesConfig`.

    A missing file yields the defaults.  Relative rule paths are resolved
    against the directory holding the config file.
    """
    if not path.exists():
        return RulesConfig()

    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(path, f"Cannot read config ({exc})") from exc

    if data is None:
        return RulesConfig()
    if not isinstance(data, dict):
        raise ConfigError(path, "Config must be a YAML mapping")

    paths: dict[str, Path | None] = {}
    for key in _PATH_KEYS:
        value = data.get(key)
        if value is None:
            paths[key] = None
            continue
        if not isinstance(value, str) or not value:
            raise ConfigError(path, f"'{key}' must be a non-empty string")
        candidate = Path(value).expanduser()
        paths[key] = candidate if candidate.is_absolute() else path.parent / candidate

    ignore = data.get("ignore_internal_rules", False)
    if not isinstance(ignore, bool):
        raise ConfigError(path, "'ignore_internal_rules' must be a boolean")

    return RulesConfig(
        internal_rules_path=paths["internal_rules_path"],
        external_rules_path=paths["external_rules_path"],
        ignore_internal_rules=ignore,
    )
