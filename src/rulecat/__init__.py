"""rulecat - rule ingestion and merge engine for privacy scanning rules."""

__version__ = "0.3.0"
