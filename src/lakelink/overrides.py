"""Versioned correction data for lake-name extraction and survey matching.

An override table pairs with one snapshot of the reference datasets.  It
holds two kinds of rule:

  - ``identifier`` rules force the lake name of one specimen record
    (looked up by ``identifier_column``) regardless of what the locality
    text says.
  - ``value`` rules rewrite an extracted lake name to the survey cards'
    spelling (``DEVIL`` -> ``DEVILS``).

Identifier rules are always evaluated before value rules; within a kind
the first matching rule in declared order wins.  The table also carries
the ``subject_id`` values of survey cards known to be duplicate
transcriptions.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

RULE_KINDS = ("identifier", "value")


@dataclass(frozen=True)
class OverrideRule:
    kind: str  # identifier, value
    key: str
    replacement: str

    def matches(self, identifier: str | None, extracted: str | None) -> bool:
        if self.kind == "identifier":
            return identifier is not None and identifier == self.key
        return extracted is not None and extracted == self.key


@dataclass(frozen=True)
class OverrideTable:
    """An ordered, validated set of override rules plus the exclusion set."""

    version: str
    rules: tuple[OverrideRule, ...] = ()
    excluded_subject_ids: frozenset[str] = field(default_factory=frozenset)
    identifier_column: str = "gbifID"

    def __post_init__(self) -> None:
        # Accept lists/sets from callers but store immutable containers
        object.__setattr__(self, "rules", tuple(self.rules))
        object.__setattr__(
            self, "excluded_subject_ids", frozenset(str(s) for s in self.excluded_subject_ids)
        )
        _validate_rules(self.rules)

    @property
    def identifier_rules(self) -> tuple[OverrideRule, ...]:
        return tuple(r for r in self.rules if r.kind == "identifier")

    @property
    def value_rules(self) -> tuple[OverrideRule, ...]:
        return tuple(r for r in self.rules if r.kind == "value")

    def find_rule(self, identifier: str | None, extracted: str | None) -> OverrideRule | None:
        """Return the rule that decides this record's lake name, if any."""
        for rule in self.identifier_rules:
            if rule.matches(identifier, extracted):
                return rule
        for rule in self.value_rules:
            if rule.matches(identifier, extracted):
                return rule
        return None

    def resolve(self, identifier: str | None, extracted: str | None) -> str | None:
        """Apply the table to one record's extracted lake name."""
        rule = self.find_rule(identifier, extracted)
        return rule.replacement if rule is not None else extracted


def _validate_rules(rules: Iterable[OverrideRule]) -> None:
    """Reject tables that are ambiguous or not idempotent."""
    seen: dict[str, set[str]] = {kind: set() for kind in RULE_KINDS}
    for rule in rules:
        if rule.kind not in RULE_KINDS:
            raise ValueError(f"Unknown override kind {rule.kind!r} for key {rule.key!r}")
        if not rule.key or not rule.replacement:
            raise ValueError(f"Override rule has an empty key or replacement: {rule!r}")
        if rule.key in seen[rule.kind]:
            raise ValueError(f"Duplicate {rule.kind} override for {rule.key!r}")
        seen[rule.kind].add(rule.key)

    # A value rule whose output feeds another value rule would give a
    # different answer on a second pass.
    value_keys = seen["value"]
    for rule in rules:
        if rule.kind == "value" and rule.replacement in value_keys:
            raise ValueError(
                f"Value override {rule.key!r} -> {rule.replacement!r} chains into another rule"
            )


# ---------------------------------------------------------------------------
# Construction helpers
# ---------------------------------------------------------------------------

def build_override_table(
    version: str,
    *,
    identifier_overrides: dict[str, str] | None = None,
    value_overrides: dict[str, str] | None = None,
    excluded_subject_ids: Iterable[str] = (),
    identifier_column: str = "gbifID",
) -> OverrideTable:
    """Build a table from plain mappings, keeping their insertion order."""
    rules = [
        OverrideRule("identifier", str(key), str(name))
        for key, name in (identifier_overrides or {}).items()
    ]
    rules += [
        OverrideRule("value", str(key), str(name))
        for key, name in (value_overrides or {}).items()
    ]
    return OverrideTable(
        version=version,
        rules=tuple(rules),
        excluded_subject_ids=frozenset(excluded_subject_ids),
        identifier_column=identifier_column,
    )


def _parse_entries(doc: dict[str, Any], section: str, key_field: str) -> dict[str, str]:
    entries = doc.get(section, [])
    if not isinstance(entries, list):
        raise ValueError(f"{section!r} must be a list")
    parsed: dict[str, str] = {}
    for entry in entries:
        try:
            key = str(entry[key_field]).strip()
            name = str(entry["lakename"]).strip()
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed {section} entry {entry!r}") from e
        if key in parsed:
            raise ValueError(f"Duplicate {section} entry for {key!r}")
        parsed[key] = name
    return parsed


def override_table_from_dict(doc: dict[str, Any]) -> OverrideTable:
    """Build a table from the JSON document layout.

    Expected keys: ``version``, ``identifier_column`` (optional),
    ``identifier_overrides`` (``[{"identifier", "lakename"}]``),
    ``value_overrides`` (``[{"extracted", "lakename"}]``) and
    ``excluded_subject_ids``.
    """
    if not isinstance(doc, dict) or "version" not in doc:
        raise ValueError("Override document must be an object with a 'version'")
    excluded = doc.get("excluded_subject_ids", [])
    if not isinstance(excluded, list):
        raise ValueError("'excluded_subject_ids' must be a list")

    return build_override_table(
        str(doc["version"]),
        identifier_overrides=_parse_entries(doc, "identifier_overrides", "identifier"),
        value_overrides=_parse_entries(doc, "value_overrides", "extracted"),
        excluded_subject_ids=[str(s) for s in excluded],
        identifier_column=str(doc.get("identifier_column", "gbifID")),
    )


def load_override_table(path: Path | str) -> OverrideTable:
    """Load an override table from a JSON file."""
    path = Path(path)
    try:
        doc = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"{path}: invalid override JSON ({e})") from e
    except OSError as e:
        raise ValueError(f"{path}: cannot read override table ({e.strerror or e})") from e
    return override_table_from_dict(doc)


# ---------------------------------------------------------------------------
# Built-in table
# ---------------------------------------------------------------------------

# Spelling corrections that hold across the survey-card snapshots seen so far.
# Snapshot-specific identifier overrides and duplicate cards belong in a JSON
# table shipped with that snapshot.
DEFAULT_OVERRIDES: OverrideTable = build_override_table(
    "default",
    value_overrides={
        "DEVIL": "DEVILS",
    },
)
