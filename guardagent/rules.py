"""Keyword and regular-expression rules used to screen text."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

import yaml

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rule:
    """A screening rule; a keyword wrapped in slashes is a regular expression."""

    type: str
    keyword: str
    description: str = ""

    @property
    def pattern(self) -> str | None:
        kw = self.keyword
        if len(kw) > 2 and kw.startswith("/") and kw.endswith("/"):
            return kw[1:-1]
        return None

    def matches(self, text: str) -> bool:
        """Whether this rule fires on *text*; invalid patterns never fire."""
        if self.pattern is None:
            return self.keyword.lower() in text.lower()
        try:
            return re.search(self.pattern, text) is not None
        except re.error:
            return False


class RuleSet:
    """An ordered collection of rules."""

    def __init__(self, rules=()) -> None:
        self.rules = list(rules)

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self):
        return iter(self.rules)

    def match(self, text: str, rule_type: str) -> str | None:
        """Keyword of the first rule of *rule_type* that fires, or None."""
        for rule in self.rules:
            if rule.type == rule_type and rule.matches(text):
                log.debug("rule hit: %s content: %s", rule.keyword, text)
                return rule.keyword
        return None

    def get_description(self, rule_type: str, keyword: str) -> str:
        """Description of the first rule with this type and keyword, or ''."""
        return next(
            (r.description for r in self.rules if r.type == rule_type and r.keyword == keyword),
            "",
        )

    def match_all(self, text: str, rule_type: str) -> list[Rule]:
        """Every firing rule of *rule_type*, one per keyword, in rule order."""
        found: dict[str, Rule] = {}
        for rule in self.rules:
            if rule.type == rule_type and rule.keyword not in found and rule.matches(text):
                found[rule.keyword] = rule
        return list(found.values())

    def match_sliding_window(self, text: str, rule_type: str, window=5, step=1) -> list[Rule]:
        """Run :meth:`match_all` over windows of *window* characters every *step*."""
        window = min(window, len(text))
        found: dict[str, Rule] = {}
        for start in range(0, len(text) - window + 1, step):
            for rule in self.match_all(text[start:start + window], rule_type):
                found.setdefault(rule.keyword, rule)
        return list(found.values())


def load_rules(path) -> RuleSet:
    """Load rules from a YAML file holding a top-level ``rules`` list."""
    with open(path, encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict) or not isinstance(data.get("rules") or [], list):
        raise ValueError("rules document must be a mapping with a 'rules' list")
    rules = []
    for entry in data.get("rules") or []:
        if not isinstance(entry, dict):
            raise ValueError("each rule must be a mapping")
        rules.append(Rule(*("" if entry.get(k) is None else str(entry[k])
                            for k in ("type", "keyword", "description"))))
    log.info("loaded %d rules", len(rules))
    return RuleSet(rules)