"""Keyword rules that decide whether a free-text payer means self-pay."""

from __future__ import annotations

import enum
import unicodedata
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from re import sub


class KeywordMatch(enum.StrEnum):
    """Supported ways of comparing a payer text against a keyword."""

    CONTAINS = "contains"
    EQUALS = "equals"
    PREFIX = "prefix"


def normalize_payer_text(value: str) -> str:
    """Lowercase, strip accents and collapse whitespace."""

    decomposed = unicodedata.normalize("NFKD", value)
    without_accents = "".join(
        char for char in decomposed if not unicodedata.combining(char)
    )
    return sub(r"\s+", " ", without_accents.lower()).strip()


@dataclass(frozen=True, slots=True)
class KeywordRule:
    """One matching rule over a set of normalized keywords."""

    match: KeywordMatch
    keywords: tuple[str, ...]

    def __post_init__(self) -> None:
        normalized = tuple(
            keyword
            for keyword in (normalize_payer_text(item) for item in self.keywords)
            if keyword
        )
        if not normalized:
            raise ValueError("Keyword rule requires at least one keyword")
        object.__setattr__(self, "keywords", normalized)

    def matches(self, normalized_text: str) -> bool:
        if self.match == KeywordMatch.EQUALS:
            return normalized_text in self.keywords
        if self.match == KeywordMatch.PREFIX:
            return any(normalized_text.startswith(item) for item in self.keywords)
        return any(item in normalized_text for item in self.keywords)


class PayerClassifier:
    """Classifies payer identifiers as self-pay or insurance."""

    def __init__(self, rules: Sequence[KeywordRule]) -> None:
        self._rules = tuple(rules)

    @classmethod
    def from_keywords(
        cls,
        keywords: Iterable[str],
        *,
        match: KeywordMatch = KeywordMatch.CONTAINS,
    ) -> PayerClassifier:
        """Build a classifier with a single rule over the given keywords."""

        return cls([KeywordRule(match=match, keywords=tuple(keywords))])

    def is_self_pay(self, payer_id: str | None) -> bool:
        """Return True when there is no payer or a rule marks it self-pay."""

        if payer_id is None:
            return True
        normalized = normalize_payer_text(payer_id)
        if not normalized:
            return True
        return any(rule.matches(normalized) for rule in self._rules)
