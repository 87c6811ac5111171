"""Rule-based intent extraction for free-text questions about the corpus.

Rules are evaluated top to bottom and the first one that returns an intent
wins. Every rule is a plain function over :class:`IntentContext`, so each can
be exercised on its own.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from sessionsearch.date_utils import extract_dates
from sessionsearch.models import DateFilter, FilterOptions, Intent

_SEARCH_VERB_RE = re.compile(
    r"(?:search|find|show|give|tell|about|for|user|engineer|work|worked|did|does|result)"
)
_DATE_KEYWORD_RE = re.compile(r"(?:date|between|before|after|from|to|since|until)")
_BETWEEN_RE = re.compile(r"(?:between|from.*?to|from.*?until)")
_BEFORE_RE = re.compile(r"\b(?:before|until|up to|prior to)\b")
_AFTER_RE = re.compile(r"\b(?:after|since|from|starting)\b")
_PROJECT_KEYWORD_RE = re.compile(r"(?:project|show|find|search|about|for)")
_STATISTICS_RE = re.compile(
    r"(?:how many|count|number of|total|statistics|stats|list all|show all)"
)
_DIRECTORY_RE = re.compile(r"(?:directory|directories|working directory|path|where)")
_WORK_ON_RE = re.compile(r"(?:what|which).*?(?:did|does|work|work on).*?(\w+)")


@dataclass
class IntentContext:
    text: str
    options: FilterOptions
    lowered: str = ""
    words: list[str] = field(default_factory=list)
    dates: list[str] = field(default_factory=list)

    @classmethod
    def from_text(cls, text: str, options: FilterOptions) -> "IntentContext":
        lowered = (text or "").lower()
        return cls(
            text=text or "",
            options=options,
            lowered=lowered,
            words=lowered.split(),
            dates=extract_dates(text or ""),
        )

    def has_whole_word(self, token: str) -> bool:
        return re.search(rf"\b{re.escape(token)}\b", self.lowered) is not None


def resolve_date_filter(lowered: str, dates: Sequence[str]) -> Optional[DateFilter]:
    """Turn date keywords plus extracted dates into a filter, if any applies."""
    if not dates or not _DATE_KEYWORD_RE.search(lowered):
        return None
    if _BETWEEN_RE.search(lowered) and len(dates) >= 2:
        return DateFilter(from_=dates[0], to=dates[1])
    if _BEFORE_RE.search(lowered):
        return DateFilter(before=dates[0])
    if _AFTER_RE.search(lowered):
        return DateFilter(after=dates[0])
    if len(dates) >= 2:
        return DateFilter(from_=dates[0], to=dates[1])
    return None


def match_user(ctx: IntentContext) -> Optional[Intent]:
    has_verb = _SEARCH_VERB_RE.search(ctx.lowered) is not None
    for username in ctx.options.users:
        token = username.lower()
        if not token or not ctx.has_whole_word(token):
            continue
        if has_verb or token in ctx.words:
            return Intent(
                type="user",
                value=username,
                dateFilter=resolve_date_filter(ctx.lowered, ctx.dates),
                rule="user",
            )
    return None


def match_project(ctx: IntentContext) -> Optional[Intent]:
    has_keyword = _PROJECT_KEYWORD_RE.search(ctx.lowered) is not None
    for project in ctx.options.projects:
        token = project.lower()
        if not token or token not in ctx.lowered:
            continue
        if has_keyword or token in ctx.words:
            return Intent(type="project", value=project, rule="project")
    return None


def match_statistics(ctx: IntentContext) -> Optional[Intent]:
    if _STATISTICS_RE.search(ctx.lowered):
        return Intent(type="statistics", rule="statistics")
    return None


def match_directory(ctx: IntentContext) -> Optional[Intent]:
    if _DIRECTORY_RE.search(ctx.lowered):
        return Intent(type="directory", rule="directory")
    return None


def match_work_on(ctx: IntentContext) -> Optional[Intent]:
    found = _WORK_ON_RE.search(ctx.lowered)
    if not found:
        return None
    candidate = found.group(1).lower()
    for username in ctx.options.users:
        if username.lower() == candidate:
            return Intent(type="user", value=username, rule="work_on")
    return None


@dataclass(frozen=True)
class IntentRule:
    name: str
    match: Callable[[IntentContext], Optional[Intent]]


DEFAULT_RULES: tuple[IntentRule, ...] = (
    IntentRule("user", match_user),
    IntentRule("project", match_project),
    IntentRule("statistics", match_statistics),
    IntentRule("directory", match_directory),
    IntentRule("work_on", match_work_on),
)


class IntentClassifier:
    def __init__(self, options: FilterOptions, rules: Sequence[IntentRule] = DEFAULT_RULES):
        self.options = options
        self.rules = tuple(rules)

    def classify(self, text: str) -> Intent:
        ctx = IntentContext.from_text(text, self.options)
        for rule in self.rules:
            intent = rule.match(ctx)
            if intent is not None:
                return intent
        return Intent(type="general", rule="general")


def classify_intent(text: str, options: FilterOptions) -> Intent:
    return IntentClassifier(options).classify(text)
