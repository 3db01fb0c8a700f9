"""Topic inference: tag titles and queries with coaching themes via keyword matching."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from enum import StrEnum


class Topic(StrEnum):
    """Coaching-conversation themes used for tagging and filtering."""

    KONFLIKT = "KONFLIKT"
    PRIORISIERUNG = "PRIORISIERUNG"
    INTIMITAET = "INTIMITAET"
    FINANZEN = "FINANZEN"


TopicClassifier = Callable[[str], list[Topic]]

# Keyword stems for transcript titles (file names)
TITLE_TOPIC_PATTERNS: dict[Topic, re.Pattern[str]] = {
    Topic.KONFLIKT: re.compile(r"konflikt|streit|repair|eskal"),
    Topic.PRIORISIERUNG: re.compile(r"prioris|zu viele|punkte|nicht-jetzt"),
    Topic.INTIMITAET: re.compile(r"intim|n(?:ae|ä)he|sexual|ber(?:ue|ü)hr"),
    Topic.FINANZEN: re.compile(r"finanz|geld|money"),
}

# Broader stems for free-form user messages
QUERY_TOPIC_PATTERNS: dict[Topic, re.Pattern[str]] = {
    Topic.KONFLIKT: re.compile(r"konflikt|streit|eskal|repair|wut|vorwurf|trigger"),
    Topic.PRIORISIERUNG: re.compile(r"prioris|zu viele|punkte|streit.*ziel|nicht-jetzt"),
    Topic.INTIMITAET: re.compile(r"intim|n(?:ae|ä)he|sexual|sex|ber(?:ue|ü)hr|druck"),
    Topic.FINANZEN: re.compile(r"finanz|geld|money|budget|konto|schulden"),
}


def infer_topics(
    text: str,
    patterns: dict[Topic, re.Pattern[str]] = QUERY_TOPIC_PATTERNS,
) -> list[Topic]:
    """Return every topic whose keyword pattern occurs in *text*.

    Topics come back in enumeration order so results are deterministic.
    """
    lower = text.lower()
    return [topic for topic in Topic if topic in patterns and patterns[topic].search(lower)]


def infer_topics_from_title(title: str) -> list[Topic]:
    return infer_topics(title, TITLE_TOPIC_PATTERNS)


def infer_topics_from_query(query: str) -> list[Topic]:
    return infer_topics(query, QUERY_TOPIC_PATTERNS)


def parse_topics(values: Iterable[str] | None) -> list[Topic]:
    """Coerce topic names to :class:`Topic`, dropping unknown values.

    Case-insensitive; duplicates collapse and the result follows
    enumeration order.
    """
    if not values:
        return []
    wanted = {str(v).strip().upper() for v in values}
    return [topic for topic in Topic if topic.value in wanted]
