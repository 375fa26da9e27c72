"""Small text helpers shared by the planner, executor and synthesizer."""

import re

from digest_research.catalog import KEYWORD_PUNCTUATION, MAX_RESULT_KEYWORDS, STOP_WORDS

# "1. ", "2) ", "- ", "• ", "* " and stacked forms such as "1. - "
_NUMBERING = re.compile(r"^(?:\d+[.)]\s*|[-*•]\s+)+")
_BOLD_LABEL = re.compile(r"\*\*([^*]*:)\*\*\s*")
_WRAPPING = " \t`\"'*_"
_PREAMBLE_PREFIXES = ("here are", "here is", "here's", "here’s", "heres", "sure", "certainly")


def extract_keywords(text: str, limit: int = MAX_RESULT_KEYWORDS) -> list[str]:
    """Return up to `limit` distinct keywords in first-seen order."""
    keywords: list[str] = []
    for raw in text.lower().split():
        word = raw.strip(KEYWORD_PUNCTUATION)
        if len(word) <= 3 or word in STOP_WORDS or word in keywords:
            continue
        keywords.append(word)
        if len(keywords) == limit:
            break
    return keywords


def truncate_content(content: str, max_length: int) -> str:
    """Cut to `max_length` characters, preferring a nearby word boundary."""
    if len(content) <= max_length:
        return content

    truncated = content[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > max_length - 50:
        truncated = truncated[:last_space]
    return truncated + "..."


def clean_generated_lines(text: str, min_length: int = 3, keep_labels: bool = False) -> list[str]:
    """Turn a one-item-per-line model response into clean items.

    Drops blank lines, markdown headers, preamble ("Here's ...") and any line
    that ends in a colon. Strips list numbering, bullets, quotes and wrapping
    emphasis (`**q**`, `*q*`, `_q_`). Bold labels such as `**Technical:**` are
    removed, or unwrapped to `Technical:` with `keep_labels`.
    """
    items: list[str] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.lower().startswith(_PREAMBLE_PREFIXES):
            continue

        line = _NUMBERING.sub("", line)
        line = _BOLD_LABEL.sub(r"\1 " if keep_labels else "", line)
        line = line.strip(_WRAPPING)
        if line.endswith(":") or len(line) < min_length:
            continue
        items.append(line)
    return items


def dedupe_case_insensitive(items: list[str]) -> list[str]:
    """Remove case-insensitive duplicates, keeping the first spelling seen."""
    seen: set[str] = set()
    unique: list[str] = []
    for item in items:
        key = item.lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(item)
    return unique
