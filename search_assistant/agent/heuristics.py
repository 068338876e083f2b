"""
String heuristics used for routing and parsing: keyword classification of
messages and plan lines, search-query extraction, and segmentation of free-form
search answers into results. Pure functions; no I/O.
"""

import re
from collections.abc import Sequence
from urllib.parse import urlparse

from search_assistant.core.config import DIRECT_SEARCH_KEYWORDS, PLAN_SEARCH_KEYWORDS
from search_assistant.schemas.search import SearchResult

_URL_RE = re.compile(r"https?://[^\s<>\"'()\[\]]+")
_MD_LINK_RE = re.compile(r"\[([^\]]+)\]\((https?://[^)\s]+)\)")
_LIST_MARKER_RE = re.compile(r"^(?:[-*•–]|\d{1,3}[.)])\s+")
_LEADING_JUNK_RE = re.compile(r"^[:\s]+")
_TITLE_TRIM = " \t:-–—|*#"


def matched_keyword(text: str, keywords: Sequence[str]) -> str | None:
    """First keyword (in the given order) contained in text, case-insensitively."""
    lowered = (text or "").lower()
    for keyword in keywords:
        if keyword and keyword in lowered:
            return keyword
    return None


def classify_needs_search(text: str, keywords: Sequence[str] = PLAN_SEARCH_KEYWORDS) -> bool:
    """True iff the plan line mentions one of the search keywords."""
    return matched_keyword(text, keywords) is not None


def is_direct_search_query(text: str, keywords: Sequence[str] = DIRECT_SEARCH_KEYWORDS) -> bool:
    """True when an inbound message should go straight to search instead of the planner."""
    return matched_keyword(text, keywords) is not None


def extract_search_query(line: str, keywords: Sequence[str] = PLAN_SEARCH_KEYWORDS) -> str:
    """
    Text following the matched keyword. Keywords are word stems, so the rest of
    the word containing the keyword is skipped ("информацию о котах" -> "о котах").
    Falls back to the whole line when nothing meaningful follows.
    """
    stripped = (line or "").strip()
    keyword = matched_keyword(stripped, keywords)
    if keyword is None:
        return stripped
    match = re.search(re.escape(keyword), stripped, re.IGNORECASE)
    if match is None:
        return stripped
    end = match.end()
    while end < len(stripped) and stripped[end].isalnum():
        end += 1
    query = _LEADING_JUNK_RE.sub("", stripped[end:]).strip()
    if not any(ch.isalnum() for ch in query):
        return stripped
    return query


def _host(url: str | None) -> str | None:
    if not url:
        return None
    host = urlparse(url).netloc.lower()
    if host.startswith("www."):
        host = host[4:]
    return host or None


def _start_result(line: str) -> dict:
    """Open a new result from a marker line (URL-bearing or list item)."""
    body = _LIST_MARKER_RE.sub("", line, count=1).strip()
    title = url = None
    link = _MD_LINK_RE.search(body)
    if link:
        title = link.group(1).strip()
        url = link.group(2)
        rest = (body[: link.start()] + body[link.end():]).strip(_TITLE_TRIM)
        return {"title": title, "url": url, "lines": [rest] if rest else []}
    bare = _URL_RE.search(body)
    if bare:
        url = bare.group(0).rstrip(".,;:")
        title = body[: bare.start()].strip(_TITLE_TRIM) or None
        rest = body[bare.end():].strip(_TITLE_TRIM)
        return {"title": title, "url": url, "lines": [rest] if rest else []}
    return {"title": None, "url": None, "lines": [body] if body else []}


def _finish_result(current: dict) -> SearchResult | None:
    snippet = "\n".join(current["lines"]).strip() or current["title"] or current["url"]
    if not snippet:
        return None
    return SearchResult(
        title=current["title"],
        url=current["url"],
        snippet=snippet,
        source=_host(current["url"]),
    )


def segment_into_results(text: str) -> list[SearchResult]:
    """
    Split free-form search output into results. A URL-bearing line or a
    bulleted / numbered line starts a new result; any other line extends the
    current one. Text before the first marker becomes its own result. Without
    any marker the whole text is one synthetic result.
    """
    if not text or not text.strip():
        return []
    groups: list[dict] = []
    current: dict | None = None
    saw_marker = False
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        if _URL_RE.search(line) or _LIST_MARKER_RE.match(line):
            saw_marker = True
            current = _start_result(line)
            groups.append(current)
        elif current is None:
            current = {"title": None, "url": None, "lines": [line]}
            groups.append(current)
        else:
            current["lines"].append(line)
    if not saw_marker:
        return [SearchResult(snippet=text.strip())]
    results = [_finish_result(g) for g in groups]
    return [r for r in results if r is not None]
