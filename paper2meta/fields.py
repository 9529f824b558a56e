"""Pure pattern-based extractors for structured fields of paper text.

Every extractor takes document text (or an already normalized view of it) and
returns a value or None. Each one walks an ordered list of candidate patterns
and keeps the first match that passes its minimum-content guard. A miss is
never an error.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Final

from paper2meta.models import NormalizedText, PDFMetadata
from paper2meta.sanitize import MAX_TAGS, sanitize_metadata, split_tags
from paper2meta.text_clean import normalize_section_text, normalize_text


# Section capture tuning. Scholarly PDFs vary too much for tight values.
SECTION_MIN_CHARS: Final[int] = 50
SECTION_WINDOW_CHARS: Final[int] = 5000

ABSTRACT_MIN_CHARS: Final[int] = 50
ABSTRACT_MAX_CHARS: Final[int] = 2000
ABSTRACT_SHORT_CHARS: Final[int] = 500

MIN_AUTHORS_CHARS: Final[int] = 6
MIN_TITLE_CHARS: Final[int] = 11

# Optional section numbering such as "1", "3." or "2.1"
_NUMBERING = r"(?:\d+(?:\.\d+)*\.?[ \t]*)?"
_LABEL_PUNCT = r"[ \t]*[:.\-–—]?[ \t]*"


def _as_doc(text: str | NormalizedText) -> NormalizedText:
    return text if isinstance(text, NormalizedText) else normalize_text(text)


def _collapse(s: str) -> str:
    return " ".join(s.split())


# ---------------------------------------------------------------- title

_TITLE_SKIP_RE = re.compile(r"^(?:abstract|introduction|doi|author)", re.I)


def extract_title(text: str | NormalizedText) -> str | None:
    """First substantial line that is not a section label."""
    for ln in _as_doc(text).lines:
        if len(ln) >= MIN_TITLE_CHARS and not _TITLE_SKIP_RE.match(ln):
            return ln
    return None


# -------------------------------------------------------------- authors

# Names stay on one line so a following label line is not swallowed
_NAME_TOKEN = r"(?:[A-Z][a-z'\-]+|[A-Z]\.)"
_NAME = rf"{_NAME_TOKEN}(?:[ \t]+{_NAME_TOKEN}){{0,3}}"
_NAME_SEP = r"(?:[ \t]*,[ \t]*(?:and[ \t]+)?|[ \t]+(?:and|&)[ \t]+)"

_AUTHOR_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(
        rf"\b(?:(?i:author(?:s|\(s\))?)[ \t]*:?|(?i:by)[ \t]*:)[ \t]*({_NAME}(?:{_NAME_SEP}{_NAME})*)"
    ),
    re.compile(r"\b([A-Z][a-z]+[ \t]+[A-Z][a-z]+(?:[ \t]*,[ \t]*[A-Z][a-z]+[ \t]+[A-Z][a-z]+)+)\b"),
)


def extract_authors(text: str | NormalizedText) -> str | None:
    doc = _as_doc(text)
    for pattern in _AUTHOR_PATTERNS:
        m = pattern.search(doc.raw)
        if not m:
            continue
        authors = m.group(1).strip().rstrip(",").strip()
        if len(authors) >= MIN_AUTHORS_CHARS:
            return authors
    return None


# -------------------------------------------------------------- journal

_JOURNAL_CONNECTORS = r"of|and|in|for|the|on|&"
# Optional "of Clinical Oncology" style tail after the suffix word
_JOURNAL_TAIL = rf"(?:[ \t]+of(?:[ \t]+(?:[A-Z][A-Za-z]+|{_JOURNAL_CONNECTORS})){{1,6}})"

_JOURNAL_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b(?i:journal|published[ \t]+in)[ \t]*:[ \t]*([A-Z][A-Za-z&'\- \t]*[A-Za-z])"),
    re.compile(
        rf"\b((?!(?:Published|Appeared|Accepted|Received|Submitted)\b)"
        rf"[A-Z][A-Za-z]+(?:[ \t]+(?:[A-Z][A-Za-z]+|{_JOURNAL_CONNECTORS})){{0,6}}"
        rf"[ \t]+(?:Journal|Review|Magazine|Proceedings)\b{_JOURNAL_TAIL}?)"
    ),
    re.compile(rf"\b((?:The[ \t]+)?(?:Journal|Proceedings){_JOURNAL_TAIL})"),
)
_TRAILING_CONNECTORS_RE = re.compile(rf"(?:[ \t]+(?:{_JOURNAL_CONNECTORS}))+$")


def extract_journal(text: str | NormalizedText) -> str | None:
    doc = _as_doc(text)
    for pattern in _JOURNAL_PATTERNS:
        m = pattern.search(doc.raw)
        if not m:
            continue
        journal = _collapse(_TRAILING_CONNECTORS_RE.sub("", m.group(1)))
        if len(journal) >= 3:
            return journal
    return None


# ----------------------------------------------------------------- year

_YEAR_RE = re.compile(r"\b((?:19|20)\d{2})\b")


def extract_year(text: str | NormalizedText, current_year: int | None = None) -> str | None:
    """First plausible publication year, between 1900 and the current year."""
    latest = current_year or date.today().year
    for m in _YEAR_RE.finditer(_as_doc(text).flat):
        if 1900 <= int(m.group(1)) <= latest:
            return m.group(1)
    return None


# ------------------------------------------------------------------ doi

_DOI_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b(?i:doi)\s*:?\s*(10\.\d{4,}/\S+)"),
    re.compile(r"(?i:https?://(?:dx\.)?doi\.org/)(10\.\d{4,}/\S+)"),
    re.compile(r"\b(10\.\d{4,}/\S+)"),
)
_DOI_TRAILING = ".,;:]}\"'"


def _trim_doi(doi: str) -> str:
    """Drop trailing sentence punctuation; keep a ")" that closes a "(" in the DOI."""
    doi = doi.rstrip(_DOI_TRAILING)
    while doi.endswith(")") and doi.count(")") > doi.count("("):
        doi = doi[:-1].rstrip(_DOI_TRAILING)
    return doi


def extract_doi(text: str | NormalizedText) -> str | None:
    doc = _as_doc(text)
    for pattern in _DOI_PATTERNS:
        m = pattern.search(doc.flat)
        if m:
            return _trim_doi(m.group(1))
    return None


# ------------------------------------------------------------- abstract

_ABSTRACT_LABEL_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.I | re.M)
    for label in ("abstract", "summary")
    for p in (
        rf"^[ \t]*{label}\b{_LABEL_PUNCT}",
        rf"\b{label}[ \t]*:[ \t]*",
        rf"\b{label}\b{_LABEL_PUNCT}",
    )
)
_ABSTRACT_END_RE = re.compile(
    r"\n[ \t]*\n"
    rf"|\n[ \t]*{_NUMBERING}(?=[A-Z])(?i:introduction|key[ \t]*words?|index[ \t]+terms|references)\b"
    r"|[ \t](?=[A-Z])(?i:key[ \t]*words?|introduction)[ \t]*:"
    # A line holding only a body-section header; inline "Methods:" labels stay
    rf"|\n[ \t]*{_NUMBERING}(?=[A-Z])(?i:methods?|materials[ \t]+and[ \t]+methods|background"
    r"|results|discussion|conclusions?)[ \t]*(?=\n|$)"
)


def extract_abstract(text: str | NormalizedText) -> tuple[str, str] | None:
    """
    Locate a labelled Abstract/Summary and capture the text after it.

    Capture stops at a blank line or the next capitalized section header.
    Returns (short form, long form) or None.
    """
    doc = _as_doc(text)
    for pattern in _ABSTRACT_LABEL_PATTERNS:
        m = pattern.search(doc.raw)
        if not m:
            continue
        rest = doc.raw[m.end():].lstrip()
        end = _ABSTRACT_END_RE.search(rest)
        body = _collapse(rest[: end.start()] if end else rest[:ABSTRACT_MAX_CHARS])
        if len(body) >= ABSTRACT_MIN_CHARS:
            full = body[:ABSTRACT_MAX_CHARS]
            return full[:ABSTRACT_SHORT_CHARS], full
    return None


# ------------------------------------------------------------- sections

@dataclass(frozen=True)
class SectionSpec:
    """Keyword and stop-list regex alternations for one body section."""
    name: str
    keywords: str
    stops: str


INTRODUCTION = SectionSpec(
    name="introduction",
    keywords=r"introduction",
    stops=(
        r"methods?|methodology|materials(?:[ \t]+and[ \t]+methods)?|results|discussion"
        r"|conclusions?|experimental|experiments?|background|related[ \t]+work"
        r"|literature[ \t]+review|data[ \t]+analysis"
    ),
)
RESULTS = SectionSpec(
    name="results",
    keywords=r"results",
    stops=r"discussion|conclusions?|limitations|summary|references|acknowledge?ments",
)
CONCLUSION = SectionSpec(
    name="conclusion",
    keywords=r"conclusions?|concluding[ \t]+remarks",
    stops=(
        r"references|bibliography|acknowledge?ments|funding|conflicts?[ \t]+of[ \t]+interests?"
        r"|competing[ \t]+interests|declarations?|author[ \t]+contributions"
        r"|data[ \t]+availability|appendix|supplementary"
    ),
)
SECTIONS: tuple[SectionSpec, ...] = (INTRODUCTION, RESULTS, CONCLUSION)


def _header_start_re(spec: SectionSpec) -> re.Pattern[str]:
    return re.compile(rf"^[ \t]*{_NUMBERING}(?:{spec.keywords})\b{_LABEL_PUNCT}", re.I | re.M)


def _header_stop_re(spec: SectionSpec) -> re.Pattern[str]:
    # Stop-list header, or any top-level numbered header such as "2. Study Population"
    return re.compile(
        rf"\n[ \t]*(?:{_NUMBERING}(?i:{spec.stops})\b|\d{{1,2}}\.[ \t]+[A-Z])"
    )


def _window_re(spec: SectionSpec) -> re.Pattern[str]:
    return re.compile(
        rf"(?:^|\s){_NUMBERING}(?=[A-Z])(?i:{spec.keywords})\b{_LABEL_PUNCT}\s*"
        rf"([\s\S]{{{SECTION_MIN_CHARS},{SECTION_WINDOW_CHARS}}}?)"
        rf"(?=\s+{_NUMBERING}(?=[A-Z])(?i:{spec.stops})\b)"
    )


def _open_window_re(spec: SectionSpec) -> re.Pattern[str]:
    return re.compile(
        rf"(?:^|\s)(?=[A-Z])(?i:{spec.keywords})\b{_LABEL_PUNCT}\s*"
        rf"([\s\S]{{{SECTION_MIN_CHARS},{SECTION_WINDOW_CHARS}}})"
    )


def _break_re(spec: SectionSpec) -> re.Pattern[str]:
    return re.compile(rf"\s(?=[A-Z])(?i:{spec.stops})\b")


def _accept(capture: str | None) -> str | None:
    if not capture:
        return None
    cleaned = normalize_section_text(capture)
    if len(cleaned) < SECTION_MIN_CHARS:
        return None
    return cleaned


def _tier_header(raw: str, spec: SectionSpec) -> str | None:
    """Header-positioned keyword, captured up to the next stop-list header."""
    for m in _header_start_re(spec).finditer(raw):
        rest = raw[m.end():].lstrip()
        stop = _header_stop_re(spec).search(rest)
        capture = rest[: stop.start()] if stop else rest[:SECTION_WINDOW_CHARS]
        accepted = _accept(capture)
        if accepted:
            return accepted
    return None


def _tier_window(raw: str, spec: SectionSpec) -> str | None:
    """Keyword anywhere, bounded window ending at a stop-list keyword."""
    m = _window_re(spec).search(raw)
    return _accept(m.group(1)) if m else None


def _tier_open_window(raw: str, spec: SectionSpec) -> str | None:
    """Keyword plus a fixed window, cut at a stop-list keyword if one shows up."""
    m = _open_window_re(spec).search(raw)
    if not m:
        return None
    content = m.group(1)
    brk = _break_re(spec).search(content, SECTION_MIN_CHARS)
    return _accept(content[: brk.start()] if brk else content)


def extract_section(text: str | NormalizedText, spec: SectionSpec) -> str | None:
    """
    Run the three capture tiers for a section, most structured first.

    The capture is returned untruncated; sanitize_metadata applies the
    2000-character cap.
    """
    raw = _as_doc(text).raw
    for tier in (_tier_header, _tier_window, _tier_open_window):
        found = tier(raw, spec)
        if found:
            return found
    return None


def extract_introduction(text: str | NormalizedText) -> str | None:
    return extract_section(text, INTRODUCTION)


def extract_results(text: str | NormalizedText) -> str | None:
    return extract_section(text, RESULTS)


def extract_conclusion(text: str | NormalizedText) -> str | None:
    return extract_section(text, CONCLUSION)


# ------------------------------------------------------------- keywords

_KEYWORD_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b(?i:key[ \t]*words?|tags?)[ \t]*:[ \t]*([^\n]+)"),
    re.compile(r"^[ \t]*(?:key[ \t]*words?|index[ \t]+terms)\b[ \t]*[\-–—]?[ \t]*([^\n]+)", re.I | re.M),
)


def extract_keywords(text: str | NormalizedText) -> list[str] | None:
    """Keyword line split on comma/semicolon, first ten in order of appearance."""
    doc = _as_doc(text)
    for pattern in _KEYWORD_PATTERNS:
        m = pattern.search(doc.raw)
        if not m:
            continue
        tags = split_tags(m.group(1))
        if tags:
            tags[-1] = tags[-1].rstrip(".").strip()
            tags = [t for t in tags if t]
        if tags:
            return tags[:MAX_TAGS]
    return None


# ---------------------------------------------------------- composition

def extract_fallback_metadata(text: str | NormalizedText) -> PDFMetadata:
    """
    Run every field extractor over the text and sanitize the result.

    Pure function: deterministic, no network, never raises.
    """
    doc = _as_doc(text)
    abstract = extract_abstract(doc)
    candidate = {
        "title": extract_title(doc),
        "authors": extract_authors(doc),
        "journal": extract_journal(doc),
        "year": extract_year(doc),
        "doi": extract_doi(doc),
        "abstract": abstract[0] if abstract else None,
        "fullAbstract": abstract[1] if abstract else None,
        "tags": extract_keywords(doc),
    }
    for spec in SECTIONS:
        candidate[spec.name] = extract_section(doc, spec)
    return sanitize_metadata(candidate)
