"""Pure text cleaning and normalization functions."""

from __future__ import annotations

import re

from paper2meta.models import NormalizedText


# Boilerplate patterns to strip from PDFs
_BOILERPLATE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^\s*permission to make digital or hard copies\b", re.I),
    re.compile(r"^\s*request permissions from\b", re.I),
    re.compile(r"^\s*copyrights for components of this work\b", re.I),
    re.compile(r"^\s*this work is licensed under\b", re.I),
    re.compile(r"^\s*downloaded from\s+\S+", re.I),
    re.compile(r"^\s*all rights reserved\.?\s*$", re.I),
    re.compile(r"^\s*page\s+\d+\s+of\s+\d+\s*$", re.I),
)

_WHITESPACE_RE = re.compile(r"\s+")
_LINE_ENDINGS_RE = re.compile(r"\r\n?")
_SPACES_RE = re.compile(r"[ \t\f\v]+")
_SPACES_AROUND_NEWLINE_RE = re.compile(r" *\n *")
_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")


def _clean_text(s: str) -> str:
    """Normalize whitespace without destroying paragraphs too aggressively."""
    s = s.replace("\x00", "")
    s = re.sub(r"[ \t]+\n", "\n", s)
    s = _EXCESS_NEWLINES_RE.sub("\n\n", s)
    return s.strip()


def _dehyphenate_wrapped_words(s: str) -> str:
    """Fix common PDF line-wrapping artifacts like: personal-\\nization."""
    return re.sub(r"([a-z])-\n([a-z])", r"\1\2", s)


def _strip_boilerplate_lines(s: str) -> str:
    """Remove publisher boilerplate (licences, download stamps, page counters)."""
    kept: list[str] = []
    for ln in s.splitlines():
        raw = ln.strip()
        if raw and any(p.search(raw) for p in _BOILERPLATE_PATTERNS):
            continue
        kept.append(ln)
    return "\n".join(kept)


def clean_pdf_text(raw_text: str) -> str:
    """
    Clean raw PDF text: unify line endings, dehyphenate, strip boilerplate,
    normalize whitespace.

    Pure function: deterministic, no side effects.
    """
    txt = _LINE_ENDINGS_RE.sub("\n", raw_text)
    txt = _dehyphenate_wrapped_words(txt)
    txt = _strip_boilerplate_lines(txt)
    return _clean_text(txt)


def normalize_text(text: str) -> NormalizedText:
    """
    Build the flat (single-line) and line-split views of document text.

    Never fails; empty input yields empty views.
    """
    raw = _LINE_ENDINGS_RE.sub("\n", text or "")
    flat = _WHITESPACE_RE.sub(" ", raw).strip()
    lines = tuple(ln.strip() for ln in raw.split("\n") if ln.strip())
    return NormalizedText(raw=raw, flat=flat, lines=lines)


def normalize_section_text(text: str) -> str:
    """Collapse space runs and 3+ newlines while keeping paragraph breaks."""
    s = _SPACES_RE.sub(" ", text)
    s = _SPACES_AROUND_NEWLINE_RE.sub("\n", s)
    s = _EXCESS_NEWLINES_RE.sub("\n\n", s)
    return s.strip()
