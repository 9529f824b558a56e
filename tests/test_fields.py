"""Tests for the pattern-based field extractors."""

import pytest

from paper2meta.fields import (
    CONCLUSION,
    INTRODUCTION,
    extract_abstract,
    extract_authors,
    extract_conclusion,
    extract_doi,
    extract_fallback_metadata,
    extract_introduction,
    extract_journal,
    extract_keywords,
    extract_results,
    extract_section,
    extract_title,
    extract_year,
)
from paper2meta.text_clean import normalize_text


class TestTitle:

    def test_first_line(self, sample_paper):
        assert extract_title(sample_paper) == (
            "Effects of Early Mobilisation on Recovery After Cardiac Surgery"
        )

    def test_skips_labels_and_short_lines(self):
        text = "Abstract\nShort\nDOI 10.1000/abc\nA Proper Paper Title Here\n"
        assert extract_title(text) == "A Proper Paper Title Here"

    def test_none_without_candidate(self):
        assert extract_title("tiny\nlines\nonly") is None


class TestAuthors:

    def test_labelled_line(self, sample_paper):
        assert extract_authors(sample_paper) == "Maria Lopez, James Chen and Priya Natarajan"

    def test_label_does_not_run_into_next_line(self):
        text = "Authors: Ana Silva, Tom Berg\nJournal: Nature"
        assert extract_authors(text) == "Ana Silva, Tom Berg"

    def test_bare_name_list(self):
        text = "Deep learning for protein folding\nJohn Smith, Jane Doe\nsome affiliation"
        assert extract_authors(text) == "John Smith, Jane Doe"

    def test_none_when_missing(self):
        assert extract_authors("no names here at all") is None


class TestJournal:

    def test_labelled(self, sample_paper):
        assert extract_journal(sample_paper) == "Clinical Rehabilitation Review"

    def test_suffix_word_with_tail(self):
        text = "This article appeared in the New England Journal of Medicine in 2020."
        assert extract_journal(text) == "New England Journal of Medicine"

    def test_proceedings_of(self):
        text = "Reprinted from Proceedings of the Royal Society, 2015."
        assert extract_journal(text) == "Proceedings of the Royal Society"

    def test_none_when_missing(self):
        assert extract_journal("a plain sentence without a venue") is None


class TestYear:

    def test_first_plausible_year(self, sample_paper):
        assert extract_year(sample_paper) == "2019"

    def test_skips_future_years(self):
        assert extract_year("revised 2035, published 2021", current_year=2024) == "2021"

    def test_none_when_missing(self):
        assert extract_year("no year in 1850 or 3020") is None


class TestDoi:

    def test_labelled_strips_trailing_punctuation(self, sample_paper):
        assert extract_doi(sample_paper) == "10.1177/0269215519845123"

    def test_doi_org_url(self):
        text = "See https://doi.org/10.1038/s41586-020-2649-2)."
        assert extract_doi(text) == "10.1038/s41586-020-2649-2"

    def test_keeps_balanced_closing_paren(self):
        text = "DOI: 10.1002/(SICI)1097-4571(199806)50:7<624::AID-ASI6>3.0.CO;2-Z(SICI)."
        assert extract_doi(text).endswith("(SICI)")

    def test_keeps_paren_but_drops_sentence_paren(self):
        assert extract_doi("(see doi:10.1000/abc(2)).") == "10.1000/abc(2)"

    def test_bare_doi(self):
        assert extract_doi("available as 10.5555/12345678, online") == "10.5555/12345678"

    def test_none_when_missing(self):
        assert extract_doi("no identifier") is None


class TestAbstract:

    def test_labelled_abstract(self, sample_paper, sample_abstract):
        short, full = extract_abstract(sample_paper)
        assert short == sample_abstract
        assert full == sample_abstract

    def test_summary_label(self):
        body = "We surveyed 80 hospitals about discharge planning and found wide variation."
        short, full = extract_abstract(f"Title line here\nSummary\n{body}\n\nMore text")
        assert full == body

    def test_short_and_full_forms(self):
        body = "word " * 300
        short, full = extract_abstract(f"Abstract\n{body}\n")
        assert len(short) == 500
        assert full == body.strip()
        assert full.startswith(short)

    def test_stops_at_standalone_section_header(self):
        text = (
            "Title line here\nAbstract: We studied early mobilisation after cardiac surgery in a trial.\n"
            "Methods\nAdults undergoing elective surgery were randomised.\n"
        )
        _, full = extract_abstract(text)
        assert full == "We studied early mobilisation after cardiac surgery in a trial."

    def test_structured_abstract_labels_kept(self):
        text = (
            "Abstract\nBackground: Bed rest delays recovery after surgery.\n"
            "Methods: We randomised 240 adults.\nResults: Stay was shorter.\n\nIntroduction\n"
        )
        _, full = extract_abstract(text)
        assert full == (
            "Background: Bed rest delays recovery after surgery. "
            "Methods: We randomised 240 adults. Results: Stay was shorter."
        )

    def test_too_short_is_rejected(self):
        assert extract_abstract("Abstract: tiny.\n\nIntroduction") is None

    def test_none_when_missing(self):
        assert extract_abstract("no label anywhere in this text") is None


class TestKeywords:

    def test_semicolon_list(self, sample_paper):
        assert extract_keywords(sample_paper) == [
            "cardiac surgery",
            "rehabilitation",
            "mobilisation",
            "randomised controlled trial",
        ]

    def test_capped_at_ten(self):
        text = "Keywords: " + ", ".join(f"k{i}" for i in range(1, 16))
        assert extract_keywords(text) == [f"k{i}" for i in range(1, 11)]

    def test_index_terms(self):
        assert extract_keywords("Index Terms—deep learning, vision.") == ["deep learning", "vision"]

    def test_none_when_missing(self):
        assert extract_keywords("nothing to see") is None


class TestSections:
    """Tests for the three-tier section capture."""

    def test_numbered_headers(self, sample_paper):
        assert extract_introduction(sample_paper).startswith("Cardiac surgery is followed")
        assert extract_introduction(sample_paper).endswith("recommend early mobilisation.")
        assert extract_results(sample_paper).startswith("Patients in the intervention group")
        assert extract_conclusion(sample_paper).startswith("A structured early mobilisation")

    def test_header_capture_stops_at_next_header(self, sample_paper):
        assert "Adults undergoing" not in extract_introduction(sample_paper)
        assert "observational" not in extract_results(sample_paper)
        assert "Smith" not in extract_conclusion(sample_paper)

    def test_header_capture_stops_at_unlisted_numbered_header(self):
        text = (
            "A Long Enough Title\n1. Introduction\n"
            "Prolonged bed rest is associated with muscle loss and delayed discharge.\n"
            "2. Study Population\nWe enrolled 240 adults from three hospitals.\n"
        )
        intro = extract_introduction(text)
        assert intro == "Prolonged bed rest is associated with muscle loss and delayed discharge."
        assert "enrolled" not in intro

    def test_inline_keyword_window(self):
        text = (
            "Some preamble sentence. Introduction This paragraph explains why the question "
            "matters and what earlier studies have found so far. Methods We recruited patients."
        )
        assert extract_section(text, INTRODUCTION) == (
            "This paragraph explains why the question matters and what earlier "
            "studies have found so far."
        )

    def test_open_window_without_stop_word(self):
        text = (
            "Preamble text. Conclusion Our programme reduced the length of stay and we "
            "recommend adopting it widely in practice."
        )
        assert extract_section(text, CONCLUSION) == (
            "Our programme reduced the length of stay and we recommend adopting it widely in practice."
        )

    def test_too_short_section_is_rejected(self):
        text = "Introduction\nToo short.\nMethods\nWe did things."
        assert extract_introduction(text) is None

    def test_lowercase_keyword_in_prose_is_ignored(self):
        text = "We report the results of a survey across many hospitals in the region last year."
        assert extract_results(text) is None


class TestFallbackMetadata:
    """Tests for the composed pattern-only extraction."""

    def test_sample_paper(self, sample_paper, sample_abstract):
        meta = extract_fallback_metadata(sample_paper)
        assert meta.title == "Effects of Early Mobilisation on Recovery After Cardiac Surgery"
        assert meta.authors == "Maria Lopez, James Chen and Priya Natarajan"
        assert meta.journal == "Clinical Rehabilitation Review"
        assert meta.year == "2019"
        assert meta.doi == "10.1177/0269215519845123"
        assert meta.abstract == sample_abstract
        assert meta.full_abstract == sample_abstract
        assert meta.tags is not None and len(meta.tags) == 4
        assert meta.introduction and meta.results and meta.conclusion

    def test_abstract_and_introduction_only(self):
        text = (
            "Abstract: This study examines the effect of X on Y in a large cohort of adult patients.\n"
            "Introduction: Background material that is long enough to pass the minimum length guard.\n"
            "Methods: We did things."
        )
        meta = extract_fallback_metadata(text)
        assert meta.abstract == (
            "This study examines the effect of X on Y in a large cohort of adult patients."
        )
        assert meta.introduction == (
            "Background material that is long enough to pass the minimum length guard."
        )
        assert meta.results is None
        assert meta.conclusion is None

    def test_sections_truncated_to_2000(self):
        body = " ".join(["lorem"] * 700)
        meta = extract_fallback_metadata(f"Introduction\n{body}\nMethods\nDone.")
        assert len(meta.introduction) == 2000

    def test_accepts_normalized_text(self, sample_paper):
        assert extract_fallback_metadata(normalize_text(sample_paper)) == (
            extract_fallback_metadata(sample_paper)
        )

    @pytest.mark.parametrize("text", ["", "   \n  ", "x"])
    def test_degenerate_input_never_raises(self, text):
        assert extract_fallback_metadata(text).introduction is None
