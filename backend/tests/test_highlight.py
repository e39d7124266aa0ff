"""Tests for the key-term highlight overlay."""

import pytest

from app.services.highlight import (
    find_term_spans,
    highlight_key_terms,
    is_inside_tag,
    order_terms,
    remove_highlights,
)


class TestOrdering:
    def test_longest_first(self):
        assert order_terms(["cell", "cell membrane", "atp"]) == ["cell membrane", "cell", "atp"]

    def test_blank_terms_dropped(self):
        assert order_terms(["", "   ", "dna"]) == ["dna"]


class TestHighlight:
    def test_longer_term_wrapped_as_a_unit(self):
        text = "The cell membrane surrounds the cell."
        result = highlight_key_terms(text, ["cell", "cell membrane"])
        assert result == "The <mark>cell membrane</mark> surrounds the <mark>cell</mark>."
        assert "<mark>cell</mark> membrane" not in result

    def test_whole_words_only(self):
        assert highlight_key_terms("cellular respiration", ["cell"]) == "cellular respiration"

    def test_case_insensitive_keeps_original_casing(self):
        assert highlight_key_terms("Mitosis and mitosis", ["MITOSIS"]) == (
            "<mark>Mitosis</mark> and <mark>mitosis</mark>"
        )

    def test_attribute_value_untouched(self):
        text = '<span class="cell">cell</span>'
        assert highlight_key_terms(text, ["cell"]) == '<span class="cell"><mark>cell</mark></span>'

    def test_tag_name_untouched(self):
        text = "<b>bold</b> text"
        assert highlight_key_terms(text, ["b"]) == text

    def test_blank_terms_are_skipped(self):
        assert highlight_key_terms("some text", ["", "  "]) == "some text"

    def test_no_terms(self):
        assert highlight_key_terms("some text", []) == "some text"

    def test_regex_characters_are_literal(self):
        text = "Use C++ and a.b here, not axb"
        result = highlight_key_terms(text, ["C++", "a.b"])
        assert result == "Use <mark>C++</mark> and <mark>a.b</mark> here, not axb"

    def test_overlapping_terms_do_not_nest(self):
        text = "heart rate variability"
        result = highlight_key_terms(text, ["heart rate", "rate variability"])
        # The longer term claims the shared word
        assert result == "heart <mark>rate variability</mark>"

    def test_custom_tag(self):
        assert highlight_key_terms("dna", ["dna"], tag="strong") == "<strong>dna</strong>"

    def test_is_inside_tag(self):
        text = '<a href="x">x</a>'
        assert is_inside_tag(text, text.index("x"))
        assert not is_inside_tag(text, text.index(">x<") + 1)

    def test_spans_are_sorted_and_disjoint(self):
        spans = find_term_spans("b a b a", ["a", "b"])
        assert spans == [(0, 1), (2, 3), (4, 5), (6, 7)]


class TestRemoveHighlights:
    @pytest.mark.parametrize(
        "text, terms",
        [
            ("The cell membrane surrounds the cell.", ["cell", "cell membrane"]),
            ('<p class="cell">A <em>cell</em> divides</p>', ["cell", "divides"]),
            ("Nothing to see", ["absent"]),
        ],
    )
    def test_round_trip(self, text, terms):
        assert remove_highlights(highlight_key_terms(text, terms)) == text

    def test_leaves_other_tags(self):
        assert remove_highlights("<p><mark>x</mark></p>") == "<p>x</p>"

    def test_existing_marks_are_unwrapped_too(self):
        text = "<mark>note</mark> on mitosis"
        highlighted = highlight_key_terms(text, ["mitosis"])
        assert remove_highlights(highlighted) == "note on mitosis"

    def test_custom_tag_round_trips_source_marks(self):
        text = "<mark>note</mark> on mitosis"
        highlighted = highlight_key_terms(text, ["mitosis"], tag="strong")
        assert remove_highlights(highlighted, tag="strong") == text
