from hla.core.highlighting import HIGHLIGHT_STYLE, highlight_text


class TestHighlight:
    def test_highlights_case_insensitive_matches(self):
        text = highlight_text("Canada", "can")
        assert [(span.start, span.end, span.style) for span in text.spans] == [(0, 3, HIGHLIGHT_STYLE)]

    def test_empty_term_leaves_text_plain(self):
        assert highlight_text("Canada", "").spans == []
        assert highlight_text("Canada", None).spans == []

    def test_special_characters_are_literal(self):
        assert highlight_text("a.b", ".").spans[0].start == 1
