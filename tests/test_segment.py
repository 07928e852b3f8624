"""
Tests unitaires pour la segmentation des chapitres.

Ces tests vérifient que les chunks respectent la taille maximale et
qu'aucun bloc de code n'est coupé.
"""

import pytest

from mdbook_translator.segment import (
    FENCE_MARKER,
    Segmentator,
    iter_lines,
    split_into_chunks,
)


def _fence_count(chunk: str) -> int:
    return sum(1 for line in chunk.split("\n") if line.startswith(FENCE_MARKER))


class TestIterLines:
    """Tests pour le découpage en lignes."""

    def test_trailing_newline_is_not_an_extra_line(self):
        assert list(iter_lines("a\nb\n")) == ["a", "b"]

    def test_carriage_return_is_stripped(self):
        assert list(iter_lines("a\r\nb")) == ["a", "b"]

    def test_empty_text(self):
        assert list(iter_lines("")) == []

    def test_blank_lines_are_kept(self):
        assert list(iter_lines("a\n\nb")) == ["a", "", "b"]


class TestSegmentator:
    """Tests pour la classe Segmentator."""

    def test_empty_text_yields_no_chunk(self):
        assert split_into_chunks("", 4000) == []

    def test_single_chunk_with_code_block(self):
        """Un texte court avec bloc de code reste en un seul chunk."""
        text = "Hello\n\n```\ncode\n```\nWorld"

        chunks = split_into_chunks(text, 4000)

        assert chunks == ["Hello\n\n\n```\ncode\n```\nWorld\n"]

    def test_split_when_buffer_reaches_max_chars(self):
        chunks = split_into_chunks("aaaa\nbbbb\ncccc", 10)

        assert chunks == ["aaaa\nbbbb\n", "cccc\n"]

    def test_code_block_is_never_split(self):
        """Les lignes d'un bloc de code restent dans le chunk qui l'ouvre."""
        text = "intro\n```\nline one\nline two\n```\nafter"

        chunks = split_into_chunks(text, 10)

        assert chunks == ["intro\n```\nline one\nline two\n```\n", "after\n"]

    def test_blank_line_is_not_a_split_point(self):
        """Les lignes vides restent attachées au chunk précédent."""
        chunks = split_into_chunks("abcd\n\n\nefgh", 5)

        assert chunks == ["abcd\n\n\n\n\n", "efgh\n"]

    def test_unterminated_fence_disables_splitting(self):
        text = "```\n" + "\n".join(f"line {i}" for i in range(50))

        chunks = split_into_chunks(text, 20)

        assert len(chunks) == 1
        assert chunks[0].startswith("```\nline 0\n")

    def test_long_first_line_does_not_produce_empty_chunk(self):
        chunks = split_into_chunks("abcdefghij\nxy", 5)

        assert chunks == ["abcdefghij\n", "xy\n"]
        assert all(chunks)

    def test_length_is_counted_in_characters(self):
        """Les caractères non ASCII comptent pour un seul caractère."""
        text = "éééé\nàààà"

        assert split_into_chunks(text, 10) == ["éééé\nàààà\n"]

    def test_split_is_a_one_shot_iterator(self):
        chunks = Segmentator(4000).split("one\ntwo")

        assert next(chunks) == "one\ntwo\n"
        assert list(chunks) == []

    @pytest.mark.parametrize("max_chars", [0, -1])
    def test_invalid_max_chars(self, max_chars):
        with pytest.raises(ValueError):
            Segmentator(max_chars)


class TestSegmentationProperties:
    """Propriétés vérifiées sur un document plus long."""

    @pytest.fixture
    def document(self):
        parts = []
        for i in range(30):
            parts.append(f"## Section {i}")
            parts.append("")
            parts.append(f"Paragraph {i} " + "lorem ipsum " * (i % 7))
            if i % 3 == 0:
                parts.append("```rust")
                parts.append(f"fn f{i}() {{}}")
                parts.append("")
                parts.append(f"let x = {i};")
                parts.append("```")
            parts.append("")
        return "\n".join(parts)

    @pytest.mark.parametrize("max_chars", [20, 80, 300, 4000])
    def test_every_chunk_closes_its_code_blocks(self, document, max_chars):
        for chunk in split_into_chunks(document, max_chars):
            assert _fence_count(chunk) % 2 == 0

    @pytest.mark.parametrize("max_chars", [20, 80, 300, 4000])
    def test_rejoined_chunks_keep_all_lines_in_order(self, document, max_chars):
        rejoined = "".join(split_into_chunks(document, max_chars))

        original_lines = [line for line in document.split("\n") if line]
        rejoined_lines = [line for line in rejoined.split("\n") if line]
        assert rejoined_lines == original_lines

    def test_prose_chunks_respect_max_chars(self):
        """Sans bloc de code ni ligne vide, un chunk ne dépasse pas max_chars."""
        text = "\n".join(f"word{i:05d}" for i in range(200))

        chunks = split_into_chunks(text, 50)

        assert len(chunks) > 1
        assert all(len(chunk) <= 50 for chunk in chunks)
