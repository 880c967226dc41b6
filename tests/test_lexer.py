"""Tests for the GLSL lexer."""

from collections.abc import Iterator

from glsl_types.generator.lexer import TokenKind, tokenize


def _texts(source: str) -> list[str]:
    return [tok.text for tok in tokenize(source)]


class TestTokenize:
    """Tests for the tokenize function."""

    def test_declaration_token_kinds(self):
        """Test classification of a simple declaration."""
        # Act
        tokens = list(tokenize("uniform vec3 color;"))

        # Assert
        assert [t.kind for t in tokens] == [
            TokenKind.QUALIFIER,
            TokenKind.TYPE_NAME,
            TokenKind.IDENTIFIER,
            TokenKind.PUNCTUATION,
        ]
        assert [t.text for t in tokens] == ["uniform", "vec3", "color", ";"]

    def test_positions_are_one_based(self):
        """Test line and column tracking across lines."""
        tokens = list(tokenize("uniform float a;\n  in vec2 uv;"))

        first = tokens[0]
        second_line = tokens[4]
        assert (first.line, first.column) == (1, 1)
        assert second_line.text == "in"
        assert (second_line.line, second_line.column) == (2, 3)

    def test_comments_are_skipped(self):
        """Test that line and block comments produce no tokens."""
        source = "// uniform float x;\n/* uniform\nfloat y; */ uniform float z;"

        tokens = list(tokenize(source))

        assert [t.text for t in tokens] == ["uniform", "float", "z", ";"]
        assert tokens[2].line == 3

    def test_unterminated_block_comment(self):
        """Test that an unterminated comment swallows the rest of the input."""
        assert _texts("uniform float a; /* never closed\nuniform float b;") == [
            "uniform",
            "float",
            "a",
            ";",
        ]

    def test_include_directive(self):
        """Test that a preprocessor line becomes one directive token."""
        tokens = list(tokenize('#include "common.glsl"\nuniform float t;'))

        assert tokens[0].kind == TokenKind.DIRECTIVE
        assert tokens[0].text == '#include "common.glsl"'
        assert tokens[1].text == "uniform"
        assert tokens[1].line == 2

    def test_directive_with_continuation(self):
        """Test a directive continued with a backslash."""
        tokens = list(tokenize("#define A \\\n  1\nfloat x;"))

        assert tokens[0].kind == TokenKind.DIRECTIVE
        assert tokens[0].text == "#define A \\\n  1"
        assert tokens[1].text == "float"
        assert tokens[1].line == 3

    def test_indented_directive(self):
        """Test that a directive may be preceded by whitespace."""
        tokens = list(tokenize("   #version 330 core\n"))

        assert len(tokens) == 1
        assert tokens[0].kind == TokenKind.DIRECTIVE
        assert tokens[0].column == 4

    def test_numbers(self):
        """Test numeric literal forms."""
        tokens = list(tokenize("1.0 0x1Fu 2.5e-3 3u 1.0lf .5 2."))

        assert all(t.kind == TokenKind.NUMBER for t in tokens)
        assert [t.text for t in tokens] == [
            "1.0",
            "0x1Fu",
            "2.5e-3",
            "3u",
            "1.0lf",
            ".5",
            "2.",
        ]

    def test_keywords_and_qualifiers(self):
        """Test classification of reserved words."""
        tokens = list(tokenize("layout struct attribute sampler2D Light"))

        assert [t.kind for t in tokens] == [
            TokenKind.KEYWORD,
            TokenKind.KEYWORD,
            TokenKind.QUALIFIER,
            TokenKind.TYPE_NAME,
            TokenKind.IDENTIFIER,
        ]

    def test_unknown_characters_do_not_fail(self):
        """Test that the lexer is total."""
        tokens = list(tokenize("uniform float a @ $;"))

        unknown = [t.text for t in tokens if t.kind == TokenKind.UNKNOWN]
        assert unknown == ["@", "$"]

    def test_multi_character_punctuation(self):
        """Test that compound operators form one token."""
        assert _texts("a <<= b && c") == ["a", "<<=", "b", "&&", "c"]

    def test_is_lazy(self):
        """Test that tokenize returns an iterator."""
        assert isinstance(tokenize("uniform float a;"), Iterator)

    def test_empty_source(self):
        """Test tokenizing an empty string."""
        assert list(tokenize("")) == []
