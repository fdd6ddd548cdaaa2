"""
Unit tests for the signature alphabet and lexer.
"""

import pytest
from dbussig import (
    tokenize, Lexer, TypeCode, LexicalError, CHARACTERS,
    token_for, byte_for, is_basic_type, is_fixed_type, is_string_like,
    is_container_marker, is_closing_delimiter,
)


class TestAlphabet:
    """Test the character <-> type code mapping."""

    def test_every_code_round_trips(self):
        """Each type code maps to one character and back."""
        for code in TypeCode:
            assert token_for(byte_for(code)) is code

    def test_alphabet_is_bijective(self):
        """No two type codes share a character."""
        assert len(CHARACTERS) == len(TypeCode)
        assert set(CHARACTERS.values()) == set(TypeCode)

    def test_known_characters(self):
        """Spot check the protocol type codes."""
        assert token_for("y") is TypeCode.BYTE
        assert token_for("h") is TypeCode.UNIX_FD
        assert token_for("g") is TypeCode.SIGNATURE
        assert token_for("(") is TypeCode.STRUCT_START
        assert token_for("}") is TypeCode.DICT_ENTRY_END

    @pytest.mark.parametrize("char", ["r", "e", "z", " ", "[", "I"])
    def test_unknown_character(self, char):
        """Characters outside the alphabet are lexical errors."""
        with pytest.raises(LexicalError) as exc_info:
            token_for(char)
        assert exc_info.value.code == "E001"

    def test_categories(self):
        """Category predicates split the alphabet."""
        assert is_fixed_type(TypeCode.DOUBLE)
        assert not is_fixed_type(TypeCode.STRING)
        assert is_string_like(TypeCode.OBJECT_PATH)
        assert is_basic_type(TypeCode.INT32)
        assert is_basic_type(TypeCode.SIGNATURE)
        assert not is_basic_type(TypeCode.VARIANT)
        assert is_container_marker(TypeCode.ARRAY)
        assert is_closing_delimiter(TypeCode.STRUCT_END)
        assert not is_closing_delimiter(TypeCode.STRUCT_START)


class TestLexer:
    """Test tokenization of whole signatures."""

    def test_empty_source(self):
        """Empty signature produces no tokens."""
        assert tokenize("") == []

    def test_token_types(self):
        """Each character becomes one token."""
        tokens = tokenize("a(sv)")
        assert [t.type for t in tokens] == [
            TypeCode.ARRAY,
            TypeCode.STRUCT_START,
            TypeCode.STRING,
            TypeCode.VARIANT,
            TypeCode.STRUCT_END,
        ]

    def test_position_tracking(self):
        """Token spans cover one character each."""
        tokens = tokenize("ai")
        assert tokens[0].offset == 0
        assert tokens[1].span.start.offset == 1
        assert tokens[1].span.end.offset == 2
        assert tokens[1].span.start.column == 2

    def test_bytes_input(self):
        """ASCII bytes are accepted."""
        tokens = tokenize(b"as")
        assert [t.lexeme for t in tokens] == ["a", "s"]

    def test_non_ascii_bytes(self):
        """Bytes above 0x7f are lexical errors."""
        with pytest.raises(LexicalError) as exc_info:
            tokenize(b"i\xffi")
        assert exc_info.value.offset == 1

    def test_error_position(self):
        """Unexpected character reports its offset."""
        with pytest.raises(LexicalError) as exc_info:
            tokenize("iiz")
        assert exc_info.value.offset == 2
        assert "E001" in str(exc_info.value)

    def test_streaming(self):
        """The lexer can be iterated."""
        lexer = Lexer("ii")
        assert [t.type for t in lexer] == [TypeCode.INT32, TypeCode.INT32]
