"""Tests for replacement and character-set rules."""

import pytest

from fluentmask.core.exceptions import RuleConfigurationError
from fluentmask.core.types import RuleCategory
from fluentmask.rules import (
    BlacklistCharsRule,
    CharClass,
    MaskCharClassRule,
    NullOutRule,
    RedactRule,
    TemplateMaskRule,
    TruncateRule,
    WhitelistCharsRule,
)


class TestConstantRules:
    """Test NullOutRule and RedactRule."""

    @pytest.mark.parametrize("value", ["secret", "", 42, None])
    def test_null_out_always_none(self, value):
        """Test that null_out discards every value."""
        assert NullOutRule().apply(value) is None

    def test_redact_replaces_empty_string(self):
        """Test that redact replaces "" as well as regular text."""
        rule = RedactRule()
        assert rule.apply("secret") == "[REDACTED]"
        assert rule.apply("") == "[REDACTED]"

    def test_redact_passes_none(self):
        """Test that redact leaves None alone."""
        assert RedactRule("X").apply(None) is None

    def test_redact_accepts_any_type(self):
        """Test that constant rules are category ANY."""
        assert RedactRule.category is RuleCategory.ANY
        assert RedactRule("#").apply(12345) == "#"

    def test_redact_text_must_be_string(self):
        """Test that a non-string replacement is rejected."""
        with pytest.raises(RuleConfigurationError):
            RedactRule(5)  # type: ignore[arg-type]


class TestTruncateRule:
    """Test TruncateRule."""

    def test_truncates_with_suffix(self):
        """Test that the suffix counts toward max_length."""
        assert TruncateRule(5).apply("abcdefgh") == "abcd…"

    def test_short_values_unchanged(self):
        """Test that values within the limit are untouched."""
        assert TruncateRule(5).apply("abc") == "abc"

    def test_empty_suffix(self):
        """Test truncation without a suffix."""
        assert TruncateRule(3, "").apply("abcdef") == "abc"


class TestTemplateMaskRule:
    """Test TemplateMaskRule tokens."""

    def test_first_and_last(self):
        """Test first/last character tokens."""
        assert TemplateMaskRule("{{F|1}}***{{L|1}}").apply("Jonathan") == "J***n"

    def test_asterisk_run(self):
        """Test the fixed asterisk token."""
        assert TemplateMaskRule("{{F|2}}{{*x4}}").apply("Jonathan") == "Jo****"

    def test_digits_slice(self):
        """Test digit extraction with a trailing slice."""
        assert TemplateMaskRule("***-**-{{digits|-4}}").apply("123-45-6789") == "***-**-6789"

    def test_letters(self):
        """Test letter extraction."""
        assert TemplateMaskRule("{{letters}}").apply("a1b2c3") == "abc"

    def test_unknown_token_kept(self):
        """Test that unknown tokens are left in place."""
        assert TemplateMaskRule("{{mystery}}").apply("x") == "{{mystery}}"

    def test_malformed_token_rejected(self):
        """Test that non-numeric counts fail at construction."""
        with pytest.raises(RuleConfigurationError):
            TemplateMaskRule("{{F|two}}")


class TestCharacterRules:
    """Test whitelist, blacklist and character class rules."""

    def test_whitelist_removes_by_default(self):
        """Test that disallowed characters are dropped."""
        assert WhitelistCharsRule("0123456789").apply("+45 (12) 34") == "451234"

    def test_whitelist_with_replacement(self):
        """Test that disallowed characters can be replaced."""
        assert WhitelistCharsRule("ab", "_").apply("abcab") == "ab_ab"

    def test_blacklist(self):
        """Test that blocked characters are replaced."""
        assert BlacklistCharsRule("aeiou").apply("masking") == "m*sk*ng"

    def test_collection_of_characters(self):
        """Test that a collection of single characters is accepted."""
        assert BlacklistCharsRule(["x", "y"], "-").apply("xyz") == "--z"

    @pytest.mark.parametrize("chars", ["", [], ["ab"], 5])
    def test_invalid_character_sets(self, chars):
        """Test that empty or malformed character sets are rejected."""
        with pytest.raises(RuleConfigurationError):
            WhitelistCharsRule(chars)

    @pytest.mark.parametrize(
        "char_class,expected",
        [
            (CharClass.DIGIT, "Room **, Floor *!"),
            (CharClass.LETTER, "**** 42, ***** 3!"),
            (CharClass.UPPER, "*oom 42, *loor 3!"),
            (CharClass.PUNCTUATION, "Room 42* Floor 3*"),
            ("whitespace", "Room*42,*Floor*3!"),
        ],
    )
    def test_mask_char_class(self, char_class, expected):
        """Test masking each character class."""
        assert MaskCharClassRule(char_class).apply("Room 42, Floor 3!") == expected

    def test_unknown_char_class_rejected(self):
        """Test that an unknown class name is rejected."""
        with pytest.raises(RuleConfigurationError):
            MaskCharClassRule("emoji")  # type: ignore[arg-type]
