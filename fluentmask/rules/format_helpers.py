"""Format-preserving masking helpers shared by phone, card and account rules."""

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

ContentPredicate = Callable[[str], bool]


class FormatPreserver:
    """Mask the content characters of a value while leaving its layout intact.

    The value is split by position into a *content* subsequence (digits, by
    default) and *structural* characters (separators, prefixes). Only the
    content is masked; structural characters either stay at their original
    positions or are dropped when the layout is collapsed.

    Examples:
        >>> FormatPreserver.mask_content("+45 12 34 56 78", keep_last=2)
        '+** ** ** ** 78'
        >>> FormatPreserver.mask_content("+45 12 34 56 78", keep_last=2, preserve=False)
        '********78'
    """

    @staticmethod
    def content_positions(value: str, is_content: ContentPredicate = str.isdigit) -> list[int]:
        """Indices of the content characters in ``value``."""
        return [i for i, char in enumerate(value) if is_content(char)]

    @staticmethod
    def mask_edges(content: str, keep_first: int, keep_last: int, mask_char: str) -> str:
        """Mask all but the first ``keep_first`` and last ``keep_last`` characters."""
        if keep_first + keep_last >= len(content):
            return content
        end = len(content) - keep_last
        return content[:keep_first] + mask_char[0] * (end - keep_first) + content[end:]

    @staticmethod
    def reinterleave(value: str, positions: list[int], masked_content: str) -> str:
        """Write ``masked_content`` back into ``value`` at ``positions``."""
        result = list(value)
        for pos, char in zip(positions, masked_content, strict=True):
            result[pos] = char
        return "".join(result)

    @staticmethod
    def mask_content(
        value: str,
        keep_last: int = 0,
        keep_first: int = 0,
        mask_char: str = "*",
        preserve: bool = True,
        is_content: ContentPredicate = str.isdigit,
    ) -> str:
        """Mask content characters except the kept edges.

        Returns ``value`` unchanged when it has no content characters or fewer
        content characters than it is asked to keep.
        """
        positions = FormatPreserver.content_positions(value, is_content)
        if not positions or len(positions) < keep_first + keep_last:
            return value

        content = "".join(value[i] for i in positions)
        masked = FormatPreserver.mask_edges(content, keep_first, keep_last, mask_char)
        if not preserve:
            return masked
        return FormatPreserver.reinterleave(value, positions, masked)

    @staticmethod
    def group(text: str, size: int = 4, separator: str = " ") -> str:
        """Split ``text`` into fixed-size groups joined by ``separator``."""
        return separator.join(text[i : i + size] for i in range(0, len(text), size))
