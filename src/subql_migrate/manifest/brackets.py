"""Balanced-delimiter scanning over raw manifest text.

The scan has no tokenizer: a delimiter inside a string literal or comment is
counted like any other.
"""

from subql_migrate.errors import UnbalancedDelimitersError

IndexPair = tuple[int, int]


def find_matching_indices(content: str, open_char: str, close_char: str, start_from: int = 0) -> list[IndexPair]:
    """Return the first balanced ``open_char``/``close_char`` span at or after *start_from*.

    The result holds at most one pair ``(start, end)`` where ``end`` is the index
    of the matching closing delimiter. An empty list means no ``open_char``
    follows *start_from*. Raises ``UnbalancedDelimitersError`` when the counts
    disagree, including a closing delimiter that comes first.
    """
    if len(open_char) != 1 or len(close_char) != 1:
        raise ValueError("Delimiters must be single characters")

    open_count = 0
    start_index: int | None = None
    pairs: list[IndexPair] = []

    for i in range(start_from, len(content)):
        char = content[i]
        if char == open_char:
            if open_count == 0:
                start_index = i
            open_count += 1
        elif char == close_char:
            open_count -= 1
            if open_count == 0:
                assert start_index is not None
                pairs.append((start_index, i))
                break

    if open_count != 0:
        raise UnbalancedDelimitersError(open_char, close_char)
    return pairs
