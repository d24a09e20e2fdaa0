"""Pure helpers that turn a page window into the token ids it covers."""

from typing import List


def generate_offsets(count: int) -> List[int]:
    """Offsets 0..count-1; empty for a non-positive count."""
    return list(range(max(count, 0)))


def generate_ids(start: int, count: int) -> List[int]:
    """count consecutive ids beginning at start."""
    return [start + offset for offset in generate_offsets(count)]
