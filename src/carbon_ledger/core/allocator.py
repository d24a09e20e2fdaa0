"""Token identifier allocation."""

from ..repositories.interfaces import CounterRepository


class IdentifierAllocator:
    """Hands out monotonically increasing token ids.

    The increment is written through the counter repository, so it commits or
    rolls back together with the mint that consumed the id. Callers must hold
    the ledger lock; ids are never reused, not even after a burn.
    """

    def __init__(self, counter: CounterRepository):
        self._counter = counter

    def current(self) -> int:
        """High-water mark: the last id handed out, 0 before the first mint."""
        return self._counter.get_last_id()

    def next_id(self) -> int:
        token_id = self._counter.get_last_id() + 1
        self._counter.set_last_id(token_id)
        return token_id
