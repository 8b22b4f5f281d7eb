import logging
from typing import Iterable, Iterator, Optional

from scorebook.models import Ball

logger = logging.getLogger(__name__)


class BallLedger:
    """
    Ordered record of every delivery in a match.

    Balls are only ever appended or truncated from the end. Truncated balls
    are kept on a redo stack until the next append starts a new history.
    """

    def __init__(self, balls: Iterable[Ball] = ()) -> None:
        self._balls: list[Ball] = []
        self._redo: list[Ball] = []
        for ball in balls:
            self.append(ball)

    def __len__(self) -> int:
        return len(self._balls)

    def __iter__(self) -> Iterator[Ball]:
        return iter(self._balls)

    @property
    def balls(self) -> tuple[Ball, ...]:
        return tuple(self._balls)

    @property
    def last(self) -> Optional[Ball]:
        return self._balls[-1] if self._balls else None

    @property
    def can_undo(self) -> bool:
        return bool(self._balls)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def append(self, ball: Ball) -> None:
        """Append a new ball. Discards anything waiting to be redone."""
        self._push(ball)
        if self._redo:
            logger.debug(f"Discarding {len(self._redo)} ball(s) from the redo buffer")
            self._redo.clear()

    def truncate(self) -> Optional[Ball]:
        """Remove the last ball and keep it for redo. Returns None if empty."""
        if not self._balls:
            return None
        ball = self._balls.pop()
        self._redo.append(ball)
        return ball

    def truncate_to(self, length: int) -> list[Ball]:
        """Remove every ball from position `length` onward, oldest first in the result."""
        if length < 0:
            raise ValueError(f"cannot truncate to negative length {length}")
        removed: list[Ball] = []
        while len(self._balls) > length:
            removed.append(self.truncate())
        removed.reverse()
        return removed

    def restore(self) -> Optional[Ball]:
        """Re-append the most recently truncated ball. Returns None if nothing to redo."""
        if not self._redo:
            return None
        ball = self._redo.pop()
        self._push(ball)
        return ball

    def _push(self, ball: Ball) -> None:
        if ball.index != len(self._balls):
            raise ValueError(
                f"ball index {ball.index} does not follow ledger length {len(self._balls)}"
            )
        self._balls.append(ball)
