"""
Frame-paced rerouting for interactive drags.

While a cable or splitter is being dragged, the editor produces geometry
updates much faster than it can draw. RerouteScheduler keeps only the
newest update per owner and applies pending updates at most once per
``min_interval`` seconds. A newer request cancels the token of the one it
replaces, so a stale reroute never overwrites a newer result.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Tuple

from .diagram import SpliceDiagram
from .models import Endpoint, ObstacleSet
from .router import CancelToken, RouteCancelled

logger = logging.getLogger(__name__)

# One display frame at 60 Hz
FRAME_INTERVAL = 1.0 / 60.0


@dataclass
class MoveRequest:
    """A pending geometry update for one owner."""

    owner_id: str
    endpoints: Tuple[Endpoint, ...]
    obstacles: ObstacleSet
    generation: int
    token: CancelToken = field(default_factory=CancelToken)


class RerouteScheduler:
    """
    Coalesces owner moves and applies them on a frame cadence.

    Args:
        diagram: The connection store to apply moves to
        min_interval: Minimum seconds between two flushes
        clock: Monotonic time source, replaceable in tests
    """

    def __init__(
        self,
        diagram: SpliceDiagram,
        min_interval: float = FRAME_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ):
        if min_interval < 0:
            raise ValueError(f"min_interval must be >= 0, got {min_interval}")
        self.diagram = diagram
        self.min_interval = min_interval
        self.clock = clock
        self.pending: Dict[str, MoveRequest] = {}
        self.superseded = 0
        self._generation = 0
        self._last_flush = None

    @property
    def has_pending(self) -> bool:
        return bool(self.pending)

    def request(
        self, owner_id: str, endpoints: Iterable[Endpoint], obstacles: ObstacleSet
    ) -> MoveRequest:
        """Queue a move, replacing and cancelling any pending one for the owner."""
        previous = self.pending.pop(owner_id, None)
        if previous is not None:
            previous.token.cancel()
            self.superseded += 1

        self._generation += 1
        move = MoveRequest(owner_id, tuple(endpoints), obstacles, self._generation)
        self.pending[owner_id] = move
        return move

    def cancel_all(self) -> None:
        for move in self.pending.values():
            move.token.cancel()
        self.pending.clear()

    def flush(self, force: bool = False) -> int:
        """
        Apply pending moves if a frame interval has passed.

        Returns:
            Number of moves applied
        """
        now = self.clock()
        if (
            not force
            and self._last_flush is not None
            and now - self._last_flush < self.min_interval
        ):
            return 0
        self._last_flush = now

        moves: List[MoveRequest] = sorted(
            self.pending.values(), key=lambda m: m.generation
        )
        self.pending.clear()

        applied = 0
        for move in moves:
            if move.token.cancelled:
                continue
            try:
                self.diagram.move_owner(
                    move.owner_id,
                    move.endpoints,
                    move.obstacles,
                    cancel_token=move.token,
                )
            except RouteCancelled:
                logger.debug("Dropped stale move of %s", move.owner_id)
                continue
            applied += 1
        return applied
