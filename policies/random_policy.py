"""
随机策略

在合法出牌和所有合法弃牌之间均匀选择；选中弃牌等价于停止出牌后弃这张牌
"""
from typing import Optional, Sequence, Tuple
import random

from core.cards import DISCARD_PILE_COUNT
from core.actions import Action
from core.state import GameView

from .base import Policy


class RandomPolicy(Policy):
    """随机策略 (自带随机数生成器)"""

    def __init__(self, seed: Optional[int] = None, name: str = "random"):
        super().__init__(name)
        self.seed = seed
        self.rng = random.Random(seed)
        self._pending: Optional[Tuple[int, int]] = None

    def choose_action(
        self,
        view: GameView,
        seat: int,
        legal_plays: Sequence[Action],
    ) -> Optional[Action]:
        discards = [
            (hand_index, pile)
            for pile in range(DISCARD_PILE_COUNT)
            for hand_index in range(len(view.hand))
        ]
        total = len(legal_plays) + len(discards)
        if total == 0:
            return None

        idx = self.rng.randrange(total)
        if idx < len(legal_plays):
            self._pending = None
            return legal_plays[idx]

        self._pending = discards[idx - len(legal_plays)]
        return None

    def choose_discard(
        self,
        view: GameView,
        seat: int,
        hand: Sequence[int],
    ) -> Tuple[int, int]:
        if not hand:
            raise ValueError("cannot discard from an empty hand")
        pending, self._pending = self._pending, None
        if pending is not None and pending[0] < len(hand):
            return pending
        return self.rng.randrange(len(hand)), self.rng.randrange(DISCARD_PILE_COUNT)

    def reset(self):
        self.rng = random.Random(self.seed)
        self._pending = None
