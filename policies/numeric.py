"""
数值策略适配器

把 "状态编码 -> 61 维动作分数" 的函数 (例如外部训练好的网络) 包装为策略
"""
from typing import Callable, Optional, Sequence, Tuple
import numpy as np

from core.cards import DISCARD_PILE_COUNT
from core.actions import Action
from core.state import GameView
from env.observation import (
    StateEncoder,
    NUM_ACTIONS,
    END_TURN_INDEX,
    get_action_encoder,
)

from .base import Policy


# 非法动作的分数
MASKED_SCORE = -1e9

ScoresFn = Callable[[np.ndarray], np.ndarray]


class ScoredPolicy(Policy):
    """
    按分数选择动作的策略

    出牌阶段在合法出牌和 "停止" (END_TURN 索引) 中取最高分；
    弃牌阶段在合法弃牌索引中取最高分。平局取索引小的
    """

    def __init__(self, scores_fn: ScoresFn, name: str = "numeric"):
        super().__init__(name)
        self.scores_fn = scores_fn
        self.state_encoder = StateEncoder()
        self.action_encoder = get_action_encoder()

    def _scores(self, view: GameView) -> np.ndarray:
        scores = np.asarray(self.scores_fn(self.state_encoder.encode(view)), dtype=np.float64)
        if scores.shape != (NUM_ACTIONS,):
            raise ValueError(f"expected {NUM_ACTIONS} action scores, got shape {scores.shape}")
        return scores

    def choose_action(
        self,
        view: GameView,
        seat: int,
        legal_plays: Sequence[Action],
    ) -> Optional[Action]:
        if not legal_plays:
            return None
        scores = self._scores(view)
        mask = self.action_encoder.build_legal_mask(legal_plays)
        mask[END_TURN_INDEX] = 1
        masked = np.where(mask > 0, scores, MASKED_SCORE)
        idx = int(np.argmax(masked))
        if idx == END_TURN_INDEX:
            return None
        return self.action_encoder.decode(idx)

    def choose_discard(
        self,
        view: GameView,
        seat: int,
        hand: Sequence[int],
    ) -> Tuple[int, int]:
        if not hand:
            raise ValueError("cannot discard from an empty hand")
        scores = self._scores(view)
        discards = [
            Action.discard(hand_index, pile)
            for hand_index in range(len(hand))
            for pile in range(DISCARD_PILE_COUNT)
        ]
        mask = self.action_encoder.build_legal_mask(discards)
        masked = np.where(mask > 0, scores, MASKED_SCORE)
        action = self.action_encoder.decode(int(np.argmax(masked)))
        return action.index, action.target
