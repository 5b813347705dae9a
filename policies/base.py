"""
策略基类

策略契约:
- choose_action(view, seat, legal_plays) -> Action 或 None (None 表示停止出牌)
- choose_discard(view, seat, hand) -> (手牌位置, 弃牌堆编号)
"""
from typing import Optional, Sequence, Tuple

from core.actions import Action, CardSource
from core.state import GameView


class Policy:
    """策略基类"""

    def __init__(self, name: str = "policy"):
        self.name = name

    def choose_action(
        self,
        view: GameView,
        seat: int,
        legal_plays: Sequence[Action],
    ) -> Optional[Action]:
        """从合法出牌中选择一个，返回 None 表示结束出牌阶段"""
        raise NotImplementedError

    def choose_discard(
        self,
        view: GameView,
        seat: int,
        hand: Sequence[int],
    ) -> Tuple[int, int]:
        """选择要弃的手牌位置和目标弃牌堆"""
        raise NotImplementedError

    def reset(self):
        """重置状态"""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


def card_for_action(view: GameView, action: Action) -> Optional[int]:
    """
    获取动作引用的牌

    Args:
        view: 行动玩家视角
        action: PLAY / DISCARD 动作

    Returns:
        牌，来源为空时返回 None
    """
    me = view.me
    if action.source == CardSource.STOCK:
        return me.stock_top
    if action.source == CardSource.HAND:
        if 0 <= action.index < len(view.hand):
            return view.hand[action.index]
        return None
    if action.source == CardSource.DISCARD:
        return me.discard_top(action.index)
    return None
