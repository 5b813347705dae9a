"""
打分函数

弃牌打分和出牌打分，分数越大越好，均为整数
"""
from enum import Enum
from typing import Optional

from core.cards import WILD, MAX_CARD_VALUE, card_priority, matches_value, next_after
from core.actions import Action, CardSource
from core.state import GameView

from .base import card_for_action


# 无法打分时的分数
INVALID_SCORE = -(2 ** 30)


class DiscardScoring(Enum):
    """弃牌打分方式"""
    NONE = "none"                    # 不打分: 第一张手牌放第一个弃牌堆
    PRIORITY_FREE = "priority_free"  # 重复叠放 + 浅堆优先，忽略牌的优先级
    WEIGHTED = "weighted"            # PRIORITY_FREE + 牌的优先级
    SEQUENCING = "sequencing"        # v 放在 v+1 下面
    MANAGER = "manager"              # 空堆奖励 + 更强的深度惩罚


class PlayScoring(Enum):
    """出牌打分方式"""
    NONE = "none"                        # 不打分，靠固定顺序打破平局
    PROGRESS = "progress"                # 偏好进度高、接近完成的建造堆
    SOURCE_WEIGHTED = "source_weighted"  # 来源权重 (库存 > 弃牌堆 > 手牌) + 进度
    STOCK_SYNERGY = "stock_synergy"      # 仅对库存出牌打分，考虑后续弃牌堆/手牌衔接


# ----------------------------------------------------------------------
# 弃牌打分
# ----------------------------------------------------------------------

def score_discard(kind: DiscardScoring, view: GameView, hand_index: int, discard_pile: int) -> int:
    """
    对 "手牌 hand_index 放到 discard_pile" 打分

    Args:
        kind: 打分方式
        view: 行动玩家视角
        hand_index: 手牌位置
        discard_pile: 弃牌堆编号

    Returns:
        分数
    """
    if not 0 <= hand_index < len(view.hand):
        return INVALID_SCORE
    card = view.hand[hand_index]
    pile = view.me.discard_piles[discard_pile]
    top = pile[-1] if pile else None
    depth = len(pile)

    if kind == DiscardScoring.NONE:
        return 0

    if kind == DiscardScoring.PRIORITY_FREE:
        duplicate_bonus = 600 if top == card else 0
        return 1000 + duplicate_bonus - depth * 20 - hand_index * 10

    if kind == DiscardScoring.WEIGHTED:
        duplicate_bonus = 600 if top == card else 0
        priority = card_priority(card) * 12
        return 1000 + duplicate_bonus + priority - depth * 20 - hand_index * 10

    if kind == DiscardScoring.SEQUENCING:
        duplicate_bonus = 600 if top == card else 0
        # 数字牌 v 放在 v+1 上面，之后可以按 v, v+1 的顺序依次打出
        one_below_bonus = 0
        if top is not None and top != WILD and card != WILD and card + 1 == top:
            one_below_bonus = 80
        spacing_penalty = 100 + (depth - 1) * 20 if depth > 0 else 0
        return 1000 + duplicate_bonus + one_below_bonus - spacing_penalty

    if kind == DiscardScoring.MANAGER:
        duplicate_bonus = 700 if top == card else 0
        empty_bonus = 80 if depth == 0 else 0
        priority = card_priority(card) * 15
        return (
            5000 + duplicate_bonus + empty_bonus + priority
            - depth * 40
            - hand_index * 5
            - discard_pile
        )

    raise ValueError(f"Unknown discard scoring: {kind}")


# ----------------------------------------------------------------------
# 出牌打分
# ----------------------------------------------------------------------

_SOURCE_BONUS = {
    CardSource.STOCK: 10_000,
    CardSource.DISCARD: 4_000,
    CardSource.HAND: 2_000,
}


def score_play(kind: PlayScoring, view: GameView, action: Action) -> int:
    """
    对出牌动作打分

    Args:
        kind: 打分方式
        view: 行动玩家视角
        action: PLAY 动作

    Returns:
        分数 (NONE 恒为 0)
    """
    if kind == PlayScoring.NONE:
        return 0

    card = card_for_action(view, action)
    if card is None:
        return INVALID_SCORE
    build_pile = action.target
    pile = view.build_piles[build_pile]
    length = len(pile.cards)
    next_value = pile.next_value

    if kind == PlayScoring.PROGRESS:
        card_value = (MAX_CARD_VALUE + 2) * 30 if card == WILD else card * 30
        completion_bonus = 500 if next_value == MAX_CARD_VALUE else 0
        return length * 150 + next_value * 60 + completion_bonus + card_value - build_pile

    if kind == PlayScoring.SOURCE_WEIGHTED:
        completion_bonus = 1000 if next_value == MAX_CARD_VALUE else 0
        wild_bonus = 300 if card == WILD else 0
        return (
            _SOURCE_BONUS[action.source]
            + card_priority(card) * 60
            + length * 40
            + next_value * 25
            + completion_bonus
            + wild_bonus
        )

    if kind == PlayScoring.STOCK_SYNERGY:
        if action.source != CardSource.STOCK:
            return 0
        return score_stock_synergy(view, build_pile)

    raise ValueError(f"Unknown play scoring: {kind}")


def score_stock_synergy(view: GameView, build_pile: int) -> int:
    """
    库存出牌打分: 进度 + 打出后弃牌堆顶/手牌能否继续衔接

    Args:
        view: 行动玩家视角
        build_pile: 目标建造堆

    Returns:
        分数，库存顶牌不匹配时为 INVALID_SCORE
    """
    stock = view.me.stock_top
    if stock is None:
        return INVALID_SCORE
    pile = view.build_piles[build_pile]
    target = pile.next_value
    if not matches_value(stock, target):
        return INVALID_SCORE

    completion_bonus = 900 if target == MAX_CARD_VALUE else 0
    follow_up = next_after(target)
    discard_synergy = sum(
        1 for top in view.me.discard_tops
        if top is not None and matches_value(top, follow_up)
    )
    hand_synergy = sum(1 for card in view.hand if matches_value(card, follow_up))
    return (
        12_000
        + len(pile.cards) * 220
        + target * 65
        + completion_bonus
        + card_priority(stock) * 30
        + discard_synergy * 650
        + hand_synergy * 180
        - build_pile * 3
    )


def played_value(view: GameView, action: Action) -> Optional[int]:
    """出牌动作的数字，万能牌返回 None"""
    card = card_for_action(view, action)
    if card is None or card == WILD:
        return None
    return card
