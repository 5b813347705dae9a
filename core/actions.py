"""
动作类型定义

Skip-Bo 共有三种动作:
- PLAY: 将库存顶牌 / 手牌 / 弃牌堆顶牌打到建造堆
- DISCARD: 将一张手牌放到自己的弃牌堆 (结束回合)
- END_TURN: 手牌为空时结束回合
"""
from enum import IntEnum
from dataclasses import dataclass
from typing import Optional


class CardSource(IntEnum):
    """出牌来源"""
    HAND = 0      # 手牌
    STOCK = 1     # 库存堆顶牌
    DISCARD = 2   # 弃牌堆顶牌


class ActionType(IntEnum):
    """动作类型"""
    PLAY = 0       # 打到建造堆
    DISCARD = 1    # 弃牌
    END_TURN = 2   # 结束回合


_SOURCE_LABELS = {
    CardSource.HAND: "hand",
    CardSource.STOCK: "stock",
    CardSource.DISCARD: "discard",
}


@dataclass(frozen=True, slots=True)
class Action:
    """
    不可变动作表示

    Attributes:
        action_type: 动作类型
        source: 出牌来源 (PLAY 时有效，DISCARD 时固定为 HAND)
        index: 来源索引 (手牌位置或弃牌堆编号，库存为 0)
        target: 目标索引 (PLAY 为建造堆编号，DISCARD 为弃牌堆编号)
    """
    action_type: ActionType
    source: Optional[CardSource] = None
    index: int = 0
    target: int = 0

    @classmethod
    def from_hand(cls, hand_index: int, build_pile: int) -> 'Action':
        """手牌打到建造堆"""
        return cls(ActionType.PLAY, CardSource.HAND, hand_index, build_pile)

    @classmethod
    def from_stock(cls, build_pile: int) -> 'Action':
        """库存顶牌打到建造堆"""
        return cls(ActionType.PLAY, CardSource.STOCK, 0, build_pile)

    @classmethod
    def from_discard(cls, discard_pile: int, build_pile: int) -> 'Action':
        """弃牌堆顶牌打到建造堆"""
        return cls(ActionType.PLAY, CardSource.DISCARD, discard_pile, build_pile)

    @classmethod
    def discard(cls, hand_index: int, discard_pile: int) -> 'Action':
        """手牌放入弃牌堆"""
        return cls(ActionType.DISCARD, CardSource.HAND, hand_index, discard_pile)

    @classmethod
    def end_turn(cls) -> 'Action':
        """结束回合"""
        return cls(ActionType.END_TURN)

    @property
    def is_play(self) -> bool:
        return self.action_type == ActionType.PLAY

    @property
    def is_discard(self) -> bool:
        return self.action_type == ActionType.DISCARD

    @property
    def is_end_turn(self) -> bool:
        return self.action_type == ActionType.END_TURN

    @property
    def build_pile(self) -> Optional[int]:
        """目标建造堆 (仅 PLAY)"""
        return self.target if self.is_play else None

    @property
    def discard_pile(self) -> Optional[int]:
        """目标弃牌堆 (DISCARD) 或来源弃牌堆 (从弃牌堆出牌)"""
        if self.is_discard:
            return self.target
        if self.is_play and self.source == CardSource.DISCARD:
            return self.index
        return None

    @property
    def hand_index(self) -> Optional[int]:
        if self.source == CardSource.HAND and not self.is_end_turn:
            return self.index
        return None

    def __str__(self) -> str:
        if self.is_end_turn:
            return "end_turn"
        if self.is_discard:
            return f"discard(hand[{self.index}] -> discard[{self.target}])"
        label = _SOURCE_LABELS[self.source]
        if self.source == CardSource.STOCK:
            return f"play(stock -> build[{self.target}])"
        return f"play({label}[{self.index}] -> build[{self.target}])"
