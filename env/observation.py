"""
观察空间与动作空间编码

将 GameView 转换为定长 float32 向量，将 Action 与 0..60 的索引相互转换
"""
from typing import List, Optional, Sequence
import numpy as np

from core.cards import (
    WILD,
    MAX_CARD_VALUE,
    HAND_SIZE,
    CARD_BUCKETS,
    DISCARD_PILE_COUNT,
    BUILD_PILE_COUNT,
    MAX_PLAYERS,
    card_bucket,
    cards_to_counts,
)
from core.actions import Action, ActionType, CardSource
from core.state import GameView


# 状态特征维度
BUILD_FEATURES = BUILD_PILE_COUNT * 2                         # 8
SELF_FEATURES = 3                                              # 3
HAND_FEATURES = CARD_BUCKETS                                   # 13
DISCARD_FEATURES = DISCARD_PILE_COUNT * (CARD_BUCKETS + 1)     # 56
PLAYER_FEATURES = MAX_PLAYERS * 3                              # 18
STATE_FEATURES = (
    BUILD_FEATURES + SELF_FEATURES + HAND_FEATURES + DISCARD_FEATURES + PLAYER_FEATURES
)                                                              # 98

# 动作空间分段
HAND_PLAY_OFFSET = 0
STOCK_PLAY_OFFSET = HAND_PLAY_OFFSET + HAND_SIZE * BUILD_PILE_COUNT                 # 20
DISCARD_PLAY_OFFSET = STOCK_PLAY_OFFSET + BUILD_PILE_COUNT                          # 24
DISCARD_OFFSET = DISCARD_PLAY_OFFSET + DISCARD_PILE_COUNT * BUILD_PILE_COUNT        # 40
END_TURN_INDEX = DISCARD_OFFSET + HAND_SIZE * DISCARD_PILE_COUNT                    # 60
NUM_ACTIONS = END_TURN_INDEX + 1                                                    # 61


class StateEncoder:
    """
    状态编码器

    特征布局:
    - 建造堆: 4 x (next_value/12, 长度/12)
    - 自己: 库存剩余比例, 库存顶牌/12 (无库存为 0), 是否已赢
    - 手牌: 13 个桶的比例
    - 自己的弃牌堆: 4 x (顶牌 one-hot 13 + 牌数/库存大小)
    - 玩家槽位: 6 x (库存剩余比例, 手牌数/5, 是否已赢)，不存在的座位为 0
    """

    @property
    def num_features(self) -> int:
        return STATE_FEATURES

    def encode(self, view: GameView) -> np.ndarray:
        """
        编码视角玩家的快照

        Args:
            view: 游戏快照

        Returns:
            (98,) float32 数组
        """
        features = np.zeros(STATE_FEATURES, dtype=np.float32)
        stock_size = float(max(view.stock_size, 1))
        offset = 0

        # 建造堆
        for pile in view.build_piles:
            features[offset] = pile.next_value / MAX_CARD_VALUE
            features[offset + 1] = len(pile.cards) / MAX_CARD_VALUE
            offset += 2

        # 自己
        me = view.me
        features[offset] = me.stock_count / stock_size
        if me.stock_top is not None:
            features[offset + 1] = (card_bucket(me.stock_top) + 1) / MAX_CARD_VALUE
        features[offset + 2] = float(me.has_won)
        offset += SELF_FEATURES

        # 手牌
        counts = cards_to_counts(view.hand)
        features[offset:offset + CARD_BUCKETS] = counts / max(len(view.hand), 1)
        offset += HAND_FEATURES

        # 弃牌堆
        for pile in me.discard_piles:
            if pile:
                features[offset + card_bucket(pile[-1])] = 1.0
            features[offset + CARD_BUCKETS] = len(pile) / stock_size
            offset += CARD_BUCKETS + 1

        # 玩家槽位
        for seat in range(MAX_PLAYERS):
            if seat < len(view.players):
                p = view.players[seat]
                hand_size = len(view.hand) if seat == view.self_player else p.hand_size
                features[offset] = p.stock_count / stock_size
                features[offset + 1] = hand_size / HAND_SIZE
                features[offset + 2] = float(p.has_won)
            offset += 3

        return features


class ActionEncoder:
    """
    动作编码器

    将 Action 与固定的 61 维动作索引相互转换:
    - 手牌出牌 20: hand * 4 + build
    - 库存出牌 4: 20 + build
    - 弃牌堆出牌 16: 24 + discard * 4 + build
    - 弃牌 20: 40 + hand * 4 + discard
    - 结束回合: 60
    """

    @property
    def num_actions(self) -> int:
        """动作空间大小"""
        return NUM_ACTIONS

    def encode(self, action: Action) -> int:
        """
        将 Action 编码为索引

        Args:
            action: Action 对象

        Returns:
            动作索引，超出编码范围返回 -1
        """
        if action.action_type == ActionType.END_TURN:
            return END_TURN_INDEX

        if not 0 <= action.target < BUILD_PILE_COUNT:
            return -1

        if action.action_type == ActionType.DISCARD:
            if not 0 <= action.index < HAND_SIZE:
                return -1
            return DISCARD_OFFSET + action.index * DISCARD_PILE_COUNT + action.target

        if action.source == CardSource.STOCK:
            return STOCK_PLAY_OFFSET + action.target
        if action.source == CardSource.HAND:
            if not 0 <= action.index < HAND_SIZE:
                return -1
            return HAND_PLAY_OFFSET + action.index * BUILD_PILE_COUNT + action.target
        if action.source == CardSource.DISCARD:
            if not 0 <= action.index < DISCARD_PILE_COUNT:
                return -1
            return DISCARD_PLAY_OFFSET + action.index * BUILD_PILE_COUNT + action.target
        return -1

    def decode(self, idx: int) -> Optional[Action]:
        """
        将索引解码为 Action

        Args:
            idx: 动作索引

        Returns:
            Action 对象，越界返回 None
        """
        if not 0 <= idx < NUM_ACTIONS:
            return None
        if idx == END_TURN_INDEX:
            return Action.end_turn()
        if idx >= DISCARD_OFFSET:
            hand_index, pile = divmod(idx - DISCARD_OFFSET, DISCARD_PILE_COUNT)
            return Action.discard(hand_index, pile)
        if idx >= DISCARD_PLAY_OFFSET:
            discard_pile, build = divmod(idx - DISCARD_PLAY_OFFSET, BUILD_PILE_COUNT)
            return Action.from_discard(discard_pile, build)
        if idx >= STOCK_PLAY_OFFSET:
            return Action.from_stock(idx - STOCK_PLAY_OFFSET)
        hand_index, build = divmod(idx - HAND_PLAY_OFFSET, BUILD_PILE_COUNT)
        return Action.from_hand(hand_index, build)

    def get_legal_action_indices(self, legal_actions: Sequence[Action]) -> List[int]:
        """获取合法动作的索引列表"""
        indices = []
        for action in legal_actions:
            idx = self.encode(action)
            if idx >= 0:
                indices.append(idx)
        return indices

    def build_legal_mask(self, legal_actions: Sequence[Action]) -> np.ndarray:
        """
        构建合法动作掩码

        Args:
            legal_actions: 合法 Action 列表

        Returns:
            (61,) float32 数组
        """
        mask = np.zeros(NUM_ACTIONS, dtype=np.float32)
        for idx in self.get_legal_action_indices(legal_actions):
            mask[idx] = 1
        return mask


# 全局单例
_action_encoder: Optional[ActionEncoder] = None


def get_action_encoder() -> ActionEncoder:
    """获取全局动作编码器"""
    global _action_encoder
    if _action_encoder is None:
        _action_encoder = ActionEncoder()
    return _action_encoder
