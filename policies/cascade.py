"""
参数化决策级联

18 种启发式策略共用同一个评估流程，差异全部体现在 StrategyParams 中:

1. 库存优先规划 (protect_planner 时拒绝喂给对手的库存出牌和计划步骤)
2. 全手牌顺序搜索 (找到即用)
3. 优先级出牌 (threshold 为 None) 或 阈值出牌
4. 阈值策略手牌已空时兜底出牌，否则停止出牌
"""
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Optional, Sequence, Tuple, List, Dict, Any

from core.cards import WILD, MIN_CARD_VALUE, MAX_CARD_VALUE, DISCARD_PILE_COUNT, card_priority, next_after
from core.actions import Action, CardSource
from core.state import GameView
from core.errors import MalformedConfiguration

from .base import Policy, card_for_action
from .scoring import DiscardScoring, PlayScoring, score_discard, score_play, played_value
from .planning import plan_stock_play, find_full_hand_sequence


class FullHandSearch(Enum):
    """全手牌顺序搜索"""
    OFF = "off"
    HAND = "hand"                            # 只用手牌
    HAND_AND_DISCARDS = "hand_and_discards"  # 可穿插弃牌堆顶


class Protection(Enum):
    """对手保护否决: 拒绝让任一对手库存顶牌立即可打的出牌"""
    OFF = "off"
    ALWAYS = "always"              # 阈值阶段无条件否决
    LAST_RESORT = "last_resort"    # 只在兜底出牌时避开


DEFAULT_PRIORITY: Tuple[CardSource, ...] = (CardSource.STOCK, CardSource.HAND, CardSource.DISCARD)


@dataclass(frozen=True)
class StrategyParams:
    """
    级联策略参数

    Attributes:
        source_priority: 出牌来源优先级
        stock_planner: 是否启用库存优先规划
        protect_planner: 库存优先规划是否应用对手保护否决
        full_hand: 全手牌顺序搜索方式
        discard_scoring: 弃牌打分方式
        threshold: 阈值 T，None 表示有牌就出；否则只出 >= T 且大于库存顶牌的数字牌
        protection: 对手保护否决
        duplication_guard: 是否保留恰好出现两次的建造堆需求值
        play_scoring: 出牌打分方式
        rank_all_sources: 优先级出牌时所有来源一起按分数排序，而不是先按来源分组
    """
    source_priority: Tuple[CardSource, ...] = DEFAULT_PRIORITY
    stock_planner: bool = False
    protect_planner: bool = False
    full_hand: FullHandSearch = FullHandSearch.OFF
    discard_scoring: DiscardScoring = DiscardScoring.NONE
    threshold: Optional[int] = None
    protection: Protection = Protection.OFF
    duplication_guard: bool = False
    play_scoring: PlayScoring = PlayScoring.NONE
    rank_all_sources: bool = False

    def __post_init__(self):
        if sorted(self.source_priority) != sorted(CardSource):
            raise MalformedConfiguration(
                f"source priority must order each source exactly once: {self.source_priority}"
            )
        if self.threshold is not None and not MIN_CARD_VALUE <= self.threshold <= MAX_CARD_VALUE:
            raise MalformedConfiguration(f"threshold must be between 1 and 12, got {self.threshold}")

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'StrategyParams':
        """从已解析的字典构建，枚举字段接受字符串"""
        valid_keys = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        if "source_priority" in filtered:
            filtered["source_priority"] = tuple(
                s if isinstance(s, CardSource) else CardSource[str(s).upper()]
                for s in filtered["source_priority"]
            )
        for key, enum_cls in (
            ("full_hand", FullHandSearch),
            ("discard_scoring", DiscardScoring),
            ("protection", Protection),
            ("play_scoring", PlayScoring),
        ):
            if key in filtered and not isinstance(filtered[key], enum_cls):
                filtered[key] = enum_cls(filtered[key])
        return cls(**filtered)


# ----------------------------------------------------------------------
# 否决规则
# ----------------------------------------------------------------------

def feeds_opponent_value(view: GameView, value: int) -> bool:
    """打出数字 value 后建造堆需要的值是否等于某个对手的数字库存顶牌"""
    follow = next_after(value)
    return any(
        p.stock_top is not None and p.stock_top != WILD and p.stock_top == follow
        for p in view.opponents()
    )


def feeds_opponent(view: GameView, action: Action) -> bool:
    """
    出牌后建造堆需要的值是否等于某个对手的数字库存顶牌

    Args:
        view: 行动玩家视角
        action: PLAY 动作

    Returns:
        是否会让对手库存顶牌立即可打
    """
    card = card_for_action(view, action)
    if card is None:
        return False
    pile = view.build_piles[action.target]
    value = pile.next_value if card == WILD else card
    return feeds_opponent_value(view, value)


def breaks_duplication(view: GameView, action: Action) -> bool:
    """目标建造堆的需求值恰好出现在两个建造堆上时，推进它会打破重复"""
    target_next = view.build_piles[action.target].next_value
    return sum(1 for pile in view.build_piles if pile.next_value == target_next) == 2


class CascadePolicy(Policy):
    """
    参数化级联策略

    平局顺序: 分数高 > 建造堆编号小 > 牌值小 > 来源优先级 > 来源索引小
    弃牌平局顺序: 分数高 > 弃牌堆编号小 > 手牌位置小
    """

    def __init__(self, params: Optional[StrategyParams] = None, name: str = "cascade"):
        super().__init__(name)
        self.params = params or StrategyParams()
        self._source_rank = {src: rank for rank, src in enumerate(self.params.source_priority)}

    def choose_action(
        self,
        view: GameView,
        seat: int,
        legal_plays: Sequence[Action],
    ) -> Optional[Action]:
        if not legal_plays:
            return None
        params = self.params

        # 1) 库存优先规划
        if params.stock_planner:
            blocked = partial(feeds_opponent_value, view) if params.protect_planner else None
            action = plan_stock_play(view, legal_plays, blocked)
            if action is not None:
                return action

        # 2) 全手牌顺序
        if params.full_hand != FullHandSearch.OFF:
            action = find_full_hand_sequence(
                view,
                legal_plays,
                use_discards=params.full_hand == FullHandSearch.HAND_AND_DISCARDS,
            )
            if action is not None:
                return action

        # 3) 优先级 / 阈值出牌
        if params.threshold is None:
            candidates = self._apply_vetoes(view, list(legal_plays))
            return self._priority_play(view, candidates)

        # 阈值阶段: LAST_RESORT 的保护只在兜底时使用
        candidates = self._threshold_candidates(view, legal_plays)
        if params.duplication_guard:
            candidates = [a for a in candidates if not breaks_duplication(view, a)]
        if params.protection == Protection.ALWAYS:
            candidates = [a for a in candidates if not feeds_opponent(view, a)]
        action = self._threshold_play(view, candidates)
        if action is not None or view.hand:
            return action

        # 4) 手牌已空，无牌可弃: 不停止，兜底出牌
        return self._fallback_play(view, legal_plays)

    def choose_discard(
        self,
        view: GameView,
        seat: int,
        hand: Sequence[int],
    ) -> Tuple[int, int]:
        if not hand:
            raise ValueError("cannot discard from an empty hand")
        kind = self.params.discard_scoring
        if kind == DiscardScoring.NONE:
            return 0, 0

        best_key = None
        best = (0, 0)
        for discard_pile in range(DISCARD_PILE_COUNT):
            for hand_index in range(len(hand)):
                score = score_discard(kind, view, hand_index, discard_pile)
                key = (-score, discard_pile, hand_index)
                if best_key is None or key < best_key:
                    best_key = key
                    best = (hand_index, discard_pile)
        return best

    # ------------------------------------------------------------------

    def _apply_vetoes(self, view: GameView, plays: List[Action]) -> List[Action]:
        """优先级出牌阶段的否决"""
        params = self.params
        if params.duplication_guard:
            plays = [a for a in plays if not breaks_duplication(view, a)]

        if params.protection == Protection.ALWAYS:
            plays = [a for a in plays if not feeds_opponent(view, a)]
        elif params.protection == Protection.LAST_RESORT:
            allowed = [a for a in plays if not feeds_opponent(view, a)]
            if allowed:
                plays = allowed

        return plays

    def _tie_break(self, view: GameView, action: Action) -> Tuple[int, int, int, int]:
        card = card_for_action(view, action)
        priority = card_priority(card) if card is not None else WILD + 1
        return action.target, priority, self._source_rank[action.source], action.index

    def _priority_play(self, view: GameView, candidates: List[Action]) -> Optional[Action]:
        """按来源优先级选择第一组非空候选，组内按打分选择 (rank_all_sources 时只有一组)"""
        kind = self.params.play_scoring
        if self.params.rank_all_sources:
            groups = [candidates]
        else:
            groups = [[a for a in candidates if a.source == s] for s in self.params.source_priority]
        for group in groups:
            if group:
                return min(
                    group,
                    key=lambda a: (-score_play(kind, view, a),) + self._tie_break(view, a),
                )
        return None

    def _fallback_play(self, view: GameView, plays: Sequence[Action]) -> Action:
        """按合法顺序取第一个出牌，有保护时跳过喂给对手的出牌 (全部被否决则取第一个)"""
        if self.params.protection != Protection.OFF:
            for action in plays:
                if not feeds_opponent(view, action):
                    return action
        return plays[0]

    def _threshold_candidates(self, view: GameView, plays: Sequence[Action]) -> List[Action]:
        """数字 >= T 且大于库存顶牌的出牌 (忽略万能牌)"""
        stock = view.me.stock_top
        stock_value = stock if stock is not None and stock != WILD else 1
        threshold = self.params.threshold
        result = []
        for action in plays:
            value = played_value(view, action)
            if value is not None and value >= threshold and value > stock_value:
                result.append(action)
        return result

    def _threshold_play(self, view: GameView, candidates: List[Action]) -> Optional[Action]:
        """选择数字最大的出牌，其次是建造堆最长的"""
        if not candidates:
            return None
        return min(
            candidates,
            key=lambda a: (
                -played_value(view, a),
                -len(view.build_piles[a.target].cards),
            ) + self._tie_break(view, a),
        )
