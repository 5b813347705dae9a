"""
游戏状态定义

- GameConfig: 开局配置 (玩家数、随机种子、库存大小)
- GameState: 可变的完整状态，只由回合状态机持有和修改
- GameView: 不可变快照，交给策略做决策
"""
from dataclasses import dataclass, field
from typing import Dict, Tuple, Optional, List, Any
from collections import Counter
from enum import Enum

from .cards import (
    FULL_DECK,
    HAND_SIZE,
    DISCARD_PILE_COUNT,
    BUILD_PILE_COUNT,
    MAX_CARD_VALUE,
    MIN_PLAYERS,
    MAX_PLAYERS,
    cards_to_str,
    card_to_str,
)
from .errors import MalformedConfiguration


DEFAULT_SEED = 0x5EED_5EED_5EED_5EED


def default_stock_size(num_players: int) -> int:
    """标准规则: 4 人及以下 30 张，否则 20 张"""
    return 30 if num_players <= 4 else 20


class GameStatus(Enum):
    """游戏状态"""
    ONGOING = "ongoing"    # 进行中
    WON = "won"            # 有玩家清空库存
    DRAW = "draw"          # 僵局: 一整轮无任何牌移动
    CAPPED = "capped"      # 达到回合上限


class TurnPhase(Enum):
    """回合阶段"""
    DRAW = "draw"                  # 补牌
    ACT = "act"                    # 出牌
    MUST_DISCARD = "must_discard"  # 必须弃牌
    END_TURN = "end_turn"          # 回合结束
    GAME_OVER = "game_over"        # 游戏结束


@dataclass
class GameConfig:
    """
    开局配置

    Attributes:
        num_players: 玩家数 (2-6)
        seed: 随机种子 (洗牌与补牌洗牌)
        stock_size: 每位玩家的库存大小，None 表示按标准规则
    """
    num_players: int = 2
    seed: int = DEFAULT_SEED
    stock_size: Optional[int] = None

    def __post_init__(self):
        if not MIN_PLAYERS <= self.num_players <= MAX_PLAYERS:
            raise MalformedConfiguration(
                f"players must be between {MIN_PLAYERS} and {MAX_PLAYERS}, got {self.num_players}"
            )
        if self.stock_size is not None:
            if self.stock_size <= 0:
                raise MalformedConfiguration("stock size must be positive")
            if self.stock_size * self.num_players > len(FULL_DECK):
                raise MalformedConfiguration(
                    "deck does not contain enough cards to deal stocks"
                )

    @property
    def effective_stock_size(self) -> int:
        if self.stock_size is not None:
            return self.stock_size
        return default_stock_size(self.num_players)

    @classmethod
    def from_dict(cls, d: dict) -> 'GameConfig':
        valid_keys = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        return cls(**filtered)


@dataclass
class BuildPile:
    """
    建造堆

    从 1 开始依次递增，满 12 张后立即清空
    """
    cards: List[int] = field(default_factory=list)

    @property
    def next_value(self) -> int:
        """需要的下一个数字"""
        return len(self.cards) % MAX_CARD_VALUE + 1

    @property
    def is_complete(self) -> bool:
        return len(self.cards) == MAX_CARD_VALUE

    def take_cards(self) -> List[int]:
        """取走全部牌并清空"""
        cards, self.cards = self.cards, []
        return cards

    def __len__(self) -> int:
        return len(self.cards)


@dataclass
class PlayerState:
    """
    单个玩家的状态

    Attributes:
        stock: 库存堆 (列表末尾为顶牌)
        hand: 手牌
        discard_piles: 4 个弃牌堆 (列表末尾为顶牌)
        has_won: 是否已清空库存
    """
    stock: List[int] = field(default_factory=list)
    hand: List[int] = field(default_factory=list)
    discard_piles: List[List[int]] = field(
        default_factory=lambda: [[] for _ in range(DISCARD_PILE_COUNT)]
    )
    has_won: bool = False

    @property
    def stock_top(self) -> Optional[int]:
        return self.stock[-1] if self.stock else None

    def discard_top(self, index: int) -> Optional[int]:
        pile = self.discard_piles[index]
        return pile[-1] if pile else None


@dataclass
class GameState:
    """
    完整游戏状态

    Attributes:
        num_players: 玩家数
        stock_size: 开局库存大小
        players: 各玩家状态
        build_piles: 4 个公共建造堆
        deck: 抽牌堆 (列表末尾先抽)
        recycle: 已完成建造堆回收的牌，抽牌堆耗尽时洗回
        current_player: 当前行动玩家
        turn: 已结束的回合数
        status: 游戏状态
        winner: 赢家座位
    """
    num_players: int
    stock_size: int
    players: List[PlayerState]
    build_piles: List[BuildPile] = field(
        default_factory=lambda: [BuildPile() for _ in range(BUILD_PILE_COUNT)]
    )
    deck: List[int] = field(default_factory=list)
    recycle: List[int] = field(default_factory=list)
    current_player: int = 0
    turn: int = 0
    status: GameStatus = GameStatus.ONGOING
    winner: Optional[int] = None

    @property
    def is_finished(self) -> bool:
        return self.status != GameStatus.ONGOING

    @property
    def discard_card_count(self) -> int:
        """所有玩家弃牌堆中的牌数"""
        return sum(len(pile) for p in self.players for pile in p.discard_piles)

    def card_counts(self) -> Counter:
        """全部牌的多重集合 (用于牌守恒检查)"""
        counts: Counter = Counter()
        counts.update(self.deck)
        counts.update(self.recycle)
        for pile in self.build_piles:
            counts.update(pile.cards)
        for player in self.players:
            counts.update(player.stock)
            counts.update(player.hand)
            for pile in player.discard_piles:
                counts.update(pile)
        return counts

    def clone(self) -> 'GameState':
        """深拷贝 (列表逐层复制)"""
        return GameState(
            num_players=self.num_players,
            stock_size=self.stock_size,
            players=[
                PlayerState(
                    stock=list(p.stock),
                    hand=list(p.hand),
                    discard_piles=[list(pile) for pile in p.discard_piles],
                    has_won=p.has_won,
                )
                for p in self.players
            ],
            build_piles=[BuildPile(list(pile.cards)) for pile in self.build_piles],
            deck=list(self.deck),
            recycle=list(self.recycle),
            current_player=self.current_player,
            turn=self.turn,
            status=self.status,
            winner=self.winner,
        )

    def view(self, perspective: int) -> 'GameView':
        """
        构建指定玩家视角的快照

        Args:
            perspective: 视角玩家座位

        Returns:
            GameView (只包含该玩家自己的手牌)
        """
        if not 0 <= perspective < self.num_players:
            raise IndexError(f"player index {perspective} is out of range")
        players = tuple(
            PlayerView(
                seat=seat,
                stock_count=len(p.stock),
                stock_top=p.stock_top,
                discard_piles=tuple(tuple(pile) for pile in p.discard_piles),
                hand_size=len(p.hand),
                has_won=p.has_won,
            )
            for seat, p in enumerate(self.players)
        )
        return GameView(
            num_players=self.num_players,
            stock_size=self.stock_size,
            self_player=perspective,
            current_player=self.current_player,
            turn=self.turn,
            status=self.status,
            draw_pile_count=len(self.deck),
            recycle_pile_count=len(self.recycle),
            build_piles=tuple(
                BuildPileView(cards=tuple(pile.cards), next_value=pile.next_value)
                for pile in self.build_piles
            ),
            players=players,
            hand=tuple(self.players[perspective].hand),
        )


@dataclass(frozen=True)
class BuildPileView:
    """建造堆快照"""
    cards: Tuple[int, ...] = ()
    next_value: int = 1

    def __len__(self) -> int:
        return len(self.cards)


@dataclass(frozen=True)
class PlayerView:
    """玩家公开信息 (所有人可见)"""
    seat: int
    stock_count: int
    stock_top: Optional[int]
    discard_piles: Tuple[Tuple[int, ...], ...]
    hand_size: int
    has_won: bool = False

    def discard_top(self, index: int) -> Optional[int]:
        pile = self.discard_piles[index]
        return pile[-1] if pile else None

    @property
    def discard_tops(self) -> Tuple[Optional[int], ...]:
        return tuple(pile[-1] if pile else None for pile in self.discard_piles)


@dataclass(frozen=True)
class GameView:
    """
    策略可见的不可变游戏快照

    Attributes:
        num_players: 玩家数
        stock_size: 开局库存大小
        self_player: 视角玩家
        current_player: 当前行动玩家
        turn: 已结束的回合数
        status: 游戏状态
        draw_pile_count: 抽牌堆剩余牌数
        recycle_pile_count: 回收堆牌数
        build_piles: 建造堆快照
        players: 所有玩家的公开信息
        hand: 视角玩家的手牌
    """
    num_players: int
    stock_size: int
    self_player: int
    current_player: int
    turn: int
    status: GameStatus
    draw_pile_count: int
    recycle_pile_count: int
    build_piles: Tuple[BuildPileView, ...]
    players: Tuple[PlayerView, ...]
    hand: Tuple[int, ...]
    hand_size: int = HAND_SIZE

    @property
    def me(self) -> PlayerView:
        return self.players[self.self_player]

    def opponents(self) -> List[PlayerView]:
        return [p for p in self.players if p.seat != self.self_player]

    def next_values(self) -> List[int]:
        return [pile.next_value for pile in self.build_piles]

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式 (日志与调试)"""
        return {
            "self_player": self.self_player,
            "current_player": self.current_player,
            "turn": self.turn,
            "status": self.status.value,
            "draw_pile_count": self.draw_pile_count,
            "recycle_pile_count": self.recycle_pile_count,
            "build_piles": [list(p.cards) for p in self.build_piles],
            "players": [
                {
                    "seat": p.seat,
                    "stock_count": p.stock_count,
                    "stock_top": p.stock_top,
                    "discard_piles": [list(d) for d in p.discard_piles],
                    "hand_size": p.hand_size,
                    "has_won": p.has_won,
                }
                for p in self.players
            ],
            "hand": list(self.hand),
        }


def render_text(view: GameView) -> str:
    """文本渲染"""
    lines = []
    lines.append("=" * 50)
    lines.append(f"Turn: {view.turn}  Status: {view.status.value}")
    lines.append(f"Current Player: {view.current_player}")
    lines.append(f"Draw pile: {view.draw_pile_count}  |  Recycle pile: {view.recycle_pile_count}")

    # 建造堆
    for i, pile in enumerate(view.build_piles):
        top = card_to_str(pile.cards[-1]) if pile.cards else '-'
        lines.append(f"Build {i}: top={top} next={pile.next_value} ({len(pile.cards)})")

    # 玩家
    for p in view.players:
        marker = "*" if p.seat == view.current_player else " "
        stock_top = card_to_str(p.stock_top) if p.stock_top is not None else '-'
        tops = ' '.join(card_to_str(t) if t is not None else '-' for t in p.discard_tops)
        lines.append(
            f"{marker}P{p.seat}: stock {stock_top} ({p.stock_count})  "
            f"discards [{tops}]  hand {p.hand_size}"
        )

    lines.append(f"Hand (P{view.self_player}): {cards_to_str(view.hand)}")
    lines.append("=" * 50)
    return "\n".join(lines)
