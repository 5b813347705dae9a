"""
Core Layer - 纯游戏逻辑 (无 ML 依赖)

Modules:
    cards: 牌定义与编码
    actions: 动作类型
    rules: 规则引擎
    state: 游戏状态与快照
    game: 回合状态机
    errors: 错误类型
"""
from .cards import (
    MIN_CARD_VALUE,
    MAX_CARD_VALUE,
    WILD,
    HAND_SIZE,
    DISCARD_PILE_COUNT,
    BUILD_PILE_COUNT,
    MIN_PLAYERS,
    MAX_PLAYERS,
    CARD_BUCKETS,
    FULL_DECK,
    is_wild,
    matches_value,
    card_priority,
    next_after,
    cards_to_str,
    str_to_cards,
    cards_to_counts,
)

from .actions import (
    CardSource,
    ActionType,
    Action,
)

from .rules import RuleEngine

from .state import (
    GameConfig,
    GameStatus,
    TurnPhase,
    BuildPile,
    PlayerState,
    GameState,
    BuildPileView,
    PlayerView,
    GameView,
    render_text,
)

from .game import Game, winner_points

from .errors import GameError, InvalidMove, MalformedConfiguration

__all__ = [
    # cards
    "MIN_CARD_VALUE",
    "MAX_CARD_VALUE",
    "WILD",
    "HAND_SIZE",
    "DISCARD_PILE_COUNT",
    "BUILD_PILE_COUNT",
    "MIN_PLAYERS",
    "MAX_PLAYERS",
    "CARD_BUCKETS",
    "FULL_DECK",
    "is_wild",
    "matches_value",
    "card_priority",
    "next_after",
    "cards_to_str",
    "str_to_cards",
    "cards_to_counts",
    # actions
    "CardSource",
    "ActionType",
    "Action",
    # rules
    "RuleEngine",
    # state
    "GameConfig",
    "GameStatus",
    "TurnPhase",
    "BuildPile",
    "PlayerState",
    "GameState",
    "BuildPileView",
    "PlayerView",
    "GameView",
    "render_text",
    # game
    "Game",
    "winner_points",
    # errors
    "GameError",
    "InvalidMove",
    "MalformedConfiguration",
]
