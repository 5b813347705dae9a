"""
回合状态机

每个回合: DRAW -> ACT -> (MUST_DISCARD) -> END_TURN，轮到下一个座位
任何时刻库存被清空即进入 GAME_OVER
"""
from typing import List, Optional, Sequence, Callable, Any
import logging
import random
import time

from .cards import FULL_DECK, HAND_SIZE
from .actions import Action
from .rules import RuleEngine
from .state import (
    GameConfig,
    GameState,
    GameStatus,
    GameView,
    PlayerState,
    TurnPhase,
    render_text,
)
from .errors import InvalidMove, MalformedConfiguration

logger = logging.getLogger(__name__)


# 赢家得分: 基础分 + 每张对手剩余库存牌的分数
WIN_BASE_POINTS = 25
POINTS_PER_OPPONENT_STOCK_CARD = 5


def winner_points(state: GameState, winner: int) -> int:
    """
    计算赢家得分

    points = 25 + 5 * (对手剩余库存牌数之和)

    Args:
        state: 结束时的游戏状态
        winner: 赢家座位

    Returns:
        得分
    """
    opponents_stock = sum(
        len(p.stock) for seat, p in enumerate(state.players) if seat != winner
    )
    return WIN_BASE_POINTS + POINTS_PER_OPPONENT_STOCK_CARD * opponents_stock


class Game:
    """
    Skip-Bo 对局

    持有游戏状态和本局专属的随机数生成器 (洗牌、补牌洗牌)
    """

    def __init__(self, config: GameConfig, deck: Optional[Sequence[int]] = None):
        """
        Args:
            config: 开局配置
            deck: 指定牌序 (测试用)，列表末尾先发；None 时用种子洗完整牌组
        """
        self.config = config
        self.rng = random.Random(config.seed)

        if deck is None:
            cards = list(FULL_DECK)
            self.rng.shuffle(cards)
        else:
            cards = list(deck)

        num_players = config.num_players
        stock_size = config.effective_stock_size
        if len(cards) < stock_size * num_players:
            raise MalformedConfiguration("deck does not contain enough cards to deal stocks")

        # 发库存牌: 每位玩家依次从牌堆末尾取
        players = []
        for _ in range(num_players):
            stock = [cards.pop() for _ in range(stock_size)]
            players.append(PlayerState(stock=stock))

        self.state = GameState(
            num_players=num_players,
            stock_size=stock_size,
            players=players,
            deck=cards,
        )
        self.phase = TurnPhase.DRAW

        # 决策计时 (按座位)
        self.decision_counts: List[int] = [0] * num_players
        self.decision_time: List[float] = [0.0] * num_players

        # 僵局检测
        self._moved = False
        self._idle_turns = 0

        self._begin_turn()

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    @property
    def current_player(self) -> int:
        return self.state.current_player

    @property
    def status(self) -> GameStatus:
        return self.state.status

    @property
    def is_finished(self) -> bool:
        return self.state.is_finished

    @property
    def winner(self) -> Optional[int]:
        return self.state.winner

    @property
    def turns(self) -> int:
        return self.state.turn

    def view(self, seat: Optional[int] = None) -> GameView:
        """获取指定座位视角的快照 (默认当前玩家)"""
        if seat is None:
            seat = self.state.current_player
        return self.state.view(seat)

    def legal_actions(self, seat: Optional[int] = None) -> List[Action]:
        """当前玩家的完整合法动作集合"""
        if seat is None:
            seat = self.state.current_player
        if seat != self.state.current_player:
            return []
        return RuleEngine.legal_actions(self.state, seat)

    def winner_points(self) -> int:
        """赢家得分，无赢家时为 0"""
        if self.state.winner is None:
            return 0
        return winner_points(self.state, self.state.winner)

    def render(self, seat: Optional[int] = None) -> str:
        return render_text(self.view(seat))

    # ------------------------------------------------------------------
    # 单步接口
    # ------------------------------------------------------------------

    def step(self, action: Action) -> None:
        """
        当前玩家执行一个动作

        - PLAY 后手牌打空则立即补牌 (奖励补牌，不结束回合)
        - DISCARD 和 END_TURN 结束回合

        Args:
            action: 动作

        Raises:
            InvalidMove: 游戏已结束或动作不合法
        """
        seat = self.state.current_player
        if self.state.is_finished:
            raise InvalidMove("game is already over", seat=seat, action=action)

        RuleEngine.apply(self.state, seat, action)

        if action.is_play:
            self._moved = True
            if self.state.is_finished:
                self.phase = TurnPhase.GAME_OVER
                logger.debug(f"Seat {seat} emptied its stock on turn {self.state.turn}")
                return
            if not self.state.players[seat].hand:
                self._refill(seat)
            return

        if action.is_discard:
            self._moved = True
        self._end_turn()

    # ------------------------------------------------------------------
    # 回合驱动
    # ------------------------------------------------------------------

    def play_turn(self, policy: Any, recorder: Any = None) -> None:
        """
        由策略驱动当前玩家完成一个回合

        Args:
            policy: 实现 choose_action / choose_discard 的策略
            recorder: 可选记录器，在每个策略动作执行前调用 on_action(view, seat, action)

        Raises:
            InvalidMove: 策略返回了合法集合之外的动作
        """
        if self.state.is_finished:
            return

        seat = self.state.current_player
        name = getattr(policy, "name", type(policy).__name__)
        self.phase = TurnPhase.ACT

        while True:
            plays = RuleEngine.legal_plays(self.state, seat)
            if not plays:
                break
            view = self.state.view(seat)
            action = self._timed(seat, policy.choose_action, view, seat, plays)
            if action is None:
                break
            if action not in plays:
                raise InvalidMove("policy chose an action outside the legal set",
                                  seat=seat, action=action, policy=name)
            if recorder is not None:
                recorder.on_action(view, seat, action)
            self.step(action)
            if self.state.is_finished:
                return

        hand = self.state.players[seat].hand
        if not hand:
            self.step(Action.end_turn())
            return

        # 必须弃牌
        self.phase = TurnPhase.MUST_DISCARD
        view = self.state.view(seat)
        choice = self._timed(seat, policy.choose_discard, view, seat, tuple(hand))
        try:
            hand_index, discard_pile = choice
            action = Action.discard(int(hand_index), int(discard_pile))
        except (TypeError, ValueError):
            raise InvalidMove("policy returned a malformed discard choice",
                              seat=seat, action=choice, policy=name)
        if not RuleEngine.is_legal(self.state, seat, action):
            raise InvalidMove("policy chose an illegal discard",
                              seat=seat, action=action, policy=name)
        if recorder is not None:
            recorder.on_action(view, seat, action)
        self.step(action)

    def run(
        self,
        policies: Sequence[Any],
        turn_cap: Optional[int] = None,
        recorder: Any = None,
    ) -> GameStatus:
        """
        运行到游戏结束或达到回合上限

        Args:
            policies: 每个座位的策略
            turn_cap: 回合上限，None 表示不限
            recorder: 可选动作记录器

        Returns:
            结束状态 (WON / DRAW / CAPPED)
        """
        if len(policies) != self.state.num_players:
            raise MalformedConfiguration(
                f"expected {self.state.num_players} policies, got {len(policies)}"
            )

        while not self.state.is_finished:
            if turn_cap is not None and self.state.turn >= turn_cap:
                self.state.status = GameStatus.CAPPED
                self.phase = TurnPhase.GAME_OVER
                logger.debug(f"Game capped after {self.state.turn} turns")
                break
            self.play_turn(policies[self.state.current_player], recorder)

        return self.state.status

    # ------------------------------------------------------------------
    # 内部
    # ------------------------------------------------------------------

    def _timed(self, seat: int, fn: Callable, *args):
        start = time.perf_counter()
        try:
            return fn(*args)
        finally:
            self.decision_time[seat] += time.perf_counter() - start
            self.decision_counts[seat] += 1

    def _begin_turn(self):
        """回合开始: 补满手牌"""
        if self.state.is_finished:
            self.phase = TurnPhase.GAME_OVER
            return
        self.phase = TurnPhase.DRAW
        self._refill(self.state.current_player)
        self.phase = TurnPhase.ACT

    def _end_turn(self):
        """回合结束: 僵局检测，推进座位和回合数"""
        self.phase = TurnPhase.END_TURN
        state = self.state

        if self._moved:
            self._idle_turns = 0
        else:
            self._idle_turns += 1
        self._moved = False

        state.current_player = (state.current_player + 1) % state.num_players
        state.turn += 1

        if self._idle_turns >= state.num_players:
            state.status = GameStatus.DRAW
            self.phase = TurnPhase.GAME_OVER
            logger.debug(f"Stalemate after {state.turn} turns")
            return

        self._begin_turn()

    def _refill(self, seat: int):
        """补牌到手牌上限，牌不够时停止"""
        hand = self.state.players[seat].hand
        while len(hand) < HAND_SIZE:
            card = self._draw_card()
            if card is None:
                break
            hand.append(card)
            self._moved = True

    def _draw_card(self) -> Optional[int]:
        deck = self.state.deck
        if deck:
            return deck.pop()
        if not self._replenish():
            return None
        return deck.pop()

    def _replenish(self) -> bool:
        """
        抽牌堆耗尽时补充

        先洗回已完成建造堆的牌；回收堆也为空时收集所有玩家弃牌堆中的牌

        Returns:
            是否补充成功
        """
        state = self.state
        if state.recycle:
            cards = state.recycle
            state.recycle = []
            origin = "recycle pile"
        else:
            cards = []
            for player in state.players:
                for pile in player.discard_piles:
                    cards.extend(pile)
                    pile.clear()
            origin = "discard piles"

        if not cards:
            logger.debug("Draw pile exhausted, nothing left to reshuffle")
            return False

        self.rng.shuffle(cards)
        state.deck.extend(cards)
        logger.debug(f"Reshuffled {len(cards)} cards from {origin} into the draw pile")
        return True
