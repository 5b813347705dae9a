"""
规则引擎 - 合法动作生成、动作执行

合法性只依赖状态本身，不涉及随机数
"""
from typing import List, Optional

from .cards import DISCARD_PILE_COUNT, matches_value
from .actions import Action, ActionType, CardSource
from .state import GameState, PlayerState, GameStatus
from .errors import InvalidMove


class RuleEngine:
    """
    Skip-Bo 规则引擎

    提供合法动作生成、合法性验证、动作执行等功能
    所有方法都是静态方法，无状态
    """

    @staticmethod
    def source_card(player: PlayerState, action: Action) -> Optional[int]:
        """
        获取动作引用的牌

        Args:
            player: 行动玩家
            action: PLAY 或 DISCARD 动作

        Returns:
            来源位置上的牌，不存在时返回 None
        """
        if action.source == CardSource.STOCK:
            return player.stock_top
        if action.source == CardSource.HAND:
            if 0 <= action.index < len(player.hand):
                return player.hand[action.index]
            return None
        if action.source == CardSource.DISCARD:
            if 0 <= action.index < DISCARD_PILE_COUNT:
                return player.discard_top(action.index)
        return None

    @staticmethod
    def legal_plays(state: GameState, seat: int) -> List[Action]:
        """
        生成所有出牌到建造堆的合法动作

        顺序: 手牌 (手牌位置 × 建造堆)，库存，弃牌堆顶 (弃牌堆 × 建造堆)

        Args:
            state: 游戏状态
            seat: 行动玩家

        Returns:
            PLAY 动作列表
        """
        if state.is_finished:
            return []
        player = state.players[seat]
        required = [pile.next_value for pile in state.build_piles]
        actions = []

        for hand_index, card in enumerate(player.hand):
            for build_index, value in enumerate(required):
                if matches_value(card, value):
                    actions.append(Action.from_hand(hand_index, build_index))

        stock_top = player.stock_top
        if stock_top is not None:
            for build_index, value in enumerate(required):
                if matches_value(stock_top, value):
                    actions.append(Action.from_stock(build_index))

        for discard_index in range(DISCARD_PILE_COUNT):
            top = player.discard_top(discard_index)
            if top is None:
                continue
            for build_index, value in enumerate(required):
                if matches_value(top, value):
                    actions.append(Action.from_discard(discard_index, build_index))

        return actions

    @staticmethod
    def legal_discards(state: GameState, seat: int) -> List[Action]:
        """生成所有弃牌动作 (弃牌堆 × 手牌位置)"""
        if state.is_finished:
            return []
        hand_len = len(state.players[seat].hand)
        return [
            Action.discard(hand_index, discard_index)
            for discard_index in range(DISCARD_PILE_COUNT)
            for hand_index in range(hand_len)
        ]

    @staticmethod
    def legal_actions(state: GameState, seat: int) -> List[Action]:
        """
        生成完整的合法动作集合

        手牌非空时包含所有弃牌动作，否则包含 END_TURN

        Args:
            state: 游戏状态
            seat: 行动玩家

        Returns:
            合法动作列表 (游戏结束时为空)
        """
        if state.is_finished:
            return []
        actions = RuleEngine.legal_plays(state, seat)
        if state.players[seat].hand:
            actions.extend(RuleEngine.legal_discards(state, seat))
        else:
            actions.append(Action.end_turn())
        return actions

    @staticmethod
    def is_legal(state: GameState, seat: int, action: Action) -> bool:
        """检查动作是否合法"""
        if state.is_finished or seat != state.current_player:
            return False
        player = state.players[seat]

        if action.action_type == ActionType.PLAY:
            if not 0 <= action.target < len(state.build_piles):
                return False
            card = RuleEngine.source_card(player, action)
            if card is None:
                return False
            return matches_value(card, state.build_piles[action.target].next_value)

        if action.action_type == ActionType.DISCARD:
            return (
                action.source == CardSource.HAND
                and 0 <= action.index < len(player.hand)
                and 0 <= action.target < DISCARD_PILE_COUNT
            )

        if action.action_type == ActionType.END_TURN:
            return not player.hand

        return False

    @staticmethod
    def apply(state: GameState, seat: int, action: Action) -> GameState:
        """
        执行动作 (原地修改状态)

        - PLAY: 牌从来源移到建造堆，建造堆满 12 张时移入回收堆；
          库存清空则该玩家获胜
        - DISCARD: 手牌移到弃牌堆
        - END_TURN: 不移动任何牌 (回合推进由状态机负责)

        需要纯函数语义时先调用 state.clone()

        Args:
            state: 游戏状态
            seat: 行动玩家
            action: 动作

        Returns:
            同一个 state 对象

        Raises:
            InvalidMove: 动作不在合法集合中
        """
        if not RuleEngine.is_legal(state, seat, action):
            raise InvalidMove("action is not legal in the current state", seat=seat, action=action)

        player = state.players[seat]

        if action.action_type == ActionType.PLAY:
            if action.source == CardSource.STOCK:
                card = player.stock.pop()
            elif action.source == CardSource.HAND:
                card = player.hand.pop(action.index)
            else:
                card = player.discard_piles[action.index].pop()

            pile = state.build_piles[action.target]
            pile.cards.append(card)
            if pile.is_complete:
                state.recycle.extend(pile.take_cards())

            if not player.stock:
                player.has_won = True
                state.status = GameStatus.WON
                state.winner = seat

        elif action.action_type == ActionType.DISCARD:
            card = player.hand.pop(action.index)
            player.discard_piles[action.target].append(card)

        return state
