"""回合状态机测试"""
import pytest
from collections import Counter

from core.cards import FULL_DECK
from core.actions import Action
from core.game import Game, winner_points
from core.state import GameConfig, GameStatus, TurnPhase
from core.errors import InvalidMove, MalformedConfiguration
from policies.base import Policy
from policies.registry import create_policy


def make_deck(stocks, draws):
    """
    构建指定牌序

    stocks[i] 为座位 i 的库存 (末尾为顶牌)，draws 为之后依次抽到的牌
    """
    pops = [card for stock in stocks for card in stock] + list(draws)
    return list(reversed(pops))


def make_game(stocks, draws):
    config = GameConfig(num_players=len(stocks), stock_size=len(stocks[0]))
    return Game(config, deck=make_deck(stocks, draws))


class ScriptedPolicy(Policy):
    """按脚本出牌，脚本用完后停止"""

    def __init__(self, actions=(), discard=(0, 0), name="scripted"):
        super().__init__(name)
        self.actions = list(actions)
        self.discard = discard

    def choose_action(self, view, seat, legal_plays):
        return self.actions.pop(0) if self.actions else None

    def choose_discard(self, view, seat, hand):
        return self.discard


class TestSetup:
    """开局测试"""

    def test_deal(self):
        game = make_game([[4, 7], [2, 9]], [1, 2, 3, 4, 5])
        assert game.state.players[0].stock == [4, 7]
        assert game.state.players[0].stock_top == 7
        assert game.state.players[1].stock_top == 9
        assert game.state.players[0].hand == [1, 2, 3, 4, 5]
        assert game.state.players[1].hand == []
        assert game.current_player == 0
        assert game.phase == TurnPhase.ACT

    def test_shuffled_deck_is_reproducible(self):
        a = Game(GameConfig(num_players=3, seed=11))
        b = Game(GameConfig(num_players=3, seed=11))
        c = Game(GameConfig(num_players=3, seed=12))
        assert a.state.deck == b.state.deck
        assert a.state.players[2].stock == b.state.players[2].stock
        assert a.state.deck != c.state.deck

    def test_conservation_at_start(self):
        game = Game(GameConfig(num_players=4, seed=3))
        assert game.state.card_counts() == Counter(FULL_DECK)
        assert all(len(p.stock) == 30 for p in game.state.players)

    def test_injected_deck_too_small(self):
        with pytest.raises(MalformedConfiguration):
            Game(GameConfig(num_players=2, stock_size=3), deck=[1, 2, 3])


class TestStep:
    """单步接口测试"""

    def test_bonus_refill_and_stock_win(self):
        game = make_game([[7], [7]], [1, 2, 3, 4, 5, 6, 8, 9, 10, 11])
        for _ in range(5):
            game.step(Action.from_hand(0, 0))
        # 手牌打空立即补牌，回合不结束
        assert game.state.players[0].hand == [6, 8, 9, 10, 11]
        assert game.current_player == 0

        game.step(Action.from_hand(0, 0))
        game.step(Action.from_stock(0))
        assert game.status == GameStatus.WON
        assert game.winner == 0
        assert game.phase == TurnPhase.GAME_OVER
        assert game.winner_points() == 25 + 5 * 1

    def test_pile_completion_and_recycle_reshuffle(self):
        draws = list(range(1, 13)) + [1, 1, 1]
        game = make_game([[9], [9]], draws)
        before = game.state.card_counts()

        for _ in range(12):
            game.step(Action.from_hand(0, 0))
        assert game.state.build_piles[0].cards == []
        assert sorted(game.state.recycle) == list(range(1, 13))
        assert game.state.players[0].hand == [1, 1, 1]

        # 弃牌结束回合，下一位玩家补牌时洗回回收堆
        game.step(Action.discard(0, 2))
        assert game.current_player == 1
        assert game.state.recycle == []
        assert len(game.state.players[1].hand) == 5
        assert len(game.state.deck) == 12 - 5
        assert game.state.card_counts() == before

    def test_replenish_from_discard_piles(self):
        game = make_game([[9], [9]], [1, 2, 3, 4, 5])
        game.step(Action.discard(0, 0))
        # 抽牌堆和回收堆都为空: 收集弃牌堆
        assert game.state.players[1].hand == [1]
        assert all(not pile for pile in game.state.players[0].discard_piles)
        assert game.state.deck == []

    def test_end_turn_requires_empty_hand(self):
        game = make_game([[9], [9]], [1, 2, 3, 4, 5])
        with pytest.raises(InvalidMove):
            game.step(Action.end_turn())

    def test_step_after_game_over(self):
        game = make_game([[1], [9]], [5, 5, 5, 5, 5])
        game.step(Action.from_stock(0))
        with pytest.raises(InvalidMove):
            game.step(Action.from_hand(0, 0))


class TestPlayTurn:
    """策略驱动回合测试"""

    def test_must_discard(self):
        game = make_game([[9], [9]], [1, 2, 3, 4, 5, 6, 6, 6, 6, 6])
        policy = ScriptedPolicy([Action.from_hand(0, 0)], discard=(1, 3))
        game.play_turn(policy)
        player = game.state.players[0]
        assert game.state.build_piles[0].cards == [1]
        assert player.discard_piles[3] == [3]
        assert player.hand == [2, 4, 5]
        assert game.current_player == 1
        assert game.turns == 1
        # 两次出牌决策 + 一次弃牌决策
        assert game.decision_counts[0] == 3

    def test_empty_hand_ends_turn(self):
        game = make_game([[9], [9]], [1, 2, 3, 4, 5])
        policy = ScriptedPolicy([Action.from_hand(0, 0)] * 5)
        game.play_turn(policy)
        # 补牌失败，手牌为空，直接结束回合
        assert game.state.players[0].hand == []
        assert game.current_player == 1

    def test_illegal_choice_raises(self):
        game = make_game([[9], [9]], [1, 2, 3, 4, 5])
        policy = ScriptedPolicy([Action.from_hand(1, 0)], name="cheater")
        with pytest.raises(InvalidMove) as exc_info:
            game.play_turn(policy)
        assert exc_info.value.seat == 0
        assert exc_info.value.policy == "cheater"

    def test_illegal_discard_raises(self):
        game = make_game([[9], [9]], [1, 2, 3, 4, 5])
        policy = ScriptedPolicy(discard=(7, 0))
        with pytest.raises(InvalidMove):
            game.play_turn(policy)

    def test_malformed_discard_raises(self):
        game = make_game([[9], [9]], [1, 2, 3, 4, 5])
        policy = ScriptedPolicy(discard=None)
        with pytest.raises(InvalidMove):
            game.play_turn(policy)

    def test_recorder_sees_every_action(self):
        calls = []

        class Recorder:
            def on_action(self, view, seat, action):
                calls.append((seat, action, len(view.hand)))

        game = make_game([[9], [9]], [1, 2, 3, 4, 5, 6, 6, 6, 6, 6])
        game.play_turn(ScriptedPolicy([Action.from_hand(0, 0)], discard=(0, 0)), Recorder())
        assert calls == [
            (0, Action.from_hand(0, 0), 5),
            (0, Action.discard(0, 0), 4),
        ]


class TestRun:
    """整局运行测试"""

    def test_stalemate(self):
        game = make_game([[9], [9]], [])
        baseline = [create_policy("baseline", s) for s in range(2)]
        status = game.run(baseline)
        assert status == GameStatus.DRAW
        assert game.winner is None
        assert game.turns == 2

    def test_turn_cap(self):
        game = Game(GameConfig(num_players=2, seed=1))
        policies = [create_policy("baseline", s) for s in range(2)]
        status = game.run(policies, turn_cap=3)
        assert status == GameStatus.CAPPED
        assert game.turns == 3
        assert game.is_finished

    def test_policy_count_mismatch(self):
        game = Game(GameConfig(num_players=3, seed=1))
        with pytest.raises(MalformedConfiguration):
            game.run([create_policy("baseline")])

    def test_full_game_conservation_and_determinism(self):
        def play(seed):
            game = Game(GameConfig(num_players=3, seed=seed, stock_size=5))
            policies = [create_policy(spec, s) for s, spec in enumerate(["h1", "h5", "h13"])]
            game.run(policies, turn_cap=2000)
            return game

        a = play(42)
        b = play(42)
        assert a.status == b.status
        assert a.winner == b.winner
        assert a.turns == b.turns
        assert a.state.card_counts() == Counter(FULL_DECK)
        assert a.state.build_piles == b.state.build_piles
        assert sum(a.decision_counts) > 0

    def test_winner_points(self):
        game = make_game([[1], [9]], [5, 5, 5, 5, 5])
        game.state.players[1].stock.extend([9, 9])
        game.step(Action.from_stock(0))
        assert winner_points(game.state, 0) == 25 + 5 * 3
