"""评估层测试"""
import pytest

from core.state import GameStatus
from core.errors import MalformedConfiguration
from policies.base import Policy
from policies.registry import get_registry
from evaluation import (
    MatchConfig,
    BatchConfig,
    MatchResult,
    BatchTally,
    reduce_tallies,
    mix_seed,
    play_match,
    plan_game,
    run_games,
    Arena,
)
from evaluation.arena import chunk_bounds, DECK_STREAM


def result(winner, status=GameStatus.WON, labels=("a", "b"), turns=10, points=30):
    return MatchResult(
        winner=winner,
        status=status,
        turns=turns,
        points=points if winner is not None else 0,
        labels=labels,
        decision_counts=(5, 4),
        decision_time=(0.01, 0.02),
    )


def tally_of(*results, num_seats=2):
    tally = BatchTally(num_seats=num_seats)
    for r in results:
        tally.add_result(r)
    return tally


class CheatingPolicy(Policy):
    """每次都弃一张不存在的手牌"""

    def choose_action(self, view, seat, legal_plays):
        return None

    def choose_discard(self, view, seat, hand):
        return (len(hand) + 3, 0)


class TestMixSeed:
    """种子派生测试"""

    def test_deterministic_and_64_bit(self):
        assert mix_seed(123, 4, 5) == mix_seed(123, 4, 5)
        for a in range(20):
            assert 0 <= mix_seed(2**63 + 17, a, DECK_STREAM) < 2**64

    def test_components_matter(self):
        seeds = {mix_seed(1, game, seat) for game in range(10) for seat in range(6)}
        assert len(seeds) == 60
        assert mix_seed(1, 2, 3) != mix_seed(2, 2, 3)


class TestChunkBounds:
    """区间切分测试"""

    def test_even_split(self):
        assert chunk_bounds(10, 3) == [(0, 3), (3, 6), (6, 10)]

    def test_more_chunks_than_games(self):
        assert chunk_bounds(2, 5) == [(0, 1), (1, 2)]

    def test_no_games(self):
        assert chunk_bounds(0, 4) == [(0, 0)]


class TestPlanGame:
    """对局派生测试"""

    def test_fixed_seats(self):
        batch = BatchConfig(specs=("h1", "h2", "random"), seed=99, permute_seats=False)
        config, seeds = plan_game(batch, 4)
        assert config.specs == ("h1", "h2", "random")
        assert config.seed == mix_seed(99, 4, DECK_STREAM)
        assert seeds == [mix_seed(99, 4, seat) for seat in range(3)]

    def test_permutation_is_reproducible(self):
        batch = BatchConfig(specs=("h1", "h2", "h3", "h4"), seed=5)
        orders = [plan_game(batch, i)[0].specs for i in range(20)]
        assert orders == [plan_game(batch, i)[0].specs for i in range(20)]
        assert all(sorted(o) == ["h1", "h2", "h3", "h4"] for o in orders)
        assert len(set(orders)) > 1


class TestBatchTally:
    """批量统计测试"""

    def test_add_result(self):
        tally = tally_of(
            result(0),
            result(None, GameStatus.CAPPED),
            result(None, GameStatus.DRAW),
        )
        assert tally.games == 3
        assert tally.seat_wins == [1, 0]
        assert tally.capped == 1
        assert tally.draws == 1
        assert tally.label_wins == {"a": 1}
        assert tally.label_seats == {"a": 3, "b": 3}
        assert tally.label_points == {"a": 30}
        assert tally.label_decisions == {"a": 15, "b": 12}

    def test_rate_denominators(self):
        tally = tally_of(
            result(0),
            result(1),
            result(1),
            result(None, GameStatus.CAPPED),
        )
        tally.add_aborted(("a", "b"))
        # 座位胜率只算有赢家的局，无赢家比例算全部局
        assert tally.win_rate(1) == pytest.approx(2 / 3)
        assert tally.non_wins == 2
        assert tally.non_win_rate == pytest.approx(2 / 5)
        assert tally.label_win_rate("b") == pytest.approx(2 / 5)
        assert tally.avg_turns == pytest.approx(10.0)

    def test_empty_rates(self):
        tally = BatchTally(num_seats=3)
        assert tally.win_rate(0) == 0.0
        assert tally.non_win_rate == 0.0
        assert tally.avg_decision_time("a") == 0.0

    def test_merge_is_associative_and_commutative(self):
        x = tally_of(result(0), result(None, GameStatus.DRAW))
        y = tally_of(result(1, labels=("b", "c")))
        z = tally_of(result(None, GameStatus.CAPPED, labels=("c", "a")), result(0))
        left = x.merge(y).merge(z)
        right = x.merge(y.merge(z))
        assert left.outcome_counts() == right.outcome_counts()
        assert x.merge(y).outcome_counts() == y.merge(x).outcome_counts()
        assert left.games == 5
        assert left.seat_wins == [2, 1]

    def test_merge_does_not_mutate(self):
        x = tally_of(result(0))
        y = tally_of(result(1))
        x.merge(y)
        assert x.seat_wins == [1, 0]

    def test_reduce(self):
        parts = [tally_of(result(i % 2)) for i in range(6)]
        total = reduce_tallies(parts)
        assert total.games == 6
        assert total.seat_wins == [3, 3]
        assert reduce_tallies([]).games == 0

    def test_reports(self):
        tally = tally_of(result(0), result(None, GameStatus.CAPPED))
        d = tally.to_dict()
        assert d["games"] == 2
        assert d["seats"][0]["win_rate"] == 1.0
        assert d["labels"]["a"]["wins"] == 1
        text = tally.to_text()
        assert "Games: 2" in text
        assert "capped 1" in text


class TestConfigs:
    """配置校验测试"""

    @pytest.mark.parametrize("kwargs", [
        {"specs": ("baseline",)},
        {"specs": ("baseline",) * 7},
        {"specs": ("baseline", "")},
        {"turn_cap": 0},
        {"stock_size": 0},
        {"stock_size": 82},
    ])
    def test_match_config_rejects(self, kwargs):
        with pytest.raises(MalformedConfiguration):
            MatchConfig(**kwargs)

    def test_batch_config_rejects(self):
        with pytest.raises(MalformedConfiguration):
            BatchConfig(n_games=-1)
        with pytest.raises(MalformedConfiguration):
            BatchConfig(n_workers=0)

    def test_from_dict(self):
        batch = BatchConfig.from_dict({
            "specs": ["h1", "random"],
            "n_games": 12,
            "n_workers": 3,
            "chart_path": "out.png",
            "ignored": 1,
        })
        assert batch.specs == ("h1", "random")
        assert batch.n_games == 12
        assert batch.chart_path == "out.png"
        config = MatchConfig.from_dict({"specs": ["h2", "h3", "h4"], "turn_cap": None})
        assert config.num_players == 3
        assert config.turn_cap is None


class TestPlayMatch:
    """单局对局测试"""

    def test_result(self):
        config = MatchConfig(specs=("baseline", "h5", "random:3"), stock_size=5, seed=7)
        first = play_match(config)
        second = play_match(config)
        assert first.labels == ("baseline", "h5", "random")
        assert (first.winner, first.status, first.turns, first.points) == \
            (second.winner, second.status, second.turns, second.points)
        if first.is_win:
            assert first.points >= 25
        else:
            assert first.winner is None

    def test_policy_count(self):
        config = MatchConfig(specs=("baseline", "baseline"))
        with pytest.raises(MalformedConfiguration):
            play_match(config, policies=[CheatingPolicy("x")])


class TestAbortedGames:
    """非法动作只中止当前对局"""

    @pytest.fixture
    def cheat_prefix(self):
        registry = get_registry()
        registry.register("cheat", lambda argument, seat, seed: CheatingPolicy("cheat"))
        yield "cheat"
        registry.unregister("cheat")

    def test_batch_continues(self, cheat_prefix):
        batch = BatchConfig(specs=(cheat_prefix, "baseline"), n_games=3, seed=1)
        tally = run_games(batch, 0, batch.n_games)
        assert tally.games == 3
        assert tally.aborted == 3
        assert tally.decided == 0
        assert tally.label_seats == {"cheat": 3, "baseline": 3}

    def test_clean_batch_has_no_aborts(self):
        batch = BatchConfig(specs=("baseline", "baseline"), n_games=4, stock_size=5, seed=2)
        tally = Arena().run_batch(batch)
        assert tally.games == 4
        assert tally.aborted == 0
        assert tally.decided + tally.capped + tally.draws == 4
