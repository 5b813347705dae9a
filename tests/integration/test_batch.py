"""批量模拟集成测试"""
import pytest

from evaluation import BatchConfig, Arena, ParallelArena, run_batch


class TestBaselineBatch:
    """基线策略大批量对局"""

    def test_every_game_has_a_winner(self):
        batch = BatchConfig(
            specs=("baseline",) * 4,
            n_games=1000,
            stock_size=5,
            turn_cap=10000,
            seed=2024,
        )
        tally = Arena().run_batch(batch)
        assert tally.games == 1000
        assert tally.capped == 0
        assert tally.draws == 0
        assert tally.aborted == 0
        assert sum(tally.seat_wins) == 1000
        assert tally.label_wins == {"baseline": 1000}


class TestParallelDeterminism:
    """统计结果与工作者数无关"""

    @pytest.fixture
    def batch(self):
        return BatchConfig(
            specs=("baseline", "h5", "h13", "random"),
            n_games=60,
            stock_size=5,
            turn_cap=2000,
            seed=77,
        )

    def test_threads_match_sequential(self, batch):
        sequential = Arena().run_batch(batch)
        parallel = ParallelArena(n_workers=4, use_processes=False).run_batch(batch)
        assert parallel.outcome_counts() == sequential.outcome_counts()

    def test_worker_count_does_not_matter(self, batch):
        two = ParallelArena(n_workers=2).run_batch(batch)
        seven = ParallelArena(n_workers=7).run_batch(batch)
        assert two.outcome_counts() == seven.outcome_counts()

    def test_processes_match_threads(self, batch):
        threads = ParallelArena(n_workers=3, use_processes=False).run_batch(batch)
        processes = ParallelArena(n_workers=3, use_processes=True).run_batch(batch)
        assert processes.outcome_counts() == threads.outcome_counts()

    def test_run_batch_dispatch(self, batch):
        batch.n_workers = 3
        assert run_batch(batch).outcome_counts() == Arena().run_batch(batch).outcome_counts()
