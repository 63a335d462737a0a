import threading

import pytest

from tracker import ScoreTracker


def test_first_score_is_scaled_fraction():
    t = ScoreTracker()
    assert t.score('memory', 0.37) == pytest.approx(37.0)
    assert t.observations('memory') == 1


def test_score_is_cumulative_mean():
    t = ScoreTracker()
    assert t.score('cpu', 0.5) == pytest.approx(50.0)
    assert t.score('cpu', 0.9) == pytest.approx(70.0)
    assert t.observations('cpu') == 2


def test_resources_are_tracked_independently():
    t = ScoreTracker()
    t.score('cpu', 1.0)
    assert t.score('memory', 0.2) == pytest.approx(20.0)
    assert t.snapshot() == {'cpu': pytest.approx(100.0), 'memory': pytest.approx(20.0)}


def test_unknown_resource_has_no_observations():
    assert ScoreTracker().observations('cpu') == 0


def test_concurrent_updates_are_not_lost():
    t = ScoreTracker()
    per_thread = 500

    def worker():
        for _ in range(per_thread):
            t.score('cpu', 0.5)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for th in threads:
        th.start()
    for th in threads:
        th.join()

    assert t.observations('cpu') == 8 * per_thread
    assert t.snapshot()['cpu'] == pytest.approx(50.0)
