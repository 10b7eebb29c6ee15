from __future__ import annotations

import pytest

from dvsim.core.convergence import ConvergenceDetector, hash_tables, replay_convergence
from dvsim.core.errors import ConfigurationError
from dvsim.core.types import Route


def test_hash_stable_against_dict_and_route_order() -> None:
    a = {
        0: [Route(0, None, 5), Route(1, 1, 1), Route(2, 1, 2)],
        1: [Route(0, 0, 1), Route(1, None, 5), Route(2, 2, 1)],
    }
    b = {
        1: [Route(2, 2, 1), Route(0, 0, 1), Route(1, None, 5)],
        0: [Route(2, 1, 2), Route(0, None, 5), Route(1, 1, 1)],
    }
    assert hash_tables(a) == hash_tables(b)


def test_hash_sees_next_hop_change() -> None:
    a = {0: [Route(3, 1, 2)]}
    b = {0: [Route(3, 2, 2)]}
    assert hash_tables(a) != hash_tables(b)


def test_converges_after_threshold_quiet_steps() -> None:
    assert replay_convergence([3, 1, 0, 0, 0, 0, 0], threshold=5) == 6
    assert replay_convergence([3, 1, 0, 0, 0, 0], threshold=5) is None


def test_counters_start_at_step_zero() -> None:
    assert replay_convergence([0] * 5, threshold=5) is None
    assert replay_convergence([0] * 6, threshold=5) == 5
    assert replay_convergence([0, 0, 0], threshold=1) == 1


def test_change_restarts_the_quiet_window() -> None:
    deltas = [1, 0, 0, 0, 2, 0, 0, 0, 0, 0, 0]
    assert replay_convergence(deltas, threshold=5) == 9


def test_detector_latches_first_convergence() -> None:
    detector = ConvergenceDetector(threshold=2)

    assert detector.observe(0, 1) is False
    assert detector.observe(1, 0) is False
    assert detector.observe(2, 0) is True
    assert detector.observe(3, 4) is True
    assert detector.converged_step == 2
    assert detector.done


def test_threshold_must_be_positive() -> None:
    with pytest.raises(ConfigurationError):
        ConvergenceDetector(threshold=0)
