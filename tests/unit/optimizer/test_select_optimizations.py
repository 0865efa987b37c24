import os
import sys

sys.path.insert(1, os.path.join(sys.path[0], "../../.."))

import pytest

from tributary.exceptions import InvalidArgumentError
from tributary.optimizer import ExperimentTable
from tributary.optimizer import OptimizationArguments
from tributary.optimizer import hash64
from tributary.optimizer import resolve_optimizations
from tributary.optimizer import select_optimizations


def bucket_by_length(value: str) -> int:
    # a predictable stand-in for the real hash, the bucket is the string length
    return len(value)


def test_worked_example():
    result = select_optimizations(
        job_name="job1",
        live_experiments={"E": 100},
        optimizations_enabled=["A"],
        optimizations_disabled=["B"],
        optimizations_default=["B", "C"],
    )
    assert result == ["A", "C", "E"], result


def test_disabled_beats_enabled_and_experiments():
    result = select_optimizations(
        job_name="job1",
        live_experiments={"E": 100, "F": 100},
        optimizations_enabled=["A", "E"],
        optimizations_disabled=["A", "E", "F"],
        optimizations_default=["A", "C"],
    )
    assert result == ["C"], result


def test_duplicates_removed_keeping_first_seen_order():
    result = select_optimizations(
        job_name="",
        live_experiments={},
        optimizations_enabled=["B"],
        optimizations_disabled=[],
        optimizations_default=["C", "A", "C", "B", "A"],
    )
    assert result == ["B", "C", "A"], result


def test_empty_job_name_switches_bucketing_off():
    result = select_optimizations(
        job_name="",
        live_experiments={"E": 100},
        optimizations_enabled=[],
        optimizations_disabled=[],
        optimizations_default=["C"],
    )
    assert result == ["C"], result


def test_empty_experiments_is_enabled_and_default_less_disabled():
    result = select_optimizations(
        job_name="job1",
        live_experiments={},
        optimizations_enabled=["A"],
        optimizations_disabled=["C"],
        optimizations_default=["C", "D"],
    )
    assert result == ["A", "D"], result


def test_zero_percent_rollout_never_selected():
    for job in ("a", "job1", "another-job", "x" * 50):
        result = select_optimizations(job, {"E": 0}, [], [], [])
        assert result == [], (job, result)


def test_bucket_is_compared_to_rollout():
    # "job" + "exp" is six characters, so bucket 6
    assert select_optimizations("job", {"exp": 7}, [], [], [], bucket_by_length) == ["exp"]
    assert select_optimizations("job", {"exp": 6}, [], [], [], bucket_by_length) == []


def test_bucket_is_reduced_modulo_100():
    # 103 characters lands in bucket 3
    job = "j" * 100
    assert select_optimizations(job, {"exp": 4}, [], [], [], bucket_by_length) == ["exp"]
    assert select_optimizations(job, {"exp": 3}, [], [], [], bucket_by_length) == []


def test_explicitly_enabled_experiment_is_not_bucketed():
    hashed = []

    def recording_hash(value):
        hashed.append(value)
        return 99

    result = select_optimizations("job", {"E": 1, "F": 1}, ["E"], ["F"], [], recording_hash)
    assert result == ["E"]
    assert hashed == [], hashed


def test_selection_is_deterministic():
    experiments = ExperimentTable({f"experiment_{i}": 50 for i in range(20)})
    first = select_optimizations("nightly-etl", experiments, ["A"], ["B"], ["C"])
    for _ in range(5):
        assert select_optimizations("nightly-etl", experiments, ["A"], ["B"], ["C"]) == first


def test_hash_is_stable():
    assert hash64("job1E") == hash64("job1E")
    assert hash64("job1E") != hash64("job2E")
    assert 0 <= hash64("job1E") < 2**64


def test_job_name_only_changes_experiments():
    experiments = {f"experiment_{i}": 50 for i in range(20)}
    non_experiments = {"A", "B", "C", "D"}
    seen = set()
    for job in ("job1", "job2", "job3", "job4", "job5"):
        result = select_optimizations(job, experiments, ["A"], ["B"], ["C", "D"])
        assert [name for name in result if name in non_experiments] == ["A", "C", "D"]
        seen.add(tuple(name for name in result if name not in non_experiments))
    # with 20 experiments at 50% these jobs don't all land in the same buckets
    assert len(seen) > 1


def test_resolve_version_one_returns_list_unchanged():
    arguments = OptimizationArguments(version=1, optimizations=["B", "A", "B"])
    recorded = []
    result = resolve_optimizations(arguments, "job1", {"A": 100}, recorder=recorded.append)
    assert result == ["B", "A", "B"]
    assert recorded == []


def test_resolve_version_two_records_applied_experiments():
    arguments = OptimizationArguments(
        version=2,
        optimizations_enabled=["X"],
        optimizations_disabled=["F"],
        optimizations_default=[],
    )
    recorded = []
    result = resolve_optimizations(
        arguments, "job1", {"E": 100, "F": 100, "G": 0, "X": 0}, recorder=recorded.append
    )
    assert result == ["X", "E"], result
    # X was enabled explicitly but is still an experiment being applied
    assert recorded == ["E", "X"], recorded


def test_resolve_without_job_name_records_nothing():
    arguments = OptimizationArguments(version=2, optimizations_enabled=["E"])
    recorded = []
    result = resolve_optimizations(arguments, "", {"E": 100}, recorder=recorded.append)
    assert result == ["E"]
    assert recorded == []


def test_resolve_unknown_version():
    with pytest.raises(InvalidArgumentError):
        resolve_optimizations(OptimizationArguments(version=3), "job1", {})


if __name__ == "__main__":  # pragma: no cover
    from tests.tools import run_tests

    run_tests()
