import os
import sys

sys.path.insert(1, os.path.join(sys.path[0], "../../.."))

import pytest

from tributary import config
from tributary.exceptions import DeadlineExceededError
from tributary.exceptions import InvalidArgumentError
from tributary.exceptions import OptimizationNotFoundError
from tributary.models import Pipeline
from tributary.models import PipelineStatistics
from tributary.models import PipelineStep
from tributary.operators import OPTIMIZE_DATASET_V1
from tributary.operators import OPTIMIZE_DATASET_V2
from tributary.operators import OptimizeDataset
from tributary.operators import optimize_dataset
from tributary.operators import parse_vector_argument
from tributary.optimizer import ExperimentTable
from tributary.shared import ExperimentMetrics
from tributary.shared import experiment_counts

RUN_ID = "optimize_dataset_tests"


class RecordingEngine:
    def __init__(self):
        self.optimizations = []
        self.configs = []

    def rewrite(self, pipeline, rewriter_config):
        custom_optimizer = rewriter_config.custom_optimizers[0]
        self.optimizations = custom_optimizer.parameter_map["optimizers"]
        self.configs = custom_optimizer.parameter_map["optimizer_configs"]
        return pipeline.copy()


class DeadlineEngine:
    def rewrite(self, pipeline, rewriter_config):
        raise DeadlineExceededError(rewriter_config.meta_optimizer_timeout_ms)


@pytest.fixture(autouse=True)
def clean_state(monkeypatch):
    monkeypatch.setenv(config.JOB_NAME_VARIABLE, "job1")
    ExperimentMetrics().reset()
    yield
    ExperimentMetrics().reset()
    PipelineStatistics.forget(RUN_ID)


def make_pipeline():
    return Pipeline.sequential([PipelineStep("source"), PipelineStep("map"), PipelineStep("batch")])


def test_version_one_applies_list_verbatim():
    engine = RecordingEngine()
    operator = OptimizeDataset(
        OPTIMIZE_DATASET_V1,
        ["b:x=1"],
        run_id=RUN_ID,
        live_experiments={"E": 100},
        engine=engine,
    )
    operator.make_dataset(make_pipeline(), {"optimizations": ["B", "A", "B"]})
    assert engine.optimizations == ["B", "A", "B"]
    assert engine.configs == ["b:x=1"]
    assert experiment_counts() == {}


def test_version_two_selects_and_records_experiments():
    engine = RecordingEngine()
    operator = OptimizeDataset(
        OPTIMIZE_DATASET_V2,
        run_id=RUN_ID,
        live_experiments=ExperimentTable({"E": 100, "F": 0}),
        engine=engine,
    )
    arguments = {
        "optimizations_enabled": ["A"],
        "optimizations_disabled": ["B"],
        "optimizations_default": ["B", "C"],
    }
    operator.make_dataset(make_pipeline(), arguments)
    assert engine.optimizations == ["A", "C", "E"]
    assert experiment_counts() == {"E": 1}
    assert PipelineStatistics(RUN_ID).optimizations_selected == 3


def test_version_two_without_job_name(monkeypatch):
    monkeypatch.delenv(config.JOB_NAME_VARIABLE)
    engine = RecordingEngine()
    operator = OptimizeDataset(
        OPTIMIZE_DATASET_V2, run_id=RUN_ID, live_experiments={"E": 100}, engine=engine
    )
    arguments = {
        "optimizations_enabled": [],
        "optimizations_disabled": [],
        "optimizations_default": ["C"],
    }
    operator.make_dataset(make_pipeline(), arguments)
    assert engine.optimizations == ["C"]
    assert experiment_counts() == {}


def test_version_accepted_as_number():
    assert OptimizeDataset(1).version == 1
    assert OptimizeDataset(2).version == 2


def test_operators_without_run_id_keep_separate_statistics():
    first = OptimizeDataset(OPTIMIZE_DATASET_V1, engine=DeadlineEngine())
    second = OptimizeDataset(OPTIMIZE_DATASET_V1, engine=DeadlineEngine())
    assert first.run_id and second.run_id
    assert first.run_id != second.run_id
    assert first.statistics is not second.statistics

    first.make_dataset(make_pipeline(), {"optimizations": ["A"]})
    assert first.statistics.rewrite_deadline_exceeded == 1
    assert second.statistics.rewrite_deadline_exceeded == 0
    PipelineStatistics.forget(first.run_id)
    PipelineStatistics.forget(second.run_id)


def test_unknown_version():
    with pytest.raises(InvalidArgumentError):
        OptimizeDataset("OptimizeDatasetV3")


@pytest.mark.parametrize(
    "arguments",
    [
        {},
        {"optimizations_enabled": [], "optimizations_disabled": []},
        {"optimizations_enabled": "A", "optimizations_disabled": [], "optimizations_default": []},
        {"optimizations_enabled": [1], "optimizations_disabled": [], "optimizations_default": []},
        {"optimizations_enabled": None, "optimizations_disabled": [], "optimizations_default": []},
    ],
)
def test_malformed_arguments_fail_before_rewrite(arguments):
    engine = RecordingEngine()
    operator = OptimizeDataset(OPTIMIZE_DATASET_V2, run_id=RUN_ID, engine=engine)
    with pytest.raises(InvalidArgumentError):
        operator.make_dataset(make_pipeline(), arguments)
    assert engine.optimizations == []


def test_malformed_optimization_configs():
    with pytest.raises(InvalidArgumentError):
        OptimizeDataset(OPTIMIZE_DATASET_V2, "a:x=1")  # type: ignore[arg-type]


def test_parse_vector_argument():
    assert parse_vector_argument({"x": ("a", "b")}, "x") == ["a", "b"]
    with pytest.raises(InvalidArgumentError) as err:
        parse_vector_argument({}, "x")
    assert err.value.argument == "x"


def test_deadline_passes_pipeline_through():
    pipeline = make_pipeline()
    operator = OptimizeDataset(OPTIMIZE_DATASET_V1, run_id=RUN_ID, engine=DeadlineEngine())
    assert operator.make_dataset(pipeline, {"optimizations": ["A"]}) is pipeline


def test_optimize_dataset_helper():
    engine = RecordingEngine()
    optimize_dataset(make_pipeline(), ["A"], run_id=RUN_ID, engine=engine)
    assert engine.optimizations == ["A"]

    optimize_dataset(
        make_pipeline(),
        optimizations_enabled=["A"],
        optimizations_default=["C"],
        run_id=RUN_ID,
        live_experiments={},
        engine=engine,
    )
    assert engine.optimizations == ["A", "C"]


def test_unregistered_optimization_is_fatal_with_default_engine():
    with pytest.raises(OptimizationNotFoundError):
        optimize_dataset(make_pipeline(), ["not_a_registered_optimization"], run_id=RUN_ID)


if __name__ == "__main__":  # pragma: no cover
    from tests.tools import run_tests

    run_tests()
