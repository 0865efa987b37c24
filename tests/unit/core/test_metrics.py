import os
import sys

sys.path.insert(1, os.path.join(sys.path[0], "../../.."))

import threading

from tributary.shared import ExperimentMetrics
from tributary.shared import experiment_counts
from tributary.shared import record_experiment


def test_metrics_is_process_wide():
    assert ExperimentMetrics() is ExperimentMetrics()


def test_record_experiment():
    ExperimentMetrics().reset()
    record_experiment("map_fusion")
    record_experiment("map_fusion")
    record_experiment("filter_fusion")
    assert experiment_counts() == {"map_fusion": 2, "filter_fusion": 1}
    ExperimentMetrics().reset()
    assert experiment_counts() == {}


def test_record_experiment_from_threads():
    ExperimentMetrics().reset()

    def worker():
        for _ in range(1000):
            record_experiment("map_fusion")

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert experiment_counts() == {"map_fusion": 8000}
    ExperimentMetrics().reset()


if __name__ == "__main__":  # pragma: no cover
    from tests.tools import run_tests

    run_tests()
