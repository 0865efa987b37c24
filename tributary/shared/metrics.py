# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Process-wide counters for experiments applied to pipelines.

Each time a pipeline is optimized with an experiment switched on, the
experiment is recorded once. Collectors read the counts with
`experiment_counts`, shipping them anywhere is left to the caller.
"""

import threading
from collections import Counter
from typing import Dict


class ExperimentMetrics:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._lock = threading.Lock()
            cls._instance._counts = Counter()
        return cls._instance

    def record(self, experiment: str):
        with self._lock:
            self._counts[experiment] += 1

    def counts(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._counts)

    def reset(self):
        with self._lock:
            self._counts.clear()


def record_experiment(experiment: str):
    ExperimentMetrics().record(experiment)


def experiment_counts() -> Dict[str, int]:
    return ExperimentMetrics().counts()
