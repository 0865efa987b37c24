# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

from tributary.shared.metrics import ExperimentMetrics
from tributary.shared.metrics import experiment_counts
from tributary.shared.metrics import record_experiment

__all__ = ("ExperimentMetrics", "experiment_counts", "record_experiment")
