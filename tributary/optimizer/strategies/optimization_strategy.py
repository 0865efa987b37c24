# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

from typing import Dict
from typing import List
from typing import Tuple

from tributary.models import Pipeline


def get_steps_of_type_from_pipeline(pipeline: Pipeline, types: Tuple[str, ...]) -> List[Tuple]:
    matches = []
    for sid, step in pipeline.steps(True):
        if step.step_type in types:
            matches.append((sid, step))
    return matches


class OptimizationStrategy:
    """
    A single optimization the meta optimizer can apply to a pipeline.

    Strategies are given their own copy of the pipeline to work on, they
    return the pipeline they produce. `parameters` holds the key=value
    settings addressed to this strategy in the optimizer configs.
    """

    name: str = None

    def __init__(self, statistics, parameters: Dict[str, str] = None):
        self.statistics = statistics
        self.parameters = parameters or {}

    def optimize(self, pipeline: Pipeline) -> Pipeline:
        raise NotImplementedError(
            "Optimize method must be implemented in OptimizationStrategy classes."
        )

    def should_i_run(self, pipeline: Pipeline) -> bool:
        return True
