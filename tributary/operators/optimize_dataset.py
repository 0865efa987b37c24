# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Optimize Dataset Operator

Applies optimizations to a pipeline before it is executed. There are two
versions of the operator:

    OptimizeDataset    - `optimizations` lists the optimizations to apply
    OptimizeDatasetV2  - `optimizations_enabled`, `optimizations_disabled` and
                         `optimizations_default`, plus live experiments

Arguments are checked before anything is selected or rewritten.
"""

from typing import Any
from typing import List
from typing import Mapping
from typing import Optional
from typing import Union
from uuid import uuid4

from tributary import config
from tributary.exceptions import InvalidArgumentError
from tributary.models import Pipeline
from tributary.models import PipelineStatistics
from tributary.optimizer import LIVE_EXPERIMENTS
from tributary.optimizer import OptimizationArguments
from tributary.optimizer import RewriteEngine
from tributary.optimizer import create_config
from tributary.optimizer import hash64
from tributary.optimizer import resolve_optimizations
from tributary.optimizer import rewrite_dataset
from tributary.optimizer.selection import HashFunction

OPTIMIZE_DATASET_V1 = "OptimizeDataset"
OPTIMIZE_DATASET_V2 = "OptimizeDatasetV2"

OPTIMIZATIONS = "optimizations"
OPTIMIZATIONS_ENABLED = "optimizations_enabled"
OPTIMIZATIONS_DISABLED = "optimizations_disabled"
OPTIMIZATIONS_DEFAULT = "optimizations_default"
OPTIMIZATION_CONFIGS = "optimization_configs"

_VERSIONS = {OPTIMIZE_DATASET_V1: 1, OPTIMIZE_DATASET_V2: 2, 1: 1, 2: 2}


def parse_vector_argument(arguments: Mapping[str, Any], name: str) -> List[str]:
    """Read a list of strings argument, raising InvalidArgumentError if it's malformed"""
    if name not in arguments or arguments[name] is None:
        raise InvalidArgumentError(argument=name, message=f"Argument '{name}' was not provided.")
    value = arguments[name]
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
        raise InvalidArgumentError(
            argument=name,
            message=f"Argument '{name}' must be a list of strings, not {type(value).__name__}.",
        )
    for item in value:
        if not isinstance(item, str):
            raise InvalidArgumentError(
                argument=name,
                message=f"Argument '{name}' must only contain strings, found {item!r}.",
            )
    return list(value)


class OptimizeDataset:
    def __init__(
        self,
        version: Union[str, int] = OPTIMIZE_DATASET_V2,
        optimization_configs: Optional[List[str]] = None,
        *,
        run_id: str = "",
        live_experiments: Optional[Mapping[str, int]] = None,
        engine: Optional[RewriteEngine] = None,
        hash_func: HashFunction = hash64,
    ):
        if version not in _VERSIONS:
            raise InvalidArgumentError(
                argument="version",
                message=f"Unknown operator '{version}', expected '{OPTIMIZE_DATASET_V1}' or '{OPTIMIZE_DATASET_V2}'.",
            )
        self.version = _VERSIONS[version]
        self.optimization_configs = parse_vector_argument(
            {OPTIMIZATION_CONFIGS: optimization_configs or []}, OPTIMIZATION_CONFIGS
        )
        self.live_experiments = LIVE_EXPERIMENTS if live_experiments is None else live_experiments
        self.engine = engine
        self.hash_func = hash_func
        self.run_id = run_id or str(uuid4())
        self.statistics = PipelineStatistics(self.run_id)

    @property
    def name(self):  # pragma: no cover
        return OPTIMIZE_DATASET_V1 if self.version == 1 else OPTIMIZE_DATASET_V2

    def parse_arguments(self, arguments: Mapping[str, Any]) -> OptimizationArguments:
        if self.version == 1:
            return OptimizationArguments(
                version=1, optimizations=parse_vector_argument(arguments, OPTIMIZATIONS)
            )
        return OptimizationArguments(
            version=2,
            optimizations_enabled=parse_vector_argument(arguments, OPTIMIZATIONS_ENABLED),
            optimizations_disabled=parse_vector_argument(arguments, OPTIMIZATIONS_DISABLED),
            optimizations_default=parse_vector_argument(arguments, OPTIMIZATIONS_DEFAULT),
        )

    def make_dataset(self, pipeline: Pipeline, arguments: Mapping[str, Any]) -> Pipeline:
        """
        Select the optimizations for `pipeline` and rewrite it.

        Returns the rewritten pipeline, or `pipeline` itself if the rewrite ran
        out of time.
        """
        optimization_arguments = self.parse_arguments(arguments)
        optimizations = resolve_optimizations(
            optimization_arguments,
            job_name=config.job_name() if self.version == 2 else "",
            live_experiments=self.live_experiments,
            hash_func=self.hash_func,
        )
        self.statistics.optimizations_selected = len(optimizations)

        def config_factory():
            return create_config(optimizations, self.optimization_configs)

        return rewrite_dataset(
            pipeline,
            config_factory,
            record_fingerprint=True,
            engine=self.engine,
            statistics=self.statistics,
        )


def optimize_dataset(
    pipeline: Pipeline,
    optimizations: Optional[List[str]] = None,
    *,
    optimizations_enabled: Optional[List[str]] = None,
    optimizations_disabled: Optional[List[str]] = None,
    optimizations_default: Optional[List[str]] = None,
    optimization_configs: Optional[List[str]] = None,
    **kwargs,
) -> Pipeline:
    """
    Optimize a pipeline in one call.

    Passing `optimizations` uses the version 1 operator, otherwise the version
    2 operator is used with any lists not provided treated as empty.
    """
    if optimizations is not None:
        operator = OptimizeDataset(OPTIMIZE_DATASET_V1, optimization_configs, **kwargs)
        return operator.make_dataset(pipeline, {OPTIMIZATIONS: optimizations})

    operator = OptimizeDataset(OPTIMIZE_DATASET_V2, optimization_configs, **kwargs)
    arguments = {
        OPTIMIZATIONS_ENABLED: optimizations_enabled or [],
        OPTIMIZATIONS_DISABLED: optimizations_disabled or [],
        OPTIMIZATIONS_DEFAULT: optimizations_default or [],
    }
    return operator.make_dataset(pipeline, arguments)
