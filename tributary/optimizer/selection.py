# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Choosing which optimizations to apply to a pipeline.

Version 1 operators name the optimizations to apply directly. Version 2
operators provide three lists - explicitly enabled, explicitly disabled and
the defaults - and live experiments are mixed in for a stable share of jobs.

An experiment is switched on for a job when

    hash(job_name + experiment) % 100 < rollout_percent

The hash is CityHash64, which gives the same bucket for the same job in every
process and every run, so rerunning a job applies the same experiments.
Disabled optimizations are always removed, whatever enabled them.
"""

import logging
from dataclasses import dataclass
from dataclasses import field
from typing import Callable
from typing import Iterable
from typing import List
from typing import Mapping

from cityhash import CityHash64

from tributary.exceptions import InvalidArgumentError
from tributary.shared.metrics import record_experiment

logger = logging.getLogger(__name__)

HashFunction = Callable[[str], int]


def hash64(value: str) -> int:
    return CityHash64(value.encode())


def _unique(items: Iterable[str]) -> List[str]:
    seen: set = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def select_optimizations(
    job_name: str,
    live_experiments: Mapping[str, int],
    optimizations_enabled: List[str],
    optimizations_disabled: List[str],
    optimizations_default: List[str],
    hash_func: HashFunction = hash64,
) -> List[str]:
    """
    Resolve the optimizations for a version 2 operator.

    Parameters:
        job_name: str
            Identifies the job for bucketing, an empty name switches bucketing off
        live_experiments: Mapping[str, int]
            Experiment names and their rollout percentage
        optimizations_enabled: List[str]
            Optimizations the user switched on
        optimizations_disabled: List[str]
            Optimizations the user switched off, these are never returned
        optimizations_default: List[str]
            Optimizations applied unless disabled
        hash_func: Callable[[str], int]
            Stable hash used to bucket jobs into experiments

    Returns:
        List[str]: enabled, then defaults, then bucketed experiments; each
        optimization appears once
    """
    enabled = set(optimizations_enabled)
    disabled = set(optimizations_disabled)

    bucketed = []
    if job_name:
        for experiment, rollout_percent in live_experiments.items():
            if experiment in enabled or experiment in disabled:
                continue
            if hash_func(job_name + experiment) % 100 < rollout_percent:
                bucketed.append(experiment)

    candidates = list(optimizations_enabled) + list(optimizations_default) + bucketed
    return _unique(name for name in candidates if name not in disabled)


@dataclass
class OptimizationArguments:
    """
    The optimization lists supplied to an operator.

    Version 1 reads `optimizations`, version 2 reads the enabled, disabled
    and default lists.
    """

    version: int
    optimizations: List[str] = field(default_factory=list)
    optimizations_enabled: List[str] = field(default_factory=list)
    optimizations_disabled: List[str] = field(default_factory=list)
    optimizations_default: List[str] = field(default_factory=list)


def resolve_optimizations(
    arguments: OptimizationArguments,
    job_name: str,
    live_experiments: Mapping[str, int],
    hash_func: HashFunction = hash64,
    recorder: Callable[[str], None] = record_experiment,
) -> List[str]:
    """
    Resolve the optimizations for an operator of either version, recording
    each live experiment which ends up applied.
    """
    if arguments.version == 1:
        return list(arguments.optimizations)
    if arguments.version != 2:
        raise InvalidArgumentError(
            argument="version",
            message=f"Operator version must be 1 or 2, not '{arguments.version}'.",
        )

    optimizations = select_optimizations(
        job_name,
        live_experiments,
        arguments.optimizations_enabled,
        arguments.optimizations_disabled,
        arguments.optimizations_default,
        hash_func,
    )

    if job_name and live_experiments:
        logger.debug("The input pipeline is subject to live experiments.")
        for experiment in live_experiments:
            if experiment in optimizations:
                logger.debug('The experiment "%s" is applied.', experiment)
                recorder(experiment)

    return optimizations
