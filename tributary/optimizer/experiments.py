# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Live experiments and the percentage of jobs each experiment is rolled out to.

The table is read-only once built. The process-wide table is loaded from the
LIVE_EXPERIMENTS setting, which is empty unless an experiment is running.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any
from typing import Iterator
from typing import Optional

from tributary import config
from tributary.exceptions import InvalidConfigurationError


def _rollout_percent(experiment: str, value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidConfigurationError(
            config_item="LIVE_EXPERIMENTS",
            provided_value=f"{experiment}:{value}",
            valid_value_description="Rollout must be a whole number between 0 and 100.",
        )
    # "050", 50 and 50.0 are all fifty percent
    try:
        percent = float(str(value).strip())
    except ValueError:
        percent = -1.0
    if not percent.is_integer() or not 0 <= percent <= 100:
        raise InvalidConfigurationError(
            config_item="LIVE_EXPERIMENTS",
            provided_value=f"{experiment}:{value}",
            valid_value_description="Rollout must be a whole number between 0 and 100.",
        )
    return int(percent)


class ExperimentTable(Mapping):
    """
    Mapping of experiment name to rollout percentage.

    Parameters:
        experiments: Mapping[str, int] (optional)
            Experiment names and the percentage of jobs (0 to 100) they apply to
    """

    __slots__ = ("_experiments",)

    def __init__(self, experiments: Optional[Mapping[str, Any]] = None):
        table = {}
        for experiment, percent in (experiments or {}).items():
            if not isinstance(experiment, str) or not experiment.strip():
                raise InvalidConfigurationError(
                    config_item="LIVE_EXPERIMENTS",
                    provided_value=repr(experiment),
                    valid_value_description="Experiment names must be non-empty strings.",
                )
            table[experiment.strip()] = _rollout_percent(experiment, percent)
        self._experiments = MappingProxyType(table)

    @classmethod
    def from_config(cls, value: Any) -> "ExperimentTable":
        """
        Build a table from a setting value, which can be a mapping, a list of
        "name:percent" entries or a comma separated string of them.
        """
        if value is None or value == "" or value == []:
            return cls()
        if isinstance(value, Mapping):
            return cls(value)
        if isinstance(value, str):
            value = value.split(",")
        if not isinstance(value, (list, tuple)):
            raise InvalidConfigurationError(
                config_item="LIVE_EXPERIMENTS",
                provided_value=repr(value),
                valid_value_description="Expected 'name:percent' entries.",
            )
        experiments = {}
        for entry in value:
            entry = str(entry).strip()
            if not entry:
                continue
            experiment, separator, percent = entry.rpartition(":")
            if not separator:
                raise InvalidConfigurationError(
                    config_item="LIVE_EXPERIMENTS",
                    provided_value=entry,
                    valid_value_description="Expected 'name:percent' entries.",
                )
            experiments[experiment.strip()] = percent.strip()
        return cls(experiments)

    def __getitem__(self, experiment: str) -> int:
        return self._experiments[experiment]

    def __iter__(self) -> Iterator[str]:
        return iter(self._experiments)

    def __len__(self) -> int:
        return len(self._experiments)

    def __repr__(self) -> str:
        return f"<ExperimentTable {dict(self._experiments)}>"


LIVE_EXPERIMENTS = ExperimentTable.from_config(config.LIVE_EXPERIMENTS)
