# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.


from collections import defaultdict


class _PipelineStatistics:
    def __init__(self):
        # predefine "messages" and "pipeline_fingerprint" so all other statistics default to 0
        self._stats: dict = defaultdict(int)
        self._stats["messages"] = []
        self._stats["pipeline_fingerprint"] = None

    def _ns_to_s(self, nano_seconds: int) -> float:
        """convert elapsed ns to s"""
        if nano_seconds == 0:
            return 0
        return nano_seconds / 1e9

    def __getattr__(self, attr):
        """allow access using stats.statistic_name"""
        if attr.startswith("__"):
            raise AttributeError(attr)
        return self._stats[attr]

    def __setattr__(self, attr, value):
        """allow access using stats.statistic_name"""
        if attr == "_stats":
            super().__setattr__(attr, value)
        else:
            self._stats[attr] = value

    def increase(self, attr: str, amount: float = 1):
        self._stats[attr] += amount

    def add_message(self, message: str):
        """collect warnings"""
        self._stats["messages"].append(message)

    def merge(self, other: "_PipelineStatistics"):
        """add the counters and messages from `other`, the fingerprint is kept"""
        for key, value in other._stats.items():
            if key == "messages":
                self._stats["messages"].extend(value)
            elif key == "pipeline_fingerprint":
                continue
            elif isinstance(value, (int, float)) and isinstance(self._stats[key], (int, float)):
                self._stats[key] += value
            else:
                self._stats[key] = value

    def as_dict(self):
        """
        Return statistics as a dictionary, times are recorded in ns but
        reported in seconds
        """
        stats_dict = dict(self._stats)
        for key, value in stats_dict.items():
            if key.startswith("time_"):
                stats_dict[key] = self._ns_to_s(value)
        stats_dict = {key: stats_dict[key] for key in sorted(stats_dict)}
        # put messages and the fingerprint at the end
        stats_dict["messages"] = stats_dict.pop("messages", [])
        stats_dict["pipeline_fingerprint"] = stats_dict.pop("pipeline_fingerprint", None)
        return stats_dict


class PipelineStatistics(_PipelineStatistics):
    """
    Statistics for a pipeline run, one instance per run id so the statistics
    don't need to be passed through every call.
    """

    slots = "_instances"

    _instances: dict[str, _PipelineStatistics] = {}

    def __new__(cls, run_id=""):
        if cls._instances.get(run_id) is None:
            cls._instances[run_id] = _PipelineStatistics()
            if len(cls._instances.keys()) > 16:
                # forget the oldest run
                cls._instances.pop(next(iter(cls._instances)))
        return cls._instances[run_id]

    @classmethod
    def forget(cls, run_id: str = ""):
        cls._instances.pop(run_id, None)
