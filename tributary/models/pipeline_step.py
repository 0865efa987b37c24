# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
A single step of a dataset pipeline, e.g. a source, a map or a batch.

Steps hold their parameters in an internal dictionary so optimizations can
read and write them as attributes. Reading a parameter that isn't set returns
None, setting a parameter to None removes it.
"""

import copy
from typing import Any
from typing import Dict

import orjson


class PipelineStep:
    __slots__ = ("_parameters", "step_type")

    def __init__(self, step_type: str, **parameters: Any):
        if any(key.startswith("_") for key in parameters):
            raise AttributeError("Step parameters cannot start with an underscore.")
        object.__setattr__(self, "_parameters", parameters)
        object.__setattr__(self, "step_type", step_type)

    @property
    def parameters(self) -> Dict[str, Any]:
        return self._parameters

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self._parameters.get(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            raise AttributeError("Step parameters cannot start with an underscore.")
        if name == "step_type":
            object.__setattr__(self, name, value)
        elif value is None:
            self._parameters.pop(name, None)
        else:
            self._parameters[name] = value

    def __eq__(self, other) -> bool:
        if not isinstance(other, PipelineStep):
            return NotImplemented
        return self.step_type == other.step_type and self._parameters == other._parameters

    __hash__ = None  # type: ignore[assignment]

    def to_dict(self) -> Dict[str, Any]:
        return {"step_type": self.step_type, **self._parameters}

    def __str__(self) -> str:
        return orjson.dumps(self.to_dict(), default=str, option=orjson.OPT_SORT_KEYS).decode()

    def __repr__(self) -> str:
        return f"<PipelineStep type={self.step_type}>"

    def copy(self) -> "PipelineStep":
        """
        Create an independent copy of the step, parameters are deep copied so
        changes to the copy never reach the original.
        """
        return PipelineStep(self.step_type, **copy.deepcopy(self._parameters))
