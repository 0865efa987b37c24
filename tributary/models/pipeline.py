# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Pipeline Module

A pipeline is a directed graph of PipelineSteps, edges run in the direction
data flows - from the sources to the step which produces the pipeline's
output.

Edges are stored in a dictionary keyed by the upstream step, so finding the
steps fed by a step is a lookup. Each edge carries three pieces of data:
    - the source step (the key)
    - the target step
    - the relationship
"""

from typing import Dict
from typing import Iterable
from typing import List
from typing import Optional
from typing import Tuple

import orjson
from cityhash import CityHash64

from tributary.exceptions import InvalidInternalStateError
from tributary.models.pipeline_step import PipelineStep


class Pipeline:
    __slots__ = ("_steps", "_edges")

    def __init__(self):
        self._steps: Dict[str, PipelineStep] = {}
        self._edges: Dict[str, Tuple[Tuple[str, Optional[str]], ...]] = {}

    @classmethod
    def sequential(cls, steps: Iterable[PipelineStep]) -> "Pipeline":
        """
        Build a linear pipeline, each step feeds the next. Steps are named by
        their position, e.g. "0-source", "1-map".
        """
        pipeline = cls()
        previous = None
        for index, step in enumerate(steps):
            sid = f"{index}-{step.step_type}"
            pipeline.add_step(sid, step)
            if previous is not None:
                pipeline.add_edge(previous, sid)
            previous = sid
        return pipeline

    def __bool__(self) -> bool:
        return len(self._steps) != 0

    def __len__(self) -> int:
        return len(self._steps)

    def __getitem__(self, sid: str) -> PipelineStep:
        return self._steps[sid]

    def __contains__(self, sid: str) -> bool:
        return sid in self._steps

    def add_step(self, sid: str, step: PipelineStep):
        self._steps[sid] = step

    def add_edge(self, source: str, target: str, relationship: Optional[str] = None):
        """
        Connect two existing steps, data flows from source to target.

        Parameters:
            source: string
                The upstream step
            target: string
                The downstream step
            relationship: string (optional)
                A label for the edge, e.g. which input of the target this is
        """
        if source not in self._steps or target not in self._steps:
            raise InvalidInternalStateError(
                f"Cannot connect '{source}' to '{target}', both steps must be in the pipeline."
            )
        existing_edges = self._edges.get(source, ())
        edge_to_add = (target, relationship)
        if edge_to_add not in existing_edges:
            self._edges[source] = existing_edges + (edge_to_add,)

    def steps(self, data: bool = False):
        """
        The steps which comprise the pipeline

        Parameters:
            data: boolean (optional)
                if True return (id, step) pairs, if False just the step ids
        """
        if data:
            return self._steps.items()
        return list(self._steps.keys())

    def edges(self):
        """
        Generator of (source, target, relationship) tuples
        """
        for source, records in self._edges.items():
            yield from ((source, target, relationship) for target, relationship in records)

    def outgoing_edges(self, source: str) -> List[Tuple]:
        return [(source, t, r) for t, r in self._edges.get(source, ())]

    def ingoing_edges(self, target: str) -> List[Tuple]:
        return [(s, t, r) for s, t, r in self.edges() if t == target]

    def get_entry_points(self) -> List[str]:
        """
        Steps with nothing upstream of them, usually the sources.
        """
        targets = {target for _, target, _ in self.edges()}
        return sorted(sid for sid in self._steps if sid not in targets)

    def get_exit_points(self) -> List[str]:
        """
        Steps with nothing downstream of them, usually the pipeline output.
        """
        return sorted(sid for sid in self._steps if sid not in self._edges)

    def remove_step(self, sid: str, heal: bool = False):
        """
        Remove a step and the edges which touch it.

        Parameters:
            heal: boolean
                Connect the steps either side of the removed step to each other
                to keep the pipeline intact
        """
        in_coming = self.ingoing_edges(sid)
        out_going = self.outgoing_edges(sid)

        self._steps.pop(sid, None)
        self._edges.pop(sid, None)
        for source, records in list(self._edges.items()):
            remaining = tuple(record for record in records if record[0] != sid)
            if remaining:
                self._edges[source] = remaining
            else:
                del self._edges[source]

        if heal:
            for upstream, _, relationship in in_coming:
                for _, downstream, _ in out_going:
                    self.add_edge(upstream, downstream, relationship)

    def copy(self) -> "Pipeline":
        """
        An independent copy of the pipeline, steps are copied so the copy can
        be rewritten without changing this pipeline.
        """
        pipeline = Pipeline()
        for sid, step in self._steps.items():
            pipeline.add_step(sid, step.copy())
        pipeline._edges = dict(self._edges)
        return pipeline

    def to_dict(self) -> dict:
        return {
            "steps": {sid: step.to_dict() for sid, step in sorted(self._steps.items())},
            "edges": sorted(
                ([source, target, relationship] for source, target, relationship in self.edges()),
                key=lambda edge: (edge[0], edge[1], edge[2] or ""),
            ),
        }

    def fingerprint(self) -> int:
        """
        A 64-bit fingerprint of the pipeline's structure and parameters.

        Steps and edges are sorted before hashing so the fingerprint doesn't
        depend on the order the pipeline was built in.
        """
        serialized = orjson.dumps(self.to_dict(), default=str, option=orjson.OPT_SORT_KEYS)
        return CityHash64(serialized)

    def draw(self) -> str:
        """
        Text rendering of the pipeline, one line per step from the output back
        to the sources.
        """

        def _inner(sid: str, prefix: str, last: bool, visited: set):
            yield prefix + ("└─ " if last else "├─ ") + f"{sid} {self._steps[sid]}\n"
            visited.add(sid)
            upstream = [source for source, _, _ in self.ingoing_edges(sid) if source not in visited]
            for index, source in enumerate(upstream):
                child_prefix = prefix + ("   " if last else "│  ")
                yield from _inner(source, child_prefix, index == len(upstream) - 1, visited)

        visited: set = set()
        lines = []
        for exit_point in self.get_exit_points():
            lines.extend(_inner(exit_point, "", True, visited))
        return "".join(lines)
