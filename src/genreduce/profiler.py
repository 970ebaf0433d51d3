# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

"""Timing of reductions, broken down by pass"""
import time
from typing import Dict, List, NamedTuple, Optional


reduce = "reduce"
reduce_pass = "reduce_pass"
commit = "commit"


class Event(NamedTuple):
    begin: bool
    kind: str
    timestamp: int

    def __str__(self) -> str:
        return f"{'begin' if self.begin else 'finish'} {self.kind} {self.timestamp}"


class PassTiming(NamedTuple):
    """One pass of a reduction. A pass which found a redex is followed by a
    commit; the final pass of a reduction which reached its fixpoint is
    not."""

    number: int
    duration: int
    rewrote: bool
    commit_duration: int

    def __str__(self) -> str:
        outcome = "rewrote" if self.rewrote else "fixpoint"
        return f"pass {self.number}: {outcome} {self.duration // 1000000} ms"


def _ms(ns: int) -> str:
    return f"{ns // 1000000} ms"


class ProfileReport:
    calls: int
    total_time: int
    children: Dict[str, "ProfileReport"]
    parent: Optional["ProfileReport"]

    def __init__(self, parent: Optional["ProfileReport"] = None) -> None:
        self.calls = 0
        self.total_time = 0
        self.children = {}
        self.parent = parent

    def __getattr__(self, kind: str) -> "ProfileReport":
        # Lets a report be navigated as report.reduce.reduce_pass
        children = self.__dict__.get("children", {})
        if kind in children:
            return children[kind]
        raise AttributeError(kind)

    def child(self, kind: str) -> "ProfileReport":
        if kind not in self.children:
            self.children[kind] = ProfileReport(self)
        return self.children[kind]

    def self_time(self) -> int:
        """Time spent in this kind of event outside of any nested event."""
        return self.total_time - sum(c.total_time for c in self.children.values())

    def _lines(self, depth: int) -> List[str]:
        lines = []
        for kind, report in self.children.items():
            line = f"{'  ' * depth}{kind}:({report.calls}) {_ms(report.total_time)}"
            if report.children:
                line += f", {_ms(report.self_time())} outside nested events"
            lines.append(line)
            lines += report._lines(depth + 1)
        return lines

    def __str__(self) -> str:
        return "\n".join(self._lines(0))


class ProfilerData:
    """Records nested begin/finish events. A reduction given one of these
    records a reduce event around the whole fixpoint loop, a reduce_pass
    event around every pass and a commit event around every commit."""

    events: List[Event]
    in_flight: List[Event]

    def __init__(self) -> None:
        self.events = []
        self.in_flight = []

    def begin(self, kind: str, timestamp: Optional[int] = None) -> None:
        e = Event(True, kind, time.time_ns() if timestamp is None else timestamp)
        self.events.append(e)
        self.in_flight.append(e)

    def finish(self, kind: str, timestamp: Optional[int] = None) -> None:
        # Finishing an event also finishes anything still open inside it.
        t = time.time_ns() if timestamp is None else timestamp
        while self.in_flight:
            opened = self.in_flight.pop()
            self.events.append(Event(False, opened.kind, t))
            if opened.kind == kind:
                return

    def count(self, kind: str) -> int:
        return sum(1 for e in self.events if e.begin and e.kind == kind)

    def rewrites(self) -> int:
        return self.count(commit)

    def __str__(self) -> str:
        return "\n".join(str(e) for e in self.events)

    def _intervals(self, kind: str) -> List[int]:
        # Lengths of the outermost intervals of the given kind; nested
        # events of the same kind are not counted twice.
        intervals = []
        depth = 0
        start = 0
        for e in self.events:
            if e.kind != kind:
                continue
            if e.begin:
                if depth == 0:
                    start = e.timestamp
                depth += 1
            else:
                depth -= 1
                if depth == 0:
                    intervals.append(e.timestamp - start)
        return intervals

    def time_in(self, kind: str) -> int:
        return sum(self._intervals(kind))

    def passes(self) -> List[PassTiming]:
        """The passes of every reduction recorded, in order. Each pass is
        numbered from 1 within its own reduction."""
        timings = []
        number = 0
        pass_begin: Optional[Event] = None
        commit_begin: Optional[Event] = None
        for e in self.events:
            if e.kind == reduce and e.begin:
                number = 0
            elif e.kind == reduce_pass:
                if e.begin:
                    pass_begin = e
                elif pass_begin is not None:
                    number += 1
                    duration = e.timestamp - pass_begin.timestamp
                    timings.append(PassTiming(number, duration, False, 0))
                    pass_begin = None
            elif e.kind == commit and timings:
                if e.begin:
                    timings[-1] = timings[-1]._replace(rewrote=True)
                    commit_begin = e
                elif commit_begin is not None:
                    duration = e.timestamp - commit_begin.timestamp
                    timings[-1] = timings[-1]._replace(commit_duration=duration)
                    commit_begin = None
        return timings

    def to_report(self) -> ProfileReport:
        root = ProfileReport()
        current = root
        opened: List[Event] = []
        for e in self.events:
            if e.begin:
                current = current.child(e.kind)
                current.calls += 1
                opened.append(e)
                continue
            if not opened or opened[-1].kind != e.kind:
                raise ValueError(f"Unbalanced profiler event: {e}")
            current.total_time += e.timestamp - opened.pop().timestamp
            assert current.parent is not None
            current = current.parent
        if opened:
            raise ValueError(f"Profiler event still in flight: {opened[-1]}")
        return root
