import json
from dataclasses import dataclass, field, asdict
from typing import List, Optional

from graphviz import Digraph

import tinyre_match

# Trace tooling for tinyre_match.
# Records every match_here / match_star call as a tree of events so a
# backtracking run can be dumped to JSON or drawn with Graphviz.


@dataclass
class TraceEvent:
    id: int
    parent: Optional[int]
    kind: str                   # "here" or "star"
    regexp: str
    text: str
    char: Optional[str] = None  # the repeated atom, star calls only
    result: Optional[bool] = None
    children: List[int] = field(default_factory=list)


class MatchTracer:
    """
    Instrument the matcher to record entry and result of each recursive call.
    Patches the module-level functions in tinyre_match, so only one tracer
    should be active at a time and no other thread should be matching.
    """

    def __init__(self):
        self.trace = []
        self._stack = []
        self._orig_functions = {}

    def _record(self, kind, orig):
        def wrapped(*args, **kwargs):
            if kind == "star":
                regexp, text = args[1], args[2]
            else:
                regexp, text = args[0], args[1]
            parent = self._stack[-1] if self._stack else None
            event = TraceEvent(id=len(self.trace), parent=parent, kind=kind,
                               regexp=regexp, text=text,
                               char=args[0] if kind == "star" else None)
            self.trace.append(event)
            if parent is not None:
                self.trace[parent].children.append(event.id)

            self._stack.append(event.id)
            try:
                event.result = orig(*args, **kwargs)
            finally:
                self._stack.pop()
            return event.result

        return wrapped

    def instrument(self):
        """
        Wrap match_here and match_star. Recursive calls inside tinyre_match
        go through the module globals, so they get recorded too.
        """
        # Only instrument once
        if self._orig_functions:
            return
        for name, kind in (("match_here", "here"), ("match_star", "star")):
            orig = getattr(tinyre_match, name)
            self._orig_functions[name] = orig
            setattr(tinyre_match, name, self._record(kind, orig))

    def restore(self) -> None:
        """
        Put the original matcher functions back.
        """
        for name, orig in self._orig_functions.items():
            setattr(tinyre_match, name, orig)
        self._orig_functions.clear()

    def get_trace(self) -> list:
        """
        Get the collected trace events, in call order.
        """
        return self.trace

    def __enter__(self):
        self.instrument()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.restore()
        return False


def trace_match(pattern, text: str, timeout=None):
    """
    Run is_match with tracing on; return (matched, events).
    If `timeout` runs out the MatchTimeout propagates, carrying the
    events recorded so far as its `trace` attribute.
    """
    with MatchTracer() as tracer:
        try:
            matched = tinyre_match.is_match(pattern, text, timeout=timeout)
        except tinyre_match.MatchTimeout as exc:
            exc.trace = tracer.get_trace()
            raise
    return matched, tracer.get_trace()


def trace_to_dict(events) -> dict:
    """
    Convert a trace into a JSON-serializable nested dictionary.
    """
    def node(event):
        data = asdict(event)
        data.pop("parent")
        data["children"] = [node(events[child]) for child in event.children]
        return data

    return {"roots": [node(e) for e in events if e.parent is None]}


def persist_trace(events, filename: str) -> None:
    """
    Serialize the trace to a JSON file.
    """
    with open(filename, 'w', encoding='utf-8') as f:
        json.dump(trace_to_dict(events), f, indent=2)


def _label(event):
    if event.kind == "star":
        label = f"star({event.char!r}) {event.regexp!r} | {event.text!r}"
    else:
        label = f"here {event.regexp!r} | {event.text!r}"
    return label


def build_trace_graph(events, format: str = 'png') -> Digraph:
    graph = Digraph(comment='tinyre match trace', format=format)
    for event in events:
        nid = str(event.id)
        if event.result:
            graph.node(nid, _label(event), color='darkgreen', penwidth='2')
        else:
            graph.node(nid, _label(event))
        if event.parent is not None:
            graph.edge(str(event.parent), nid)
    return graph


def visualize_trace(events, output_path: str = 'trace',
                    format: str = 'png') -> str:
    """
    Create a Graphviz drawing of the call tree.
    Returns the path to the rendered file. Needs the `dot` binary.
    """
    graph = build_trace_graph(events, format=format)
    return graph.render(output_path, cleanup=True)
