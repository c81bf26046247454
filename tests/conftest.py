"""Shared fixtures for bobble tests."""

import json
from collections import defaultdict
from concurrent.futures import Executor, Future

import pytest

from bobble.core.graph import build_graph

# Module graph of the "main" chunk group below:
#   1 -> 2, 1 -> 3, 2 -> 4, 3 -> 4
SCENARIO_EDGES = [(1, 2), (1, 3), (2, 4), (3, 4)]
SCENARIO_SIZES = {1: 10, 2: 20, 3: 20, 4: 5}


class ManualExecutor(Executor):
    """Executor that only runs jobs when told to, in any order."""

    def __init__(self):
        self.jobs = []

    def submit(self, fn, /, *args, **kwargs):
        future = Future()
        self.jobs.append((future, fn, args, kwargs))
        return future

    def run(self, index):
        future, fn, args, kwargs = self.jobs[index]
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)

    def run_all(self):
        for index, (future, _, _, _) in enumerate(list(self.jobs)):
            if not future.done():
                self.run(index)


def graph_from_edges(edges, sizes, names=None):
    parents = defaultdict(list)
    for parent, child in edges:
        parents[child].append(parent)
    names = names or {}
    return build_graph(
        list(sizes),
        lambda node_id: parents[node_id],
        lambda node_id: {"name": names.get(node_id, f"m{node_id}"), "size": sizes[node_id]},
    )


@pytest.fixture
def make_graph():
    return graph_from_edges


@pytest.fixture
def scenario_graph():
    return graph_from_edges(SCENARIO_EDGES, SCENARIO_SIZES)


@pytest.fixture
def diamond_graph():
    # root -> {a, b}, a -> c, b -> c
    edges = [("root", "a"), ("root", "b"), ("a", "c"), ("b", "c")]
    sizes = {"root": 1, "a": 2, "b": 3, "c": 4}
    return graph_from_edges(edges, sizes)


@pytest.fixture
def manual_executor():
    return ManualExecutor()


@pytest.fixture
def stats_data():
    return {
        "builtAt": 1577836800000,
        "hash": "abc123",
        "namedChunkGroups": {
            "main": {"chunks": [0], "assets": ["main.js"]},
            "admin": {"chunks": [1]},
        },
        "chunks": [
            {"id": 0, "names": ["main"], "modules": [{"id": 1}, {"id": 2}, {"id": 3}, {"id": 4}]},
            {"id": 1, "names": ["admin"], "modules": [{"id": 5}, {"id": 4}]},
        ],
        "modules": [
            {"id": 1, "name": "./src/index.js", "size": 10, "reasons": []},
            {"id": 2, "name": "./src/charts.js", "size": 20, "reasons": [{"moduleId": 1}]},
            {"id": 3, "name": "./src/table.js", "size": 20, "reasons": [{"moduleId": 1}]},
            {
                "id": 4,
                "name": "./node_modules/lodash.js",
                "size": 5,
                "reasons": [{"moduleId": 2}, {"moduleId": 3}, {"moduleId": 5}],
            },
            {"id": 5, "name": "./src/admin.js", "size": 100, "reasons": [{"moduleId": None}]},
        ],
    }


@pytest.fixture
def stats_file(tmp_path, stats_data):
    path = tmp_path / "stats.json"
    path.write_text(json.dumps(stats_data))
    return path
