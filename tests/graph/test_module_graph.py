"""Tests for graph/models.py: Module, ImportEdge, ModuleGraph."""

import pytest

from layerguard.graph.models import ImportEdge, Module, ModuleGraph


class TestModule:
    def test_package_is_top_level_segment(self):
        assert Module("app.billing.models.invoice").package == "app"
        assert Module("app").package == "app"

    def test_with_layer_returns_tagged_copy(self):
        module = Module("app.models.user", file="app/models/user.py")
        tagged = module.with_layer("models")
        assert tagged.layer == "models"
        assert tagged.file == "app/models/user.py"
        assert module.layer is None

    def test_immutable(self):
        module = Module("app")
        with pytest.raises(Exception):
            module.path = "other"  # type: ignore[misc]


class TestImportEdge:
    def test_str(self):
        assert str(ImportEdge("a.b", "c")) == "a.b -> c"

    def test_orders_by_source_then_target(self):
        edges = [ImportEdge("b", "a"), ImportEdge("a", "c"), ImportEdge("a", "b")]
        assert sorted(edges) == [ImportEdge("a", "b"), ImportEdge("a", "c"), ImportEdge("b", "a")]

    def test_set_semantics(self):
        assert len({ImportEdge("a", "b"), ImportEdge("a", "b")}) == 1


class TestModuleGraphConstruction:
    def test_add_module_is_idempotent(self):
        graph = ModuleGraph()
        first = graph.add_module(Module("app.x", file="app/x.py"))
        second = graph.add_module(Module("app.x", file="other.py"))
        assert second is first
        assert len(graph) == 1

    def test_duplicate_edges_collapse(self):
        graph = ModuleGraph.from_edges([("a", "b"), ("a", "b")])
        assert graph.edge_count == 1

    def test_self_edge_ignored(self):
        graph = ModuleGraph.from_edges([], modules=["a"])
        assert graph.add_edge("a", "a") is False
        assert graph.edge_count == 0

    def test_add_edge_unknown_module(self):
        graph = ModuleGraph.from_edges([], modules=["a"])
        with pytest.raises(KeyError):
            graph.add_edge("a", "missing")

    def test_reverse_index_kept_in_sync(self):
        graph = ModuleGraph.from_edges([("a", "c"), ("b", "c")])
        assert graph.predecessors("c") == ["a", "b"]
        assert graph.predecessors("a") == []

    def test_queries_do_not_write_before_finalize(self):
        graph = ModuleGraph()
        for path in ("a", "b", "c"):
            graph.add_module(Module(path))
        graph.add_edge("a", "c")
        graph.add_edge("a", "b")

        assert graph.successors("a") == ["b", "c"]
        assert graph._ordered == {}

        graph.finalize()
        assert graph._ordered == {"a": ["b", "c"], "b": [], "c": []}

    def test_edge_after_finalize_is_seen(self):
        graph = ModuleGraph.from_edges([("a", "c")], modules=["b"])
        snapshot = dict(graph._ordered)
        assert [graph.successors(p) for p in ("a", "b", "c")] == [["c"], [], []]
        assert graph._ordered == snapshot

        graph.add_edge("a", "b")
        assert graph.successors("a") == ["b", "c"]


class TestModuleGraphQueries:
    @pytest.fixture
    def graph(self):
        return ModuleGraph.from_edges(
            [("app.z", "app.a"), ("app.z", "app.m"), ("app.a", "lib.core")],
            modules=["app.lonely"],
        )

    def test_discovery_order(self, graph):
        assert graph.module_paths() == ["app.a", "app.lonely", "app.m", "app.z", "lib.core"]

    def test_successors_sorted(self, graph):
        assert graph.successors("app.z") == ["app.a", "app.m"]

    def test_successors_cache_invalidated_on_new_edge(self, graph):
        assert graph.successors("app.z") == ["app.a", "app.m"]
        graph.add_edge("app.z", "app.lonely")
        assert graph.successors("app.z") == ["app.a", "app.lonely", "app.m"]

    def test_edges_sorted(self, graph):
        assert [str(e) for e in graph.edges()] == [
            "app.a -> lib.core",
            "app.z -> app.a",
            "app.z -> app.m",
        ]

    def test_packages(self, graph):
        assert graph.packages == ["app", "lib"]

    def test_find(self, graph):
        assert graph.find(lambda p: p.startswith("app.")) == [
            "app.a",
            "app.lonely",
            "app.m",
            "app.z",
        ]

    def test_is_path(self, graph):
        assert graph.is_path(["app.z", "app.a", "lib.core"])
        assert not graph.is_path(["app.z", "lib.core"])
        assert not graph.is_path(["app.z"])

    def test_contains(self, graph):
        assert "app.m" in graph
        assert "app" not in graph
