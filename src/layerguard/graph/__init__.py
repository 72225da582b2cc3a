"""Module import graph: data model and builder."""

from .builder import GraphBuilder, build_graph
from .models import ImportEdge, Module, ModuleGraph

__all__ = [
    "Module",
    "ImportEdge",
    "ModuleGraph",
    "GraphBuilder",
    "build_graph",
]
