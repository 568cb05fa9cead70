"""Document reachability graph."""

from .builder import GraphBuilder
from .model import DocumentGraph, GraphNode

__all__ = ["DocumentGraph", "GraphBuilder", "GraphNode"]
