try:
    from ._version import version as __version__  # populated by setuptools-scm
except ModuleNotFoundError:
    __version__ = "0.0.0"

from .ids import IdAllocator
from .graph import Edge, Graph, Node

__all__ = ["__version__", "IdAllocator", "Graph", "Node", "Edge"]
