"""
Geometry Kernel interface.

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Declare the primitive geometry operations the engine calls but
does not implement. The engine only decides HOW to use them to resolve domain
conflicts; robustness of the predicates belongs to the implementation.

Contract:
- Geometries are immutable values (Shapely objects in the shipped kernel).
- None (or an empty geometry) is a normal result meaning "no remaining area".
- Any internal error is raised as KernelFailure naming the operation and
  its inputs. Callers never receive partial geometry from a failed call.

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional, Sequence


class KernelFailure(Exception):
    """Infrastructure failure inside a kernel primitive.

    Attributes:
        operation: Name of the primitive (e.g. "difference")
        inputs: Short textual summaries of the inputs
        diagnostic: Underlying error message
    """

    def __init__(self, operation: str, inputs: Sequence[str], diagnostic: str):
        self.operation = operation
        self.inputs = tuple(inputs)
        self.diagnostic = diagnostic
        super().__init__(f"Kernel {operation} failed: {diagnostic}")


class GeometryKernel(ABC):
    """Primitive geometry operations consumed by the engine."""

    @abstractmethod
    def prepare(self, geometry: Any, polygonal: bool) -> Any:
        """Normalise a candidate before validation (repair, drop debris)."""

    @abstractmethod
    def clip(self, geometry: Any, boundary: Any) -> Optional[Any]:
        """Polygonal part of `geometry` inside `boundary`, or None."""

    @abstractmethod
    def intersect(self, a: Any, b: Any) -> Optional[Any]:
        """Intersection of `a` and `b`, or None when empty."""

    @abstractmethod
    def difference(self, a: Any, b: Any) -> Optional[Any]:
        """`a` minus `b`, or None when nothing remains."""

    @abstractmethod
    def union(self, geometries: Iterable[Any]) -> Optional[Any]:
        """Union of all geometries, or None for an empty input."""

    @abstractmethod
    def contains(self, container: Any, contained: Any) -> bool:
        """True when `contained` lies in the interior of `container`."""

    @abstractmethod
    def overlaps(self, a: Any, b: Any) -> bool:
        """True when the interiors of `a` and `b` share area."""

    @abstractmethod
    def equals(self, a: Any, b: Any) -> bool:
        """Topological equality."""

    @abstractmethod
    def area(self, geometry: Any, unit: str = "square-meters") -> float:
        """Geodesic (or planar) area of `geometry` in `unit`."""

    @abstractmethod
    def length(self, geometry: Any, unit: str = "meters") -> float:
        """Geodesic (or planar) length of `geometry` in `unit`."""

    def is_empty(self, geometry: Any) -> bool:
        return geometry is None or geometry.is_empty
