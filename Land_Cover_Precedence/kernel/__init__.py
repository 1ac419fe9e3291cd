"""Geometry kernel package: the primitive operations the engine consumes."""

from .geometry_kernel import GeometryKernel, KernelFailure
from .shapely_kernel import ShapelyKernel

__all__ = ["GeometryKernel", "KernelFailure", "ShapelyKernel"]
