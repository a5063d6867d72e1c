#!/usr/bin/env python

"""Orthogonal decomposition of the walk's state space.

A `Vertex` is the list of (1-based) coordinates spanning the linear
subspace that stands in for one node of the directed graph.  A
`VertexSet` collects the vertices of the whole space; its vertices
never share a coordinate, i.e. they correspond to mutually orthogonal
subspaces.
"""
from numbers import Integral
from typing import Iterable, Iterator, Union

import numpy as np


class Vertex:
    """Linear subspace given by a sequence of coordinates.

    Args:
        subspace (Iterable[int]): Distinct positive coordinates.

    Two vertices are equal when their coordinates are equal in the same
    order, which makes them usable as dictionary keys for per-vertex
    operators.

    >>> v = Vertex([1, 2])
    >>> v
    Vertex([1, 2])
    >>> len(v), v[1]
    (2, 2)
    >>> v == Vertex([1, 2]), v == Vertex([2, 1])
    (True, False)

    Non-positive coordinates are rejected.

    >>> Vertex([0, 1])
    Traceback (most recent call last):
    ...
    ValueError: Vertex coordinates should be positive, got [0, 1]
    """

    __slots__ = ("_subspace",)

    def __init__(self, subspace: Iterable[int]):
        subspace = tuple(subspace)
        for c in subspace:
            if isinstance(c, bool) or not isinstance(c, Integral):
                raise TypeError(f"Vertex coordinates should be integers, got {c!r}")
        subspace = tuple(int(c) for c in subspace)
        if not subspace:
            raise ValueError("Vertex needs at least one coordinate")
        if not all(c > 0 for c in subspace):
            raise ValueError(
                f"Vertex coordinates should be positive, got {list(subspace)}"
            )
        if len(set(subspace)) != len(subspace):
            raise ValueError(
                f"Vertex coordinates should be distinct, got {list(subspace)}"
            )
        self._subspace = subspace

    @property
    def subspace(self) -> tuple:
        """Coordinates of the vertex."""
        return self._subspace

    @property
    def indices(self) -> np.ndarray:
        """0-based row/column indices of the vertex block."""
        return np.array(self._subspace, dtype=int) - 1

    def __len__(self) -> int:
        return len(self._subspace)

    def __getitem__(self, i):
        return self._subspace[i]

    def __iter__(self) -> Iterator[int]:
        return iter(self._subspace)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Vertex):
            return NotImplemented
        return self._subspace == other._subspace

    def __hash__(self) -> int:
        return hash(self._subspace)

    def __repr__(self) -> str:
        return f"Vertex({list(self._subspace)})"


class VertexSet:
    """Ordered collection of mutually orthogonal vertices.

    Args:
        vertices (list[Vertex] or list[list[int]]): The vertices, or
            their coordinate lists.

    >>> vset = VertexSet([[1, 4], [2, 3, 5], [6], [7, 8]])
    >>> len(vset), vset.size
    (4, 8)
    >>> vset[1]
    Vertex([2, 3, 5])
    >>> Vertex([6]) in vset
    True

    Overlapping vertices do not form a valid decomposition.

    >>> VertexSet([[1, 2], [2, 3]])
    Traceback (most recent call last):
    ...
    ValueError: Vertices should correspond to orthogonal linear spaces, repeated coordinates: [2]
    """

    __slots__ = ("_vertices",)

    def __init__(self, vertices: Iterable[Union[Vertex, Iterable[int]]]):
        vertices = tuple(v if isinstance(v, Vertex) else Vertex(v) for v in vertices)
        seen = set()
        repeated = set()
        for v in vertices:
            for c in v:
                if c in seen:
                    repeated.add(c)
                seen.add(c)
        if repeated:
            raise ValueError(
                "Vertices should correspond to orthogonal linear spaces, "
                f"repeated coordinates: {sorted(repeated)}"
            )
        self._vertices = vertices

    @property
    def vertices(self) -> tuple:
        """The vertices, in order."""
        return self._vertices

    @property
    def size(self) -> int:
        """Dimension of the space indexed by the vertices."""
        return sum(len(v) for v in self._vertices)

    @property
    def lengths(self) -> list[int]:
        """Length of each vertex, in order."""
        return [len(v) for v in self._vertices]

    def __len__(self) -> int:
        return len(self._vertices)

    def __getitem__(self, i):
        if isinstance(i, (list, tuple, np.ndarray)):
            return [self._vertices[k] for k in i]
        return self._vertices[i]

    def __iter__(self) -> Iterator[Vertex]:
        return iter(self._vertices)

    def __contains__(self, vertex) -> bool:
        return vertex in self._vertices

    def __eq__(self, other) -> bool:
        if not isinstance(other, VertexSet):
            return NotImplemented
        return self._vertices == other._vertices

    def __hash__(self) -> int:
        return hash(self._vertices)

    def __repr__(self) -> str:
        return f"VertexSet({list(self._vertices)})"
