#!/usr/bin/env python

"""Derive the vertex decomposition from a directed graph.

The graph is given by a square matrix `A` where `A[i, j]` is the weight
of the edge from vertex `j` to vertex `i`.  Graph vertices are referred
to by their 0-based row/column position in `A`; entries with magnitude
below `epsilon` are absent edges.
"""
import logging
from typing import Optional

import numpy as np
import scipy.sparse as sp

from .shared import check_epsilon
from .vertex import VertexSet

logger = logging.getLogger(__name__)


def check_square(A):
    """Return `A` as a 2-D array or sparse matrix, rejecting other shapes."""
    if not sp.issparse(A):
        A = np.asarray(A)
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise ValueError(f"A matrix must be square, got shape {A.shape}")
    return A


def incidence_list(A, epsilon: Optional[float] = None) -> list[list[int]]:
    """Out-neighbours of every graph vertex.

    Args:
            A (np.ndarray or sparse matrix): Square connectivity matrix.
            epsilon (float): Nonnegative threshold, defaults to
                `qswalk.shared.defaults.epsilon`.

    Returns:
            list[list[int]]: Entry `i` lists the rows `j` (ascending)
            with `abs(A[j, i]) >= epsilon`.

    >>> incidence_list(np.array([[0, 1, 0], [1, 0, 0], [0, 1, 0]]))
    [[1], [0, 2], []]
    """
    epsilon = check_epsilon(epsilon)
    A = check_square(A)
    n = A.shape[0]
    if not sp.issparse(A):
        mask = np.abs(A) >= epsilon
        return [np.flatnonzero(mask[:, i]).tolist() for i in range(n)]
    if epsilon == 0:
        # implicit zeros pass a zero threshold as well
        return [list(range(n)) for _ in range(n)]
    A = sp.csc_matrix(A, copy=True)
    A.sort_indices()
    result = []
    for i in range(n):
        start, stop = A.indptr[i], A.indptr[i + 1]
        rows = A.indices[start:stop]
        result.append(rows[np.abs(A.data[start:stop]) >= epsilon].tolist())
    return result


def reversed_incidence_list(A, epsilon: Optional[float] = None) -> list[list[int]]:
    """In-neighbours of every graph vertex.

    Entry `i` lists the columns `j` (ascending) with
    `abs(A[i, j]) >= epsilon`, i.e. `incidence_list` of the transpose.

    >>> reversed_incidence_list(np.array([[0, 1, 0], [1, 0, 0], [0, 1, 0]]))
    [[1], [0], [1]]
    """
    A = check_square(A)
    return incidence_list(A.T, epsilon=epsilon)


def partition_from_reversed_incidence(revincidence_list: list[list[int]]) -> VertexSet:
    """Allocate a block of coordinates to every graph vertex.

    Graph vertex `i` gets `len(revincidence_list[i])` consecutive
    coordinates, or a single one when it has no in-edges.  Coordinates
    start at 1 and follow the order of the list without gaps.

    >>> partition_from_reversed_incidence([[1], [0, 2], [1]])
    VertexSet([Vertex([1]), Vertex([2, 3]), Vertex([4])])
    >>> partition_from_reversed_incidence([[], [0]])
    VertexSet([Vertex([1]), Vertex([2])])
    """
    vertices = []
    start = 1
    for inedges in revincidence_list:
        length = max(1, len(inedges))
        vertices.append(list(range(start, start + length)))
        start += length
    return VertexSet(vertices)


def derive_vertex_set(A, epsilon: Optional[float] = None) -> VertexSet:
    """Vertex decomposition matching the nonmoralizing construction.

    Args:
            A (np.ndarray or sparse matrix): Square connectivity matrix.
            epsilon (float): Nonnegative threshold, defaults to
                `qswalk.shared.defaults.epsilon`.

    Returns:
            VertexSet: One vertex per graph vertex, with as many
            coordinates as in-edges (at least one).

    >>> derive_vertex_set(np.array([[0, 1, 0], [1, 0, 1], [0, 1, 0]]))
    VertexSet([Vertex([1]), Vertex([2, 3]), Vertex([4])])
    """
    epsilon = check_epsilon(epsilon)
    A = check_square(A)
    vset = partition_from_reversed_incidence(reversed_incidence_list(A, epsilon))
    logger.debug(
        "Derived %d vertices spanning dimension %d (epsilon=%g)",
        len(vset),
        vset.size,
        epsilon,
    )
    return vset
