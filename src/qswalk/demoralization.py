#!/usr/bin/env python

"""Nonmoralizing quantum stochastic walk operators.

A naive quantum stochastic walk on a directed graph lets transitions
that arrive at the same vertex from different sources interfere, which
effectively walks on the moral (undirected) graph.  The demoralization
procedure enlarges every graph vertex to a subspace with one dimension
per in-edge (see `qswalk.graph.derive_vertex_set`) and builds block
operators on it:

- `local_hamiltonian`: Hamiltonian acting inside each vertex,
- `nonmoralizing_lindbladian`: the dissipator routing each in-edge
  through its own orthogonal column,
- `global_hamiltonian`: Hermitian coupling between connected vertices,
- `initial_state` and `measure`: preparing states on, and reading
  probabilities from, the vertices.

All operators are returned as `scipy.sparse.csr_matrix` of complex
dtype.  The same `VertexSet` must be used for every operator of one
walk, so the graph based constructors return the one they derived.

Operator dictionaries are keyed either by vertex length (degree),
e.g. ``{1: h1, 2: h2}``, or by `Vertex`, e.g. ``{Vertex([1]): h1}``;
global couplings are keyed either by block shape, e.g.
``{(1, 2): x}``, or by pairs of vertices.
"""
import logging
from collections.abc import Mapping
from numbers import Integral
from typing import Iterable, Optional, Union

import numpy as np
import scipy.sparse as sp

from .dirac import fourier_matrix
from .graph import (check_square, partition_from_reversed_incidence,
                    reversed_incidence_list)
from .shared import check_epsilon
from .vertex import Vertex, VertexSet

logger = logging.getLogger(__name__)


def _dense(M) -> np.ndarray:
    return M.toarray() if sp.issparse(M) else np.asarray(M)


class _BlockBuilder:
    """Collect dense blocks as COO triples and assemble them once."""

    def __init__(self, size: int):
        self.size = size
        self.rows = []
        self.cols = []
        self.data = []

    def add(self, rows: np.ndarray, cols: np.ndarray, block: np.ndarray):
        r, c = np.meshgrid(rows, cols, indexing="ij")
        self.rows.append(r.ravel())
        self.cols.append(c.ravel())
        self.data.append(np.asarray(block, dtype=complex).ravel())

    def tocsr(self) -> sp.csr_matrix:
        if self.data:
            data = np.concatenate(self.data)
            rows = np.concatenate(self.rows)
            cols = np.concatenate(self.cols)
        else:
            data = np.zeros(0, dtype=complex)
            rows = cols = np.zeros(0, dtype=int)
        result = sp.coo_matrix(
            (data, (rows, cols)), shape=(self.size, self.size), dtype=complex
        ).tocsr()
        result.eliminate_zeros()
        return result


def _by_vertex(
    operators: Optional[Mapping], vset: VertexSet, default, name: str
) -> dict:
    """Resolve a degree or vertex keyed dictionary to one operator per vertex.

    Missing entries, non-square operators and operators whose size does
    not match the vertex length are reported before anything is built.
    """
    lengths = set(vset.lengths)
    if operators is None:
        operators = {d: default(d) for d in sorted(lengths)}
    keys = list(operators.keys())
    if all(isinstance(k, Vertex) for k in keys) and keys:
        by_degree = False
    elif all(isinstance(k, Integral) for k in keys):
        by_degree = True
    else:
        raise ValueError(f"{name} should be keyed either by degree or by Vertex")

    for k, op in operators.items():
        shape = np.shape(op)
        if len(shape) != 2 or shape[0] != shape[1]:
            raise ValueError(
                f"{name} must consist of square matrices, got shape {shape} for {k!r}"
            )

    required = lengths if by_degree else set(vset.vertices)
    missing = required - set(keys)
    if missing:
        what = "degrees" if by_degree else "vertices"
        missing = sorted(missing) if by_degree else [v for v in vset if v in missing]
        raise ValueError(f"Missing {what} in {name}: {missing}")

    result = {}
    for v in vset:
        op = operators[len(v)] if by_degree else operators[v]
        if np.shape(op)[0] != len(v):
            raise ValueError(
                f"Size of {name} for {v!r} should equal the vertex length "
                f"{len(v)}, got {np.shape(op)[0]}"
            )
        result[v] = op
    return result


def default_local_hamiltonian(size: int) -> sp.csr_matrix:
    """Default local Hamiltonian of a vertex.

    Nearest-neighbour coupling with `1j` on the first upper diagonal
    and `-1j` on the first lower diagonal.  A vertex of length one gets
    the zero matrix.

    Args:
        size (int): Length of the vertex.

    Returns:
        sp.csr_matrix: Hermitian matrix of shape `(size, size)`.

    >>> default_local_hamiltonian(3).toarray()
    array([[0.+0.j, 0.+1.j, 0.+0.j],
           [0.-1.j, 0.+0.j, 0.+1.j],
           [0.+0.j, 0.-1.j, 0.+0.j]])
    """
    if size <= 0:
        raise ValueError(
            f"Size of default local Hamiltonian needs to be positive, got {size}"
        )
    if size == 1:
        return sp.csr_matrix((1, 1), dtype=complex)
    upper = 1j * np.ones(size - 1)
    return sp.diags([upper, upper.conj()], [1, -1], format="csr", dtype=complex)


def local_hamiltonian(
    vertex_set: VertexSet, hamiltonians: Optional[Mapping] = None
) -> sp.csr_matrix:
    """Block diagonal Hamiltonian acting inside each vertex.

    Args:
        vertex_set (VertexSet): The decomposition of the space, usually
            from `qswalk.graph.derive_vertex_set`.
        hamiltonians (dict): Hermitian operators keyed by vertex length
            or by `Vertex`.  Only the lengths (or vertices) occurring in
            `vertex_set` are needed.  Defaults to
            `default_local_hamiltonian` for every length.

    Returns:
        sp.csr_matrix: Operator of dimension `vertex_set.size`.

    >>> H = local_hamiltonian(VertexSet([[1, 2], [3, 4]]))
    >>> H.toarray()
    array([[0.+0.j, 0.+1.j, 0.+0.j, 0.+0.j],
           [0.-1.j, 0.+0.j, 0.+0.j, 0.+0.j],
           [0.+0.j, 0.+0.j, 0.+0.j, 0.+1.j],
           [0.+0.j, 0.+0.j, 0.-1.j, 0.+0.j]])
    """
    blocks = _by_vertex(
        hamiltonians, vertex_set, default_local_hamiltonian, "hamiltonians"
    )
    builder = _BlockBuilder(vertex_set.size)
    for v in vertex_set:
        builder.add(v.indices, v.indices, _dense(blocks[v]))
    H = builder.tocsr()
    logger.debug("Local Hamiltonian of dimension %d, nnz=%d", H.shape[0], H.nnz)
    return H


def nonmoralizing_lindbladian(
    A,
    lindbladians: Optional[Mapping] = None,
    epsilon: Optional[float] = None,
) -> tuple[sp.csr_matrix, VertexSet]:
    """Nonmoralizing Lindblad operator of a directed graph.

    For every edge `j -> i` (`abs(A[i, j]) >= epsilon`) which is the
    `k`-th in-edge of `i`, the block with rows of vertex `i` and the
    columns of vertex `j` is filled with `A[i, j] * L_i[:, k]`, where
    `L_i` is the operator for vertex `i`.  Distinct in-edges thus enter
    along orthogonal columns when `L_i` has orthogonal columns (not
    checked).

    Args:
        A (np.ndarray or sparse matrix): Square connectivity matrix,
            `A[i, j]` is the weight of the edge from `j` to `i`.
        lindbladians (dict): Square operators keyed by vertex length
            (in-degree) or by `Vertex` of the derived decomposition.
            Defaults to `qswalk.dirac.fourier_matrix` of every length.
        epsilon (float): Threshold for the presence of an edge,
            defaults to `qswalk.shared.defaults.epsilon`.

    Returns:
        (sp.csr_matrix, VertexSet): The operator and the derived
        decomposition, which has to be reused for the other operators.

    >>> A = np.array([[0, 1, 0], [1, 0, 1], [0, 1, 0]])
    >>> L, vset = nonmoralizing_lindbladian(A)
    >>> vset
    VertexSet([Vertex([1]), Vertex([2, 3]), Vertex([4])])
    >>> np.round(L.toarray().real, 12)
    array([[ 0.,  1.,  1.,  0.],
           [ 1.,  0.,  0.,  1.],
           [ 1.,  0.,  0., -1.],
           [ 0.,  1.,  1.,  0.]])
    """
    epsilon = check_epsilon(epsilon)
    A = check_square(A)
    if sp.issparse(A):
        A = sp.csr_matrix(A)
    revincidence_list = reversed_incidence_list(A, epsilon)
    vset = partition_from_reversed_incidence(revincidence_list)
    operators = _by_vertex(lindbladians, vset, fourier_matrix, "lindbladians")

    builder = _BlockBuilder(vset.size)
    for i, inedges in enumerate(revincidence_list):
        rows = vset[i].indices
        L_i = _dense(operators[vset[i]])
        for index, j in enumerate(inedges):
            cols = vset[j].indices
            column = A[i, j] * L_i[:, index]
            builder.add(rows, cols, np.outer(column, np.ones(len(cols))))
    L = builder.tocsr()
    logger.debug(
        "Nonmoralizing Lindblad operator on %d vertices, dimension %d, nnz=%d",
        len(vset),
        vset.size,
        L.nnz,
    )
    return L, vset


def _coupling_blocks(
    couplings: Optional[Mapping], vset: VertexSet, pairs: list[tuple[int, int]]
) -> dict:
    """Resolve a shape or vertex-pair keyed dictionary to one block per pair."""
    shapes = {(len(vset[i]), len(vset[j])) for i, j in pairs}
    if couplings is None:
        couplings = {shape: np.ones(shape) for shape in sorted(shapes)}
    keys = list(couplings.keys())

    def is_pair(k, kind):
        return (
            isinstance(k, tuple)
            and len(k) == 2
            and all(isinstance(x, kind) and not isinstance(x, bool) for x in k)
        )

    if keys and all(is_pair(k, Vertex) for k in keys):
        by_shape = False
    elif all(is_pair(k, Integral) for k in keys):
        by_shape = True
    else:
        raise ValueError(
            "hamiltonians should be keyed either by block shape or by pairs of Vertex"
        )

    if by_shape:
        missing = sorted(shapes - set(keys))
        if missing:
            raise ValueError(f"Missing shapes in hamiltonians: {missing}")
    else:
        required = [(vset[i], vset[j]) for i, j in pairs]
        missing = [k for k in required if k not in couplings]
        if missing:
            raise ValueError(f"Missing vertex pairs in hamiltonians: {missing}")

    result = {}
    for i, j in pairs:
        shape = (len(vset[i]), len(vset[j]))
        key = shape if by_shape else (vset[i], vset[j])
        block = couplings[key]
        if np.shape(block) != shape:
            raise ValueError(
                f"hamiltonian for key {key!r} should have shape {shape}, "
                f"got {np.shape(block)}"
            )
        result[i, j] = block
    return result


def global_hamiltonian(
    A,
    hamiltonians: Optional[Mapping] = None,
    epsilon: Optional[float] = None,
) -> sp.csr_matrix:
    """Hermitian coupling between connected vertices.

    For every edge with `i < j` and `abs(A[i, j]) >= epsilon` the block
    `X` with rows of vertex `i` and columns of vertex `j` is set to
    `A[i, j] * h`, and the result is `X + X^†`.

    Args:
        A (np.ndarray or sparse matrix): Square connectivity matrix.
        hamiltonians (dict): Coupling blocks keyed by block shape
            `(len(v_i), len(v_j))` or by vertex pair `(v_i, v_j)` of the
            derived decomposition.  Defaults to all-ones blocks.
        epsilon (float): Threshold for the presence of an edge,
            defaults to `qswalk.shared.defaults.epsilon`.

    Returns:
        sp.csr_matrix: Hermitian operator on the space of
        `qswalk.graph.derive_vertex_set(A, epsilon)`.

    >>> A = np.array([[0, 1, 0], [1, 0, 1], [0, 1, 0]])
    >>> global_hamiltonian(A).toarray().real
    array([[0., 1., 1., 0.],
           [1., 0., 0., 1.],
           [1., 0., 0., 1.],
           [0., 1., 1., 0.]])
    """
    epsilon = check_epsilon(epsilon)
    A = check_square(A)
    if sp.issparse(A):
        A = sp.csr_matrix(A)
    revincidence_list = reversed_incidence_list(A, epsilon)
    vset = partition_from_reversed_incidence(revincidence_list)
    pairs = [
        (i, j) for i, inedges in enumerate(revincidence_list) for j in inedges if i < j
    ]
    blocks = _coupling_blocks(hamiltonians, vset, pairs)

    builder = _BlockBuilder(vset.size)
    for i, j in pairs:
        builder.add(vset[i].indices, vset[j].indices, A[i, j] * _dense(blocks[i, j]))
    X = builder.tocsr()
    H = (X + X.conj().T).tocsr()
    logger.debug("Global Hamiltonian over %d edges, nnz=%d", len(pairs), H.nnz)
    return H


def measure(state, vertex_set: VertexSet) -> np.ndarray:
    """Probability of finding the walker in each vertex.

    Args:
        state: Probability vector (1-D), or density matrix (dense or
            sparse, square) whose real diagonal is used.
        vertex_set (VertexSet): The decomposition the state lives on.

    Returns:
        np.ndarray: One probability per vertex, in order.

    >>> p = np.array([0.05, 0.1, 0.25, 0.3, 0.01, 0.20, 0.04, 0.05])
    >>> vset = VertexSet([[1, 4], [2, 3, 5], [6], [7, 8]])
    >>> np.round(measure(p, vset), 12)
    array([0.35, 0.36, 0.2 , 0.09])
    """
    if not sp.issparse(state):
        state = np.asarray(state)
    if state.ndim == 2:
        if state.shape[0] != state.shape[1]:
            raise ValueError(f"state should be square matrix, got shape {state.shape}")
        probability = np.real(state.diagonal())
    elif state.ndim == 1:
        probability = state
    else:
        raise ValueError(
            f"state should be a vector or a square matrix, got shape {state.shape}"
        )
    assert len(probability) == vertex_set.size, (
        f"vertexset size {vertex_set.size} and state size "
        f"{len(probability)} do not match"
    )
    return np.array([probability[v.indices].sum() for v in vertex_set])


def initial_state(
    initial: Union[Iterable[Vertex], Mapping], vertex_set: VertexSet
) -> sp.csr_matrix:
    """Block diagonal initial density matrix.

    Args:
        initial (list[Vertex] or dict): Either the vertices to start
            from, each getting the identity scaled so that the walker is
            found in every one of them with equal probability, or a
            dictionary from vertices to their blocks (expected to be
            positive semidefinite with total trace one, not checked).
        vertex_set (VertexSet): The decomposition of the space.

    Returns:
        sp.csr_matrix: Density matrix of dimension `vertex_set.size`;
        vertices not mentioned get a zero block.

    >>> vset = VertexSet([[1], [2, 3], [4]])
    >>> initial_state([Vertex([2, 3])], vset).diagonal().real
    array([0. , 0.5, 0.5, 0. ])
    """
    builder = _BlockBuilder(vertex_set.size)
    if isinstance(initial, Mapping):
        for v, state in initial.items():
            assert v in vertex_set, f"{v!r} is not in the vertexset"
            assert np.shape(state) == (len(v), len(v)), (
                f"The size of initial state {np.shape(state)} and {v!r} do not match"
            )
        for v, state in initial.items():
            builder.add(v.indices, v.indices, _dense(state))
    else:
        initial = list(dict.fromkeys(initial))
        for v in initial:
            assert v in vertex_set, f"{v!r} is not in the vertexset"
        for v in initial:
            normalization = len(v) * len(initial)
            builder.add(v.indices, v.indices, np.eye(len(v)) / normalization)
    return builder.tocsr()
