#!/usr/bin/env python

"""GKSL generators of quantum stochastic walks.

The generator acts on row-major vectorized density matrices (see
`qswalk.dirac.vectorize`), so that `rho(t) = devectorize(expm(t * G) @
vectorize(rho(0)))`.
"""
import logging
from typing import Optional

import numpy as np
import scipy.sparse as sp

from .demoralization import (global_hamiltonian, local_hamiltonian,
                             nonmoralizing_lindbladian)
from .dirac import basis_matrix
from .graph import check_square, reversed_incidence_list
from .shared import check_epsilon

logger = logging.getLogger(__name__)


def _as_operator_list(lindbladians) -> list:
    if sp.issparse(lindbladians) or (
        isinstance(lindbladians, np.ndarray) and lindbladians.ndim == 2
    ):
        return [lindbladians]
    return list(lindbladians)


def _commutator(H) -> sp.csr_matrix:
    """Superoperator of `rho -> H rho - rho H`."""
    eye = sp.identity(H.shape[0], dtype=complex, format="csr")
    return sp.kron(H, eye) - sp.kron(eye, H.T)


def _dissipator(L) -> sp.csr_matrix:
    """Superoperator of `rho -> L rho L^† - {L^† L, rho} / 2`."""
    eye = sp.identity(L.shape[0], dtype=complex, format="csr")
    LdL = L.conj().T @ L
    return sp.kron(L, L.conj()) - 0.5 * (sp.kron(LdL, eye) + sp.kron(eye, LdL.T))


def evolve_generator(
    hamiltonian,
    lindbladians,
    omega: float,
    local_hamiltonian=None,
) -> sp.csr_matrix:
    """Generator of a quantum stochastic walk.

    Constructs

    `G = -i (1 - omega) [H, .] - i [H_loc, .] + omega sum_L D[L]`

    where `D[L]` is the Lindblad dissipator of `L`.  The local
    Hamiltonian is not scaled by `omega`, as it only acts inside the
    vertices of a demoralized walk.

    Args:
            hamiltonian: Square (sparse or dense) Hamiltonian `H`.
            lindbladians: A Lindblad operator or a list of them.
            omega (float): Weight of the dissipative part, between 0
                (unitary walk) and 1 (classical walk).
            local_hamiltonian: Optional Hamiltonian `H_loc`, e.g. from
                `qswalk.demoralization.local_hamiltonian`.

    Returns:
            sp.csr_matrix: Generator of dimension `n**2` for operators
            of dimension `n`.
    """
    if not 0 <= omega <= 1:
        raise ValueError(f"omega should be in [0, 1], got {omega}")
    H = sp.csr_matrix(check_square(hamiltonian), dtype=complex)
    n = H.shape[0]
    operators = [
        sp.csr_matrix(check_square(L), dtype=complex)
        for L in _as_operator_list(lindbladians)
    ]
    if local_hamiltonian is not None:
        H_loc = sp.csr_matrix(check_square(local_hamiltonian), dtype=complex)
        operators_to_check = operators + [H_loc]
    else:
        H_loc = None
        operators_to_check = operators
    for op in operators_to_check:
        if op.shape != (n, n):
            raise ValueError(
                f"All operators should have the shape of the Hamiltonian {(n, n)}, "
                f"got {op.shape}"
            )

    G = -1j * (1 - omega) * _commutator(H)
    if H_loc is not None:
        G = G - 1j * _commutator(H_loc)
    for L in operators:
        G = G + omega * _dissipator(L)
    G = sp.csr_matrix(G)
    G.eliminate_zeros()
    logger.debug(
        "Generator of dimension %d from %d Lindblad operators, nnz=%d",
        G.shape[0],
        len(operators),
        G.nnz,
    )
    return G


def local_lindbladians(A, epsilon: Optional[float] = None) -> list[sp.csr_matrix]:
    """Single edge Lindblad operators of the classical random walk.

    Args:
            A (np.ndarray or sparse matrix): Square connectivity matrix.
            epsilon (float): Threshold for the presence of an edge.

    Returns:
            list[sp.csr_matrix]: `A[i, j] |i><j|` for every edge, ordered
            by row and then column.

    >>> [L.toarray() for L in local_lindbladians(np.array([[0, 2], [0, 0]]))]
    [array([[0.+0.j, 2.+0.j],
           [0.+0.j, 0.+0.j]])]
    """
    epsilon = check_epsilon(epsilon)
    A = check_square(A)
    if sp.issparse(A):
        A = sp.csr_matrix(A)
    n = A.shape[0]
    return [
        sp.csr_matrix(A[i, j] * basis_matrix(i + 1, j + 1, n), dtype=complex)
        for i, inedges in enumerate(reversed_incidence_list(A, epsilon))
        for j in inedges
    ]


def global_lindbladian(A) -> sp.csr_matrix:
    """Connectivity matrix itself as a single Lindblad operator."""
    return sp.csr_matrix(check_square(A), dtype=complex)


def walk_generator(A, omega: float, epsilon: Optional[float] = None):
    """Generator of the nonmoralizing walk on a directed graph.

    Combines the default `nonmoralizing_lindbladian`,
    `global_hamiltonian` and `local_hamiltonian` of
    `qswalk.demoralization`.

    Args:
            A (np.ndarray or sparse matrix): Square connectivity matrix.
            omega (float): Weight of the dissipative part.
            epsilon (float): Threshold for the presence of an edge.

    Returns:
            (sp.csr_matrix, VertexSet): The generator and the vertex
            decomposition its states live on.
    """
    L, vset = nonmoralizing_lindbladian(A, epsilon=epsilon)
    H = global_hamiltonian(A, epsilon=epsilon)
    return evolve_generator(H, [L], omega, local_hamiltonian(vset)), vset
