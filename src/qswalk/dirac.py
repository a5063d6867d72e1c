#!/usr/bin/env python

"""Basis vectors, projectors and (de)vectorization.

Vectors use 1-based indices, so `basis_vector(1, n)` is the first
canonical basis vector. Vectorization is row-major, i.e. the matrix
rows are concatenated, which makes `vectorize(A @ rho @ B)` equal to
`np.kron(A, B.T) @ vectorize(rho)`.
"""
import math

import numpy as np
import scipy.sparse as sp


def basis_vector(index: int, size: int) -> sp.csr_matrix:
    """Canonical basis (column) vector.

    Args:
            index (int): Position of the unit entry (1-based).
            size (int): Dimension of the space.

    Returns:
            sp.csr_matrix: Sparse column of shape `(size, 1)`.

    >>> basis_vector(2, 3).toarray()
    array([[0],
           [1],
           [0]])
    """
    if size <= 0:
        raise ValueError(f"vector size must be positive, got {size}")
    if not 1 <= index <= size:
        raise ValueError(
            f"index must be in [1, {size}], got {index}"
        )
    return sp.csr_matrix(([1], ([index - 1], [0])), shape=(size, 1), dtype=int)


def basis_covector(index: int, size: int) -> sp.csr_matrix:
    """Conjugate transpose of `basis_vector`, a row of shape `(1, size)`."""
    return basis_vector(index, size).conj().T.tocsr()


def basis_matrix(row: int, col: int, size: int) -> sp.csr_matrix:
    """Elementary matrix with a single unit entry at (`row`, `col`).

    >>> basis_matrix(1, 2, 2).toarray()
    array([[0, 1],
           [0, 0]])
    """
    return (basis_vector(row, size) @ basis_covector(col, size)).tocsr()


def projector(vector, size: int = None):
    """Rank-1 projector.

    Args:
            vector (int or array-like): Either the (1-based) index of a
                basis vector, in which case `size` is required, or an
                arbitrary vector (dense 1-D array or sparse column).
            size (int): Dimension of the space when `vector` is an index.

    Returns:
            The outer product of the vector with its own conjugate,
            sparse for basis vectors and sparse input.

    >>> projector(1, 2).toarray()
    array([[1, 0],
           [0, 0]])
    >>> projector(np.array([1, 1j]))
    array([[1.+0.j, 0.-1.j],
           [0.+1.j, 1.+0.j]])
    """
    if size is not None:
        return basis_matrix(vector, vector, size)
    if sp.issparse(vector):
        return (vector @ vector.conj().T).tocsr()
    vector = np.asarray(vector).ravel()
    return np.outer(vector, vector.conj())


def vectorize(matrix):
    """Row-major vectorization of a square matrix.

    Dense input gives a 1-D array, sparse input a sparse column.

    >>> vectorize(np.array([[1, 2], [3, 4]]))
    array([1, 2, 3, 4])
    """
    if not sp.issparse(matrix):
        matrix = np.asarray(matrix)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise ValueError(f"Expected a square matrix, got shape {matrix.shape}")
    if sp.issparse(matrix):
        return sp.csr_matrix(matrix).reshape((matrix.shape[0] ** 2, 1)).tocsr()
    return matrix.reshape(-1)


def devectorize(vector):
    """Inverse of `vectorize`.

    Args:
            vector: Dense 1-D array, dense column or sparse column whose
                length is a perfect square.

    Returns:
            The square matrix (sparse for sparse input).

    >>> devectorize(np.array([1, 2, 3, 4]))
    array([[1, 2],
           [3, 4]])
    >>> devectorize(np.arange(3))
    Traceback (most recent call last):
    ...
    ValueError: Expected vector with perfect square number of elements, got 3
    """
    if not sp.issparse(vector):
        vector = np.asarray(vector)
    length = math.prod(vector.shape)
    dim = math.isqrt(length)
    if dim * dim != length:
        raise ValueError(
            f"Expected vector with perfect square number of elements, got {length}"
        )
    if sp.issparse(vector):
        return sp.csr_matrix(vector).reshape((dim, dim)).tocsr()
    return vector.reshape(dim, dim)


def fourier_matrix(size: int) -> np.ndarray:
    """Discrete Fourier matrix.

    Entries are `exp(2 pi i r c / size)` for 0-based row `r` and column
    `c`. The columns are mutually orthogonal, which is what the
    nonmoralizing Lindblad operator relies on.

    Args:
            size (int): Number of rows and columns.

    Returns:
            np.ndarray: Complex matrix of shape `(size, size)`.

    >>> fourier_matrix(1)
    array([[1.+0.j]])
    """
    if size <= 0:
        raise ValueError(f"Size of the matrix needs to be positive, got {size}")
    k = np.arange(size)
    return np.exp(2j * np.pi * np.outer(k, k) / size)
