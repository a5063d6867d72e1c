#! /usr/bin/env python

import doctest
import unittest

import numpy as np
import scipy.sparse as sp

from qswalk import dirac


def load_tests(loader, tests, ignore):
    tests.addTests(doctest.DocTestSuite(dirac))
    return tests


class BasisTests(unittest.TestCase):
    def test_basis_vector(self):
        for size in range(1, 6):
            for index in range(1, size + 1):
                v = dirac.basis_vector(index, size)
                self.assertEqual(v.shape, (size, 1))
                self.assertEqual(v.nnz, 1)
                self.assertEqual(v[index - 1, 0], 1)

    def test_basis_vector_invalid(self):
        with self.assertRaises(ValueError):
            dirac.basis_vector(1, 0)
        with self.assertRaises(ValueError):
            dirac.basis_vector(0, 3)
        with self.assertRaises(ValueError):
            dirac.basis_vector(4, 3)

    def test_basis_covector(self):
        w = dirac.basis_covector(2, 4)
        self.assertEqual(w.shape, (1, 4))
        np.testing.assert_array_equal(w.toarray(), [[0, 1, 0, 0]])

    def test_basis_matrix(self):
        M = dirac.basis_matrix(3, 1, 3)
        expected = np.zeros((3, 3))
        expected[2, 0] = 1
        np.testing.assert_array_equal(M.toarray(), expected)

    def test_projector_index(self):
        P = dirac.projector(2, 3)
        np.testing.assert_array_equal(P.toarray(), np.diag([0, 1, 0]))

    def test_projector_vector(self):
        v = np.array([1, 1j, 0]) / np.sqrt(2)
        P = dirac.projector(v)
        np.testing.assert_allclose(P @ P, P, atol=1e-12)
        np.testing.assert_allclose(P, P.conj().T)
        self.assertAlmostEqual(np.trace(P).real, 1.0)

    def test_projector_sparse_vector(self):
        v = dirac.basis_vector(1, 2) + dirac.basis_vector(2, 2)
        P = dirac.projector(v)
        self.assertTrue(sp.issparse(P))
        np.testing.assert_array_equal(P.toarray(), np.ones((2, 2)))


class VectorizationTests(unittest.TestCase):
    def test_row_major(self):
        M = np.array([[1, 2, 3], [4, 5, 6], [7, 8, 9]])
        np.testing.assert_array_equal(dirac.vectorize(M), np.arange(1, 10))

    def test_devectorize_vectorize(self):
        rng = np.random.default_rng(42)
        for n in [1, 2, 5]:
            M = rng.normal(size=(n, n)) + 1j * rng.normal(size=(n, n))
            np.testing.assert_array_equal(dirac.devectorize(dirac.vectorize(M)), M)

    def test_vectorize_devectorize(self):
        v = np.arange(16) * (1 + 2j)
        np.testing.assert_array_equal(dirac.vectorize(dirac.devectorize(v)), v)

    def test_sparse(self):
        M = sp.csr_matrix(np.array([[0, 1], [2, 0]]))
        v = dirac.vectorize(M)
        self.assertEqual(v.shape, (4, 1))
        np.testing.assert_array_equal(v.toarray().ravel(), [0, 1, 2, 0])
        np.testing.assert_array_equal(dirac.devectorize(v).toarray(), M.toarray())

    def test_devectorize_not_square(self):
        for n in [2, 3, 5, 7]:
            with self.assertRaises(ValueError):
                dirac.devectorize(np.ones(n))

    def test_vectorize_not_square(self):
        with self.assertRaises(ValueError):
            dirac.vectorize(np.ones((2, 3)))

    def test_superoperator_identity(self):
        """Row-major: vec(A rho B) == kron(A, B.T) vec(rho)."""
        rng = np.random.default_rng(0)
        A, rho, B = (rng.normal(size=(3, 3)) for _ in range(3))
        np.testing.assert_allclose(
            dirac.vectorize(A @ rho @ B),
            np.kron(A, B.T) @ dirac.vectorize(rho),
        )


class FourierTests(unittest.TestCase):
    def test_size_one(self):
        np.testing.assert_array_equal(dirac.fourier_matrix(1), [[1]])

    def test_size_two(self):
        F = dirac.fourier_matrix(2)
        np.testing.assert_allclose(np.abs(F), np.ones((2, 2)))
        np.testing.assert_array_equal(F, F.T)
        np.testing.assert_allclose(F, [[1, 1], [1, -1]], atol=1e-12)

    def test_orthogonal_columns(self):
        for n in range(1, 7):
            F = dirac.fourier_matrix(n)
            np.testing.assert_allclose(F.conj().T @ F, n * np.eye(n), atol=1e-10)

    def test_invalid(self):
        with self.assertRaises(ValueError):
            dirac.fourier_matrix(0)
