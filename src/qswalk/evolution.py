#!/usr/bin/env python

"""Time evolution with a GKSL generator.

Thin wrapper around `scipy.sparse.linalg.expm_multiply`; the generator
comes from `qswalk.operator.evolve_generator` or any other source
acting on row-major vectorized density matrices.
"""
import logging
from typing import Iterable, Union

import numpy as np
import scipy.sparse as sp
from scipy.sparse.linalg import expm_multiply

from .dirac import devectorize, vectorize

logger = logging.getLogger(__name__)


def evolve(generator, state, times: Union[float, Iterable[float]]) -> np.ndarray:
    """Evolve a state with `exp(t * G)`.

    Args:
            generator: Square generator `G` of dimension `n**2`.
            state: Vectorized state of length `n**2`, or an `n` by `n`
                density matrix (dense or sparse).
            times (float or Iterable[float]): One time or a sequence of
                times.

    Returns:
            np.ndarray: The evolved state in the form of `state` (a
            dense matrix for matrix input).  For a sequence of times
            the states are stacked along the first axis.
    """
    G = sp.csr_matrix(generator, dtype=complex)
    if G.shape[0] != G.shape[1]:
        raise ValueError(f"generator should be square, got shape {G.shape}")
    if sp.issparse(state):
        state = state.toarray()
    state = np.asarray(state, dtype=complex)

    is_matrix = state.ndim == 2 and state.shape[0] == state.shape[1]
    rho = vectorize(state) if is_matrix else state.reshape(-1)
    if rho.shape[0] != G.shape[0]:
        raise ValueError(
            f"generator dimension {G.shape[0]} and vectorized state length "
            f"{rho.shape[0]} do not match"
        )

    def step(t):
        result = expm_multiply(t * G, rho)
        return devectorize(result) if is_matrix else result

    if np.ndim(times) == 0:
        return step(times)
    times = list(times)
    logger.debug("Evolving dimension %d over %d times", G.shape[0], len(times))
    return np.array([step(t) for t in times])
