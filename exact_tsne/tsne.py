"""
t-DISTRIBUTED STOCHASTIC NEIGHBOR EMBEDDING (t-SNE): exact formulation

===============================================================
WHAT IT IS (THE CORE IDEA)
===============================================================

Convert DISTANCES to PROBABILITIES. Then make low-D match high-D.

High-dimensional: "How likely is point j to be point i's neighbor?"
    → Gaussian: p(j|i) ∝ exp(-||x_i - x_j||² / 2σ_i²)

Low-dimensional: "Same question, in the embedding"
    → Student-t: q_ij ∝ (1 + ||y_i - y_j||²)^(-1)

Objective: make Q look like P
    → Minimize KL(P || Q) via momentum gradient descent

===============================================================
THE PIPELINE
===============================================================

    validate X
    D     = pairwise squared distances of X          (once)
    σ     = per-point bisection to target perplexity  (once)
    P     = symmetrized Gaussian affinities / 2n      (once)
    Y     = uniform random in [-0.5, 0.5)
    repeat n_iter times:
        Q, grad from current Y
        Y ← Y - lr·grad + momentum·(Y - Y_prev)

Everything is exact and O(n²) per iteration: fine for hundreds to a
few thousand points, not more. There is no early exaggeration phase
and no convergence check.

===============================================================
"""

import logging

import numpy as np

from .affinities import joint_probabilities
from .distances import pairwise_squared_distances
from .optimizer import init_embedding, optimize
from .perplexity import DEFAULT_MAX_ITER, DEFAULT_TOL, calibrate_sigmas
from .validation import validate_input

log = logging.getLogger(__name__)

# Option names accepted by TSNE.from_config, mapped to __init__ arguments.
CONFIG_KEYS = {
    'nDims': 'n_dims',
    'n_dims': 'n_dims',
    'perplexity': 'perplexity',
    'learningRate': 'learning_rate',
    'learning_rate': 'learning_rate',
    'nIter': 'n_iter',
    'n_iter': 'n_iter',
    'randomState': 'random_state',
    'random_state': 'random_state',
    'perplexityTol': 'perplexity_tol',
    'perplexity_tol': 'perplexity_tol',
    'maxSigmaIter': 'max_sigma_iter',
    'max_sigma_iter': 'max_sigma_iter',
    'verbose': 'verbose',
}


class TSNE:
    """
    Exact t-SNE with momentum gradient descent.

    Parameters:
    -----------
    n_dims : int
        Output dimensionality (>= 1).
    perplexity : float
        Effective number of neighbors. Should be below the number of
        samples for the calibration to be meaningful.
    learning_rate : float
        Step size for gradient descent.
    n_iter : int
        Number of optimization iterations, always run in full.
    random_state : None, int or numpy.random.Generator
        Source for the initial embedding. None draws fresh entropy on
        every call, so unseeded runs differ.
    perplexity_tol : float
        Absolute tolerance of the per-point perplexity bisection.
    max_sigma_iter : int
        Bisection steps per point.
    verbose : bool
        Log progress at INFO instead of DEBUG.
    """

    def __init__(self, n_dims=2, perplexity=30.0, learning_rate=1.0,
                 n_iter=100, random_state=None, perplexity_tol=DEFAULT_TOL,
                 max_sigma_iter=DEFAULT_MAX_ITER, verbose=False):
        if int(n_dims) != n_dims or n_dims < 1:
            raise ValueError(f"n_dims must be a positive integer, got {n_dims!r}")
        if not np.isfinite(perplexity) or perplexity <= 0:
            raise ValueError(f"perplexity must be a positive finite number, got {perplexity!r}")
        if not np.isfinite(learning_rate) or learning_rate <= 0:
            raise ValueError(f"learning_rate must be a positive finite number, got {learning_rate!r}")
        if int(n_iter) != n_iter or n_iter < 0:
            raise ValueError(f"n_iter must be a non-negative integer, got {n_iter!r}")

        self.n_dims = int(n_dims)
        self.perplexity = float(perplexity)
        self.learning_rate = float(learning_rate)
        self.n_iter = int(n_iter)
        self.random_state = random_state
        self.perplexity_tol = perplexity_tol
        self.max_sigma_iter = max_sigma_iter
        self.verbose = verbose

        # Diagnostics from the last transform call
        self.kl_divergence_ = None
        self.kl_history_ = []

    @classmethod
    def from_config(cls, config=None):
        """
        Build from a mapping of options.

        Accepts camelCase (nDims, learningRate, nIter) or snake_case keys.
        Missing options take their defaults; unknown keys are ignored.
        """
        kwargs = {}
        for key, value in (config or {}).items():
            if key in CONFIG_KEYS:
                kwargs[CONFIG_KEYS[key]] = value
            else:
                log.debug("Ignoring unrecognized t-SNE option %r", key)
        return cls(**kwargs)

    def _rng(self):
        if isinstance(self.random_state, np.random.Generator):
            return self.random_state
        return np.random.default_rng(self.random_state)

    def transform(self, X):
        """
        Compute the t-SNE embedding of X.

        Args:
            X: (n_samples, n_features) finite numbers, n_samples >= 2

        Returns:
            Y: (n_samples, n_dims) embedding

        Raises:
            DataValidationError: X is not a valid matrix
        """
        X = validate_input(X)
        n = X.shape[0]
        level = logging.INFO if self.verbose else logging.DEBUG

        if self.perplexity >= n:
            log.warning("Perplexity (%s) should be less than n_samples (%d); "
                        "affinities will be close to uniform.", self.perplexity, n)

        # Step 1: fixed high-dimensional affinities
        distances = pairwise_squared_distances(X)
        sigmas = calibrate_sigmas(distances, self.perplexity,
                                  tol=self.perplexity_tol, max_iter=self.max_sigma_iter)
        P = joint_probabilities(distances, sigmas)
        log.log(level, "Calibrated %d sigmas (perplexity=%s): min=%.4g, median=%.4g, max=%.4g",
                n, self.perplexity, sigmas.min(), np.median(sigmas), sigmas.max())

        # Step 2: random initial embedding
        Y = init_embedding(n, self.n_dims, self._rng())

        # Step 3: optimize
        Y, kl_history = optimize(P, Y, self.n_iter, self.learning_rate,
                                 verbose=self.verbose)

        self.kl_history_ = kl_history
        self.kl_divergence_ = kl_history[-1] if kl_history else None
        return Y

    fit_transform = transform

    def __repr__(self):
        return (f"TSNE(n_dims={self.n_dims}, perplexity={self.perplexity}, "
                f"learning_rate={self.learning_rate}, n_iter={self.n_iter})")
