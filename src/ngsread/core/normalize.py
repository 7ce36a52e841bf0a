"""Log-space conversion and normalization of genotype probabilities.

All genotype arithmetic finishes in natural-log space. Normalization works on
the last axis, so a single ``(3,)`` triple and an ``(n_individuals, 3)`` block
for one site go through the same code path.
"""

import numpy as np
from scipy.special import logsumexp


def to_log_scale(values: np.ndarray) -> np.ndarray:
    """Take the natural log elementwise without evaluating log(0).

    Zero probabilities map directly to -inf. Negative values are not valid
    probabilities and map to NaN so the caller's NaN check rejects them.

    Args:
        values: Probabilities or likelihoods on the linear scale.

    Returns:
        float64 array of the same shape on the log scale.
    """
    values = np.asarray(values, dtype=np.float64)
    out = np.full(values.shape, -np.inf)
    np.log(values, out=out, where=values > 0)
    out[values < 0] = np.nan
    # NaN inputs fail every comparison above and must stay NaN
    out[np.isnan(values)] = np.nan
    return out


def normalize_log_triple(values: np.ndarray) -> np.ndarray:
    """Normalize log-probabilities so each triple sums to 1 on the linear scale.

    Args:
        values: Log-probabilities, last axis of length 3.

    Returns:
        Normalized log-probabilities with the same shape. A triple that is
        entirely -inf (or holds NaN) comes back as NaN.
    """
    values = np.asarray(values, dtype=np.float64)
    with np.errstate(invalid="ignore", divide="ignore"):
        total = logsumexp(values, axis=-1, keepdims=True)
        return values - total


def has_nan(values: np.ndarray) -> bool:
    """Return True if any value is NaN."""
    return bool(np.isnan(values).any())
