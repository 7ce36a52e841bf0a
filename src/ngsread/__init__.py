"""ngsread: loaders for population-genetics genotype and position files.

ngsread reads per-site genotype information (discrete calls, genotype
likelihoods or posterior probabilities, as text or packed binary) into a
normalized log-probability matrix, and per-site positions into distances
between adjacent sites. Malformed input fails loudly with a typed error.

Example:
    >>> from ngsread import load_distances, load_genotypes
    >>> geno = load_genotypes("data/study.geno.gz", n_individuals=20, n_sites=1000)
    >>> dist = load_distances("data/study.pos.gz", n_sites=1000)
"""

import sys
from importlib.metadata import version

from loguru import logger

__version__ = version("ngsread")

# Configure loguru with sensible defaults on import
# Users can override by calling logger.remove()/add()
logger.remove()
logger.add(
    sys.stdout,
    level="INFO",
    format="{time:HH:mm:ss} | <level>{level: <8}</level> | {message}",
    colorize=True,
)

from ngsread.io import (  # noqa: E402
    DistanceArray,
    GenotypeMatrix,
    InputError,
    ProbabilityScale,
    load_distances,
    load_genotypes,
)

__all__ = [
    "DistanceArray",
    "GenotypeMatrix",
    "InputError",
    "ProbabilityScale",
    "load_distances",
    "load_genotypes",
    "__version__",
]
