"""I/O modules for ngsread.

This package contains loaders for population-genetics input files:
- genotypes: genotype calls, likelihoods or posteriors (text or binary)
- positions: site positions converted to inter-site distances
- errors: input error taxonomy shared by the loaders
"""

from ngsread.io.errors import (
    CorruptDataError,
    FormatError,
    InputError,
    InvalidDistanceError,
    StreamOpenError,
    TrailingDataError,
    TruncatedInputError,
)
from ngsread.io.genotypes import (
    GenotypeMatrix,
    ProbabilityScale,
    is_genotype_header,
    load_genotypes,
    write_genotype_binary,
)
from ngsread.io.positions import (
    DistanceArray,
    is_position_header,
    load_distances,
    write_distances,
)

__all__ = [
    "CorruptDataError",
    "DistanceArray",
    "FormatError",
    "GenotypeMatrix",
    "InputError",
    "InvalidDistanceError",
    "ProbabilityScale",
    "StreamOpenError",
    "TrailingDataError",
    "TruncatedInputError",
    "is_genotype_header",
    "is_position_header",
    "load_distances",
    "load_genotypes",
    "write_distances",
    "write_genotype_binary",
]
