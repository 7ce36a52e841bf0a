"""Genotype file loading.

Reads per-site, per-individual genotype information into a dense matrix of
log-probabilities. Three kinds of input are accepted:

- discrete calls, one field per individual coded as {-1, 0, 1, 2}
  (-1 or any negative value is missing data);
- genotype likelihoods or posterior probabilities, three fields per
  individual (hom ref, het, hom alt), as plain text;
- the same three values per individual as raw native-endian float64,
  site-major, no header or delimiters ("binary" format).

Text input may carry leading identifier columns; only the trailing
``n_individuals * fields_per_individual`` fields of each row are used.
Any of the formats may be gzip/bgzip compressed.

Whatever the input scale, the loaded matrix is always on the natural-log
scale and every (individual, site) triple is normalized.
"""

import gzip
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import BinaryIO

import numpy as np
from loguru import logger

from ngsread.core.memory import (
    check_memory_available,
    estimate_genotype_memory,
    log_memory_snapshot,
)
from ngsread.core.normalize import has_nan, normalize_log_triple, to_log_scale
from ngsread.core.progress import SiteProgress, site_progress
from ngsread.io.errors import (
    CorruptDataError,
    FormatError,
    TrailingDataError,
    TruncatedInputError,
)
from ngsread.io.streams import (
    at_end,
    log_skipped_header,
    open_stream,
    read_exact,
    read_line,
    tokenize,
)

N_GENOTYPES = 3
OPERATION = "load_genotypes"

_LOG_UNIFORM = np.log(1.0 / N_GENOTYPES)


class ProbabilityScale(Enum):
    """Scale of genotype probability values."""

    LINEAR = "linear"
    LOG = "log"


@dataclass
class GenotypeMatrix:
    """Normalized genotype log-probabilities.

    Attributes:
        log_probs: Array of shape (n_individuals, n_sites + 1, 3) indexed as
            [individual, site, genotype]. Sites are 1-based; site 0 is unused
            and holds -inf. Genotype classes are hom ref, het, hom alt.
    """

    log_probs: np.ndarray

    @property
    def scale(self) -> ProbabilityScale:
        """Loaded matrices are always on the log scale."""
        return ProbabilityScale.LOG

    @property
    def n_individuals(self) -> int:
        return self.log_probs.shape[0]

    @property
    def n_sites(self) -> int:
        return self.log_probs.shape[1] - 1

    def site(self, s: int) -> np.ndarray:
        """Log-probabilities for 1-based site ``s``, shape (n_individuals, 3).

        Raises:
            IndexError: If ``s`` is outside 1..n_sites.
        """
        if not 1 <= s <= self.n_sites:
            raise IndexError(f"Site {s} out of range 1..{self.n_sites}")
        return self.log_probs[:, s, :]

    def probabilities(self) -> np.ndarray:
        """Linear-scale probabilities with the same shape and indexing."""
        return np.exp(self.log_probs)

    def calls(self) -> np.ndarray:
        """Most probable genotype per individual and site.

        Returns:
            int array of shape (n_individuals, n_sites) for sites 1..n_sites,
            with values in {0, 1, 2}.
        """
        return np.argmax(self.log_probs[:, 1:, :], axis=2)


def is_genotype_header(tokens: list[str]) -> bool:
    """Return True if a tokenized genotype row is a header.

    A row with no numeric field at all (including an all-whitespace row) is a
    header. Rows with leading identifier columns still hold numeric genotype
    fields and are data.
    """
    return not any(_is_number(token) for token in tokens)


def _is_number(token: str) -> bool:
    try:
        float(token)
    except ValueError:
        return False
    return True


def load_genotypes(
    path: Path,
    n_individuals: int,
    n_sites: int,
    *,
    binary: bool = False,
    probabilistic: bool = True,
    scale: ProbabilityScale = ProbabilityScale.LINEAR,
    show_progress: bool = False,
    check_memory: bool = True,
) -> GenotypeMatrix:
    """Load a genotype file into a normalized log-probability matrix.

    Args:
        path: Genotype file, plain or gzip compressed.
        n_individuals: Number of individuals per site.
        n_sites: Number of sites; must match the number of data rows exactly.
        binary: Input is raw float64 triples rather than text.
        probabilistic: Text input holds 3 values per individual (likelihoods
            or posteriors). If False, text holds 1 discrete call per
            individual. Binary input is always probabilistic.
        scale: Scale of the input values. Ignored for discrete calls.
        show_progress: Draw a progress bar over sites.
        check_memory: Check available memory before allocating the matrix.

    Returns:
        GenotypeMatrix on the log scale.

    Raises:
        ValueError: If n_individuals or n_sites is not positive.
        MemoryError: If check_memory is set and the matrix will not fit.
        StreamOpenError: If the file cannot be opened.
        TruncatedInputError: If the file ends before n_sites sites.
        FormatError: If a row has too few fields or an invalid value.
        CorruptDataError: If normalization yields NaN.
        TrailingDataError: If data remains after n_sites sites.

    Example:
        >>> geno = load_genotypes(Path("data/study.geno.gz"), 20, 1000)
        >>> geno.calls().shape
        (20, 1000)
    """
    if n_individuals < 1 or n_sites < 1:
        raise ValueError(
            "n_individuals and n_sites must be positive "
            f"(got {n_individuals}, {n_sites})"
        )
    if check_memory:
        check_memory_available(
            estimate_genotype_memory(n_individuals, n_sites),
            operation="genotype matrix allocation",
        )

    path = Path(path)
    log_probs = np.full((n_individuals, n_sites + 1, N_GENOTYPES), -np.inf)
    log_memory_snapshot("after_allocation")

    kind = "binary" if binary else ("probabilistic" if probabilistic else "called")
    logger.info(
        f"Reading {n_sites} sites for {n_individuals} individuals from {path} "
        f"({kind}, {scale.value} scale)"
    )

    with open_stream(path, OPERATION) as handle, site_progress(
        n_sites, desc="Reading genotypes", enabled=show_progress
    ) as progress:
        if binary:
            _read_binary_sites(handle, log_probs, scale, progress)
        else:
            _read_text_sites(handle, log_probs, probabilistic, scale, progress)

        if not at_end(handle):
            raise TrailingDataError(
                OPERATION,
                "GENO file not at EOF. Check GENO file and number of sites!",
            )

    logger.info(f"Loaded genotypes for {n_sites} sites")
    return GenotypeMatrix(log_probs=log_probs)


def _read_binary_sites(
    handle: BinaryIO,
    log_probs: np.ndarray,
    scale: ProbabilityScale,
    progress: SiteProgress,
) -> None:
    n_individuals = log_probs.shape[0]
    n_sites = log_probs.shape[1] - 1
    block_size = n_individuals * N_GENOTYPES * np.dtype(np.float64).itemsize

    for s in range(1, n_sites + 1):
        block = read_exact(handle, block_size)
        if len(block) != block_size:
            raise TruncatedInputError(
                OPERATION,
                f"cannot read site {s} from binary GENO file "
                f"(got {len(block)} of {block_size} bytes). "
                "Check GENO file and number of sites!",
            )
        values = np.frombuffer(block, dtype=np.float64).reshape(
            n_individuals, N_GENOTYPES
        )
        if scale is ProbabilityScale.LINEAR:
            values = to_log_scale(values)

        log_probs[:, s, :] = _normalized(values, f"site {s}")
        progress.advance()


def _read_text_sites(
    handle: BinaryIO,
    log_probs: np.ndarray,
    probabilistic: bool,
    scale: ProbabilityScale,
    progress: SiteProgress,
) -> None:
    n_individuals = log_probs.shape[0]
    n_sites = log_probs.shape[1] - 1
    fields_per_individual = N_GENOTYPES if probabilistic else 1
    n_expected = n_individuals * fields_per_individual

    s = 1
    line_number = 0
    while s <= n_sites:
        line = read_line(handle)
        if line is None:
            raise TruncatedInputError(
                OPERATION,
                f"file ended after {s - 1} of {n_sites} sites. "
                "Check GENO file and number of sites!",
            )
        line_number += 1

        # Blank lines are ignored and do not consume a site
        if not line:
            continue

        tokens = tokenize(line)
        if is_genotype_header(tokens):
            log_skipped_header(OPERATION, line, s - 1)
            continue

        if len(tokens) < n_expected:
            raise FormatError(
                OPERATION,
                f"wrong GENO file format on line {line_number}: "
                f"{len(tokens)} fields, expected at least {n_expected}",
            )

        # Use the last n_expected columns; leading columns are identifiers
        values = _parse_fields(tokens[len(tokens) - n_expected :], line_number)

        if probabilistic:
            values = values.reshape(n_individuals, N_GENOTYPES)
            site = to_log_scale(values) if scale is ProbabilityScale.LINEAR else values
        else:
            site = _calls_to_log(values, line_number)

        log_probs[:, s, :] = _normalized(site, f"line {line_number}")
        progress.advance()
        s += 1


def _parse_fields(tokens: list[str], line_number: int) -> np.ndarray:
    try:
        return np.array([float(token) for token in tokens], dtype=np.float64)
    except ValueError as e:
        raise FormatError(
            OPERATION, f"non-numeric genotype field on line {line_number} ({e})"
        ) from e


def _calls_to_log(calls: np.ndarray, line_number: int) -> np.ndarray:
    """Convert discrete calls to log-probability triples.

    A call g in {0, 1, 2} puts all mass on class g; a negative call is missing
    data and gets a uniform distribution.
    """
    site = np.full((len(calls), N_GENOTYPES), -np.inf)
    for i, value in enumerate(calls):
        if not np.isfinite(value):
            raise FormatError(
                OPERATION,
                f"invalid genotype {value} on line {line_number}. "
                "Genotypes must be coded as {-1,0,1,2}!",
            )
        g = int(value)  # truncates toward zero
        if g > 2:
            raise FormatError(
                OPERATION,
                f"invalid genotype {g} on line {line_number}. "
                "Genotypes must be coded as {-1,0,1,2}!",
            )
        if g >= 0:
            site[i, g] = 0.0
        else:
            site[i, :] = _LOG_UNIFORM
    return site


def _normalized(site: np.ndarray, where: str) -> np.ndarray:
    site = normalize_log_triple(site)
    if has_nan(site):
        raise CorruptDataError(
            OPERATION, f"NaN found at {where}! Is the file format correct?"
        )
    return site


def write_genotype_binary(
    path: Path,
    genotypes: GenotypeMatrix | np.ndarray,
    compress: bool = False,
) -> None:
    """Write genotype triples in the binary input format.

    Values are written as native-endian float64 in site-major, then
    individual, then genotype order, with no header.

    Args:
        path: Output file path.
        genotypes: A GenotypeMatrix (written without its site-0 sentinel) or
            an array of shape (n_individuals, n_sites, 3).
        compress: gzip-compress the output.

    Raises:
        ValueError: If the array does not have shape (n_individuals, n_sites, 3).
    """
    if isinstance(genotypes, GenotypeMatrix):
        values = genotypes.log_probs[:, 1:, :]
    else:
        values = np.asarray(genotypes, dtype=np.float64)

    if values.ndim != 3 or values.shape[2] != N_GENOTYPES:
        raise ValueError(
            "Genotypes must have shape (n_individuals, n_sites, 3), "
            f"got {values.shape}"
        )

    data = np.ascontiguousarray(values.transpose(1, 0, 2), dtype=np.float64)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    opener = gzip.open if compress else open
    with opener(path, "wb") as f:
        f.write(data.tobytes())
