"""Site position file loading.

Reads ``chromosome position ...`` rows (one per site, whitespace delimited,
extra columns ignored) and converts them to distances between adjacent sites.
The first site of each chromosome has infinite distance to its predecessor.
"""

from dataclasses import dataclass
from pathlib import Path

import numpy as np
from loguru import logger

from ngsread.core.progress import site_progress
from ngsread.io.errors import (
    FormatError,
    InvalidDistanceError,
    TrailingDataError,
    TruncatedInputError,
)
from ngsread.io.streams import (
    at_end,
    log_skipped_header,
    open_stream,
    read_line,
    tokenize,
)

OPERATION = "load_distances"


@dataclass
class DistanceArray:
    """Distances between adjacent sites.

    Attributes:
        distances: Array of shape (n_sites + 1,). Sites are 1-based; index 0
            is unused and holds +inf. A site that starts a chromosome has
            distance +inf, every other site has distance >= 1.
        chromosomes: Chromosome id per site, same indexing (index 0 is None).
    """

    distances: np.ndarray
    chromosomes: list[str | None]

    @property
    def n_sites(self) -> int:
        return len(self.distances) - 1

    def chromosome_starts(self) -> np.ndarray:
        """1-based sites that begin a chromosome."""
        return np.flatnonzero(np.isinf(self.distances[1:])) + 1


def _position_value(token: str) -> float:
    """Numeric value of a position field; non-numeric text counts as zero."""
    try:
        return float(token)
    except ValueError:
        return 0.0


def is_position_header(tokens: list[str]) -> bool:
    """Return True if a tokenized position row is a header.

    Headers are told apart from data by the position column: a row is a
    header if it has no fields or its second field is zero or non-numeric
    (e.g. ``chr pos``). Real positions are 1-based, so a zero never occurs
    in data.
    """
    if not tokens:
        return True
    return len(tokens) >= 2 and _position_value(tokens[1]) == 0


def _parse_position(token: str, line_number: int) -> int:
    # Integer text is parsed exactly; only forms like 1e5 go through float
    try:
        value = int(token)
    except ValueError:
        number = _position_value(token)
        value = int(number) if number.is_integer() else -1
    if value < 0:
        raise FormatError(
            OPERATION,
            f"invalid position {token!r} on line {line_number}. "
            "Positions must be non-negative integers!",
        )
    return value


def load_distances(
    path: Path,
    n_sites: int,
    *,
    show_progress: bool = False,
) -> DistanceArray:
    """Load a position file into distances between adjacent sites.

    Args:
        path: Position file, plain or gzip compressed.
        n_sites: Number of sites; must match the number of data rows exactly.
        show_progress: Draw a progress bar over sites.

    Returns:
        DistanceArray with +inf at the first site of every chromosome.

    Raises:
        ValueError: If n_sites is not positive.
        StreamOpenError: If the file cannot be opened.
        TruncatedInputError: If the file ends before n_sites sites.
        FormatError: If a row has fewer than 2 fields or a bad position.
        InvalidDistanceError: If positions on a chromosome are not increasing.
        TrailingDataError: If data remains after n_sites sites.

    Example:
        Position file contents:
        ```
        chr1 100
        chr1 150
        chr2 10
        ```

        >>> dist = load_distances(Path("sites.pos"), 3)
        >>> dist.distances[1:]
        array([inf, 50., inf])
    """
    if n_sites < 1:
        raise ValueError(f"n_sites must be positive (got {n_sites})")

    path = Path(path)
    distances = np.full(n_sites + 1, np.inf)
    chromosomes: list[str | None] = [None] * (n_sites + 1)
    prev_chrom: str | None = None
    prev_pos = 0

    logger.info(f"Reading {n_sites} site positions from {path}")

    with open_stream(path, OPERATION) as handle, site_progress(
        n_sites, desc="Reading positions", enabled=show_progress
    ) as progress:
        s = 1
        line_number = 0
        while s <= n_sites:
            line = read_line(handle)
            if line is None:
                raise TruncatedInputError(
                    OPERATION,
                    f"cannot read next site from POS file after {s - 1} of "
                    f"{n_sites} sites",
                )
            line_number += 1

            # Blank lines are ignored and do not consume a site
            if not line:
                continue

            tokens = tokenize(line)
            if is_position_header(tokens):
                log_skipped_header(OPERATION, line, s - 1)
                continue

            if len(tokens) < 2:
                raise FormatError(
                    OPERATION,
                    f"wrong POS file format on line {line_number}: "
                    "expected chromosome and position",
                )

            chrom = tokens[0]
            pos = _parse_position(tokens[1], line_number)

            if prev_chrom == chrom:
                distance = pos - prev_pos
                if distance < 1:
                    raise InvalidDistanceError(
                        OPERATION,
                        "invalid distance between adjacent sites on line "
                        f"{line_number} ({chrom}:{prev_pos} -> {chrom}:{pos})",
                    )
                distances[s] = distance
            else:
                # First site overall or first site of a new chromosome
                distances[s] = np.inf
                prev_chrom = chrom
            prev_pos = pos
            chromosomes[s] = chrom

            progress.advance()
            s += 1

        if not at_end(handle):
            raise TrailingDataError(
                OPERATION,
                "POS file not at EOF. Check POS file and number of sites!",
            )

    result = DistanceArray(distances=distances, chromosomes=chromosomes)
    logger.info(
        f"Loaded {n_sites} positions on {len(result.chromosome_starts())} "
        "chromosome segments"
    )
    return result


def write_distances(path: Path, dist: DistanceArray) -> None:
    """Write one distance per line for sites 1..n_sites.

    Chromosome starts are written as ``inf``.

    Args:
        path: Output file path.
        dist: Distances to write.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        for value in dist.distances[1:]:
            f.write(f"{value:.10g}\n")
