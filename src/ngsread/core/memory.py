"""Memory estimation and checking before genotype matrix allocation.

The genotype matrix is loaded whole, so a large site count with many
individuals can exhaust RAM. Checking before allocation fails fast instead of
being killed mid-parse.
"""

from typing import NamedTuple

import psutil
from loguru import logger

N_GENOTYPES = 3
BYTES_PER_VALUE = 8  # float64


def estimate_genotype_memory(n_individuals: int, n_sites: int) -> float:
    """Estimate memory (GB) for a genotype matrix including the site-0 sentinel.

    Args:
        n_individuals: Number of individuals.
        n_sites: Number of sites.

    Returns:
        Size in GB of an (n_individuals, n_sites + 1, 3) float64 array.

    Example:
        >>> estimate_genotype_memory(1_000, 1_000_000)
        24.000024
    """
    n_values = n_individuals * (n_sites + 1) * N_GENOTYPES
    return n_values * BYTES_PER_VALUE / 1e9


def check_memory_available(
    required_gb: float,
    safety_margin: float = 0.1,
    operation: str = "operation",
) -> bool:
    """Check if sufficient memory is available, raise if not.

    Args:
        required_gb: Memory required in GB.
        safety_margin: Additional margin (0.1 = 10%).
        operation: Description for error message.

    Returns:
        True if sufficient memory available.

    Raises:
        MemoryError: If insufficient memory with detailed message.
    """
    available_gb = psutil.virtual_memory().available / 1e9
    required_with_margin = required_gb * (1 + safety_margin)

    if required_with_margin > available_gb:
        raise MemoryError(
            f"Insufficient memory for {operation}. "
            f"Need {required_gb:.1f}GB (+{safety_margin*100:.0f}% margin = "
            f"{required_with_margin:.1f}GB), but only {available_gb:.1f}GB available. "
            "Reduce the number of sites per file or use a machine with more RAM."
        )

    return True


class MemorySnapshot(NamedTuple):
    """Snapshot of current memory state for debugging.

    All values in GB.
    """

    rss_gb: float  # Resident Set Size (actual RAM used by process)
    available_gb: float  # Available system memory
    total_gb: float  # Total system memory


def get_memory_snapshot() -> MemorySnapshot:
    """Get current memory usage snapshot."""
    vm = psutil.virtual_memory()
    return MemorySnapshot(
        rss_gb=psutil.Process().memory_info().rss / 1e9,
        available_gb=vm.available / 1e9,
        total_gb=vm.total / 1e9,
    )


def log_memory_snapshot(label: str = "", level: str = "DEBUG") -> MemorySnapshot:
    """Log current memory state with optional label.

    Args:
        label: Optional label for this snapshot (e.g., "after_load").
        level: Log level ("DEBUG", "INFO", "WARNING").

    Returns:
        MemorySnapshot for chaining/assertions.
    """
    snap = get_memory_snapshot()
    prefix = f"[{label}] " if label else ""
    logger.log(
        level,
        f"{prefix}Memory: RSS={snap.rss_gb:.2f}GB, "
        f"available={snap.available_gb:.1f}GB/{snap.total_gb:.1f}GB",
    )
    return snap
