"""Configuration dataclasses for ngsread.

Output locations for the CLI. Loader behavior is configured by keyword
arguments on the loaders themselves.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class OutputConfig:
    """Configuration for output files and directories.

    Attributes:
        outdir: Output directory for result files. Created if it doesn't exist.
        prefix: Prefix for output filenames (e.g., "result" produces "result.log.txt").
        verbose: Enable verbose/debug output to console.
    """

    outdir: Path = field(default_factory=lambda: Path("output"))
    prefix: str = "result"
    verbose: bool = False

    @property
    def log_path(self) -> Path:
        """Path to the run log: {outdir}/{prefix}.log.txt"""
        return self.outdir / f"{self.prefix}.log.txt"

    def output_path(self, suffix: str) -> Path:
        """Path to an output file: {outdir}/{prefix}.{suffix}"""
        return self.outdir / f"{self.prefix}.{suffix}"

    def ensure_outdir(self) -> None:
        """Create output directory if it doesn't exist."""
        self.outdir.mkdir(parents=True, exist_ok=True)
