"""ngsread command-line interface.

This module provides a Typer-based CLI for checking and converting
population-genetics input files: ``geno`` loads a genotype file and
``pos`` loads a site position file, each writing a run log.
"""

import sys
import time
from pathlib import Path
from typing import Annotated

import typer

import ngsread
from ngsread.core import OutputConfig, estimate_genotype_memory
from ngsread.io import (
    InputError,
    ProbabilityScale,
    load_distances,
    load_genotypes,
    write_distances,
    write_genotype_binary,
)
from ngsread.utils import setup_logging, write_run_log

app = typer.Typer(
    name="ngsread",
    help="ngsread: load and validate genotype and position files.",
    add_completion=False,
)

# Store global options set by callback
_global_config: OutputConfig | None = None


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"ngsread version {ngsread.__version__}")
        raise typer.Exit()


@app.callback()
def main(
    outdir: Annotated[
        Path,
        typer.Option("-outdir", help="Output directory"),
    ] = Path("output"),
    output: Annotated[
        str,
        typer.Option("-o", help="Output file prefix"),
    ] = "result",
    verbose: Annotated[
        bool,
        typer.Option("-v", "--verbose", help="Verbose output"),
    ] = False,
    log_file: Annotated[
        Path | None,
        typer.Option("-log", help="Also write DEBUG logs as JSON lines to this file"),
    ] = None,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = None,
) -> None:
    """ngsread: genotype and position file loading.

    Reads genotype calls, likelihoods or posteriors and site positions,
    failing loudly on malformed input.
    """
    global _global_config
    _global_config = OutputConfig(outdir=outdir, prefix=output, verbose=verbose)
    setup_logging(verbose=verbose, log_file=log_file)


def _get_config() -> OutputConfig:
    global _global_config
    if _global_config is None:
        _global_config = OutputConfig()
    return _global_config


@app.command("geno")
def geno_command(
    geno_file: Annotated[
        Path,
        typer.Option("-geno", help="Genotype file (plain or gzip)"),
    ],
    n_ind: Annotated[
        int,
        typer.Option("-n_ind", help="Number of individuals"),
    ],
    n_sites: Annotated[
        int,
        typer.Option("-n_sites", help="Number of sites"),
    ],
    binary: Annotated[
        bool,
        typer.Option("--binary", help="Input is binary float64 triples"),
    ] = False,
    calls: Annotated[
        bool,
        typer.Option("--calls", help="Input holds called genotypes {-1,0,1,2}"),
    ] = False,
    log_scale: Annotated[
        bool,
        typer.Option("--log-scale", help="Input probabilities are log-scaled"),
    ] = False,
    write_binary: Annotated[
        bool,
        typer.Option(
            "--write-binary",
            help="Write normalized log-scale genotypes as {prefix}.geno.bin",
        ),
    ] = False,
    check_memory: Annotated[
        bool,
        typer.Option(
            "--check-memory/--no-check-memory",
            help="Enable/disable pre-flight memory check (default: enabled)",
        ),
    ] = True,
    progress: Annotated[
        bool,
        typer.Option("--progress", help="Show a progress bar"),
    ] = False,
) -> None:
    """Load a genotype file and report its dimensions.

    Accepts called genotypes (--calls), or genotype likelihoods / posterior
    probabilities as text or binary (--binary). Optionally writes the
    normalized log-scale matrix in binary format.
    """
    config = _get_config()
    command_line = " ".join(sys.argv)

    if binary and calls:
        typer.echo("Error: --binary input cannot hold called genotypes", err=True)
        raise typer.Exit(code=1)
    if n_ind < 1 or n_sites < 1:
        typer.echo("Error: -n_ind and -n_sites must be positive", err=True)
        raise typer.Exit(code=1)

    scale = ProbabilityScale.LOG if log_scale else ProbabilityScale.LINEAR
    typer.echo(
        f"Loading genotypes from {geno_file} "
        f"(~{estimate_genotype_memory(n_ind, n_sites):.2f}GB)..."
    )

    start_time = time.perf_counter()
    try:
        geno = load_genotypes(
            geno_file,
            n_ind,
            n_sites,
            binary=binary,
            probabilistic=not calls,
            scale=scale,
            show_progress=progress,
            check_memory=check_memory,
        )
    except (InputError, MemoryError) as e:
        typer.echo(f"Error loading genotypes: {e}", err=True)
        raise typer.Exit(code=1) from None
    load_time = time.perf_counter() - start_time

    typer.echo(f"Loaded {geno.n_individuals} individuals, {geno.n_sites} sites")

    config.ensure_outdir()
    params = {
        "geno_file": str(geno_file),
        "n_individuals": geno.n_individuals,
        "n_sites": geno.n_sites,
        "binary": binary,
        "calls": calls,
        "input_scale": scale.value,
    }

    if write_binary:
        bin_path = config.output_path("geno.bin")
        write_genotype_binary(bin_path, geno)
        params["output_file"] = str(bin_path)
        typer.echo(f"Log-scale genotypes written to {bin_path}")

    timing = {"total": time.perf_counter() - start_time, "load": load_time}
    log_path = write_run_log(config, params, timing, command_line)
    typer.echo(f"Log written to {log_path}")


@app.command("pos")
def pos_command(
    pos_file: Annotated[
        Path,
        typer.Option("-pos", help="Position file (plain or gzip)"),
    ],
    n_sites: Annotated[
        int,
        typer.Option("-n_sites", help="Number of sites"),
    ],
    progress: Annotated[
        bool,
        typer.Option("--progress", help="Show a progress bar"),
    ] = False,
) -> None:
    """Load a position file and write distances between adjacent sites.

    Writes one distance per site to {prefix}.dist.txt, with ``inf`` at the
    first site of each chromosome.
    """
    config = _get_config()
    command_line = " ".join(sys.argv)

    if n_sites < 1:
        typer.echo("Error: -n_sites must be positive", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Loading positions from {pos_file}...")
    start_time = time.perf_counter()
    try:
        dist = load_distances(pos_file, n_sites, show_progress=progress)
    except InputError as e:
        typer.echo(f"Error loading positions: {e}", err=True)
        raise typer.Exit(code=1) from None

    n_segments = len(dist.chromosome_starts())
    typer.echo(f"Loaded {dist.n_sites} sites on {n_segments} chromosome segments")

    config.ensure_outdir()
    dist_path = config.output_path("dist.txt")
    write_distances(dist_path, dist)
    typer.echo(f"Distances written to {dist_path}")

    params = {
        "pos_file": str(pos_file),
        "n_sites": dist.n_sites,
        "n_chromosome_segments": n_segments,
        "output_file": str(dist_path),
    }
    timing = {"total": time.perf_counter() - start_time}
    log_path = write_run_log(config, params, timing, command_line)
    typer.echo(f"Log written to {log_path}")


if __name__ == "__main__":
    app()
