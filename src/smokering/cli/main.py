"""Command-line interface for the smoke-ring solver.

Usage:
    smokering simulate config.json --steps=100
    smokering simulate --preset small -o run.h5
    smokering verify config.json
    smokering presets
"""

from __future__ import annotations

import logging
import sys

import click


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """smokering — compressible vortex-sheet (smoke ring) simulator."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


@cli.command()
@click.argument("config_file", type=click.Path(exists=True), required=False)
@click.option("--preset", type=str, default=None, help="Start from a named preset instead of a file.")
@click.option("--steps", type=int, default=None, help="Max timesteps (default: run to sim_time).")
@click.option("--output", "-o", type=str, default=None, help="Write HDF5 diagnostics to this file.")
@click.option("--field-interval", type=click.IntRange(min=0), default=None, help="Records between field snapshots.")
def simulate(
    config_file: str | None,
    preset: str | None,
    steps: int | None,
    output: str | None,
    field_interval: int | None,
) -> None:
    """Run a simulation from a configuration file or preset."""
    from smokering.config import SimulationConfig
    from smokering.engine import SimulationEngine
    from smokering.presets import get_preset

    if config_file and preset:
        click.echo("Give either CONFIG_FILE or --preset, not both.", err=True)
        sys.exit(2)

    if config_file:
        click.echo(f"Loading config from {config_file}")
        try:
            config = SimulationConfig.from_file(config_file)
        except Exception as exc:
            click.echo(f"Configuration error: {exc}", err=True)
            sys.exit(1)
    else:
        name = preset or "smoke_ring"
        try:
            config = SimulationConfig(**get_preset(name))
        except KeyError as exc:
            click.echo(str(exc.args[0]), err=True)
            sys.exit(2)
        click.echo(f"Using preset: {name}")

    if output:
        config.diagnostics.hdf5_filename = output
    if field_interval is not None:
        config.diagnostics.field_output_interval = field_interval

    try:
        engine = SimulationEngine(config)
    except Exception as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(1)

    summary = engine.run(max_steps=steps)

    click.echo("\n--- Simulation Summary ---")
    for key, val in summary.items():
        if isinstance(val, float):
            click.echo(f"  {key}: {val:.6e}")
        else:
            click.echo(f"  {key}: {val}")


@cli.command()
@click.argument("config_file", type=click.Path(exists=True))
def verify(config_file: str) -> None:
    """Verify a configuration file is valid."""
    from smokering.config import SimulationConfig
    from smokering.core.grid import Grid

    try:
        config = SimulationConfig.from_file(config_file)
        grid = Grid.from_config(config.grid)
        click.echo("Configuration is valid:")
        click.echo(f"  Grid: {grid.nx} x {grid.ny} (dx={grid.dx:.3e} m, dy={grid.dy:.3e} m)")
        click.echo(f"  sim_time: {config.sim_time:.2e} s")
        click.echo(
            f"  Fluid: nu={config.fluid.viscosity:.3e}, kappa={config.fluid.thermal_diffusivity:.3e}, "
            f"gamma={config.fluid.gamma}"
        )
        click.echo(
            f"  Forcing: {'on' if config.forcing.enabled else 'off'}, "
            f"window=[{config.forcing.t_start:.2e}, {config.forcing.t_end:.2e}] s"
        )
        click.echo(f"  CFL recompute interval: {config.integrator.recompute_interval}")
    except Exception as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(1)


@cli.command()
def presets() -> None:
    """List the named configuration presets."""
    from smokering.presets import list_presets

    click.echo("Available presets:")
    for info in list_presets():
        nx, ny = info["grid"]
        click.echo(f"  {info['name']:<12} {nx}x{ny}  {info['description']}")


if __name__ == "__main__":
    cli()
