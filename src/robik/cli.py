"""
Command-line interface for robik.

Provides commands to inspect configured robots and to run forward and
inverse kinematics from the shell.
"""

import math
from pathlib import Path
from typing import Optional

import click
from compas.geometry import Frame, Point, Vector
from rich.console import Console
from rich.table import Table

from robik import __version__
from robik.core.config import ConfigManager
from robik.core.exceptions import RobikError
from robik.core.logging import configure_logging
from robik.core.robot import ConfigurationData, RobotDescription
from robik.kinematics.inverse import InverseKinematics
from robik.kinematics.opw import OPWKinematics

console = Console()


def _load_robot(ctx: click.Context, name: str) -> RobotDescription:
    manager = ConfigManager(ctx.obj["config_dir"])
    return manager.get_robot(name).to_description()


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config-dir",
    type=click.Path(exists=True, path_type=Path),
    default="config",
    help="Configuration directory",
)
@click.option("--verbose", "-v", is_flag=True, help="Show solver debug logging")
@click.option("--log-json", is_flag=True, help="Write log events as JSON lines")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also append log events to this file",
)
@click.pass_context
def main(
    ctx: click.Context,
    config_dir: Path,
    verbose: bool,
    log_json: bool,
    log_file: Optional[Path],
) -> None:
    """robik - Closed-form inverse kinematics for ABB robots."""
    ctx.ensure_object(dict)
    ctx.obj["config_dir"] = config_dir
    configure_logging(
        level="DEBUG" if verbose else "WARNING",
        json_output=log_json,
        log_file=log_file,
    )


# =============================================================================
# Robot Commands
# =============================================================================


@main.group()
def robots() -> None:
    """Robot configuration commands."""
    pass


@robots.command("list")
@click.pass_context
def robots_list(ctx: click.Context) -> None:
    """List available robot configurations."""
    try:
        manager = ConfigManager(ctx.obj["config_dir"])
        names = manager.list_robots()

        if not names:
            console.print("[yellow]No robot configurations found[/yellow]")
            return

        table = Table(title="Robots")
        table.add_column("Config", style="cyan")
        table.add_column("Name")
        table.add_column("Manufacturer")

        for name in names:
            robot = manager.get_robot(name)
            table.add_row(name, robot.name, robot.manufacturer)

        console.print(table)

    except RobikError as e:
        console.print(f"[red]✗[/red] Failed to list robots: {e}")
        raise SystemExit(1)


@robots.command("show")
@click.argument("name")
@click.pass_context
def robots_show(ctx: click.Context, name: str) -> None:
    """Show the kinematic description of a robot."""
    try:
        robot = _load_robot(ctx, name)

        table = Table(title=f"Robot: {robot.name}")
        table.add_column("Parameter", style="cyan")
        table.add_column("Value", justify="right")
        for parameter in ("a1", "a2", "a3", "b", "c1", "c2", "c3", "c4"):
            table.add_row(parameter, f"{getattr(robot.parameters, parameter):.3f}")
        console.print(table)

        axes = Table(title="Axes")
        axes.add_column("Axis")
        axes.add_column("Lower", justify="right")
        axes.add_column("Upper", justify="right")
        axes.add_column("Sign", justify="right")
        axes.add_column("Offset", justify="right")
        for i, (lower, upper) in enumerate(robot.axis_limits):
            axes.add_row(
                str(i + 1),
                f"{lower:.1f}",
                f"{upper:.1f}",
                str(robot.corrections.signs[i]),
                f"{math.degrees(robot.corrections.offsets[i]):.1f}",
            )
        console.print(axes)

    except RobikError as e:
        console.print(f"[red]✗[/red] Failed to load robot: {e}")
        raise SystemExit(1)


# =============================================================================
# Kinematics Commands
# =============================================================================


@main.command("fk")
@click.argument("name")
@click.argument("joints", nargs=6, type=float)
@click.pass_context
def forward(ctx: click.Context, name: str, joints: tuple[float, ...]) -> None:
    """Compute the end frame for six axis values in degrees."""
    try:
        robot = _load_robot(ctx, name)
        opw = OPWKinematics(robot.parameters, robot.corrections)
        frame, wrist = opw.forward([math.radians(j) for j in joints])

        table = Table(title=f"Forward kinematics: {robot.name}")
        table.add_column("", style="cyan")
        table.add_column("X", justify="right")
        table.add_column("Y", justify="right")
        table.add_column("Z", justify="right")
        for label, vector in (
            ("Origin", frame.point),
            ("X axis", frame.xaxis),
            ("Y axis", frame.yaxis),
            ("Z axis", frame.zaxis),
            ("Wrist", wrist),
        ):
            table.add_row(label, *(f"{v:.4f}" for v in vector))
        console.print(table)

    except RobikError as e:
        console.print(f"[red]✗[/red] Forward kinematics failed: {e}")
        raise SystemExit(1)


@main.command("ik")
@click.argument("name")
@click.argument("position", nargs=3, type=float)
@click.option("--xaxis", nargs=3, type=float, default=(0.0, 0.0, -1.0), help="End frame X axis")
@click.option("--yaxis", nargs=3, type=float, default=(0.0, 1.0, 0.0), help="End frame Y axis")
@click.option("--cfx", type=click.IntRange(0, 7), default=0, help="Solution to select")
@click.pass_context
def inverse(
    ctx: click.Context,
    name: str,
    position: tuple[float, float, float],
    xaxis: tuple[float, float, float],
    yaxis: tuple[float, float, float],
    cfx: int,
) -> None:
    """Compute all eight solutions for an end frame in the robot base frame."""
    try:
        robot = _load_robot(ctx, name)
        ik = InverseKinematics(robot)
        frame = Frame(Point(*position), Vector(*xaxis), Vector(*yaxis))
        ik.calculate(frame, ConfigurationData(cfx=cfx))

        table = Table(title=f"Inverse kinematics: {robot.name}")
        table.add_column("cfx", style="cyan")
        for i in range(6):
            table.add_column(f"J{i + 1}", justify="right")
        table.add_column("Singularities")

        for i, solution in enumerate(ik.robot_joint_positions):
            flags = [
                label
                for label, flagged in (
                    ("shoulder", ik.shoulder_singularities[i]),
                    ("elbow", ik.elbow_singularities[i]),
                    ("wrist", ik.wrist_singularities[i]),
                )
                if flagged
            ]
            style = "bold green" if i == ik.selected_solution else None
            table.add_row(
                str(i),
                *(f"{v:.3f}" for v in solution),
                ", ".join(flags) or "-",
                style=style,
            )
        console.print(table)

        data = ik.configuration_data
        console.print(f"confdata: [{data.cf1}, {data.cf4}, {data.cf6}, {data.cfx}]")
        for message in ik.error_text:
            console.print(f"[yellow]![/yellow] {message}")

    except RobikError as e:
        console.print(f"[red]✗[/red] Inverse kinematics failed: {e}")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
