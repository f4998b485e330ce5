"""CLI entrypoint for store-boundary."""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.markup import escape

from store_boundary.config import GEOLOCATION, load_defaults
from store_boundary.geolocation import locate_center
from store_boundary.models import Coordinate
from store_boundary.render import add_message, render_session, save_message
from store_boundary.session import AddResult, BoundarySession
from store_boundary.sinks import BoundarySink, JsonFileSink, LogSink
from store_boundary.validation import ValidationError, validate_coordinate, validate_radius

logger = logging.getLogger(__name__)

console = Console()

HELP_TEXT = """\
Commands:
  add LAT,LNG      add a boundary point
  undo             remove the last point
  clear            remove all points
  center LAT,LNG   move the store center
  radius METERS    change the service radius
  name TEXT        rename the store
  show             show the current boundary
  save             validate and save the boundary
  help             show this help
  quit             leave without saving"""


class CoordinateParam(click.ParamType):
    """Click parameter accepting ``LAT,LNG``."""

    name = "LAT,LNG"

    def convert(self, value, param, ctx):
        if isinstance(value, Coordinate):
            return value
        try:
            coord = Coordinate.parse(value)
        except ValueError as exc:
            self.fail(str(exc), param, ctx)
        errors = validate_coordinate(coord)
        if errors:
            self.fail("; ".join(errors), param, ctx)
        return coord


COORDINATE = CoordinateParam()


class RadiusParam(click.ParamType):
    """Click parameter accepting a positive, finite radius in meters."""

    name = "METERS"

    def convert(self, value, param, ctx):
        try:
            radius = float(value)
        except (TypeError, ValueError):
            self.fail(f"{value!r} is not a number", param, ctx)
        errors = validate_radius(radius)
        if errors:
            self.fail("; ".join(errors), param, ctx)
        return radius


RADIUS = RadiusParam()


def _build_session(name: str | None, center: Coordinate | None, radius: float | None,
                   locate: bool) -> BoundarySession:
    """Session from config defaults, with command-line overrides applied.

    Raises:
        click.UsageError: if the configured defaults are unusable.
    """
    try:
        session = BoundarySession.from_defaults(load_defaults())
    except (ValueError, ValidationError) as exc:
        raise click.UsageError(f"Invalid STORE_BOUNDARY_* settings: {exc}") from exc

    if locate and center is None:
        located = locate_center(GEOLOCATION)
        if located is not None:
            session.set_center(located)
        else:
            console.print("[yellow]Could not determine location; using the default center.[/]")
    if center is not None:
        session.set_center(center)
    if radius is not None:
        session.set_radius(radius)
    if name is not None:
        session.set_store_name(name)

    return session


def _make_sink(out: str | None) -> BoundarySink:
    return JsonFileSink(out) if out else LogSink()


def _save(session: BoundarySession, sink: BoundarySink) -> bool:
    result = session.validate_and_save()
    console.print(save_message(result))
    if not result.ok:
        return False

    try:
        sink.save(result.snapshot)
    except OSError as exc:
        logger.error("Saving boundary failed: %s", exc)
        console.print(f"[red]Error saving store: {escape(str(exc))}[/]")
        return False
    return True


session_options = [
    click.option("--name", default=None, help="Store name."),
    click.option("--center", type=COORDINATE, default=None, help="Store center as LAT,LNG."),
    click.option("--radius", type=RADIUS, default=None,
                 help="Service radius in meters."),
    click.option("--locate/--no-locate", default=False,
                 help="Look up the initial center from the IP address."),
    click.option("--out", type=click.Path(dir_okay=False, writable=True), default=None,
                 help="Write the saved boundary as JSON to this file."),
]


def with_session_options(func):
    for option in reversed(session_options):
        func = option(func)
    return func


@click.group()
@click.option("--log-level", default="WARNING",
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              help="Logging verbosity.")
def cli(log_level: str):
    """Store Boundary Setter — define a store's service polygon."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


@cli.command()
@with_session_options
def draw(name, center, radius, locate, out):
    """Interactively build a boundary, one command per line."""
    session = _build_session(name, center, radius, locate)
    sink = _make_sink(out)

    console.print(render_session(session))
    console.print("Type [bold]help[/] for commands.")

    while True:
        try:
            line = click.prompt("boundary", default="", show_default=False, prompt_suffix="> ")
        except (EOFError, click.Abort):
            break

        parts = line.strip().split(maxsplit=1)
        if not parts:
            continue
        command, arg = parts[0].lower(), (parts[1] if len(parts) > 1 else "")

        if command in ("quit", "exit"):
            break
        try:
            _dispatch(session, sink, command, arg)
        except click.BadParameter as exc:
            console.print(f"[red]{escape(exc.format_message())}[/]")
        except (ValueError, ValidationError) as exc:
            console.print(f"[red]{escape(str(exc))}[/]")


def _dispatch(session: BoundarySession, sink: BoundarySink, command: str, arg: str) -> None:
    if command == "add":
        point = COORDINATE.convert(arg, None, None) if arg else None
        if point is None:
            raise ValueError("usage: add LAT,LNG")
        console.print(add_message(session.attempt_add_vertex(point), can_undo=True))
    elif command == "undo":
        if session.remove_last_vertex():
            console.print("Removed last point.")
        else:
            console.print("[yellow]No points to undo.[/]")
    elif command == "clear":
        session.clear_all()
        console.print("Cleared all points.")
    elif command == "center":
        session.set_center(Coordinate.parse(arg))
        console.print(f"Center moved to {session.center}.")
    elif command == "radius":
        session.set_radius(float(arg))
        console.print(f"Radius set to {session.radius_km:g} km.")
    elif command == "name":
        session.set_store_name(arg)
        console.print(f"Store renamed to {escape(repr(arg))}.")
    elif command == "show":
        console.print(render_session(session))
    elif command == "save":
        _save(session, sink)
    elif command == "help":
        console.print(HELP_TEXT, markup=False)
    else:
        console.print(f"[red]Unknown command {escape(repr(command))}.[/] Type [bold]help[/] for commands.")


@cli.command()
@with_session_options
@click.option("--point", "points", type=COORDINATE, multiple=True,
              help="Boundary point as LAT,LNG (repeat, in ring order).")
@click.pass_context
def check(ctx, name, center, radius, locate, out, points):
    """Validate a boundary given on the command line."""
    session = _build_session(name, center, radius, locate)
    sink = _make_sink(out)

    for i, point in enumerate(points, start=1):
        result = session.attempt_add_vertex(point)
        console.print(f"Point {i} ({point}): {add_message(result)}")
        if result is not AddResult.ACCEPTED:
            logger.info("Point %d rejected: %s", i, result.value)

    console.print(render_session(session))
    if not _save(session, sink):
        ctx.exit(1)


if __name__ == "__main__":
    cli()
