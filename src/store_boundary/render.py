"""Terminal rendering of boundary sessions and their outcomes."""

from __future__ import annotations

from rich.console import Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from store_boundary.session import (
    MAX_VERTICES,
    AddResult,
    BoundarySession,
    SaveError,
    SaveResult,
    SessionState,
)

ADD_MESSAGES = {
    AddResult.ACCEPTED: "Point added.",
    AddResult.REJECTED_TOO_MANY: f"Polygon can only have {MAX_VERTICES} points.",
    AddResult.REJECTED_OUT_OF_RADIUS: "Point is outside the allowed boundary.",
}

SAVE_MESSAGES = {
    SaveError.INCOMPLETE_BOUNDARY: f"Set polygon with {MAX_VERTICES} points.",
    SaveError.CENTER_NOT_CONTAINED: (
        "The store location must be inside the polygon boundary. "
        "Please adjust the points."
    ),
}

_STATE_COLORS = {
    SessionState.EMPTY: "dim",
    SessionState.BUILDING: "yellow",
    SessionState.READY: "cyan",
    SessionState.VALID: "green",
}


def add_message(result: AddResult, can_undo: bool = False) -> str:
    color = "green" if result is AddResult.ACCEPTED else "red"
    message = ADD_MESSAGES[result]
    if can_undo and result is AddResult.REJECTED_TOO_MANY:
        message += ' Use "undo" to adjust.'
    return f"[{color}]{message}[/]"


def save_message(result: SaveResult) -> str:
    if result.ok:
        return "[green]Success! Store saved.[/]"
    return f"[red]{SAVE_MESSAGES[result.error]}[/]"


def _build_vertex_table(session: BoundarySession) -> Table:
    table = Table(title=f"Boundary points ({len(session.vertices)}/{MAX_VERTICES})", expand=True)
    table.add_column("#", width=3, justify="right")
    table.add_column("Latitude", justify="right")
    table.add_column("Longitude", justify="right")
    table.add_column("From center (km)", justify="right")

    for i, vertex in enumerate(session.vertices, start=1):
        dist_km = session.distance_to_center(vertex) / 1000
        color = "green" if session.is_within_radius(vertex) else "yellow"
        table.add_row(
            str(i),
            f"{vertex.latitude:.6f}",
            f"{vertex.longitude:.6f}",
            f"[{color}]{dist_km:.2f}[/]",
        )

    return table


def _build_summary(session: BoundarySession) -> Panel:
    state = session.state
    lines = [
        f"Store: [bold]{escape(session.store_name) or '(unnamed)'}[/]",
        f"Center: {session.center}",
        f"Radius: {session.radius_km:g} km",
        f"State: [{_STATE_COLORS[state]}]{state.value}[/]",
    ]
    if state in (SessionState.EMPTY, SessionState.BUILDING):
        lines.append(
            f"Add {session.remaining_vertices} more point(s) "
            f"within {session.radius_km:g} km of the store center."
        )
    return Panel("\n".join(lines), title="Store Boundary Setter", border_style="blue")


def render_session(session: BoundarySession) -> Group:
    """Summary panel plus the vertex table."""
    return Group(_build_summary(session), _build_vertex_table(session))
