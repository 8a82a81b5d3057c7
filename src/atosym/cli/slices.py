"""atosym slices — list the architectures and UUIDs inside an object file."""

from __future__ import annotations

from pathlib import Path

import typer


def slices_cmd(
    object_path: Path = typer.Argument(..., help="Binary, dSYM DWARF file or universal binary"),
) -> None:
    """Show every slice a fat binary contains (a thin file shows as one slice)."""
    from atosym.errors import AtosError
    from atosym.resolution.selection import list_candidates
    from atosym.utils.formatters import print_error, print_table
    from atosym.utils.mapping import open_and_map

    try:
        with open_and_map(object_path) as data:
            rows = list_candidates(data)
    except OSError as exc:
        print_error(str(exc))
        raise typer.Exit(1)
    except AtosError as exc:
        print_error(str(exc))
        raise typer.Exit(1)

    print_table(rows, title=object_path.name, columns=["arch", "uuid"])
