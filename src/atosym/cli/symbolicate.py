"""atosym symbolicate — resolve runtime addresses inside one image."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer


def symbolicate_cmd(
    ctx: typer.Context,
    addresses: List[str] = typer.Argument(..., help="Addresses to resolve (0x-hex or decimal)"),
    object_path: Path = typer.Option(..., "--object", "-o", help="Binary or dSYM DWARF file"),
    load_address: str = typer.Option(..., "--load-address", "-l", help="Runtime load address of the image"),
    arch: Optional[str] = typer.Option(None, "--arch", "-a", help="Select a fat slice by architecture"),
    uuid: Optional[str] = typer.Option(None, "--uuid", help="Select a fat slice by UUID"),
    file_offset: bool = typer.Option(
        False, "--file-offset", "-f", help="Treat addresses as file offsets, not virtual addresses"
    ),
) -> None:
    """Print one symbol line per address, in input order."""
    from atosym.cli.app import get_context
    from atosym.errors import AtosError
    from atosym.resolution.address import AddressMode, parse_address
    from atosym.resolution.batch import BatchOptions, resolve_batch
    from atosym.utils.formatters import print_error
    from atosym.utils.mapping import open_and_map

    state = get_context(ctx)
    resolution = state.ensure_config().resolution

    try:
        load = parse_address(load_address)
        queries = [parse_address(a) for a in addresses]
        options = BatchOptions(
            address_mode=AddressMode.FILE_OFFSET if file_offset else resolution.address_mode,
            architecture_filter=arch or resolution.architecture,
            identifier_filter=uuid or resolution.uuid,
            verbose=state.verbose,
        )
        with open_and_map(object_path) as data:
            lines = resolve_batch(data, load, queries, options, image_name=object_path.name)
    except OSError as exc:
        print_error(str(exc))
        raise typer.Exit(1)
    except AtosError as exc:
        print_error(str(exc))
        raise typer.Exit(1)

    for line in lines:
        typer.echo(line)
