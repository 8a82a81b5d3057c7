"""atosym Quickstart — symbolicate a few crash-log addresses from Python."""

import sys
from pathlib import Path

from atosym import AtosContext
from atosym.config.loader import load_config
from atosym.errors import AtosError
from atosym.resolution.address import parse_address
from atosym.resolution.batch import BatchOptions, build_session
from atosym.resolution.selection import list_candidates
from atosym.utils.logging import setup_logging
from atosym.utils.mapping import open_and_map


def main():
    # 1. Load configuration (atosym.yaml in cwd, ~/.config/atosym or ~)
    ctx = AtosContext()
    ctx.config = load_config()
    setup_logging(ctx.config.logging.level)

    if len(sys.argv) < 4:
        print("usage: quickstart.py OBJECT LOAD_ADDRESS ADDRESS...")
        return

    object_path = Path(sys.argv[1])
    load_address = parse_address(sys.argv[2])
    addresses = [parse_address(a) for a in sys.argv[3:]]

    with open_and_map(object_path) as data:
        # 2. Show what the file contains
        for candidate in list_candidates(data):
            print(f"  slice: {candidate['arch']} {candidate['uuid']}")

        # 3. Select one image and resolve each address against it
        options = BatchOptions(
            address_mode=ctx.config.resolution.address_mode,
            architecture_filter=ctx.config.resolution.architecture,
            identifier_filter=ctx.config.resolution.uuid,
        )
        try:
            session = build_session(data, load_address, options, image_name=object_path.name)
        except AtosError as e:
            print(f"Cannot select an image: {e}")
            return

        print(f"Resolver: {'DWARF' if session.uses_dwarf else 'symbol table'}")
        for address in addresses:
            print(f"  {address:#018x}  {session.resolve(address).render()}")


if __name__ == "__main__":
    main()
