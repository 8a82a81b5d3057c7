"""Pick the one object image a batch runs against.

Thin Mach-O and ELF inputs are parsed directly and checked against the
filter. Fat inputs are narrowed slice by slice; only the winning slice is
fully parsed.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from atosym.errors import FilterMismatch, ParseError, SelectionAmbiguous, SelectionNoMatch
from atosym.extraction.binary_image import BinaryImage
from atosym.extraction.elf_loader import is_elf, load_elf
from atosym.extraction.fat import FatSlice, is_fat, parse_fat
from atosym.extraction.macho_loader import is_macho, load_macho
from atosym.resolution.arch import arch_matches
from atosym.resolution.identifiers import format_optional_uuid, format_uuid
from atosym.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class SelectionFilter:
    architecture: str | None = None
    uuid: bytes | None = None

    @property
    def is_empty(self) -> bool:
        return self.architecture is None and self.uuid is None

    def accepts(self, architecture: str, uuid: bytes | None) -> bool:
        if self.architecture is not None and not arch_matches(architecture, self.architecture):
            return False
        if self.uuid is not None and uuid != self.uuid:
            return False
        return True


@dataclass(frozen=True)
class SelectionDiagnostic:
    selected: str
    candidates: tuple[str, ...] = ()

    def __str__(self) -> str:
        return self.selected


def load_image(data: memoryview) -> BinaryImage:
    """Parse a non-fat object, dispatching on its magic."""
    if is_macho(data):
        return load_macho(data)
    if is_elf(data):
        return load_elf(data)
    raise ParseError("unrecognized object format")


def validate_image(image: BinaryImage, selection: SelectionFilter) -> None:
    """Check a non-fat image against *selection*; there is no other slice to fall back on."""
    if selection.uuid is not None:
        if image.uuid is None:
            raise FilterMismatch("--uuid was provided, but this file has no Mach-O UUID")
        if image.uuid != selection.uuid:
            raise FilterMismatch(
                f"uuid mismatch: requested {format_uuid(selection.uuid)}, "
                f"actual {format_uuid(image.uuid)}"
            )
    if selection.architecture is not None:
        if not arch_matches(image.architecture, selection.architecture):
            raise FilterMismatch(
                f"architecture mismatch: requested '{selection.architecture}', "
                f"actual '{image.architecture}'"
            )


def select_slice(slices: Sequence[FatSlice], selection: SelectionFilter) -> FatSlice:
    """Apply the selection policy to a fat container's slices."""
    if not slices:
        raise ParseError("fat Mach-O has no slices")

    candidates = [s.describe() for s in slices]

    if selection.is_empty:
        if len(slices) == 1:
            return slices[0]
        raise SelectionAmbiguous(
            "fat Mach-O contains multiple slices.\n"
            "Use -a/--arch or --uuid to select one.\n"
            "Available slices:",
            candidates,
        )

    matches = [s for s in slices if selection.accepts(s.architecture, s.uuid)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        raise SelectionNoMatch(
            f"no fat Mach-O slice matched arch={selection.architecture or '-'} "
            f"uuid={format_optional_uuid(selection.uuid)}.\n"
            "Available slices:",
            candidates,
        )
    raise SelectionAmbiguous(
        "filters are ambiguous and matched multiple slices:",
        [s.describe() for s in matches],
    )


def list_candidates(data: memoryview) -> list[dict[str, str]]:
    """Every image in *data* as ``{"arch", "uuid"}``: all slices of a fat file, or the single image."""
    data = memoryview(data)
    if is_fat(data):
        return [
            {"arch": s.architecture, "uuid": format_optional_uuid(s.uuid)}
            for s in parse_fat(data)
        ]
    image = load_image(data)
    return [{"arch": image.architecture, "uuid": format_optional_uuid(image.uuid)}]


def resolve_object(
    data: memoryview,
    selection: SelectionFilter | None = None,
    verbose: bool = False,
) -> tuple[BinaryImage, SelectionDiagnostic | None]:
    """Return the selected image and, for fat inputs, which slice was chosen."""
    data = memoryview(data)
    selection = selection or SelectionFilter()

    if not is_fat(data):
        image = load_image(data)
        validate_image(image, selection)
        return image, None

    slices = parse_fat(data)
    if verbose:
        for s in slices:
            log.info("fat_slice", arch=s.architecture, uuid=format_optional_uuid(s.uuid))

    chosen = select_slice(slices, selection)
    diagnostic = SelectionDiagnostic(
        selected=chosen.describe(),
        candidates=tuple(s.describe() for s in slices),
    )
    if verbose:
        log.info("selected_slice", slice=diagnostic.selected)
    return chosen.load(), diagnostic
