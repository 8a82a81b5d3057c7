"""Batch entry point: select an image once, then resolve addresses in order."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from atosym.errors import InvalidAddress
from atosym.extraction.binary_image import BinaryImage
from atosym.resolution.address import AddressMode, to_search_address
from atosym.resolution.dwarf import load_dwarf, resolve_line
from atosym.resolution.identifiers import parse_uuid
from atosym.resolution.outcome import ResolutionOutcome, Unresolved
from atosym.resolution.selection import SelectionFilter, resolve_object
from atosym.resolution.symtab import resolve_symbol
from atosym.utils.logging import bound_image, get_logger

if TYPE_CHECKING:
    from elftools.dwarf.dwarfinfo import DWARFInfo

log = get_logger(__name__)

LINE_SECTION_NAMES = ("__debug_line", ".debug_line", ".zdebug_line")


def is_rich(image: BinaryImage) -> bool:
    """True when the image carries a line-number section, i.e. DWARF resolution applies."""
    return any(image.has_section(name) for name in LINE_SECTION_NAMES)


@dataclass(frozen=True)
class BatchOptions:
    address_mode: AddressMode = AddressMode.VIRTUAL
    architecture_filter: str | None = None
    identifier_filter: str | None = None
    verbose: bool = False


@dataclass
class SymbolicationSession:
    """Everything one batch needs, built once by ``resolve_batch``."""

    image: BinaryImage
    image_name: str
    load_address: int
    address_mode: AddressMode = AddressMode.VIRTUAL
    verbose: bool = False
    _dwarf: DWARFInfo | None = field(default=None, init=False, repr=False)
    _dwarf_failed: bool = field(default=False, init=False, repr=False)

    @property
    def uses_dwarf(self) -> bool:
        return is_rich(self.image)

    def search_address(self, address: int) -> int:
        return to_search_address(
            address, self.load_address, self.image.text_vmaddr, self.address_mode
        )

    def dwarf(self) -> DWARFInfo | None:
        if self._dwarf is None and not self._dwarf_failed:
            try:
                self._dwarf = load_dwarf(self.image)
            except Exception as exc:
                log.warning("dwarf_load_failed", image=self.image_name, error=str(exc))
                self._dwarf_failed = True
        return self._dwarf

    def resolve(self, address: int) -> ResolutionOutcome:
        """Resolve one runtime address: DWARF first when available, then the symbol table."""
        try:
            search_address = self.search_address(address)
        except InvalidAddress as exc:
            return Unresolved(str(exc))

        if self.uses_dwarf:
            dwarfinfo = self.dwarf()
            if dwarfinfo is not None:
                try:
                    line = resolve_line(dwarfinfo, self.image_name, search_address)
                except Exception as exc:
                    log.debug("dwarf_lookup_failed", address=hex(search_address), error=str(exc))
                    line = None
                if line is not None:
                    return line

        symbol = resolve_symbol(self.image, self.image_name, search_address)
        if symbol is not None:
            return symbol
        return Unresolved("failed search symbol")


def build_session(
    object_bytes: bytes | memoryview,
    load_address: int,
    options: BatchOptions | None = None,
    image_name: str = "<image>",
) -> SymbolicationSession:
    """Select the image and wrap it in a session; raises on configuration errors."""
    options = options or BatchOptions()
    selection = SelectionFilter(
        architecture=options.architecture_filter,
        uuid=parse_uuid(options.identifier_filter) if options.identifier_filter else None,
    )
    image, _diagnostic = resolve_object(memoryview(object_bytes), selection, verbose=options.verbose)
    session = SymbolicationSession(
        image=image,
        image_name=image_name,
        load_address=load_address,
        address_mode=options.address_mode,
        verbose=options.verbose,
    )
    if options.verbose:
        log.info("resolver", kind="dwarf" if session.uses_dwarf else "symbol_table")
    return session


def resolve_batch(
    object_bytes: bytes | memoryview,
    load_address: int,
    addresses: Sequence[int],
    options: BatchOptions | None = None,
    image_name: str = "<image>",
) -> list[str]:
    """Resolve *addresses* against the object and return one outcome line per address."""
    with bound_image(image_name):
        session = build_session(object_bytes, load_address, options, image_name)
        lines: list[str] = []
        for address in addresses:
            if session.verbose:
                log.info("begin_address", address=address, hex=f"{address:016x}")
            outcome = session.resolve(address)
            lines.append(outcome.render())
            if session.verbose:
                log.info("end_address", address=address, result=lines[-1])
    return lines
