"""Mach-O and universal-binary constants (from <mach-o/loader.h>, <mach-o/fat.h>)."""

FAT_MAGIC = 0xCAFEBABE
FAT_MAGIC_64 = 0xCAFEBABF

MH_MAGIC = 0xFEEDFACE
MH_CIGAM = 0xCEFAEDFE
MH_MAGIC_64 = 0xFEEDFACF
MH_CIGAM_64 = 0xCFFAEDFE

# Java class files share FAT_MAGIC; real universal binaries never get close
FAT_MAX_ARCHS = 30

CPU_ARCH_ABI64 = 0x01000000
CPU_TYPE_X86 = 7
CPU_TYPE_X86_64 = CPU_TYPE_X86 | CPU_ARCH_ABI64
CPU_TYPE_ARM = 12
CPU_TYPE_ARM64 = CPU_TYPE_ARM | CPU_ARCH_ABI64
CPU_TYPE_ARM64_32 = CPU_TYPE_ARM | 0x02000000

CPU_SUBTYPE_MASK = 0xFF000000

CPU_SUBTYPE_ARM64E = 2
CPU_SUBTYPE_ARM_V7 = 9
CPU_SUBTYPE_ARM_V7F = 10
CPU_SUBTYPE_ARM_V7S = 11
CPU_SUBTYPE_ARM_V7K = 12
CPU_SUBTYPE_ARM_V8 = 13
CPU_SUBTYPE_X86_64_H = 8

LC_SEGMENT = 0x1
LC_SYMTAB = 0x2
LC_SEGMENT_64 = 0x19
LC_UUID = 0x1B

N_STAB = 0xE0
N_TYPE = 0x0E
N_SECT = 0x0E

MACH_HEADER_SIZE = 28
MACH_HEADER_64_SIZE = 32
SEGMENT_COMMAND_SIZE = 56
SEGMENT_COMMAND_64_SIZE = 72
SECTION_SIZE = 68
SECTION_64_SIZE = 80
NLIST_SIZE = 12
NLIST_64_SIZE = 16
FAT_ARCH_SIZE = 20
FAT_ARCH_64_SIZE = 32
