"""Target descriptor grammar and compatibility.

A target descriptor names the platform an artifact runs on:
    <os>-<arch>[-<abi>]

Examples:
    linux-x64
    linux-arm64-musl
    windows-x64-msvc
    any-any          (platform independent)

``any`` in the os or arch slot marks a generic artifact.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

ANY = "any"

KNOWN_OS = frozenset({"linux", "macos", "windows", "freebsd", "android", "ios", ANY})
KNOWN_ARCH = frozenset({"x64", "x86", "arm64", "arm", "riscv64", "ppc64le", "s390x", "wasm32", ANY})

ABI_PATTERN = re.compile(r"^[a-z][a-z0-9]*$")


@dataclass(frozen=True)
class TargetDescriptor:
    """Parsed target descriptor.

    Attributes:
        os: Operating system (or ``any``).
        arch: CPU architecture (or ``any``).
        abi: Optional ABI / libc variant (e.g. ``gnu``, ``musl``, ``msvc``).
    """

    os: str
    arch: str
    abi: Optional[str] = None

    def __str__(self) -> str:
        text = f"{self.os}-{self.arch}"
        if self.abi:
            text += f"-{self.abi}"
        return text

    @property
    def is_generic(self) -> bool:
        return self.os == ANY or self.arch == ANY

    def fallback_chain(self) -> list[TargetDescriptor]:
        """Compatible descriptors, most specific first.

        The descriptor itself, then without its ABI, then
        architecture-generic, then OS-generic, then fully generic.
        """
        chain = [
            self,
            TargetDescriptor(self.os, self.arch),
            TargetDescriptor(self.os, ANY),
            TargetDescriptor(ANY, self.arch),
            TargetDescriptor(ANY, ANY),
        ]
        unique: list[TargetDescriptor] = []
        for candidate in chain:
            if candidate not in unique:
                unique.append(candidate)
        return unique


def parse_target(target_str: str) -> TargetDescriptor:
    """Parse a target descriptor string.

    Raises:
        ValueError: If the descriptor does not match the grammar.
    """
    if not isinstance(target_str, str) or not target_str:
        raise ValueError("Target descriptor is empty")

    parts = target_str.split("-")
    if len(parts) not in (2, 3):
        raise ValueError(
            f"Invalid target '{target_str}': expected <os>-<arch>[-<abi>]"
        )

    os_name, arch = parts[0], parts[1]
    abi = parts[2] if len(parts) == 3 else None

    if os_name not in KNOWN_OS:
        raise ValueError(
            f"Invalid target '{target_str}': unknown os '{os_name}' "
            f"(expected one of {', '.join(sorted(KNOWN_OS))})"
        )
    if arch not in KNOWN_ARCH:
        raise ValueError(
            f"Invalid target '{target_str}': unknown arch '{arch}' "
            f"(expected one of {', '.join(sorted(KNOWN_ARCH))})"
        )
    if abi is not None and not ABI_PATTERN.match(abi):
        raise ValueError(f"Invalid target '{target_str}': malformed abi '{abi}'")

    return TargetDescriptor(os=os_name, arch=arch, abi=abi)


def is_valid_target(target_str: str) -> bool:
    """Check if a target descriptor is valid without raising."""
    try:
        parse_target(target_str)
        return True
    except ValueError:
        return False
