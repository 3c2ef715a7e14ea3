"""Merge generated seeders into the seed registry module.

The registry is a module that imports every table seeder and runs them in
registration order. It outlives a single run, so existing registrations are
recovered from its text and never dropped.
"""

from __future__ import annotations

import re
from typing import Iterable


DEFAULT_REGISTRY_NAME = "DatabaseSeeder"
DEFAULT_SEEDERS_PACKAGE = "seeders"

REGISTRATION_RE = re.compile(r"^[ \t]*([A-Za-z_]\w*)\(\)\.run\(conn\)[ \t]*$", flags=re.M)


def parse_registered_seeders(content: str | None) -> list[str]:
    if not content:
        return []
    seen: set[str] = set()
    out: list[str] = []
    for name in REGISTRATION_RE.findall(content):
        if name not in seen:
            seen.add(name)
            out.append(name)
    return out


def merge_seeders(existing: Iterable[str], new: Iterable[str]) -> list[str]:
    """Existing registrations first, then new ones not already present."""
    merged: list[str] = []
    seen: set[str] = set()
    for name in list(existing) + list(new):
        if name in seen:
            continue
        seen.add(name)
        merged.append(name)
    return merged


def render_registry(
    seeders: list[str],
    package: str = DEFAULT_SEEDERS_PACKAGE,
    name: str = DEFAULT_REGISTRY_NAME,
) -> str:
    lines: list[str] = [
        '"""Run every table seeder in registration order."""',
        "",
        "import sqlalchemy as sa",
        "",
    ]
    for seeder in seeders:
        lines.append(f"from {package}.{seeder} import {seeder}")
    if seeders:
        lines.append("")
    lines.append("")
    lines.append(f"class {name}:")
    lines.append("    def run(self, conn: sa.Connection) -> None:")
    if not seeders:
        lines.append("        pass")
    for seeder in seeders:
        lines.append(f"        {seeder}().run(conn)")
    lines.append("")
    return "\n".join(lines)


def merge_registry(
    existing_content: str | None,
    new_entries: Iterable[str],
    package: str = DEFAULT_SEEDERS_PACKAGE,
    name: str = DEFAULT_REGISTRY_NAME,
) -> str:
    existing = parse_registered_seeders(existing_content)
    return render_registry(merge_seeders(existing, new_entries), package=package, name=name)
