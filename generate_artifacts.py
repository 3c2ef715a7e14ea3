#!/usr/bin/env python3
"""Generate Alembic migrations, table seeders and the seed registry from a live database.

Pipeline: list tables (minus the exclusion set), emit one create-table
migration per table, then one foreign-key migration per table that has
foreign keys, then one seeder per table, then merge every seeder into the
seed registry.

Usage:
    python generate_artifacts.py [--config dbgen.yaml] [--database-url URL] [--force] [--dry-run]
"""

from __future__ import annotations

import argparse
import ast
import dataclasses
import difflib
import enum
import os
import re
import sys
from datetime import datetime
from pathlib import Path
from typing import Iterable

import yaml
from dotenv import load_dotenv
from sqlalchemy.engine import Connection, URL
from sqlalchemy.exc import SQLAlchemyError

from read_schema import (
    DEFAULT_EXCLUDED_TABLES,
    ForeignKey,
    IntrospectionError,
    TableMetadata,
    build_database_url,
    create_db_engine,
    fetch_rows,
    filter_tables,
    list_tables,
    load_table,
)
from seed_registry import (
    DEFAULT_REGISTRY_NAME,
    DEFAULT_SEEDERS_PACKAGE,
    merge_registry,
    parse_registered_seeders,
)


class ConfigError(ValueError):
    pass


class PortableType(str, enum.Enum):
    INTEGER = "integer"
    BIG_INTEGER = "bigInteger"
    BOOLEAN = "boolean"
    STRING = "string"
    TEXT = "text"
    DATE = "date"
    DATETIME = "dateTime"
    TIMESTAMP = "timestamp"
    DECIMAL = "decimal"
    FLOAT = "float"
    DOUBLE = "double"


NATIVE_TYPE_MAP: dict[str, PortableType] = {
    "int": PortableType.INTEGER,
    "tinyint": PortableType.BOOLEAN,
    "smallint": PortableType.INTEGER,
    "mediumint": PortableType.INTEGER,
    "bigint": PortableType.BIG_INTEGER,
    "varchar": PortableType.STRING,
    "char": PortableType.STRING,
    "text": PortableType.TEXT,
    "mediumtext": PortableType.TEXT,
    "longtext": PortableType.TEXT,
    "date": PortableType.DATE,
    "datetime": PortableType.DATETIME,
    "timestamp": PortableType.TIMESTAMP,
    "decimal": PortableType.DECIMAL,
    "float": PortableType.FLOAT,
    "double": PortableType.DOUBLE,
    "enum": PortableType.STRING,
}

TYPE_EXPRESSIONS: dict[PortableType, str] = {
    PortableType.INTEGER: "sa.Integer()",
    PortableType.BIG_INTEGER: "sa.BigInteger()",
    PortableType.BOOLEAN: "sa.Boolean()",
    PortableType.STRING: "sa.String(255)",
    PortableType.TEXT: "sa.Text()",
    PortableType.DATE: "sa.Date()",
    PortableType.DATETIME: "sa.DateTime()",
    PortableType.TIMESTAMP: "sa.TIMESTAMP()",
    PortableType.DECIMAL: "sa.Numeric(8, 2)",
    PortableType.FLOAT: "sa.Float()",
    PortableType.DOUBLE: "sa.Double()",
}

# tinyint maps to boolean but is still an integer key.
IDENTITY_TYPES = {PortableType.INTEGER, PortableType.BIG_INTEGER, PortableType.BOOLEAN}

BASE_TYPE_RE = re.compile(r"^\s*([A-Za-z]\w*)")

MIGRATION = "migration"
RELATIONSHIP = "relationship"
SEEDER = "seeder"

ARTIFACT_LABELS = {
    MIGRATION: "Migration",
    RELATIONSHIP: "Foreign key migration",
    SEEDER: "Seeder",
}

MAX_IDENTIFIER_LENGTH = 64


def map_column_type(native_type: str) -> PortableType:
    m = BASE_TYPE_RE.match(native_type or "")
    if not m:
        return PortableType.STRING
    return NATIVE_TYPE_MAP.get(m.group(1).lower(), PortableType.STRING)


def render_type(portable: PortableType) -> str:
    return TYPE_EXPRESSIONS[portable]


@dataclasses.dataclass(frozen=True)
class Artifact:
    kind: str
    table: str
    file_name: str
    body: str
    overwrite: bool = False
    revision: str | None = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.table, self.kind)


class RevisionSequence:
    """Hands out revision ids `<stamp>_<n>` whose lexical order is emission order."""

    def __init__(self, stamp: str, start: int = 1) -> None:
        if not stamp.isdigit():
            raise ConfigError(f"run stamp must be digits only: {stamp!r}")
        self.stamp = stamp
        self._next = start

    def next(self) -> str:
        revision = f"{self.stamp}_{self._next:04d}"
        self._next += 1
        return revision


def seeder_identifier(table: str, registry_name: str = DEFAULT_REGISTRY_NAME) -> str:
    ident = re.sub(r"\W", "_", table) + "Seeder"
    if ident[0].isdigit():
        ident = "_" + ident
    # The registry module shares the seeders directory.
    if ident == registry_name:
        ident = ident[: -len("Seeder")] + "TableSeeder"
    return ident


def migration_file_name(revision: str, table: str) -> str:
    return f"{revision}_create_{table}_table.py"


def relationship_file_name(revision: str, table: str) -> str:
    return f"{revision}_add_foreign_keys_to_{table}_table.py"


def migration_identity_pattern(kind: str, table: str) -> re.Pattern:
    if kind == MIGRATION:
        return re.compile(rf"^\d+_\d+_create_{re.escape(table)}_table\.py$")
    if kind == RELATIONSHIP:
        return re.compile(rf"^\d+_\d+_add_foreign_keys_to_{re.escape(table)}_table\.py$")
    raise ValueError(f"Not a migration kind: {kind}")


REVISION_RE = re.compile(r"^revision(?:[ \t]*:[^=\n]*)?[ \t]*=[ \t]*(.+?)[ \t]*(?:#.*)?$", flags=re.M)
DOWN_REVISION_RE = re.compile(r"^(down_revision(?:[ \t]*:[^=\n]*)?[ \t]*=[ \t]*)(.+?)[ \t]*(?:#.*)?$", flags=re.M)
REVISES_RE = re.compile(r"^Revises:.*$", flags=re.M)


def read_revision_ids(text: str) -> tuple[str | None, tuple[str, ...]]:
    """Return (revision, down_revisions) declared by an Alembic revision script."""
    m = REVISION_RE.search(text)
    if not m:
        return None, ()
    try:
        revision = ast.literal_eval(m.group(1))
    except (ValueError, SyntaxError):
        return None, ()
    if not isinstance(revision, str):
        return None, ()

    downs: tuple[str, ...] = ()
    m = DOWN_REVISION_RE.search(text)
    if m:
        try:
            value = ast.literal_eval(m.group(2))
        except (ValueError, SyntaxError):
            value = None
        if isinstance(value, str):
            downs = (value,)
        elif isinstance(value, (tuple, list)):
            downs = tuple(str(v) for v in value)
    return revision, downs


def set_down_revisions(text: str, downs: list[str]) -> str:
    if not downs:
        value: object = None
    elif len(downs) == 1:
        value = downs[0]
    else:
        value = tuple(downs)
    text = DOWN_REVISION_RE.sub(lambda m: f"{m.group(1)}{value!r}", text, count=1)
    revises = f"Revises: {', '.join(downs)}"
    return REVISES_RE.sub(lambda m: revises, text, count=1)


def render_revision_header(message: str, revision: str, down_revision: str | None) -> list[str]:
    return [
        f'"""{message}',
        "",
        f"Revision ID: {revision}",
        f"Revises: {down_revision or ''}",
        '"""',
        "from alembic import op",
        "import sqlalchemy as sa",
        "",
        "# revision identifiers, used by Alembic.",
        f"revision = {revision!r}",
        f"down_revision = {down_revision!r}",
        "branch_labels = None",
        "depends_on = None",
        "",
        "",
    ]


def render_block(header: str, statements: list[str], indent: str) -> list[str]:
    lines = [header]
    if not statements:
        statements = ["pass"]
    lines.extend(f"{indent}{stmt}" for stmt in statements)
    return lines


def render_primary_key(table: TableMetadata) -> str:
    col = table.column(table.primary_key) if table.primary_key else None
    portable = map_column_type(col.native_type) if col else PortableType.BIG_INTEGER
    if portable in IDENTITY_TYPES:
        return f"sa.Column({table.primary_key!r}, sa.BigInteger(), primary_key=True, autoincrement=True)"
    return f"sa.Column({table.primary_key!r}, {render_type(portable)}, primary_key=True)"


def emit_migration(
    table: TableMetadata,
    revision: str,
    down_revision: str | None = None,
    overwrite: bool = False,
) -> Artifact:
    fk_columns = table.foreign_key_columns()

    column_defs: list[str] = []
    if table.primary_key:
        column_defs.append(render_primary_key(table))
    for col in table.columns:
        # Foreign key columns are added after every table exists.
        if col.name == table.primary_key or col.name in fk_columns:
            continue
        column_defs.append(f"sa.Column({col.name!r}, {render_type(map_column_type(col.native_type))}, nullable=True)")

    lines = render_revision_header(f"create {table.name} table", revision, down_revision)
    lines.append("def upgrade() -> None:")
    lines.append("    op.create_table(")
    lines.append(f"        {table.name!r},")
    for column_def in column_defs:
        lines.append(f"        {column_def},")
    lines.append("    )")
    lines.append("")
    lines.append("")
    lines.append("def downgrade() -> None:")
    lines.append(f"    op.drop_table({table.name!r})")
    lines.append("")

    return Artifact(
        kind=MIGRATION,
        table=table.name,
        file_name=migration_file_name(revision, table.name),
        body="\n".join(lines),
        overwrite=overwrite,
        revision=revision,
    )


def foreign_key_name(table: str, column: str) -> str:
    return f"fk_{table}_{column}"[:MAX_IDENTIFIER_LENGTH]


def render_foreign_key_column(table: TableMetadata, fk: ForeignKey) -> str:
    col = table.column(fk.column)
    portable = map_column_type(col.native_type) if col else PortableType.BIG_INTEGER
    # Identity keys are emitted as BigInteger, so integer references follow suit.
    type_expr = "sa.BigInteger()" if portable in IDENTITY_TYPES else render_type(portable)
    return f"sa.Column({fk.column!r}, {type_expr}, nullable=True)"


def emit_relationships(
    table: TableMetadata,
    foreign_keys: Iterable[ForeignKey],
    revision: str,
    down_revision: str | None = None,
    overwrite: bool = False,
    constrain: bool = False,
) -> Artifact | None:
    foreign_keys = list(foreign_keys)
    if not foreign_keys:
        return None

    up: list[str] = []
    down: list[str] = []
    for fk in foreign_keys:
        # A key column that is also the primary key already exists.
        if fk.column != table.primary_key:
            up.append(f"batch_op.add_column({render_foreign_key_column(table, fk)})")
        if constrain:
            name = foreign_key_name(table.name, fk.column)
            up.append(f"batch_op.create_foreign_key({name!r}, {fk.on_table!r}, [{fk.column!r}], [{fk.references!r}])")
            down.append(f"batch_op.drop_constraint({name!r}, type_='foreignkey')")
    for fk in foreign_keys:
        if fk.column != table.primary_key:
            down.append(f"batch_op.drop_column({fk.column!r})")

    batch = f"    with op.batch_alter_table({table.name!r}) as batch_op:"
    lines = render_revision_header(f"add foreign keys to {table.name} table", revision, down_revision)
    lines.append("def upgrade() -> None:")
    lines.extend(render_block(batch, up, "        "))
    lines.append("")
    lines.append("")
    lines.append("def downgrade() -> None:")
    lines.extend(render_block(batch, down, "        "))
    lines.append("")

    return Artifact(
        kind=RELATIONSHIP,
        table=table.name,
        file_name=relationship_file_name(revision, table.name),
        body="\n".join(lines),
        overwrite=overwrite,
        revision=revision,
    )


def seed_literal(value: object) -> str:
    if isinstance(value, (bytes, bytearray)):
        value = bytes(value).decode("utf-8", errors="backslashreplace")
    if value is None or (isinstance(value, str) and value == ""):
        return "None"
    return repr(str(value))


def emit_seeder(
    table: TableMetadata,
    rows: Iterable[dict],
    overwrite: bool = False,
    registry_name: str = DEFAULT_REGISTRY_NAME,
) -> Artifact:
    rows = list(rows)
    ident = seeder_identifier(table.name, registry_name)

    column_names = [col.name for col in table.columns]
    for row in rows:
        for key in row:
            if key not in column_names:
                column_names.append(key)

    lines: list[str] = [
        f'"""Seed data for the {table.name} table.',
        "",
        "Rows are cleared with DELETE rather than TRUNCATE, so auto-increment",
        "counters are not reset.",
        '"""',
        "",
        "import sqlalchemy as sa",
        "",
        "",
        "TABLE = sa.table(",
        f"    {table.name!r},",
    ]
    lines.extend(f"    sa.column({name!r})," for name in column_names)
    lines.append(")")
    lines.append("")
    lines.append("")
    lines.append(f"class {ident}:")
    lines.append("    def run(self, conn: sa.Connection) -> None:")
    lines.append("        conn.execute(sa.delete(TABLE))")
    for row in rows:
        values = ", ".join(f"{key!r}: {seed_literal(value)}" for key, value in row.items())
        lines.append(f"        conn.execute(sa.insert(TABLE).values({{{values}}}))")
    lines.append("")

    return Artifact(
        kind=SEEDER,
        table=table.name,
        file_name=f"{ident}.py",
        body="\n".join(lines),
        overwrite=overwrite,
    )


@dataclasses.dataclass(frozen=True)
class GeneratorConfig:
    run_stamp: str
    exclude_tables: frozenset[str] = DEFAULT_EXCLUDED_TABLES
    force: bool = False
    migrations_dir: Path = Path("database/migrations")
    seeders_dir: Path = Path("database/seeders")
    seeders_package: str = DEFAULT_SEEDERS_PACKAGE
    registry_name: str = DEFAULT_REGISTRY_NAME
    constrain_foreign_keys: bool = False
    down_revision: str | None = None


@dataclasses.dataclass
class RunReport:
    written: list[Artifact] = dataclasses.field(default_factory=list)
    skipped: list[Artifact] = dataclasses.field(default_factory=list)
    excluded_tables: list[str] = dataclasses.field(default_factory=list)
    registry: list[str] = dataclasses.field(default_factory=list)

    def artifacts(self, kind: str) -> list[Artifact]:
        return [a for a in self.written if a.kind == kind]


def write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


class ArtifactStore:
    """Artifacts on disk, looked up by (table, kind) rather than by file name."""

    def __init__(self, migrations_dir: Path, seeders_dir: Path) -> None:
        self.migrations_dir = Path(migrations_dir)
        self.seeders_dir = Path(seeders_dir)

    def directory_for(self, artifact: Artifact) -> Path:
        return self.seeders_dir if artifact.kind == SEEDER else self.migrations_dir

    def path_for(self, artifact: Artifact) -> Path:
        return self.directory_for(artifact) / artifact.file_name

    def matching(self, artifact: Artifact) -> list[Path]:
        if artifact.kind == SEEDER:
            path = self.path_for(artifact)
            return [path] if path.is_file() else []
        return self.migration_files(artifact.kind, artifact.table)

    def migration_files(self, kind: str, table: str) -> list[Path]:
        if not self.migrations_dir.is_dir():
            return []
        pattern = migration_identity_pattern(kind, table)
        return sorted(p for p in self.migrations_dir.iterdir() if p.is_file() and pattern.match(p.name))

    def migration_revisions(self) -> dict[str, tuple[Path, tuple[str, ...]]]:
        revisions: dict[str, tuple[Path, tuple[str, ...]]] = {}
        if not self.migrations_dir.is_dir():
            return revisions
        for path in sorted(self.migrations_dir.glob("*.py")):
            revision, downs = read_revision_ids(path.read_text(encoding="utf-8"))
            if revision is not None:
                revisions[revision] = (path, downs)
        return revisions

    def head_revision(self) -> str | None:
        revisions = self.migration_revisions()
        referenced = {down for _, downs in revisions.values() for down in downs}
        heads = sorted(rev for rev in revisions if rev not in referenced)
        if not heads:
            return None
        if len(heads) > 1:
            joined = ", ".join(heads)
            print(f"[warn] multiple heads in {self.migrations_dir}: {joined}; revising {heads[-1]}", file=sys.stderr)
        return heads[-1]

    def exists(self, artifact: Artifact) -> bool:
        return bool(self.matching(artifact))

    def remove(self, path: Path) -> None:
        """Delete a revision script and re-point its children at its own parents."""
        revision, downs = read_revision_ids(path.read_text(encoding="utf-8"))
        path.unlink()
        if revision is None:
            return
        for child, (child_path, child_downs) in self.migration_revisions().items():
            if revision not in child_downs:
                continue
            spliced: list[str] = []
            for down in child_downs:
                for rev in downs if down == revision else (down,):
                    if rev not in spliced:
                        spliced.append(rev)
            text = child_path.read_text(encoding="utf-8")
            write_text(child_path, set_down_revisions(text, spliced))
            print(f"[force] {child} now revises {', '.join(spliced) or 'nothing'}", file=sys.stderr)

    def write(self, artifact: Artifact) -> Path:
        path = self.path_for(artifact)
        for stale in self.matching(artifact):
            if stale != path:
                print(f"[force] replacing {stale.name}", file=sys.stderr)
                self.remove(stale)
        write_text(path, artifact.body)
        return path

    def registry_path(self, name: str) -> Path:
        return self.seeders_dir / f"{name}.py"

    def read_registry(self, name: str) -> str | None:
        path = self.registry_path(name)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write_registry(self, name: str, content: str) -> Path:
        path = self.registry_path(name)
        write_text(path, content)
        return path


def persist_artifact(store: ArtifactStore, artifact: Artifact, dry_run: bool = False) -> bool:
    label = ARTIFACT_LABELS[artifact.kind]
    if store.exists(artifact) and not artifact.overwrite:
        print(f"[warn] {label} for {artifact.table} already exists. Use --force to overwrite.", file=sys.stderr)
        return False
    if dry_run:
        print(f"[dry-run] would write {artifact.file_name}")
        return True
    store.write(artifact)
    print(f"{label} for {artifact.table} created: {artifact.file_name}")
    return True


def print_diff(name: str, existing: str, generated: str) -> None:
    diff = difflib.unified_diff(
        existing.splitlines(),
        generated.splitlines(),
        fromfile=name,
        tofile=f"generated:{name}",
        lineterm="",
    )
    for idx, line in enumerate(diff):
        if idx > 200:
            print("... (diff truncated)", file=sys.stderr)
            break
        print(line, file=sys.stderr)


def generate_artifacts(
    conn: Connection,
    config: GeneratorConfig,
    store: ArtifactStore,
    dry_run: bool = False,
) -> RunReport:
    report = RunReport()

    tables, excluded = filter_tables(list_tables(conn), config.exclude_tables)
    for name in excluded:
        print(f"Skipping table: {name}")
    report.excluded_tables = excluded

    metadata: list[TableMetadata] = []
    for name in tables:
        print(f"Processing table: {name}", flush=True)
        metadata.append(load_table(conn, name))

    sequence = RevisionSequence(config.run_stamp)

    # Forced runs regenerate every migration for the tables in this run, including
    # foreign key migrations for tables that no longer have foreign keys.
    if config.force and not dry_run:
        for meta in metadata:
            for kind in (MIGRATION, RELATIONSHIP):
                for stale in store.migration_files(kind, meta.name):
                    print(f"[force] removing {stale.name}", file=sys.stderr)
                    store.remove(stale)

    head = config.down_revision or store.head_revision()

    def record(artifact: Artifact) -> bool:
        if persist_artifact(store, artifact, dry_run=dry_run):
            report.written.append(artifact)
            return True
        report.skipped.append(artifact)
        return False

    # Pass 1: every table exists before any foreign key points at it.
    for meta in metadata:
        artifact = emit_migration(meta, sequence.next(), down_revision=head, overwrite=config.force)
        if record(artifact):
            head = artifact.revision

    # Pass 2: foreign keys.
    for meta in metadata:
        if not meta.foreign_keys:
            continue
        artifact = emit_relationships(
            meta,
            meta.foreign_keys,
            sequence.next(),
            down_revision=head,
            overwrite=config.force,
            constrain=config.constrain_foreign_keys,
        )
        if artifact and record(artifact):
            head = artifact.revision

    # Pass 3: seeders.
    seeders: list[str] = []
    for meta in metadata:
        rows = fetch_rows(conn, meta.name)
        artifact = emit_seeder(meta, rows, overwrite=config.force, registry_name=config.registry_name)
        record(artifact)
        seeders.append(seeder_identifier(meta.name, config.registry_name))

    # Registry is written once, after every seeder.
    existing = store.read_registry(config.registry_name)
    content = merge_registry(existing, seeders, package=config.seeders_package, name=config.registry_name)
    report.registry = parse_registered_seeders(content)
    if dry_run:
        if existing != content:
            print(f"[dry-run] would update {config.registry_name}.py")
            print_diff(f"{config.registry_name}.py", existing or "", content)
    else:
        store.write_registry(config.registry_name, content)
        print(f"{config.registry_name}.py has been updated with all seeders.")

    return report


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Expected a mapping at the top of {path}")
    return raw


def build_config(raw: dict, args: argparse.Namespace | None = None, run_stamp: str | None = None) -> GeneratorConfig:
    output_cfg = raw.get("output", {}) or {}
    rel_cfg = raw.get("relationships", {}) or {}

    excluded = raw.get("exclude_tables")
    exclude_tables = set(DEFAULT_EXCLUDED_TABLES if excluded is None else excluded)
    if args is not None and args.exclude:
        exclude_tables.update(args.exclude)

    def pick(arg_name: str, value):
        override = getattr(args, arg_name, None) if args is not None else None
        return value if override is None else override

    stamp = run_stamp or datetime.now().strftime("%Y%m%d%H%M%S")
    if not stamp.isdigit():
        raise ConfigError(f"run stamp must be digits only: {stamp!r}")

    return GeneratorConfig(
        run_stamp=stamp,
        exclude_tables=frozenset(exclude_tables),
        force=bool(pick("force", raw.get("force", False))),
        migrations_dir=Path(pick("migrations_dir", output_cfg.get("migrations_dir", "database/migrations"))),
        seeders_dir=Path(pick("seeders_dir", output_cfg.get("seeders_dir", "database/seeders"))),
        seeders_package=output_cfg.get("seeders_package", DEFAULT_SEEDERS_PACKAGE),
        registry_name=output_cfg.get("registry_name", DEFAULT_REGISTRY_NAME),
        constrain_foreign_keys=bool(pick("constrain_foreign_keys", rel_cfg.get("constrain_foreign_keys", False))),
        down_revision=pick("down_revision", raw.get("down_revision")),
    )


def resolve_database_url(db_cfg: dict, override: str | None = None) -> str | URL:
    url = override or os.environ.get("DATABASE_URL") or db_cfg.get("url")
    if url:
        return url
    if not db_cfg.get("name"):
        raise ConfigError("database.name (or --database-url / DATABASE_URL) is required")
    password_env = db_cfg.get("password_env", "DB_PASSWORD")
    return build_database_url(
        driver=db_cfg.get("driver", "mysql+pymysql"),
        host=db_cfg.get("host", "localhost"),
        port=int(db_cfg.get("port", 3306)),
        name=db_cfg["name"],
        user=db_cfg.get("user"),
        password=os.environ.get(password_env),
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate migrations and seeders for all tables in the database")
    parser.add_argument("--config", default="dbgen.yaml", help="Declarative YAML config")
    parser.add_argument("--database-url", default=None, help="SQLAlchemy database URL (overrides config)")
    parser.add_argument("--force", action="store_true", default=None, help="Overwrite existing migrations and seeders")
    parser.add_argument("--exclude", action="append", default=[], help="Additional table to skip (repeatable)")
    parser.add_argument("--migrations-dir", default=None, help="Output directory for migrations")
    parser.add_argument("--seeders-dir", default=None, help="Output directory for seeders and the registry")
    parser.add_argument(
        "--constrain-foreign-keys",
        action="store_true",
        default=None,
        help="Emit foreign key constraints, not just the columns",
    )
    parser.add_argument("--down-revision", default=None, help="Revision the first generated migration revises")
    parser.add_argument("--dry-run", action="store_true", help="Report what would be written without writing")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    load_dotenv()

    try:
        raw = load_config(Path(args.config))
        config = build_config(raw, args)
        url = resolve_database_url(raw.get("database", {}) or {}, args.database_url)
    except ConfigError as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 2

    engine = create_db_engine(url)
    store = ArtifactStore(config.migrations_dir, config.seeders_dir)
    try:
        with engine.connect() as conn:
            report = generate_artifacts(conn, config, store, dry_run=args.dry_run)
    except (IntrospectionError, SQLAlchemyError) as exc:
        print(f"[error] Error: {exc}", file=sys.stderr)
        return 1
    finally:
        engine.dispose()

    print(
        f"\nAll migrations and seeders have been generated! "
        f"({len(report.written)} written, {len(report.skipped)} skipped, {len(report.registry)} registered)"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
