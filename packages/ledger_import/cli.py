# ruff: noqa: I001
"""CLI for the ``ledger_import`` package.

Command handlers (``cmd_*``) are plain functions returning an exit code so
they can be called directly; the Typer app wraps them. Environment variables
(notably ``DATABASE_URL``) are loaded from a local ``.env`` using
``python-dotenv`` before any command runs.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .errors import CommitError, error_message
from .logging_setup import configure_logging
from .models import RecordKind

USER_ID_ENV_VAR = "LEDGER_IMPORT_USER_ID"
SEED_DEFAULTS_ENV_VAR = "LEDGER_IMPORT_SEED_DEFAULTS"


# ---- Small module-level helpers used by CLI commands -------------------------


def _resolve_user_id(user_id: str | None) -> str | None:
    value = user_id or os.getenv(USER_ID_ENV_VAR)
    return value.strip() if value and value.strip() else None


def _env_flag(name: str, default: bool) -> bool:
    """Read a boolean env var; unrecognized values keep ``default``."""

    raw = os.getenv(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in {"0", "false", "no"}:
        return False
    if v in {"1", "true", "yes"}:
        return True
    return default


# ---- Command handlers --------------------------------------------------------


def cmd_import_csv(
    csv_path: str,
    *,
    kind: RecordKind,
    user_id: str | None,
    database_url: str | None = None,
    accept_defaults: bool = False,
    assume_yes: bool = False,
) -> int:
    """Import one CSV file. Returns a process exit code."""

    from .term_ui import confirm
    from .workflows.import_flow import import_csv_file

    resolved_user = _resolve_user_id(user_id)
    if resolved_user is None:
        print(
            f"Error: no user id given; pass --user-id or set {USER_ID_ENV_VAR}.",
            file=sys.stderr,
        )
        return 1

    try:
        outcome = import_csv_file(
            csv_path,
            kind=kind,
            user_id=resolved_user,
            database_url=database_url,
            accept_defaults=accept_defaults,
            confirm_fn=None if assume_yes else (lambda q: confirm(q, default=False)),
            seed_defaults=_env_flag(SEED_DEFAULTS_ENV_VAR, True),
        )
    except FileNotFoundError:
        print(f"Error: File not found: {csv_path}", file=sys.stderr)
        return 1
    except PermissionError:
        print(f"Error: Permission denied: {csv_path}", file=sys.stderr)
        return 1
    except UnicodeDecodeError as e:
        print(f"Error: '{csv_path}' is not UTF-8 text: {e}", file=sys.stderr)
        return 1
    except CommitError as e:
        print(f"Error: import failed: {error_message(e)}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: {error_message(e)}", file=sys.stderr)
        return 1

    if outcome.parse.fatal or not outcome.parse.rows:
        return 1
    return 0


def cmd_template(kind: RecordKind, output: str | None = None) -> int:
    """Write the sample CSV for ``kind`` to ``output`` (or stdout)."""

    from .ingest.templates import template_csv

    text = template_csv(kind)
    if output is None:
        sys.stdout.write(text)
        return 0
    try:
        Path(output).write_text(text, encoding="utf-8")
    except OSError as e:
        print(f"Error: cannot write '{output}': {e}", file=sys.stderr)
        return 1
    print(f"Wrote {output}")
    return 0


def cmd_seed_categories(
    *, kind: RecordKind, user_id: str | None, database_url: str | None = None
) -> int:
    """Seed the default taxonomy (and payment modes for expenses)."""

    from db.client import session_scope

    from .ingest.seed_taxonomy import seed_default_categories
    from .payment_modes import seed_default_payment_modes

    resolved_user = _resolve_user_id(user_id)
    if resolved_user is None:
        print(
            f"Error: no user id given; pass --user-id or set {USER_ID_ENV_VAR}.",
            file=sys.stderr,
        )
        return 1
    try:
        with session_scope(database_url=database_url) as session:
            inserted = seed_default_categories(session, kind=kind, user_id=resolved_user)
            if kind is RecordKind.EXPENSE:
                seed_default_payment_modes(session, user_id=resolved_user)
    except Exception as e:
        print(f"Error: seeding failed: {error_message(e)}", file=sys.stderr)
        return 1
    print(f"Inserted {inserted} {kind} categor(ies).")
    return 0


# ---- Typer app ---------------------------------------------------------------

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    help="Import expense and income CSV files and reconcile their categories.",
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults).
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--csv-path",
    help="Path to the CSV file to import",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
)
KIND_OPTION: OptionInfo = typer.Option(
    ..., "--kind", help="Record kind of the file: expense or income."
)
USER_ID_OPTION: OptionInfo = typer.Option(
    ..., "--user-id", help=f"Owner of the imported rows (falls back to {USER_ID_ENV_VAR})."
)
DATABASE_URL_OPTION: OptionInfo = typer.Option(
    ..., "--database-url", help="Override DATABASE_URL (falls back to env var)."
)


@app.command("import-csv")
def import_csv_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    kind: Annotated[RecordKind, KIND_OPTION] = RecordKind.EXPENSE,
    user_id: Annotated[str | None, USER_ID_OPTION] = None,
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
    accept_defaults: bool = typer.Option(
        False, "--accept-defaults", help="Skip the review prompts and keep suggested decisions."
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask before writing."),
) -> None:
    """Parse, review, and import a CSV file."""

    code = cmd_import_csv(
        str(csv_path),
        kind=kind,
        user_id=user_id,
        database_url=database_url,
        accept_defaults=accept_defaults,
        assume_yes=yes,
    )
    raise typer.Exit(code)


@app.command("template")
def template_cmd(
    kind: Annotated[RecordKind, KIND_OPTION] = RecordKind.EXPENSE,
    output: str | None = typer.Option(
        None, "--output", "-o", help="File to write instead of stdout."
    ),
) -> None:
    """Print (or save) a sample CSV for the chosen record kind."""

    raise typer.Exit(cmd_template(kind, output))


@app.command("seed-categories")
def seed_categories_cmd(
    kind: Annotated[RecordKind, KIND_OPTION] = RecordKind.EXPENSE,
    user_id: Annotated[str | None, USER_ID_OPTION] = None,
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    """Seed the default categories for a user who has none."""

    raise typer.Exit(cmd_seed_categories(kind=kind, user_id=user_id, database_url=database_url))


@app.callback(invoke_without_command=True)
def _root(ctx: typer.Context) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


def main() -> None:  # pragma: no cover - console script entrypoint
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
