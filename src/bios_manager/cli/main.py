"""BIOS manager CLI - ``bios-manager`` entry point.

Manages dynamic BIOS update records: the MDT make/model identity, its
TARGETBIOSDATE / FLASHBIOSCMD / BIOSPACKAGE settings and the Configuration
Manager package holding the BIOS binaries.

Usage:
    bios-manager configure --database-server sql01 --database MDT \\
        --sccm-server cm01.contoso.com --sccm-site-code CM1
    bios-manager create --make Dell --model 7520 --target-date today \\
        --flash-command FlashBios.cmd --content-path \\\\share\\bios --version 1.0.0
    bios-manager get CM100123
    bios-manager update CM100123 --target-date 20240115
    bios-manager remove --make Dell --model 7520
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

import typer

from bios_manager.auth import InsecureKeyringError, SecretStore
from bios_manager.bootstrap import ServiceRegistry, build_services
from bios_manager.config import Settings, SettingsManager
from bios_manager.data import BiosPackage
from bios_manager.errors import BiosManagerError
from bios_manager.services import ConfirmationRequest, MutationStatus, PackageActionEvent
from bios_manager.utils import (
    ErrorSeverity,
    LoggingOptions,
    configure_logging,
    describe_exception,
    sanitize_log_message,
)

T = TypeVar("T")

app = typer.Typer(
    name="bios-manager",
    help="Create, query, update and remove dynamic BIOS update records.",
    add_completion=False,
)


@dataclass(slots=True)
class CliState:
    settings_manager: SettingsManager


@app.callback()
def root(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
    env_file: Optional[Path] = typer.Option(
        None, "--env-file", help="Settings file to use instead of the per-user default."
    ),
    log_file: bool = typer.Option(
        True, "--log-file/--no-log-file", help="Also write a rotating log file."
    ),
) -> None:
    configure_logging(LoggingOptions(debug=debug, file_sink=log_file))
    ctx.obj = CliState(settings_manager=SettingsManager(env_file))


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@app.command()
def configure(
    ctx: typer.Context,
    database_server: Optional[str] = typer.Option(None, help="SQL Server hosting the MDT database."),
    database: Optional[str] = typer.Option(None, help="MDT database name."),
    network_library: Optional[str] = typer.Option(None, help="Network library, e.g. DBMSSOCN."),
    sccm_server: Optional[str] = typer.Option(None, help="Configuration Manager site server (SMS Provider)."),
    sccm_site_code: Optional[str] = typer.Option(None, help="Configuration Manager site code."),
    odbc_driver: Optional[str] = typer.Option(None, help="ODBC driver name."),
    database_url: Optional[str] = typer.Option(None, help="Explicit SQLAlchemy URL overriding the server fields."),
    catalog_username: Optional[str] = typer.Option(None, help="AdminService account (DOMAIN\\user)."),
    set_catalog_password: bool = typer.Option(
        False,
        "--set-catalog-password",
        help="Prompt for the AdminService password and store it in the OS keyring.",
    ),
    verify_tls: Optional[bool] = typer.Option(None, "--verify-tls/--no-verify-tls", help="Verify the site server certificate."),
) -> None:
    """Persist connection settings used by every other command."""

    manager = _state(ctx).settings_manager
    settings = manager.load(environment=False)
    updates = {
        "database_server": database_server,
        "database": database,
        "network_library": network_library,
        "sccm_server": sccm_server,
        "sccm_site_code": sccm_site_code,
        "odbc_driver": odbc_driver,
        "database_url": database_url,
        "catalog_username": catalog_username,
        "catalog_verify_tls": verify_tls,
    }
    for name, value in updates.items():
        if value is not None:
            setattr(settings, name, value)
    manager.save(settings)
    typer.echo(f"Settings saved to {manager.env_file}")

    if set_catalog_password:
        password = typer.prompt(
            "AdminService password",
            hide_input=True,
            confirmation_prompt=True,
        )
        try:
            SecretStore().set_catalog_password(password)
        except InsecureKeyringError as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(1)
        typer.echo("AdminService password stored in the OS keyring.")

    missing = settings.missing_fields()
    if missing:
        typer.echo("Still missing: " + ", ".join(missing))


@app.command("show-config")
def show_config(ctx: typer.Context) -> None:
    """Print the persisted settings."""

    manager = _state(ctx).settings_manager
    settings = manager.load()
    typer.echo(f"Settings file: {manager.env_file}")
    for item in fields(Settings):
        typer.echo(f"  {item.name:20} {getattr(settings, item.name)}")
    typer.echo(f"  {'configured':20} {settings.is_configured}")


# ---------------------------------------------------------------------------
# Record operations
# ---------------------------------------------------------------------------


@app.command()
def create(
    ctx: typer.Context,
    make: str = typer.Option(..., help="Hardware manufacturer as reported by WMI."),
    model: str = typer.Option(..., help="Hardware model as reported by WMI."),
    target_date: str = typer.Option(..., "--target-date", help="Target BIOS date (yyyyMMdd) or 'today'."),
    flash_command: str = typer.Option(..., help="Command line that flashes the BIOS."),
    content_path: str = typer.Option(..., help="UNC path holding the BIOS binaries."),
    version: Optional[str] = typer.Option(None, help="Package version."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
    cleanup_on_failure: bool = typer.Option(
        False,
        "--cleanup-on-failure",
        help="Delete the new catalog package again if the database write fails.",
    ),
) -> None:
    """Create the catalog package and register the make/model BIOS record."""

    package_id = _run(
        ctx,
        lambda services: services.bios.create_package(
            make, model, target_date, flash_command, content_path, version
        ),
        assume_yes=yes,
        cleanup_orphans=cleanup_on_failure,
    )
    if package_id is None:
        typer.echo("Aborted; no changes made.")
        return
    typer.echo(f"Created package {package_id} for {make} {model}.")


@app.command()
def get(
    ctx: typer.Context,
    package_id: str = typer.Argument(..., help="Package-catalog identifier."),
) -> None:
    """Show the BIOS record referencing a package."""

    record = _run(ctx, lambda services: _wrap(services.bios.get_package, package_id))
    _print_record(record)


@app.command(name="list")
def list_packages(ctx: typer.Context) -> None:
    """List every registered BIOS record."""

    records = _run(ctx, lambda services: _wrap(services.bios.list_packages))
    if not records:
        typer.echo("No BIOS records registered.")
        return
    typer.echo(f"Found {len(records)} BIOS records:\n")
    for record in records:
        typer.echo(
            f"  {record.bios_package or '-':10} {record.make[:20]:20} "
            f"{record.model[:24]:24} {record.target_bios_date or '-'}"
        )


@app.command()
def update(
    ctx: typer.Context,
    package_id: str = typer.Argument(..., help="Package-catalog identifier of the record."),
    new_package_id: Optional[str] = typer.Option(None, help="Point the record at a different package."),
    flash_command: Optional[str] = typer.Option(None, help="New flash command."),
    target_date: Optional[str] = typer.Option(None, "--target-date", help="New target BIOS date or 'today'."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """Change the package, flash command or target date of a record."""

    rows = _run(
        ctx,
        lambda services: services.bios.update_package(
            package_id,
            new_package_id=new_package_id,
            new_flash_command=flash_command,
            new_target_bios_date=target_date,
        ),
        assume_yes=yes,
    )
    if rows is None:
        typer.echo("Aborted; no changes made.")
        return
    typer.echo(f"Updated {rows} record(s) for package {package_id}.")


@app.command()
def remove(
    ctx: typer.Context,
    package_id: Optional[str] = typer.Option(None, help="Package-catalog identifier of the record."),
    make: Optional[str] = typer.Option(None, help="Manufacturer (with --model)."),
    model: Optional[str] = typer.Option(None, help="Model (with --make)."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """Remove a BIOS record; the catalog package must be deleted separately."""

    rows = _run(
        ctx,
        lambda services: services.bios.remove_package(package_id, make=make, model=model),
        assume_yes=yes,
    )
    if rows is None:
        typer.echo("Aborted; no changes made.")
        return
    typer.echo(f"Removed {rows} record(s).")
    typer.echo("Delete the package from the Configuration Manager console separately.")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _state(ctx: typer.Context) -> CliState:
    state = ctx.obj
    if not isinstance(state, CliState):
        state = CliState(settings_manager=SettingsManager())
        ctx.obj = state
    return state


async def _wrap(func: Callable[..., T], *args: object) -> T:
    return func(*args)


def _confirmer(assume_yes: bool) -> Callable[[ConfirmationRequest], bool]:
    def confirm(request: ConfirmationRequest) -> bool:
        typer.echo(request.summary)
        for key, value in request.details.items():
            typer.echo(f"  {key:15} {sanitize_log_message(value)}")
        if assume_yes:
            return True
        return typer.confirm("Proceed?", default=False)

    return confirm


def _report_action(event: PackageActionEvent) -> None:
    typer.echo(
        f"[{event.status.value}] {event.operation.value} {event.subject}",
        err=event.status is MutationStatus.FAILED,
    )


def _run(
    ctx: typer.Context,
    action: Callable[[ServiceRegistry], Awaitable[T]],
    *,
    assume_yes: bool = False,
    cleanup_orphans: bool = False,
) -> T:
    settings = _state(ctx).settings_manager.load()

    async def _execute() -> T:
        services = build_services(
            settings,
            confirm=_confirmer(assume_yes),
            cleanup_orphans=cleanup_orphans,
        )
        services.bios.actions.subscribe(_report_action)
        try:
            return await action(services)
        finally:
            await services.close()

    try:
        return asyncio.run(_execute())
    except BiosManagerError as exc:
        descriptor = describe_exception(exc)
        label = "Warning" if descriptor.severity is ErrorSeverity.WARNING else "Error"
        typer.echo(f"{label}: {descriptor.headline}", err=True)
        typer.echo(f"  {descriptor.detail}", err=True)
        if descriptor.suggestion:
            typer.echo(f"  {descriptor.suggestion}", err=True)
        if descriptor.transient:
            typer.echo("  The failure may be temporary; retry shortly.", err=True)
        raise typer.Exit(1)


def _print_record(record: BiosPackage) -> None:
    for column, value in record.to_columns().items():
        typer.echo(f"{column:15} {value if value is not None else ''}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
