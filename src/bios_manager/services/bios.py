from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from typing import Callable

from bios_manager.catalog import PackageCatalog, package_name
from bios_manager.data import BiosPackage, BiosPackageChanges, BiosPackageRepository
from bios_manager.errors import (
    BiosManagerError,
    InvalidArgumentsError,
    NotFoundError,
    OrphanedCatalogPackageError,
)
from bios_manager.services.base import (
    EventHook,
    MutationStatus,
    run_tracked_mutation,
)
from bios_manager.utils import get_logger, normalise_field


logger = get_logger(__name__)

TODAY_TOKEN = "today"
BIOS_DATE_FORMAT = "%Y%m%d"
_BIOS_DATE_PATTERN = re.compile(r"^\d{8}$")


class PackageOperation(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    REMOVE = "remove"


@dataclass(slots=True)
class ConfirmationRequest:
    operation: PackageOperation
    summary: str
    details: dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class PackageActionEvent:
    operation: PackageOperation
    subject: str
    status: MutationStatus
    error: Exception | None = None


ConfirmCallback = Callable[[ConfirmationRequest], bool]


def resolve_target_date(value: str, *, today: date) -> str:
    """Expand ``today`` and validate an explicit ``yyyyMMdd`` date."""

    if value.strip().lower() == TODAY_TOKEN:
        return today.strftime(BIOS_DATE_FORMAT)
    candidate = value.strip()
    if not _BIOS_DATE_PATTERN.match(candidate):
        raise InvalidArgumentsError(
            message=f"Target BIOS date '{value}' must be 'today' or yyyyMMdd",
        )
    try:
        datetime.strptime(candidate, BIOS_DATE_FORMAT)
    except ValueError as exc:
        raise InvalidArgumentsError(
            message=f"Target BIOS date '{value}' is not a calendar date",
            inner_error=exc,
        ) from exc
    return candidate


class BiosPackageService:
    """Creates, reads, updates and removes dynamic BIOS update records.

    Every mutation asks ``confirm`` first; a ``False`` answer returns ``None``
    without touching the catalog or the database.
    """

    def __init__(
        self,
        catalog: PackageCatalog,
        repository: BiosPackageRepository,
        *,
        confirm: ConfirmCallback,
        clock: Callable[[], date] | None = None,
        cleanup_orphans: bool = False,
    ) -> None:
        self._catalog = catalog
        self._repository = repository
        self._confirm = confirm
        self._clock = clock or date.today
        self._cleanup_orphans = cleanup_orphans

        self.actions: EventHook[PackageActionEvent] = EventHook()

    # ------------------------------------------------------------------ Queries

    def get_package(self, package_id: str) -> BiosPackage:
        key = self._required("package_id", package_id)
        record = self._repository.get_by_package(key)
        if record is None:
            raise NotFoundError(message=f"No BIOS record references package {key}")
        return record

    def list_packages(self) -> list[BiosPackage]:
        items = self._repository.list_all()
        logger.debug("Listed BIOS records", count=len(items))
        return items

    # ----------------------------------------------------------------- Actions

    async def create_package(
        self,
        make: str,
        model: str,
        target_bios_date: str,
        flash_command: str,
        content_path: str,
        version: str | None = None,
    ) -> str | None:
        """Create the catalog package, then the identity and settings rows."""

        make = self._required("make", make)
        model = self._required("model", model)
        flash_command = self._required("flash_command", flash_command)
        content_path = self._required("content_path", content_path)
        resolved_date = resolve_target_date(
            self._required("target_bios_date", target_bios_date),
            today=self._clock(),
        )
        version = normalise_field(version)

        if self._repository.identity_for_make_model(make, model) is not None:
            raise InvalidArgumentsError(
                message=f"{make} {model} already has a BIOS record; use update instead",
            )

        name = package_name(make, model)
        request = ConfirmationRequest(
            operation=PackageOperation.CREATE,
            summary=(
                f"Create package '{name}' from {content_path} and register "
                f"{make} {model} with target BIOS date {resolved_date}"
            ),
            details={
                "Make": make,
                "Model": model,
                "TARGETBIOSDATE": resolved_date,
                "FLASHBIOSCMD": flash_command,
                "SourcePath": content_path,
                "Version": version or "",
            },
        )
        if not self._ask(request):
            return None

        async def operation() -> str:
            package_id = await self._catalog.create_package(
                name, content_path, version, make
            )
            try:
                self._repository.add(
                    make=make,
                    model=model,
                    target_bios_date=resolved_date,
                    flash_command=flash_command,
                    package_id=package_id,
                )
            except BiosManagerError as exc:
                raise await self._orphaned(package_id, exc) from exc
            return package_id

        return await run_tracked_mutation(
            name=PackageOperation.CREATE.value,
            emitter=self.actions,
            event_builder=self._event_builder(PackageOperation.CREATE, name),
            operation=operation,
        )

    async def update_package(
        self,
        package_id: str,
        *,
        new_package_id: str | None = None,
        new_flash_command: str | None = None,
        new_target_bios_date: str | None = None,
    ) -> int | None:
        """Apply every supplied change to the record referencing ``package_id``."""

        key = self._required("package_id", package_id)
        target_date = normalise_field(new_target_bios_date)
        changes = BiosPackageChanges(
            bios_package=normalise_field(new_package_id),
            flash_bios_cmd=normalise_field(new_flash_command),
            target_bios_date=(
                resolve_target_date(target_date, today=self._clock())
                if target_date
                else None
            ),
        )
        if changes.is_empty:
            raise InvalidArgumentsError(
                message="Supply at least one of new package id, flash command or target BIOS date",
            )

        existing = self.get_package(key)
        if changes.bios_package is not None:
            holder = self._repository.identity_for_package(changes.bios_package)
            if holder is not None and holder != existing.id:
                raise InvalidArgumentsError(
                    message=(
                        f"Package {changes.bios_package} is already referenced by "
                        f"BIOS record {holder}"
                    ),
                )

        request = ConfirmationRequest(
            operation=PackageOperation.UPDATE,
            summary=f"Update BIOS record for {existing.make} {existing.model} ({key})",
            details={
                column: value
                for column, value in changes.to_columns().items()
                if value is not None
            },
        )
        if not self._ask(request):
            return None

        async def operation() -> int:
            return self._repository.update(key, changes)

        return await run_tracked_mutation(
            name=PackageOperation.UPDATE.value,
            emitter=self.actions,
            event_builder=self._event_builder(PackageOperation.UPDATE, key),
            operation=operation,
        )

    async def remove_package(
        self,
        package_id: str | None = None,
        *,
        make: str | None = None,
        model: str | None = None,
    ) -> int | None:
        """Delete the settings and identity rows addressed by id or make/model.

        The catalog package itself is left in place.
        """

        key = normalise_field(package_id)
        make = normalise_field(make)
        model = normalise_field(model)

        if key and (make or model):
            raise InvalidArgumentsError(
                message="Address the record by package id or by make and model, not both",
            )
        if key:
            identity_id = self._repository.identity_for_package(key)
            subject = key
        elif make and model:
            identity_id = self._repository.identity_for_make_model(make, model)
            subject = f"{make} {model}"
        else:
            raise InvalidArgumentsError(
                message="Supply a package id, or both make and model",
            )
        if identity_id is None:
            raise NotFoundError(message=f"No BIOS record found for {subject}")

        request = ConfirmationRequest(
            operation=PackageOperation.REMOVE,
            summary=f"Remove BIOS record {identity_id} for {subject}",
            details={"ID": str(identity_id)},
        )
        if not self._ask(request):
            return None

        async def operation() -> int:
            return self._repository.delete(identity_id)

        return await run_tracked_mutation(
            name=PackageOperation.REMOVE.value,
            emitter=self.actions,
            event_builder=self._event_builder(PackageOperation.REMOVE, subject),
            operation=operation,
        )

    # ----------------------------------------------------------------- Helpers

    def _ask(self, request: ConfirmationRequest) -> bool:
        accepted = bool(self._confirm(request))
        if not accepted:
            logger.info(
                "Operation declined",
                operation=request.operation.value,
                summary=request.summary,
            )
        return accepted

    async def _orphaned(
        self,
        package_id: str,
        error: BiosManagerError,
    ) -> OrphanedCatalogPackageError:
        logger.error(
            "Database write failed after catalog package creation",
            package_id=package_id,
            error=str(error),
        )
        cleaned_up = False
        cleanup_error: Exception | None = None
        if self._cleanup_orphans:
            try:
                await self._catalog.delete_package(package_id)
                cleaned_up = True
            except BiosManagerError as exc:
                cleanup_error = exc
                logger.error(
                    "Compensating catalog cleanup failed",
                    package_id=package_id,
                    error=str(exc),
                )
        return OrphanedCatalogPackageError(
            message=(
                f"Catalog package {package_id} was created but the database "
                f"write failed: {error}"
            ),
            inner_error=error,
            package_id=package_id,
            cleaned_up=cleaned_up,
            cleanup_error=cleanup_error,
        )

    def _event_builder(
        self,
        operation: PackageOperation,
        subject: str,
    ) -> Callable[[MutationStatus, Exception | None], PackageActionEvent]:
        def build(status: MutationStatus, error: Exception | None) -> PackageActionEvent:
            return PackageActionEvent(
                operation=operation,
                subject=subject,
                status=status,
                error=error,
            )

        return build

    @staticmethod
    def _required(name: str, value: str | None) -> str:
        normalised = normalise_field(value)
        if not normalised:
            raise InvalidArgumentsError(message=f"{name} must not be empty")
        return normalised


__all__ = [
    "BiosPackageService",
    "ConfirmCallback",
    "ConfirmationRequest",
    "PackageActionEvent",
    "PackageOperation",
    "resolve_target_date",
]
