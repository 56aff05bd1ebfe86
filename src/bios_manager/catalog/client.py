from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from bios_manager.config import Settings
from bios_manager.errors import CatalogError
from bios_manager.utils import get_logger


logger = get_logger(__name__)

PACKAGE_NAME_PREFIX = "BIOS UPDATE"
# PkgSourceFlag 2: content is read from the source path on every refresh.
STORE_DIRECT_SOURCE_FLAG = 2


def package_name(make: str, model: str) -> str:
    return f"{PACKAGE_NAME_PREFIX} - {make} {model}"


class PackageCatalog(Protocol):
    """The systems-management package catalog the BIOS binaries live in."""

    async def create_package(
        self,
        name: str,
        source_path: str,
        version: str | None,
        manufacturer: str,
    ) -> str: ...

    async def delete_package(self, package_id: str) -> None: ...

    async def close(self) -> None: ...


@dataclass(slots=True)
class CatalogConfig:
    server: str
    site_code: str
    username: str | None = None
    password: str | None = None
    verify_tls: bool = True
    user_agent: str = "BiosManager-Python"
    timeout: float = 30.0

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        password: str | None = None,
    ) -> "CatalogConfig":
        settings.require()
        return cls(
            server=settings.sccm_server or "",
            site_code=settings.sccm_site_code or "",
            username=settings.catalog_username,
            password=password,
            verify_tls=settings.catalog_verify_tls,
        )

    @property
    def base_url(self) -> str:
        return f"https://{self.server}/AdminService/wmi"


class AdminServiceCatalog:
    """Creates packages through the Configuration Manager AdminService."""

    def __init__(
        self,
        config: CatalogConfig,
        *,
        auth: httpx.Auth | None = None,
    ) -> None:
        self._config = config
        self._auth = auth
        if self._auth is None and config.username:
            self._auth = httpx.BasicAuth(config.username, config.password or "")
        self._http_client: httpx.AsyncClient | None = None

    async def create_package(
        self,
        name: str,
        source_path: str,
        version: str | None,
        manufacturer: str,
    ) -> str:
        body = {
            "Name": name,
            "PkgSourcePath": source_path,
            "PkgSourceFlag": STORE_DIRECT_SOURCE_FLAG,
            "Manufacturer": manufacturer,
        }
        if version:
            body["Version"] = version
        payload = await self._request_json("POST", "/SMS_Package", json_body=body)
        package_id = _extract_package_id(payload)
        if not package_id:
            raise CatalogError(
                message="Site server created the package but returned no PackageID",
            )
        logger.info(
            "Created catalog package",
            package_id=package_id,
            name=name,
            site_code=self._config.site_code,
        )
        return package_id

    async def delete_package(self, package_id: str) -> None:
        await self._request("DELETE", f"/SMS_Package('{package_id}')")
        logger.info("Deleted catalog package", package_id=package_id)

    async def close(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    # ------------------------------------------------------------- Internals

    async def _request_json(
        self,
        method: str,
        path: str,
        *,
        json_body: Any | None = None,
    ) -> dict[str, Any]:
        response = await self._request(method, path, json_body=json_body)
        try:
            return response.json()
        except ValueError as exc:
            raise CatalogError(
                message="Site server returned a response that is not JSON",
                status_code=response.status_code,
                inner_error=exc,
            ) from exc

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_body: Any | None = None,
    ) -> httpx.Response:
        client = self._get_http_client()
        url = f"{self._config.base_url}{path}"
        try:
            response = await client.request(method, url, json=json_body)
        except httpx.TimeoutException as exc:
            raise CatalogError(
                message=f"Timed out contacting {self._config.server}",
                inner_error=exc,
            ) from exc
        except httpx.RequestError as exc:
            raise CatalogError(
                message=f"Network error contacting {self._config.server}: {exc}",
                inner_error=exc,
            ) from exc
        if response.status_code >= 400:
            error = _map_response_to_error(response)
            logger.warning(
                "Catalog request failed",
                method=method,
                url=url,
                status_code=response.status_code,
            )
            raise error
        return response

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                headers={"User-Agent": self._config.user_agent},
                auth=self._auth,
                verify=self._config.verify_tls,
                timeout=httpx.Timeout(self._config.timeout, connect=10.0),
            )
        return self._http_client


def _extract_package_id(payload: dict[str, Any]) -> str | None:
    candidate: Any = payload
    value = payload.get("value") if isinstance(payload, dict) else None
    if isinstance(value, list) and value:
        candidate = value[0]
    elif isinstance(value, dict):
        candidate = value
    if isinstance(candidate, dict):
        package_id = candidate.get("PackageID")
        if isinstance(package_id, str) and package_id:
            return package_id
    return None


def _map_response_to_error(response: httpx.Response) -> CatalogError:
    status = response.status_code
    body: Any = {}
    try:
        body = json.loads(response.text)
    except ValueError:
        body = {}

    error_info = body.get("error") if isinstance(body, dict) else None
    code = None
    message = None
    if isinstance(error_info, dict):
        code = error_info.get("code")
        message = error_info.get("message")
    elif isinstance(body, dict):
        message = body.get("Message")

    if status == 401:
        message = message or "Site server rejected the supplied credentials"
    elif status == 403:
        message = message or "Account lacks permission to create packages"
    message = message or response.text or f"Catalog request failed with status {status}"

    return CatalogError(
        message=str(message),
        status_code=status,
        code=code if isinstance(code, str) else None,
    )


__all__ = [
    "AdminServiceCatalog",
    "CatalogConfig",
    "PACKAGE_NAME_PREFIX",
    "PackageCatalog",
    "package_name",
]
