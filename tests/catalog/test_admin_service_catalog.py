from __future__ import annotations

import json

import httpx
import pytest
import respx

from bios_manager.catalog import AdminServiceCatalog, CatalogConfig, package_name
from bios_manager.errors import CatalogError, ErrorCategory

from tests.factories import make_settings


PACKAGES_URL = "https://cm01.contoso.com/AdminService/wmi/SMS_Package"


def _catalog() -> AdminServiceCatalog:
    return AdminServiceCatalog(CatalogConfig.from_settings(make_settings()))


def test_package_name_format() -> None:
    assert package_name("Dell", "7520") == "BIOS UPDATE - Dell 7520"


@pytest.mark.asyncio
async def test_create_package_posts_definition(respx_mock: respx.Router) -> None:
    route = respx_mock.post(PACKAGES_URL).mock(
        return_value=httpx.Response(201, json={"PackageID": "CM100123"}),
    )
    catalog = _catalog()
    try:
        package_id = await catalog.create_package(
            "BIOS UPDATE - Dell 7520", "\\\\share\\bios", "1.0.0", "Dell"
        )
    finally:
        await catalog.close()

    assert package_id == "CM100123"
    assert route.called
    body = json.loads(route.calls.last.request.content)
    assert body == {
        "Name": "BIOS UPDATE - Dell 7520",
        "PkgSourcePath": "\\\\share\\bios",
        "PkgSourceFlag": 2,
        "Manufacturer": "Dell",
        "Version": "1.0.0",
    }


@pytest.mark.asyncio
async def test_create_package_reads_value_envelope(respx_mock: respx.Router) -> None:
    respx_mock.post(PACKAGES_URL).mock(
        return_value=httpx.Response(200, json={"value": [{"PackageID": "CM100124"}]}),
    )
    catalog = _catalog()
    try:
        assert await catalog.create_package("n", "p", None, "HP") == "CM100124"
    finally:
        await catalog.close()


@pytest.mark.asyncio
async def test_create_package_without_identifier_fails(respx_mock: respx.Router) -> None:
    respx_mock.post(PACKAGES_URL).mock(return_value=httpx.Response(201, json={}))
    catalog = _catalog()
    try:
        with pytest.raises(CatalogError, match="no PackageID"):
            await catalog.create_package("n", "p", None, "HP")
    finally:
        await catalog.close()


@pytest.mark.asyncio
async def test_http_error_maps_to_catalog_error(respx_mock: respx.Router) -> None:
    respx_mock.post(PACKAGES_URL).mock(
        return_value=httpx.Response(
            403,
            json={"error": {"code": "Forbidden", "message": "Access denied"}},
        ),
    )
    catalog = _catalog()
    try:
        with pytest.raises(CatalogError) as excinfo:
            await catalog.create_package("n", "p", None, "HP")
    finally:
        await catalog.close()

    error = excinfo.value
    assert error.category is ErrorCategory.CATALOG
    assert error.status_code == 403
    assert error.code == "Forbidden"
    assert str(error) == "Access denied"
    assert error.is_retriable is False


@pytest.mark.asyncio
async def test_transport_error_maps_to_catalog_error(respx_mock: respx.Router) -> None:
    respx_mock.post(PACKAGES_URL).mock(side_effect=httpx.ConnectError("refused"))
    catalog = _catalog()
    try:
        with pytest.raises(CatalogError) as excinfo:
            await catalog.create_package("n", "p", None, "HP")
    finally:
        await catalog.close()

    assert isinstance(excinfo.value.inner_error, httpx.ConnectError)
    assert excinfo.value.is_retriable is True


@pytest.mark.asyncio
async def test_delete_package_addresses_instance(respx_mock: respx.Router) -> None:
    route = respx_mock.delete(f"{PACKAGES_URL}('CM100123')").mock(
        return_value=httpx.Response(204),
    )
    catalog = _catalog()
    try:
        await catalog.delete_package("CM100123")
    finally:
        await catalog.close()

    assert route.called


@pytest.mark.asyncio
async def test_basic_auth_sent_when_username_configured(respx_mock: respx.Router) -> None:
    route = respx_mock.post(PACKAGES_URL).mock(
        return_value=httpx.Response(201, json={"PackageID": "CM100125"}),
    )
    config = CatalogConfig.from_settings(
        make_settings(catalog_username="CONTOSO\\svc"),
        password="secret",
    )
    catalog = AdminServiceCatalog(config)
    try:
        await catalog.create_package("n", "p", None, "HP")
    finally:
        await catalog.close()

    assert route.calls.last.request.headers["Authorization"].startswith("Basic ")
