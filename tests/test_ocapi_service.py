"""Tests for OCAPI configuration retrieval."""

import json

import pytest

from conftest import OCAPI
from crmsync_cli.exceptions import B2CRequestError
from crmsync_cli.models.deployment import AuthToken
from crmsync_cli.services.b2c_client import B2CClient
from crmsync_cli.services.ocapi_service import (
    OCAPIConfigReport,
    OCAPIConfigService,
    short_site_id,
)

TOKEN = AuthToken(access_token="bm-token")

OCAPI_CONFIG = {
    "global": [
        {
            "site_configs": [
                {"api_type": "data", "client_id": "client-id", "resources": []},
                {"api_type": "shop", "client_id": "client-id", "resources": []},
            ]
        }
    ],
    "sites": [
        {"site_id": "Sites-RefArch-Site", "api_type": "shop", "client_id": "client-id"},
        {"site_id": "Sites-RefArchGlobal-Site", "api_type": "shop", "client_id": "client-id"},
    ],
}


def test_report_splits_global_and_site_settings():
    report = OCAPIConfigReport.from_api(OCAPI_CONFIG)

    assert [config["api_type"] for config in report.global_configs] == ["data", "shop"]
    assert list(report.site_configs) == ["RefArch", "RefArchGlobal"]
    assert [row[0] for row in report.global_rows()] == ["data", "shop"]
    assert json.loads(report.site_rows()[0][1])["site_id"] == "Sites-RefArch-Site"


def test_empty_global_settings_render_placeholders():
    report = OCAPIConfigReport.from_api({})

    assert report.global_rows() == [["data", "---"], ["shop", "---"]]
    assert report.site_rows() == []


def test_short_site_id():
    assert short_site_id("Sites-RefArch-Site") == "RefArch"
    assert short_site_id("RefArch") == "RefArch"


class TestOCAPIConfigService:
    @pytest.mark.asyncio
    async def test_fetch_passes_client_id_and_writes_audit(
        self, fake_instance, settings, environment
    ):
        fake_instance.add("GET", f"{OCAPI}/ocapi_configs", json_body=OCAPI_CONFIG)

        async with B2CClient(environment, settings, transport=fake_instance.transport) as client:
            service = OCAPIConfigService(client)
            report = await service.fetch(TOKEN)
            path = service.write_audit(report)

        request = fake_instance.requests[0]
        assert request.url.params["client_id"] == "client-id"
        assert request.headers["Authorization"] == "Bearer bm-token"
        assert path == settings.paths.dx_config / "b2cInstanceA.ocapiConfig.json"
        assert json.loads(path.read_text()) == OCAPI_CONFIG

    @pytest.mark.asyncio
    async def test_fetch_failure_raises_request_error(self, fake_instance, settings, environment):
        fake_instance.add(
            "GET",
            f"{OCAPI}/ocapi_configs",
            status=403,
            json_body={"fault": {"type": "ClientAccessForbiddenException", "message": "denied"}},
        )

        async with B2CClient(environment, settings, transport=fake_instance.transport) as client:
            with pytest.raises(B2CRequestError) as exc_info:
                await OCAPIConfigService(client).fetch(TOKEN)

        assert exc_info.value.headline == "denied (HTTP 403)"
