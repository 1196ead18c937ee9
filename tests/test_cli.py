"""CLI tests: command wiring, JSON output and exit codes."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from conftest import HOST, OCAPI, code_deploy_routes, code_versions_route, token_route
from crmsync_cli.base import EnvironmentCommand
from crmsync_cli.constants import ENV_VAR_MAP
from crmsync_cli.main import cli

SF_FLAGS = [
    "--sf-login-url", "https://test.salesforce.com",
    "--sf-username", "admin@b2ccrmsync.example.com",
    "--sf-password", "password",
    "--sf-security-token", "token",
]

BM_FLAGS = ["--b2c-username", "admin", "--b2c-access-key", "access-key"]

B2C_FLAGS = [
    "--b2c-hostname", HOST,
    "--b2c-instance", "b2cInstanceA",
    "--b2c-client-id", "client-id",
    "--b2c-client-secret", "client-secret",
    "--b2c-code-version", "v7",
    "--b2c-site-ids", "RefArch,RefArchGlobal",
]


@pytest.fixture(autouse=True)
def isolated_project(tmp_path, monkeypatch, fake_instance):
    """Run every command from an empty project with a fake B2C instance."""
    for var_name in ENV_VAR_MAP.values():
        monkeypatch.delenv(var_name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(EnvironmentCommand, "transport", fake_instance.transport)
    return tmp_path


@pytest.fixture
def runner():
    return CliRunner()


def invoke_json(runner, *args):
    result = runner.invoke(cli, [*args, *B2C_FLAGS, "--json"])
    return result, json.loads(result.output)


def test_all_commands_are_registered(runner):
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    for name in (
        "env:list",
        "b2c:code:zip",
        "b2c:data:zip",
        "b2c:code:deploy",
        "b2c:data:deploy",
        "b2c:verify",
        "b2c:ocapi:get",
        "b2c:sites:cartridges:add",
        "b2c:sites:cartridges:remove",
        "oobo:customers:create",
        "sf:connectedapps:create",
        "sf:trustedsites:create",
        "sf:remotesites:create",
        "sf:org:deploy",
        "sf:b2cinstance:setup",
    ):
        assert name in cli.commands


def test_env_list_masks_secrets(runner):
    result, payload = invoke_json(runner, "env:list")

    assert result.exit_code == 0
    assert payload["variables"]["B2C_INSTANCENAME"] == "b2cInstanceA"
    assert payload["variables"]["B2C_CLIENTSECRET"] == "clie...cret"
    assert payload["b2c"]["valid"] is True
    assert payload["sf"]["valid"] is False


def test_code_deploy_success(runner, fake_instance, code_archive):
    token_route(fake_instance, "tok123")
    code_deploy_routes(fake_instance, "v7")
    code_versions_route(fake_instance, "v7")

    result, payload = invoke_json(runner, "b2c:code:deploy")

    assert result.exit_code == 0
    assert payload["version"] == "v7"
    assert payload["summary"]["id"] == "v7"
    assert payload["summary"]["active"] is True


def test_code_deploy_missing_archive_exits_non_zero(runner, fake_instance):
    token_route(fake_instance)

    result, payload = invoke_json(runner, "b2c:code:deploy")

    assert result.exit_code == 1
    assert payload["error"].startswith("Unable to locate the deployment archive")
    assert "b2cInstanceA-code.zip" in payload["error"]
    assert payload["details"]["stage"] == "locate"
    assert fake_instance.requests == []


def test_code_deploy_requires_code_version(runner, fake_instance):
    result = runner.invoke(
        cli, ["b2c:code:deploy", *B2C_FLAGS[:-4], "--b2c-site-ids", "RefArch", "--json"]
    )

    assert result.exit_code == 1
    assert "B2C_CODEVERSION" in json.loads(result.output)["details"]["context"]
    assert fake_instance.requests == []


def test_code_deploy_writes_command_log(runner, fake_instance, code_archive, tmp_path):
    token_route(fake_instance, status=401)

    result = runner.invoke(cli, ["b2c:code:deploy", *B2C_FLAGS])

    assert result.exit_code == 1
    logs = list((tmp_path / "logs" / "b2cInstanceA").rglob("*_b2c-code-deploy.log"))
    assert len(logs) == 1
    content = logs[0].read_text()
    assert "Unable to authenticate against the B2C Commerce instance" in content
    assert "stage: authenticate" in content
    assert "Status: FAILED" in content


def test_code_zip_then_locate(runner, settings):
    cartridge = settings.paths.code_source / "int_b2ccrmsync"
    cartridge.mkdir(parents=True)
    (cartridge / "package.json").write_text("{}")

    result, payload = invoke_json(runner, "b2c:code:zip")

    assert result.exit_code == 0
    assert payload["archive"] == "b2cInstanceA-code.zip"
    assert payload["files"] == 1


def test_verify_fails_when_no_site_verifies(runner, fake_instance):
    token_route(fake_instance)
    fake_instance.add("GET", f"{OCAPI}/code_versions", json_body={"data": []})

    result, payload = invoke_json(runner, "b2c:verify")

    assert result.exit_code == 1
    assert payload["sites"]["success"] == []
    assert set(payload["sites"]["error"]) == {"RefArch", "RefArchGlobal"}


def test_trusted_site_generation(runner, settings):
    result, payload = invoke_json(runner, "sf:trustedsites:create")

    assert result.exit_code == 0
    assert payload["file"].endswith("b2cInstanceA_B2C.cspTrustedSite-meta.xml")
    assert (settings.paths.dx_deploy_path / "cspTrustedSites").is_dir()


def test_b2cinstance_setup_requires_salesforce_credentials(runner):
    result, payload = invoke_json(runner, "sf:b2cinstance:setup")

    assert result.exit_code == 1
    assert "SF_USERNAME" in payload["details"]["context"]
    assert "environment definition is incomplete" in payload["error"]


def test_failed_site_lookup_is_reported_as_request_failure(runner, fake_instance):
    token_route(fake_instance)
    fake_instance.add(
        "GET", f"{OCAPI}/sites/RefArch", status=500, json_body={"fault": {"message": "boom"}}
    )

    result, payload = invoke_json(runner, "b2c:sites:cartridges:add")

    assert result.exit_code == 1
    assert payload["error"] == "boom (HTTP 500)"
    assert payload["details"]["status_code"] == 500
    assert "stage" not in payload["details"]
    assert fake_instance.calls("POST") == ["POST /dwsso/oauth2/access_token"]

    result = runner.invoke(cli, ["b2c:sites:cartridges:add", *B2C_FLAGS])
    assert result.exit_code == 1
    assert "B2C Commerce request failed" in result.output
    assert "Pipeline failed" not in result.output


def test_verify_reports_code_version_listing_errors(runner, fake_instance):
    token_route(fake_instance)
    fake_instance.add(
        "GET",
        f"{OCAPI}/sites/RefArch",
        json_body={"id": "RefArch", "customer_list_link": {"customer_list_id": "RefArch"}},
    )
    fake_instance.add(
        "GET", f"{OCAPI}/code_versions", status=503, json_body={"fault": {"message": "unavailable"}}
    )

    result, payload = invoke_json(runner, "b2c:verify")

    assert result.exit_code == 0
    assert payload["code_version"] is None
    assert payload["code_version_error"] == "unavailable (HTTP 503)"

    result = runner.invoke(cli, ["b2c:verify", *B2C_FLAGS])
    assert "could not be listed" in result.output
    assert "not deployed yet" not in result.output


def test_verify_reports_missing_code_version(runner, fake_instance):
    token_route(fake_instance)
    fake_instance.add(
        "GET",
        f"{OCAPI}/sites/RefArch",
        json_body={"id": "RefArch", "customer_list_link": {"customer_list_id": "RefArch"}},
    )
    code_versions_route(fake_instance, "v6")

    result, payload = invoke_json(runner, "b2c:verify")

    assert result.exit_code == 0
    assert payload["code_version"] is None
    assert payload["code_version_error"] is None


def test_ocapi_get_uses_business_manager_grant(runner, fake_instance, settings):
    fake_instance.add(
        "POST",
        "/dw/oauth2/access_token",
        json_body={"access_token": "bm-token", "token_type": "Bearer", "expires_in": 899},
    )
    fake_instance.add(
        "GET",
        f"{OCAPI}/ocapi_configs",
        json_body={
            "global": [{"site_configs": [{"api_type": "data"}, {"api_type": "shop"}]}],
            "sites": [{"site_id": "Sites-RefArch-Site", "api_type": "shop"}],
        },
    )

    result = runner.invoke(cli, ["b2c:ocapi:get", *B2C_FLAGS, *BM_FLAGS, "--json"])
    payload = json.loads(result.output)

    assert result.exit_code == 0
    assert [config["api_type"] for config in payload["global"]] == ["data", "shop"]
    assert list(payload["sites"]) == ["RefArch"]
    assert payload["audit_file"].endswith("b2cInstanceA.ocapiConfig.json")
    assert (settings.paths.dx_config / "b2cInstanceA.ocapiConfig.json").is_file()
    assert fake_instance.calls() == [
        "POST /dw/oauth2/access_token",
        f"GET {OCAPI}/ocapi_configs",
    ]


def test_ocapi_get_requires_business_manager_credentials(runner, fake_instance):
    result, payload = invoke_json(runner, "b2c:ocapi:get")

    assert result.exit_code == 1
    assert "B2C_USERNAME" in payload["details"]["context"]
    assert "B2C_ACCESSKEY" in payload["details"]["context"]
    assert fake_instance.requests == []


@patch("crmsync_cli.services.salesforce_service.Salesforce")
def test_oobo_customers_update_site_preferences_and_salesforce(
    salesforce_cls, runner, fake_instance
):
    customer_url = f"{OCAPI}/customer_lists/RefArch/customers/9999999"
    prefs_url = f"{OCAPI}/sites/RefArch/site_preferences/preference_groups/B2CCRMSync/sandbox"
    token_route(fake_instance)
    fake_instance.add(
        "GET",
        f"{OCAPI}/sites/RefArch",
        json_body={"id": "RefArch", "customer_list_link": {"customer_list_id": "RefArch"}},
    )
    fake_instance.add("GET", customer_url, status=404, json_body={"fault": {"message": "missing"}})
    fake_instance.add(
        "PUT", customer_url, json_body={"customer_no": "9999999", "customer_id": "abOOBO"}
    )
    fake_instance.add("PATCH", prefs_url, json_body={})
    sf = salesforce_cls.return_value
    sf.query_all.return_value = {"records": [{"Id": "a0B000000000001", "Name": "RefArch"}]}

    result, payload = invoke_json(runner, "oobo:customers:create", *SF_FLAGS)

    assert result.exit_code == 0
    assert payload["customers"][0]["customer_id"] == "abOOBO"
    assert payload["customers"][0]["created"] is True
    assert payload["site_preferences"] == [{"site": "RefArch", "status": 200, "fault": None}]
    assert payload["sf_sites"] == [{"site": "RefArch", "id": "a0B000000000001", "updated": True}]
    sf.B2C_Site__c.update.assert_called_once_with(
        "a0B000000000001",
        {"OOBO_Customer_ID__c": "abOOBO", "OOBO_Customer_No__c": "9999999"},
    )


def test_oobo_customers_require_salesforce_credentials(runner, fake_instance):
    result, payload = invoke_json(runner, "oobo:customers:create")

    assert result.exit_code == 1
    assert "SF_USERNAME" in payload["details"]["context"]
    assert fake_instance.requests == []
