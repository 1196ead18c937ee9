"""Tests for settings loading and environment resolution."""

from pathlib import Path

import pytest

from crmsync_cli.config import (
    deep_merge,
    load_settings,
    parse_site_ids,
    resolve_environment,
    validate_b2c_connection,
    validate_sf_connection,
)
from crmsync_cli.exceptions import ConfigurationError
from crmsync_cli.models.deployment import ArtifactScope
from crmsync_cli.models.environment import EnvironmentDefinition


class TestSettings:
    def test_defaults_load_and_anchor_paths(self, tmp_path):
        settings = load_settings(tmp_path)

        assert settings.b2c.ocapi_version == "v21_3"
        assert settings.paths.deploy_root == tmp_path / "_dist"
        assert settings.paths.dx_config == tmp_path / "config-dx"
        assert settings.paths.path_element_for(ArtifactScope.CODE) == "cartridges"
        assert settings.paths.label_for(ArtifactScope.DATA) == "data"
        assert (settings.paths.template_root / "connectedApps").is_dir()

    def test_project_override_is_deep_merged(self, tmp_path):
        (tmp_path / "crm-sync.yml").write_text(
            "b2c:\n  ocapi_version: v23_2\npaths:\n  labels:\n    code: cartridges\n"
        )

        settings = load_settings(tmp_path)

        assert settings.b2c.ocapi_version == "v23_2"
        assert settings.b2c.site_import_job_id == "sfcc-site-archive-import"
        assert settings.paths.labels == {"code": "cartridges", "data": "data"}

    def test_unknown_keys_are_rejected(self, tmp_path):
        (tmp_path / "crm-sync.yml").write_text("b2c:\n  ocapi_versoin: v23_2\n")

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(tmp_path)
        assert "ocapi_versoin" in exc_info.value.context

    def test_invalid_yaml_is_a_configuration_error(self, tmp_path):
        (tmp_path / "crm-sync.yml").write_text("b2c: [unclosed\n")

        with pytest.raises(ConfigurationError):
            load_settings(tmp_path)

    def test_settings_are_frozen(self, tmp_path):
        settings = load_settings(tmp_path)
        with pytest.raises(Exception):
            settings.version_no = "2.0.0"

    def test_deep_merge_does_not_mutate_base(self):
        base = {"a": {"b": 1, "c": 2}}
        merged = deep_merge(base, {"a": {"c": 3}})

        assert merged == {"a": {"b": 1, "c": 3}}
        assert base == {"a": {"b": 1, "c": 2}}


class TestEnvironmentResolution:
    def test_precedence_is_file_then_environ_then_flags(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "B2C_HOSTNAME=file.example.com\n"
            "B2C_INSTANCENAME=fromFile\n"
            "B2C_CODEVERSION=file_version\n"
        )
        environ = {"B2C_INSTANCENAME": "fromEnviron", "B2C_CODEVERSION": "environ_version"}

        environment = resolve_environment(
            overrides={"b2c_code_version": "flag_version", "b2c_client_id": None},
            env_file=env_file,
            environ=environ,
        )

        assert environment.b2c_host_name == "file.example.com"
        assert environment.b2c_instance_name == "fromEnviron"
        assert environment.b2c_code_version == "flag_version"
        assert environment.b2c_client_id is None

    def test_site_ids_are_split(self, tmp_path):
        environment = resolve_environment(
            overrides={"b2c_site_ids": "RefArch, RefArchGlobal,,"},
            env_file=tmp_path / "missing.env",
            environ={},
        )
        assert environment.b2c_site_ids == ("RefArch", "RefArchGlobal")
        assert parse_site_ids(None) == ()

    def test_environment_is_immutable(self):
        environment = EnvironmentDefinition(b2c_instance_name="a")
        with pytest.raises(Exception):
            environment.b2c_instance_name = "b"


class TestConnectionValidation:
    def test_complete_b2c_environment_is_valid(self, environment):
        result = validate_b2c_connection(environment, require_code_version=True)
        assert result.is_valid
        assert result.warnings == []

    def test_missing_properties_are_named(self):
        result = validate_b2c_connection(
            EnvironmentDefinition(b2c_host_name="host.example.com"), require_code_version=True
        )

        assert not result.is_valid
        assert "Missing required property: B2C_INSTANCENAME" in result.errors
        assert "Missing required property: B2C_CODEVERSION" in result.errors
        assert result.has_warnings

    def test_host_name_with_scheme_is_rejected(self, environment):
        import dataclasses

        environment = dataclasses.replace(environment, b2c_host_name="https://host.example.com/")
        result = validate_b2c_connection(environment)

        assert any("bare host name" in error for error in result.errors)

    def test_sf_login_url_must_be_https(self, environment):
        import dataclasses

        assert validate_sf_connection(environment).is_valid
        environment = dataclasses.replace(environment, sf_login_url="http://login.salesforce.com")
        assert not validate_sf_connection(environment).is_valid

    @pytest.mark.parametrize(
        "login_url,domain",
        [
            ("https://test.salesforce.com", "test"),
            ("https://login.salesforce.com/", "login"),
            ("https://acme.my.salesforce.com", "acme.my"),
            (None, "login"),
        ],
    )
    def test_sf_domain(self, login_url, domain):
        assert EnvironmentDefinition(sf_login_url=login_url).sf_domain == domain
