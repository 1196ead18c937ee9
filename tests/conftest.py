"""Pytest configuration and fixtures for crm-sync tests."""

import json
import zipfile
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx
import pytest

from crmsync_cli.config.settings import load_settings
from crmsync_cli.models.deployment import ArtifactScope
from crmsync_cli.models.environment import EnvironmentDefinition
from crmsync_cli.services.archive_service import ArchiveLocator

HOST = "zzzz-007.dx.commercecloud.salesforce.com"
OCAPI = "/s/-/dw/data/v21_3"
CODE_WEBDAV = "/on/demandware.servlet/webdav/Sites/Cartridges"
IMPEX_WEBDAV = "/on/demandware.servlet/webdav/Sites/Impex/src/instance"

Handler = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class FakeInstance:
    """
    Records every request and answers from registered routes.

    Routes match on method and exact URL path; unmatched requests get an
    OCAPI-style 404 fault.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.routes: Dict[Tuple[str, str], Handler] = {}

    def add(
        self,
        method: str,
        path: str,
        status: int = 200,
        json_body: Any = None,
        handler: Optional[Callable[[httpx.Request], httpx.Response]] = None,
    ) -> "FakeInstance":
        if handler is None:
            response = httpx.Response(status, json=json_body) if json_body is not None else httpx.Response(status)
            self.routes[(method, path)] = response
        else:
            self.routes[(method, path)] = handler
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(
                404, json={"fault": {"type": "NotFound", "message": f"No route {request.url.path}"}}
            )
        if callable(route) and not isinstance(route, httpx.Response):
            return route(request)
        return httpx.Response(route.status_code, content=route.content, headers=route.headers)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def calls(self, method: Optional[str] = None) -> List[str]:
        return [
            f"{r.method} {r.url.path}"
            for r in self.requests
            if method is None or r.method == method
        ]

    def body(self, index: int) -> Any:
        return json.loads(self.requests[index].content)


@pytest.fixture
def fake_instance() -> FakeInstance:
    return FakeInstance()


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture
def settings(project_root: Path):
    return load_settings(project_root)


@pytest.fixture
def environment() -> EnvironmentDefinition:
    return EnvironmentDefinition(
        b2c_host_name=HOST,
        b2c_instance_name="b2cInstanceA",
        b2c_client_id="client-id",
        b2c_client_secret="client-secret",
        b2c_username="admin",
        b2c_access_key="access-key",
        b2c_code_version="v7",
        b2c_site_ids=("RefArch", "RefArchGlobal"),
        sf_login_url="https://test.salesforce.com",
        sf_username="admin@b2ccrmsync.example.com",
        sf_password="password",
        sf_security_token="token",
    )


def write_archive(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("v7/int_b2ccrmsync/package.json", "{}")
    return path


@pytest.fixture
def code_archive(settings, environment) -> Path:
    return write_archive(ArchiveLocator(settings).archive_path(environment, ArtifactScope.CODE))


@pytest.fixture
def data_archive(settings, environment) -> Path:
    return write_archive(ArchiveLocator(settings).archive_path(environment, ArtifactScope.DATA))


def token_route(instance: FakeInstance, token: str = "tok123", status: int = 200) -> None:
    body = {"access_token": token, "token_type": "Bearer", "expires_in": 1799}
    if status != 200:
        body = {"error": "invalid_client", "error_description": "Client authentication failed"}
    instance.add("POST", "/dwsso/oauth2/access_token", status=status, json_body=body)


def code_deploy_routes(instance: FakeInstance, version: str = "v7") -> None:
    """WebDAV upload/unzip/delete plus activation for the code archive."""
    archive = f"{CODE_WEBDAV}/b2cInstanceA-code.zip"
    instance.add("PUT", archive, status=201)
    instance.add("POST", archive, status=201)
    instance.add("DELETE", archive, status=204)
    instance.add(
        "PATCH",
        f"{OCAPI}/code_versions/{version}",
        json_body={"_type": "code_version", "id": version, "active": True},
    )


def code_versions_route(instance: FakeInstance, version: str = "v7") -> None:
    instance.add(
        "GET",
        f"{OCAPI}/code_versions",
        json_body={
            "_v": "21.3",
            "count": 2,
            "data": [
                {
                    "id": "version1",
                    "active": False,
                    "last_modification_time": "2021-01-04T10:00:00.000Z",
                },
                {
                    "id": version,
                    "active": True,
                    "activation_time": "2021-03-01T12:00:00.000Z",
                    "last_modification_time": "2021-03-01T11:59:00.000Z",
                    "compatibility_mode": "19.10",
                    "cartridges": ["int_b2ccrmsync", "plugin_b2ccrmsync"],
                    "rollback": False,
                    "total_size": 1024,
                    "web_dav_url": f"https://{HOST}{CODE_WEBDAV}/{version}",
                },
            ],
        },
    )
