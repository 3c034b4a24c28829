"""Tests for the FastAPI service mode."""

from __future__ import annotations

import base64
from pathlib import Path
from typing import List

import pytest
from fastapi.testclient import TestClient

from permabundle.acquisition.github import GithubArchiveSource
from permabundle.config import PermabundleConfig
from permabundle.deploy import DeployResult
from permabundle.errors import AcquisitionError, DeployError
from permabundle.orchestrator import Orchestrator
from permabundle.service import create_app
from tests._fixtures.archive_builder import ArchiveBuilder


class _StubGithubSource:
    def __init__(self, payload: bytes | None = None) -> None:
        self.payload = payload

    def fetch_archive(self, identifier: str) -> bytes:
        if self.payload is None:
            raise AcquisitionError(
                f"Failed to fetch repository {identifier} from all available sources",
                ["direct: status 404"],
            )
        return self.payload


class _StubPageSource:
    def fetch_page(self, url: str) -> str:
        return '<html><body><h1 class="t">Live</h1></body></html>'


class _StubDeployClient:
    def __init__(self, result: DeployResult | Exception) -> None:
        self.result = result
        self.submitted: List[str] = []

    def submit(self, html: str) -> DeployResult:
        self.submitted.append(html)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def _site(builder: ArchiveBuilder) -> bytes:
    return builder.write(
        {
            "repo/index.html": '<html><head><link rel="stylesheet" href="style.css"></head><body><p>Hi</p></body></html>',
            "repo/style.css": "p{color:red}",
        }
    ).build()


def _client(
    tmp_path: Path,
    *,
    github: object | None = None,
    deploy: _StubDeployClient | None = None,
    max_size_kb: float = 3000,
) -> TestClient:
    config = PermabundleConfig(root=tmp_path)
    config.deploy.max_size_kb = max_size_kb

    def _factory() -> Orchestrator:
        return Orchestrator(
            config,
            github_source=github or _StubGithubSource(),  # type: ignore[arg-type]
            page_source=_StubPageSource(),  # type: ignore[arg-type]
            deploy_client=deploy or _StubDeployClient(DeployResult(success=True, links=["https://arweave.net/t"])),  # type: ignore[arg-type]
        )

    return TestClient(create_app(_factory))


def test_health_endpoint(tmp_path: Path) -> None:
    response = _client(tmp_path).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_bundle_github_endpoint(tmp_path: Path, archive_builder: ArchiveBuilder) -> None:
    client = _client(tmp_path, github=_StubGithubSource(_site(archive_builder)))

    response = client.post("/bundle/github", json={"repository": "octo/site"})

    assert response.status_code == 200
    body = response.json()
    assert body["source"] == "github"
    assert body["entry_path"] == "repo/index.html"
    assert body["project_type"] == "static"
    assert "p{color:red}" in body["html"]
    assert body["links"] is None


def test_bundle_github_with_deploy(tmp_path: Path, archive_builder: ArchiveBuilder) -> None:
    deploy = _StubDeployClient(DeployResult(success=True, links=["https://arweave.net/t"]))
    client = _client(tmp_path, github=_StubGithubSource(_site(archive_builder)), deploy=deploy)

    response = client.post("/bundle/github", json={"repository": "octo/site", "deploy": True})

    assert response.status_code == 200
    assert response.json()["links"] == ["https://arweave.net/t"]
    assert len(deploy.submitted) == 1


def test_exhausted_mirrors_are_a_gateway_error(tmp_path: Path) -> None:
    response = _client(tmp_path).post("/bundle/github", json={"repository": "octo/site"})

    assert response.status_code == 502
    assert response.json()["failures"] == ["direct: status 404"]


def test_invalid_repository_is_a_client_error(tmp_path: Path) -> None:
    def _unused_fetcher(url: str, **_kwargs: object) -> bytes:
        raise AssertionError("no request expected")

    github = GithubArchiveSource(_unused_fetcher)
    response = _client(tmp_path, github=github).post(  # type: ignore[arg-type]
        "/bundle/github", json={"repository": "not a repository"}
    )

    assert response.status_code == 400
    assert "Invalid GitHub repository identifier" in response.json()["detail"]


def test_bundle_url_endpoint(tmp_path: Path) -> None:
    response = _client(tmp_path).post("/bundle/url", json={"url": "https://example.com"})

    assert response.status_code == 200
    assert response.json()["html"] == "<html><body><h1 class='t'>Live</h1></body></html>"


def test_bundle_file_endpoint(tmp_path: Path) -> None:
    content = base64.b64encode(b"<p>\n  file\n</p>").decode("ascii")

    response = _client(tmp_path).post("/bundle/file", json={"filename": "a.html", "content": content})

    assert response.status_code == 200
    assert response.json()["html"] == "<p> file\n</p>"
    assert response.json()["source"] == "file"


def test_bundle_file_rejects_bad_base64(tmp_path: Path) -> None:
    response = _client(tmp_path).post("/bundle/file", json={"filename": "a.html", "content": "%%%"})

    assert response.status_code == 400


def test_bundle_file_rejects_unsupported_type(tmp_path: Path) -> None:
    content = base64.b64encode(b"hello").decode("ascii")

    response = _client(tmp_path).post("/bundle/file", json={"filename": "a.txt", "content": content})

    assert response.status_code == 400
    assert "Unsupported file type" in response.json()["detail"]


def test_bundle_archive_endpoint(tmp_path: Path, archive_builder: ArchiveBuilder) -> None:
    response = _client(tmp_path).post(
        "/bundle/archive",
        content=_site(archive_builder),
        headers={"Content-Type": "application/zip"},
    )

    assert response.status_code == 200
    assert response.json()["source"] == "archive"


def test_bundle_archive_rejects_non_zip(tmp_path: Path) -> None:
    response = _client(tmp_path).post("/bundle/archive", content=b"not a zip")

    assert response.status_code == 400


def test_deploy_endpoint(tmp_path: Path) -> None:
    response = _client(tmp_path).post("/deploy", json={"html": "<p>x</p>"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "links": ["https://arweave.net/t"]}


def test_deploy_endpoint_size_exceeded(tmp_path: Path) -> None:
    deploy = _StubDeployClient(DeployResult(success=True))

    response = _client(tmp_path, deploy=deploy, max_size_kb=1).post("/deploy", json={"html": "a" * 2048})

    assert response.status_code == 413
    assert response.json()["limit_kb"] == 1
    assert deploy.submitted == []


@pytest.mark.parametrize(
    ("result", "detail"),
    [
        (DeployResult(success=False), "Deployment failed"),
        (DeployResult(success=False, error="Bundle rejected"), "Bundle rejected"),
        (DeployError("Deployment failed with status: 500"), "Deployment failed with status: 500"),
    ],
)
def test_deploy_endpoint_failures(tmp_path: Path, result: object, detail: str) -> None:
    response = _client(tmp_path, deploy=_StubDeployClient(result)).post(  # type: ignore[arg-type]
        "/deploy", json={"html": "<p>x</p>"}
    )

    assert response.status_code == 502
    assert response.json()["detail"] == detail
