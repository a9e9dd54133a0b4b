"""End-to-end tests of the publishing flow.

gpg is the FakeGpg runner and the Portal is an httpx.MockTransport, so the
whole collect, sign, upload and settle sequence runs without side effects.
"""

import zipfile

import httpx
import pytest

from portal_publisher import main
from portal_publisher.config import Settings
from portal_publisher.portal import PortalProxy
from portal_publisher.signing import GpgSigner
from tests.conftest import TEST_PRIVATE_KEY, FakeGpg, add_pom


@pytest.fixture
def settings(tmp_path) -> Settings:
    repo = tmp_path / "repo" / "dk" / "mada" / "action-maven-publish-test" / "0.0.0"
    add_pom(repo, "action-maven-publish-test-0.0.0.pom")
    return Settings(
        search_dir=tmp_path / "repo",
        signing_key=TEST_PRIVATE_KEY,
        signing_key_secret="passphrase",
        portal_username="user",
        portal_token="token",
        portal_base_url="https://portal.test",
        target_action="promote_or_keep",
        initial_pause=0,
        loop_pause=0,
    )


class PortalScript:
    """Answers Portal calls with a fixed deployment state."""

    def __init__(self, state: str = "VALIDATED"):
        self.state = state
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.endswith("/upload"):
            return httpx.Response(201, text="dep-1")
        if path.endswith("/status"):
            return httpx.Response(
                200, text=f'{{"deploymentId":"dep-1","deploymentState":"{self.state}"}}'
            )
        return httpx.Response(204)


@pytest.fixture
def portal(monkeypatch) -> PortalScript:
    script = PortalScript()

    def make_proxy(credentials, base_url):
        client = httpx.Client(transport=httpx.MockTransport(script))
        return PortalProxy(credentials, base_url=base_url, client=client)

    monkeypatch.setattr(main, "PortalProxy", make_proxy)
    return script


@pytest.fixture
def gpg(monkeypatch) -> FakeGpg:
    fake = FakeGpg()
    monkeypatch.setattr(main, "GpgSigner", lambda certificate: GpgSigner(certificate, runner=fake))
    return fake


class TestPublish:
    def test_bundle_signed_uploaded_and_promoted(self, settings, portal, gpg):
        result = main.publish(settings)

        assert result.executed_action == "promoted"
        assert result.all_repos_valid
        methods = [(r.method, r.url.path) for r in portal.requests]
        assert methods == [
            ("POST", "/api/v1/publisher/upload"),
            ("GET", "/api/v1/publisher/status"),
            ("POST", "/api/v1/publisher/deployment/dep-1"),
        ]

    def test_bundle_contents(self, settings, portal, gpg):
        result = main.publish(settings)

        jar = result.final_states[0].bundle.bundle_jar
        with zipfile.ZipFile(jar) as archive:
            names = archive.namelist()
        prefix = "dk/mada/action-maven-publish-test/0.0.0/action-maven-publish-test-0.0.0.pom"
        assert names == [prefix, prefix + ".md5", prefix + ".sha1", prefix + ".asc"]


class TestRun:
    def test_exit_zero_when_all_valid(self, settings, portal, gpg):
        assert main.run(settings) == 0

    def test_exit_one_when_deployment_failed(self, settings, portal, gpg):
        portal.state = "FAILED"

        assert main.run(settings) == 1
        # Promotion falls back to keep, nothing is published
        assert [r.method for r in portal.requests] == ["POST", "GET"]

    def test_exit_one_on_error(self, settings, monkeypatch):
        def broken(_settings):
            raise RuntimeError("gpg exploded")

        monkeypatch.setattr(main, "publish", broken)

        assert main.run(settings) == 1

    def test_exit_one_on_invalid_configuration(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        for name in ("SEARCH_DIR", "SIGNING_KEY", "SIGNING_KEY_SECRET", "PORTAL_USERNAME", "PORTAL_TOKEN"):
            monkeypatch.delenv(name, raising=False)

        assert main.run() == 1
