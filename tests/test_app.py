"""Tests for the diagnostics server and report builder"""
import asyncio
import time
from unittest.mock import patch
import httpx
import pytest
from fastapi.testclient import TestClient

from server_utils import __version__
from server_utils.app.middleware import build_server_vars, is_trusted_host
from server_utils.app.server import DiagnosticsServer
from server_utils.report import build_report, server_report, system_report
from server_utils.server import Server
from server_utils.utils.request import server_vars


@pytest.fixture
def client(configure):
    def _client(**values):
        config = configure(**values)
        return TestClient(DiagnosticsServer(config).get_app())
    return _client


class TestDiagnosticsServer:
    """Test diagnostics endpoints"""

    def test_health(self, client):
        response = client().get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["requests_served"] == 0
        assert data["uptime_seconds"] >= 0

    def test_request_counter(self, client):
        test_client = client()
        test_client.get("/runtime")
        test_client.get("/system")

        assert test_client.get("/health").json()["requests_served"] == 2

    def test_status(self, client):
        response = client().get("/status")

        assert response.status_code == 200
        data = response.json()
        assert set(data) == {"service", "runtime", "environment", "server", "system"}
        assert data["service"]["version"] == __version__

    def test_server_vars_from_request(self, client):
        """Test request headers and configured software reach Server"""
        response = client(server_software="nginx/1.25").get("/server", headers={"cf-ray": "8a1b2c3d4e5f-AMS"})

        assert response.status_code == 200
        data = response.json()
        assert data["type"] == "Nginx"
        assert data["software"] == "nginx/1.25"
        assert data["cloudflare"] is True
        assert data["url_rewriting"] is True
        assert data["htaccess"] is False
        assert data["apache_modules"] is None

    def test_request_vars_do_not_leak(self, client):
        client().get("/server", headers={"cf-ray": "8a1b2c3d4e5f-AMS"})

        assert Server.is_cloudflare() is False

    def test_environment(self, client):
        data = client(site_url="http://localhost:8080", home_url="http://localhost:8080").get("/environment").json()

        assert data["type"] == "localhost"
        assert set(data) == {"type", "hosting_platform", "hostname", "docker", "virtual_machine"}

    def test_runtime(self, client):
        data = client(memory_limit="256M", disable_functions="exec, system").get("/runtime").json()

        assert data["memory_limit"] == "256M"
        assert data["disabled_functions"] == ["exec", "system"]
        assert data["uploads_enabled"] is True

    def test_security_headers(self, client):
        response = client().get("/health")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Cache-Control"] == "no-store"
        assert "server" not in response.headers
        assert "X-Process-Time" in response.headers

    def test_request_logging_disabled(self, client):
        response = client(enable_request_logging="false").get("/health")

        assert "X-Process-Time" not in response.headers

    def test_untrusted_host(self, client):
        response = client(trusted_hosts_str="example.com").get("/health")

        assert response.status_code == 403
        assert response.json() == {"detail": "Forbidden: Untrusted host"}

    def test_trusted_host(self, client):
        response = client(trusted_hosts_str="example.com, testserver").get("/health")

        assert response.status_code == 200

    def test_lookalike_host_rejected(self, client):
        test_client = client(trusted_hosts_str="example.com")

        assert test_client.get("http://evilexample.com/health").status_code == 403
        assert test_client.get("http://example.com.evil.net/health").status_code == 403
        assert test_client.get("http://example.com:8080/health").status_code == 200
        assert test_client.get("http://api.example.com/health").status_code == 200

    def test_slow_request_does_not_block_health(self, configure, monkeypatch):
        """Test blocking report work runs off the event loop"""
        config = configure(server_software="Apache/2.4.41")

        def slow_module_lister():
            time.sleep(1.0)
            return ["mod_rewrite"]

        monkeypatch.setattr(Server, "module_lister", slow_module_lister)
        app = DiagnosticsServer(config).get_app()

        async def run():
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as async_client:
                slow = asyncio.create_task(async_client.get("/server"))
                await asyncio.sleep(0.2)

                start = time.perf_counter()
                health = await async_client.get("/health")
                latency = time.perf_counter() - start

                return health, latency, await slow

        health, latency, server = asyncio.run(run())

        assert health.status_code == 200
        assert latency < 0.5
        assert server.status_code == 200
        assert server.json()["type"] == "Apache"
        assert server.json()["htaccess"] is True

    def test_docs_disabled(self, client):
        test_client = client()

        assert test_client.get("/docs").status_code == 404
        assert test_client.get("/openapi.json").status_code == 404


class TestTrustedHosts:
    """Test Host header matching"""

    @pytest.mark.parametrize("host,trusted", [
        ("example.com", True),
        ("EXAMPLE.com", True),
        ("example.com:8080", True),
        ("www.example.com", True),
        ("evilexample.com", False),
        ("example.com.evil.net", False),
        ("localhost:8080", False),
        ("", False),
    ])
    def test_is_trusted_host(self, host, trusted):
        assert is_trusted_host(host, ["example.com"]) is trusted

    def test_ip_and_port(self):
        assert is_trusted_host("127.0.0.1:8080", ["127.0.0.1"]) is True
        assert is_trusted_host("[::1]:8080", ["::1"]) is True


class TestBuildServerVars:
    """Test conversion of an ASGI scope into server vars"""

    def test_scope(self):
        scope = {
            "type": "http",
            "method": "GET",
            "path": "/status",
            "query_string": b"verbose=1",
            "http_version": "1.1",
            "server": ("10.0.0.5", 8080),
            "client": ("198.51.100.4", 51234),
            "headers": [(b"host", b"example.com"), (b"x-forwarded-proto", b"https")],
        }

        values = build_server_vars(scope, "uvicorn")

        assert values["SERVER_SOFTWARE"] == "uvicorn"
        assert values["REQUEST_METHOD"] == "GET"
        assert values["REQUEST_URI"] == "/status"
        assert values["QUERY_STRING"] == "verbose=1"
        assert values["SERVER_PROTOCOL"] == "HTTP/1.1"
        assert values["SERVER_ADDR"] == "10.0.0.5"
        assert values["SERVER_PORT"] == "8080"
        assert values["REMOTE_ADDR"] == "198.51.100.4"
        assert values["HTTP_HOST"] == "example.com"
        assert values["HTTP_X_FORWARDED_PROTO"] == "https"

    def test_minimal_scope(self):
        values = build_server_vars({"type": "http"}, "")

        assert "SERVER_ADDR" not in values
        assert "REMOTE_ADDR" not in values
        assert values["QUERY_STRING"] == ""


class TestReport:
    """Test report aggregation"""

    def test_build_report_sections(self):
        report = build_report()

        assert set(report) == {"runtime", "environment", "server", "system"}

    def test_server_report(self, monkeypatch):
        monkeypatch.setattr(Server, "module_lister", lambda: ["mod_rewrite", "mod_xsendfile"])

        with server_vars({"SERVER_SOFTWARE": "Apache/2.4.58", "SERVER_ADDR": "203.0.113.7", "SERVER_PORT": "443"}):
            report = server_report()

        assert report["type"] == "Apache"
        assert report["ip"] == "203.0.113.7"
        assert report["port"] == 443
        assert report["htaccess"] is True
        assert report["xsendfile"] is True
        assert report["apache_modules"] == ["mod_rewrite", "mod_xsendfile"]

    def test_system_report_without_load(self, tmp_path, configure):
        configure(site_root=str(tmp_path))

        with patch("server_utils.system.System.get_load_average", return_value=None):
            report = system_report()

        assert report["load_average"] is None
        assert report["high_load"] is False
        assert report["disk"]["total"] > 0
