"""Tests for common-path probing."""

from __future__ import annotations

import asyncio

import aiohttp
import pytest

from leakprobe.collectors.path_probe import COMMON_PROBE_PATHS, PathProbe


def run_async(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


ORIGIN = "https://target.example"


class TestIsAccepted:
    def test_plain_success(self):
        assert PathProbe.is_accepted("/.env", 200, ORIGIN + "/.env", "text/plain")

    def test_redirected_path_is_rejected(self):
        assert not PathProbe.is_accepted("/.env", 200, ORIGIN + "/login", "text/plain")

    def test_env_served_as_html_is_rejected(self):
        assert not PathProbe.is_accepted("/.env", 200, ORIGIN + "/.env", "text/html; charset=utf-8")

    def test_structured_extension_check_is_case_insensitive(self):
        assert not PathProbe.is_accepted("/Config.JSON", 200, ORIGIN + "/Config.JSON", "TEXT/HTML")

    def test_extensionless_path_may_be_html(self):
        assert PathProbe.is_accepted("/graphql", 200, ORIGIN + "/graphql", "text/html")

    @pytest.mark.parametrize("status", [301, 403, 404, 500])
    def test_non_success_status_is_rejected(self, status):
        assert not PathProbe.is_accepted("/robots.txt", status, ORIGIN + "/robots.txt", "text/plain")


class TestProbe:
    def test_filters_false_positives(self, fake_session):
        fake_session.add(ORIGIN + "/.env", body="<html>home</html>", content_type="text/html")
        fake_session.add(ORIGIN + "/config.json", body="<html>", final_url=ORIGIN + "/", content_type="text/plain")
        fake_session.add(ORIGIN + "/robots.txt", body="User-agent: *", content_type="text/plain")
        probe = PathProbe(fake_session, paths=["/.env", "/config.json", "/robots.txt", "/missing.yml"])

        found = run_async(probe.probe(ORIGIN))

        assert found == [ORIGIN + "/robots.txt"]

    def test_transport_errors_are_dropped(self, fake_session):
        fake_session.fail(ORIGIN + "/.env", aiohttp.ClientConnectionError("reset"))
        fake_session.add(ORIGIN + "/swagger.json", body="{}", content_type="application/json")
        probe = PathProbe(fake_session, paths=["/.env", "/swagger.json"])

        assert run_async(probe.probe(ORIGIN + "/")) == [ORIGIN + "/swagger.json"]

    def test_requests_go_straight_to_the_origin(self, fake_session):
        probe = PathProbe(fake_session)

        run_async(probe.probe(ORIGIN))

        assert fake_session.requests == [ORIGIN + path for path in COMMON_PROBE_PATHS]
        assert all(kw.get("allow_redirects") for kw in fake_session.request_kwargs)


class TestCatalog:
    def test_covers_the_usual_suspects(self):
        for path in ["/.env", "/swagger.json", "/docker-compose.yml", "/terraform.tfvars", "/graphql"]:
            assert path in COMMON_PROBE_PATHS

    def test_paths_are_absolute_and_unique(self):
        assert all(p.startswith("/") for p in COMMON_PROBE_PATHS)
        assert len(COMMON_PROBE_PATHS) == len(set(COMMON_PROBE_PATHS))
