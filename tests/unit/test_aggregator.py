"""Tests for result aggregation and ordering."""

from __future__ import annotations

import asyncio

from leakprobe.collectors.crawler import Crawler
from leakprobe.models import Finding, ScanResult
from leakprobe.pipelines.scan.aggregator import ResultAggregator, order_results, sort_key


def run_async(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


ORIGIN = "https://shop.example"
SECRET = (Finding(type="Google API Key", values=("AIza...",)),)


def result(url, secrets=(), endpoints=("/api/x",)):
    return ScanResult(source_url=url, endpoints=endpoints, secrets=secrets)


class TestOrdering:
    def test_sort_key_components(self):
        assert sort_key(result(ORIGIN + "/a.js", SECRET)) == (False, False, False)
        assert sort_key(result(ORIGIN + "/a.js")) == (False, False, True)
        assert sort_key(result("https://www.googletagmanager.com/gtm.js", SECRET)) == (True, False, False)
        assert sort_key(result("https://apis.google.com/js/api.js")) == (False, True, True)

    def test_secrets_first_then_analytics_then_tag_manager(self):
        plain = result(ORIGIN + "/plain.js")
        leaky = result(ORIGIN + "/leaky.js", SECRET)
        google = result("https://maps.google.com/api.js", SECRET)
        gtm = result("https://www.googletagmanager.com/gtm.js", SECRET)

        assert order_results([gtm, google, plain, leaky]) == [leaky, plain, google, gtm]

    def test_ties_keep_encounter_order(self):
        first = result(ORIGIN + "/1.js")
        second = result(ORIGIN + "/2.js")
        third = result(ORIGIN + "/3.js")

        assert order_results([first, second, third]) == [first, second, third]

    def test_secret_file_never_sorts_after_clean_file(self):
        clean = result(ORIGIN + "/clean.js")
        leaky = result(ORIGIN + "/leaky.js", SECRET)

        ordered = order_results([clean, leaky])

        assert ordered.index(leaky) < ordered.index(clean)


class TestAggregate:
    def test_empty_and_unreachable_files_are_dropped(self, memory_fetcher, google_key):
        memory_fetcher.pages[ORIGIN + "/app.js"] = f'const apiKey = "{google_key}"'
        memory_fetcher.pages[ORIGIN + "/empty.js"] = "var x = 1;"
        aggregator = ResultAggregator(memory_fetcher, silent_mode=True)

        results = run_async(aggregator.aggregate([
            ORIGIN + "/empty.js", ORIGIN + "/missing.js", ORIGIN + "/app.js",
        ]))

        assert [r.source_url for r in results] == [ORIGIN + "/app.js"]
        assert aggregator.files_scanned == 3

    def test_progress_messages(self, memory_fetcher):
        messages = []
        aggregator = ResultAggregator(memory_fetcher, progress=messages.append)

        run_async(aggregator.aggregate([ORIGIN + "/a.js", ORIGIN + "/b.js"]))

        assert messages == [
            "Phase 2: Scanning 2 file(s)...",
            "Phase 2: Scanning file 1/2...",
            "Phase 2: Scanning file 2/2...",
        ]

    def test_duplicate_urls_are_scanned_once(self, memory_fetcher):
        memory_fetcher.pages[ORIGIN + "/a.js"] = 'fetch("/api/a")'
        aggregator = ResultAggregator(memory_fetcher, silent_mode=True)

        results = run_async(aggregator.aggregate([ORIGIN + "/a.js", ORIGIN + "/a.js"]))

        assert len(results) == 1
        assert memory_fetcher.calls == [ORIGIN + "/a.js"]


class TestEndToEnd:
    def test_script_with_google_key(self, memory_fetcher, google_key):
        start = ORIGIN + "/"
        memory_fetcher.pages[start] = '<html><script src="/app.js"></script></html>'
        memory_fetcher.pages[ORIGIN + "/app.js"] = f'const apiKey = "{google_key}"'

        discovery = run_async(Crawler(memory_fetcher, silent_mode=True).discover(ORIGIN, start))
        results = run_async(ResultAggregator(memory_fetcher, silent_mode=True).aggregate(discovery.target_urls))

        app = [r for r in results if r.source_url == ORIGIN + "/app.js"]
        assert len(app) == 1
        assert Finding(type="Google API Key", values=(google_key,)) in app[0].secrets
        assert results[0] is app[0]

    def test_config_json_db_password(self, memory_fetcher):
        memory_fetcher.pages[ORIGIN + "/config.json"] = '{"db_password": "s3cr3tpass1"}'

        results = run_async(ResultAggregator(memory_fetcher, silent_mode=True).aggregate([ORIGIN + "/config.json"]))

        assert results[0].secrets == (Finding(type="JSON Key: db_password", values=("s3cr3tpass1",)),)
