import io
import json
import os
import tempfile
from unittest import mock

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase, override_settings

from countries.exceptions import EmptyResultError, TransportError
from countries.models import Country
from countries.queries import CodeQuery, NameQuery, RegionQuery


class FetchCommandTestMixin:
    def setUp(self):
        # Basic sample data in the decoded shape
        self.sample = {
            "chile": Country(name="Chile", population=19_000_000, region="Americas", capital="Santiago"),
            "peru": Country(name="Peru", population=33_000_000, region="Americas", capital="Lima"),
            "bolivia": Country(name="Bolivia", population=12_000_000, region="Americas", capital="Sucre"),
        }

    def _patch_api(self, fetch=None):
        """
        Patch the APIClient used by the fetch commands so they use our
        sample data instead of making real HTTP requests.
        """
        patcher = mock.patch(
            "countries.management.commands._base.APIClient",
            autospec=True,
        )
        mocked_api_cls = patcher.start()
        self.addCleanup(patcher.stop)

        mocked_api = mocked_api_cls.return_value
        mocked_api.fetch.side_effect = fetch or self._fake_fetch
        return mocked_api

    def _fake_fetch(self, query, limit, timeout=None):
        countries = list(self.sample.values())
        return countries[:limit] if limit > 0 else countries

    def _call(self, *args):
        out, err = io.StringIO(), io.StringIO()
        call_command(*args, "--no-progress", stdout=out, stderr=err)
        return out.getvalue(), err.getvalue()


class FetchCountriesCommandTests(FetchCommandTestMixin, SimpleTestCase):
    def test_fetch_by_name_prints_json(self):
        mocked_api = self._patch_api()

        out, _ = self._call("fetch_countries", "--name", "chile")

        mocked_api.fetch.assert_called_once_with(NameQuery("chile", False), 1, None)
        payload = json.loads(out)
        self.assertEqual(
            payload,
            [{"name": "Chile", "population": 19_000_000, "region": "Americas", "capital": "Santiago"}],
        )

    def test_names_and_codes_fetched_concurrently(self):
        mocked_api = self._patch_api()

        out, _ = self._call(
            "fetch_countries", "--name", "chile", "peru", "--code", "bo", "--fulltext", "-n", "2"
        )

        queried = {c.args[0] for c in mocked_api.fetch.call_args_list}
        self.assertEqual(
            queried,
            {NameQuery("chile", True), NameQuery("peru", True), CodeQuery("bo")},
        )
        # 3 queries x 2 countries each, flattened
        self.assertEqual(len(json.loads(out)), 6)

    def test_all_flag_overrides_limit(self):
        mocked_api = self._patch_api()

        out, _ = self._call("fetch_countries", "--name", "a", "-n", "2", "--all")

        mocked_api.fetch.assert_called_once_with(NameQuery("a", False), -1, None)
        self.assertEqual(len(json.loads(out)), 3)

    def test_failed_query_is_reported_and_others_kept(self):
        def fetch(query, limit, timeout=None):
            if query.code == "xx":
                raise TransportError("404 Client Error")
            return [self.sample["chile"]]

        self._patch_api(fetch)

        out, err = self._call("fetch_countries", "--code", "cl", "xx")

        self.assertEqual([c["name"] for c in json.loads(out)], ["Chile"])
        self.assertIn("Failed to fetch", err)
        self.assertIn("404 Client Error", err)

    def test_all_queries_failing_raises(self):
        self._patch_api(mock.Mock(side_effect=EmptyResultError("no match")))

        with self.assertRaises(CommandError):
            self._call("fetch_countries", "--name", "atlantis")

    def test_requires_name_or_code(self):
        self._patch_api()
        with self.assertRaises(CommandError):
            self._call("fetch_countries")

    def test_writes_output_file(self):
        self._patch_api()
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        path = os.path.join(tmp.name, "out.json")

        out, _ = self._call("fetch_countries", "--code", "cl", "--output", path)

        self.assertIn("Wrote 1 result(s)", out)
        with open(path, encoding="utf-8") as f:
            self.assertEqual(json.load(f)[0]["name"], "Chile")

    @override_settings(FETCHER_JSON_FORCE_OVERRIDE="false")
    def test_existing_output_file_without_override_raises(self):
        self._patch_api()
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        path = os.path.join(tmp.name, "out.json")
        with open(path, "w") as f:
            f.write("[]")

        with self.assertRaises(CommandError):
            self._call("fetch_countries", "--code", "cl", "--output", path)

    @override_settings(FETCHER_HTTP_TIMEOUT="whenever")
    def test_bad_config_aborts_before_fetching(self):
        mocked_api = self._patch_api()

        with self.assertRaises(CommandError):
            self._call("fetch_countries", "--name", "chile")
        mocked_api.fetch.assert_not_called()

    @override_settings(FETCHER_LOG_LEVEL="SHOUTY")
    def test_bad_log_level_aborts_before_fetching(self):
        mocked_api = self._patch_api()

        with self.assertRaises(CommandError):
            self._call("fetch_countries", "--name", "chile")
        mocked_api.fetch.assert_not_called()


class FetchRegionsCommandTests(FetchCommandTestMixin, SimpleTestCase):
    def test_region_stats_printed(self):
        mocked_api = self._patch_api()

        out, _ = self._call("fetch_regions", "--name", "americas", "--all")

        mocked_api.fetch.assert_called_once_with(RegionQuery("americas"), -1, None)
        [region] = json.loads(out)
        self.assertEqual(region["name"], "americas")
        self.assertEqual(region["total_population"], 64_000_000)
        self.assertAlmostEqual(region["avg_population"], 64_000_000 / 3)
        self.assertEqual(len(region["countries"]), 3)

    def test_default_limit_is_ten(self):
        mocked_api = self._patch_api()

        self._call("fetch_regions", "--name", "europe")

        mocked_api.fetch.assert_called_once_with(RegionQuery("europe"), 10, None)

    def test_multiple_regions(self):
        self._patch_api()

        out, _ = self._call("fetch_regions", "--name", "europe", "asia", "-n", "2")

        regions = {r["name"]: r for r in json.loads(out)}
        self.assertEqual(set(regions), {"europe", "asia"})
        self.assertEqual(regions["asia"]["total_population"], 52_000_000)
        self.assertEqual(regions["asia"]["avg_population"], 26_000_000.0)

    def test_failed_region_is_reported(self):
        def fetch(query, limit, timeout=None):
            if query.region == "atlantis":
                raise EmptyResultError("no countries")
            return [self.sample["peru"]]

        self._patch_api(fetch)

        out, err = self._call("fetch_regions", "--name", "atlantis", "americas")

        self.assertEqual([r["name"] for r in json.loads(out)], ["americas"])
        self.assertIn("atlantis", err)
