"""Tests for SyncConfig URLs and startup validation."""

import pytest

from vlrsync.config import SyncConfig
from vlrsync.exceptions import ConfigError


class TestUrls:

    def test_listing_url(self):
        assert SyncConfig().listing_url == "https://www.vlr.gg/matches"

    def test_first_results_page_has_no_query(self):
        assert SyncConfig().results_url() == "https://www.vlr.gg/matches/results"
        assert SyncConfig().results_url(1) == "https://www.vlr.gg/matches/results"

    def test_later_results_page(self):
        assert SyncConfig().results_url(7) == "https://www.vlr.gg/matches/results?page=7"

    def test_detail_url(self):
        assert SyncConfig().detail_url("542195") == "https://www.vlr.gg/542195"

    def test_custom_base(self):
        config = SyncConfig(base_url="http://localhost:8080")
        assert config.listing_url == "http://localhost:8080/matches"


class TestValidate:

    @pytest.mark.parametrize(
        "store_url, remote",
        [
            ("https://store.example", True),
            ("http://localhost:3210", True),
            ("sqlite:///data/vlr.db", False),
            ("data/vlr.db", False),
            (None, False),
        ],
    )
    def test_is_remote_store(self, store_url, remote):
        assert SyncConfig(store_url=store_url).is_remote_store is remote

    def test_local_store_needs_no_key(self):
        SyncConfig(store_url="data/vlr.db").validate()

    def test_missing_store_url(self):
        with pytest.raises(ConfigError, match="VLRSYNC_STORE_URL"):
            SyncConfig().validate()

    def test_remote_store_without_key(self):
        with pytest.raises(ConfigError, match="VLRSYNC_STORE_API_KEY"):
            SyncConfig(store_url="https://store.example").validate()

    def test_remote_store_with_key(self):
        SyncConfig(store_url="https://store.example", store_api_key="k").validate()

    @pytest.mark.parametrize("field", ["scan_interval", "tracker_interval"])
    def test_non_positive_interval(self, field):
        with pytest.raises(ConfigError):
            SyncConfig(store_url="vlr.db", **{field: 0}).validate()
