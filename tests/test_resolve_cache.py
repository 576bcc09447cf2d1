"""
Unit tests for social.graze.fedinfo.resolve.cache

Tests cover freshness windows, lazy adoption of snapshot entries, overwrite
semantics and snapshot draining, driven by a fake clock.
"""

from concurrent.futures import ThreadPoolExecutor

from social.graze.fedinfo.model.software import SoftwareIdentity
from social.graze.fedinfo.resolve.cache import DEFAULT_TTL, SoftwareCache

MASTODON = SoftwareIdentity(name="mastodon", version="4.2.0")
MISSKEY = SoftwareIdentity(name="misskey", version="2024.5.0")


class TestGetAndSet:
    """Test suite for basic lookups."""

    def test_get_unknown_domain(self, cache):
        """Test a domain never set or loaded is a miss with the empty identity."""
        assert cache.get("example.social") == (SoftwareIdentity(), False)

    def test_set_then_get(self, cache):
        """Test a value is returned immediately after it is set."""
        cache.set("example.social", MASTODON)
        assert cache.get("example.social") == (MASTODON, True)

    def test_set_overwrites(self, cache):
        """Test the last set wins."""
        cache.set("example.social", MASTODON)
        cache.set("example.social", MISSKEY)
        assert cache.get("example.social") == (MISSKEY, True)
        assert len(cache) == 1

    def test_keys_are_independent(self, cache):
        """Test entries for different domains do not interfere."""
        cache.set("a.social", MASTODON)
        cache.set("b.social", MISSKEY)
        assert cache.get("a.social") == (MASTODON, True)
        assert cache.get("b.social") == (MISSKEY, True)

    def test_default_ttl(self):
        """Test the default freshness window is one hour."""
        assert SoftwareCache().ttl == DEFAULT_TTL == 3600.0


class TestExpiry:
    """Test suite for TTL expiry."""

    def test_fresh_just_before_ttl(self, cache, clock):
        """Test an entry is still served just inside its TTL."""
        cache.set("example.social", MASTODON)
        clock.advance(59.9)
        assert cache.get("example.social") == (MASTODON, True)

    def test_fresh_exactly_at_ttl(self, cache, clock):
        """Test an entry is only stale once elapsed time exceeds the TTL."""
        cache.set("example.social", MASTODON)
        clock.advance(60.0)
        assert cache.get("example.social") == (MASTODON, True)

    def test_stale_after_ttl(self, cache, clock):
        """Test an entry is hidden once its TTL has passed."""
        cache.set("example.social", MASTODON)
        clock.advance(60.1)
        assert cache.get("example.social") == (SoftwareIdentity(), False)

    def test_stale_entry_is_kept(self, cache, clock):
        """Test a stale entry stays in place for snapshots."""
        cache.set("example.social", MASTODON)
        clock.advance(600)
        cache.get("example.social")
        assert "example.social" in cache
        assert cache.dump() == {"example.social": MASTODON}

    def test_stale_get_does_not_refresh(self, cache, clock):
        """Test reading a stale entry does not make it fresh again."""
        cache.set("example.social", MASTODON)
        clock.advance(61)
        assert cache.get("example.social")[1] is False
        assert cache.get("example.social")[1] is False

    def test_set_refreshes_stale_entry(self, cache, clock):
        """Test a new set restarts the freshness window."""
        cache.set("example.social", MASTODON)
        clock.advance(120)
        cache.set("example.social", MISSKEY)
        clock.advance(30)
        assert cache.get("example.social") == (MISSKEY, True)


class TestLazyAdoption:
    """Test suite for entries loaded from a snapshot."""

    def test_loaded_entry_is_fresh_on_first_read(self, cache, clock):
        """Test an entry without observation time is served on first read."""
        cache.load({"example.social": MASTODON})
        clock.advance(10_000)
        assert cache.get("example.social") == (MASTODON, True)

    def test_first_read_starts_ttl(self, cache, clock):
        """Test the TTL window of a loaded entry starts at its first read."""
        cache.load({"example.social": MASTODON})
        clock.advance(10_000)
        assert cache.get("example.social") == (MASTODON, True)
        clock.advance(59)
        assert cache.get("example.social") == (MASTODON, True)
        clock.advance(2)
        assert cache.get("example.social") == (SoftwareIdentity(), False)

    def test_unread_entries_are_not_stamped(self, cache, clock):
        """Test only the entry that was read gets an observation time."""
        cache.load({"a.social": MASTODON, "b.social": MISSKEY})
        cache.get("a.social")
        clock.advance(500)
        assert cache.get("a.social")[1] is False
        assert cache.get("b.social") == (MISSKEY, True)

    def test_load_replaces_existing_entry(self, cache, clock):
        """Test loading over a stale entry makes it adoptable again."""
        cache.set("example.social", MASTODON)
        clock.advance(120)
        cache.load({"example.social": MISSKEY})
        assert cache.get("example.social") == (MISSKEY, True)


class TestDump:
    """Test suite for draining the cache."""

    def test_dump_empty(self, cache):
        assert cache.dump() == {}

    def test_dump_returns_copy(self, cache):
        """Test mutating the dump does not touch the cache."""
        cache.set("example.social", MASTODON)
        dumped = cache.dump()
        dumped["other.social"] = MISSKEY
        assert "other.social" not in cache

    def test_dump_includes_loaded_and_set(self, cache):
        cache.load({"a.social": MASTODON})
        cache.set("b.social", MISSKEY)
        assert cache.dump() == {"a.social": MASTODON, "b.social": MISSKEY}


class TestConcurrency:
    """Test suite for use from several threads."""

    def test_concurrent_sets_keep_one_entry(self, cache):
        """Test racing writers leave exactly one entry holding one of their values."""
        values = [SoftwareIdentity(name="mastodon", version=f"4.{i}.0") for i in range(50)]
        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda v: cache.set("example.social", v), values))
        value, found = cache.get("example.social")
        assert found is True
        assert value in values
        assert len(cache) == 1
