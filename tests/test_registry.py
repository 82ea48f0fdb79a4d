"""Tests for encoding configuration and resolution (registry.py).

Covers:
- Zero configuration: external unset, internal falls to UTF-8
- Field override -> entity default -> process default precedence
- Environment fallbacks for the internal encoding
- Per-side configuration keeps the other side of an existing spec
- Validation of encoding names
"""

import threading

import pytest

from encoding_aware.encodings import EncodingSpec
from encoding_aware.errors import UnknownEncodingError
from encoding_aware.registry import EncodingRegistry


class User:
    pass


class Post:
    pass


# ─── Zero configuration ───────────────────────────────────────────────────────


class TestUnconfigured:
    def test_external_is_unset(self, registry):
        assert registry.resolve_external(User, "comment") is None

    def test_internal_falls_back_to_utf8(self, registry):
        assert registry.resolve_internal(User, "comment") == "UTF-8"

    def test_resolve_without_field(self, registry):
        spec = registry.resolve(User, None)
        assert spec.external is None
        assert spec.internal == "UTF-8"

    def test_resolution_does_not_create_entries(self, registry):
        registry.resolve(User, "comment")
        assert registry.encodings_for(User) == {}
        assert registry.default_for(User) == EncodingSpec()


# ─── Precedence ───────────────────────────────────────────────────────────────


class TestPrecedence:
    def test_field_override_beats_entity_default(self, registry):
        registry.set_field_override(User, "comment", EncodingSpec(external="ISO-8859-1"))
        registry.set_default(User, EncodingSpec(external="cp1252"))

        assert registry.resolve_external(User, "comment") == "ISO-8859-1"
        assert registry.resolve_external(User, "name") == "cp1252"

    def test_entity_default_beats_process_default(self, registry):
        registry.set_process_default(EncodingSpec(external="ascii", internal="ascii"))
        registry.set_default(User, EncodingSpec(external="cp1252"))

        assert registry.resolve_external(User, "name") == "cp1252"
        assert registry.resolve_internal(User, "name") == "ascii"
        assert registry.resolve_external(Post, "title") == "ascii"

    def test_unset_side_falls_through(self, registry):
        registry.set_field_override(User, "comment", EncodingSpec(internal="UTF-16"))
        registry.set_default(User, EncodingSpec(external="ISO-8859-1"))

        spec = registry.resolve(User, "comment")
        assert spec.external == "ISO-8859-1"
        assert spec.internal == "UTF-16"

    def test_overrides_are_per_entity(self, registry):
        registry.set_field_override(User, "comment", EncodingSpec(external="ISO-8859-1"))
        assert registry.resolve_external(Post, "comment") is None

    def test_batch_override(self, registry):
        registry.set_field_override(
            User, ["first_name", "last_name"], EncodingSpec(external="cp1252")
        )
        assert registry.resolve_external(User, "first_name") == "cp1252"
        assert registry.resolve_external(User, "last_name") == "cp1252"
        assert registry.resolve_external(User, "comment") is None

    def test_last_override_wins(self, registry):
        registry.set_field_override(User, "comment", EncodingSpec(external="cp1252"))
        registry.set_field_override(User, "comment", EncodingSpec(internal="UTF-16"))

        # Replaced, not merged
        assert registry.resolve_external(User, "comment") is None
        assert registry.resolve_internal(User, "comment") == "UTF-16"

    def test_empty_field_list_rejected(self, registry):
        with pytest.raises(ValueError):
            registry.set_field_override(User, [], EncodingSpec(external="cp1252"))

    def test_process_default_last_call_wins(self, registry):
        registry.set_process_default(EncodingSpec(external="cp1252"))
        registry.set_process_default(EncodingSpec(external="ISO-8859-1"))
        assert registry.resolve_external(User, "x") == "ISO-8859-1"

    def test_string_entity_keys(self, registry):
        registry.external_encoding("users", "ISO-8859-1", for_="comment")
        assert registry.resolve_external("users", "comment") == "ISO-8859-1"
        assert registry.resolve_external(User, "comment") is None


# ─── Environment fallbacks ────────────────────────────────────────────────────


class TestInternalFallbacks:
    def test_settings_seed_process_default(self, make_settings):
        registry = EncodingRegistry(
            settings=make_settings(external_encoding="cp1252", internal_encoding="UTF-16")
        )
        assert registry.process_default == EncodingSpec(external="cp1252", internal="UTF-16")
        assert registry.resolve_external(User, "x") == "cp1252"

    def test_default_internal_encoding(self, make_settings):
        registry = EncodingRegistry(
            settings=make_settings(
                default_internal_encoding="UTF-16", default_external_encoding="ascii"
            )
        )
        assert registry.resolve_internal(User, "x") == "UTF-16"
        # The environment level never feeds the external side
        assert registry.resolve_external(User, "x") is None

    def test_default_external_encoding(self, make_settings):
        registry = EncodingRegistry(settings=make_settings(default_external_encoding="ascii"))
        assert registry.resolve_internal(User, "x") == "ascii"

    def test_process_default_beats_environment(self, make_settings):
        registry = EncodingRegistry(
            settings=make_settings(default_internal_encoding="UTF-16")
        )
        registry.set_process_internal_encoding("cp1252")
        assert registry.resolve_internal(User, "x") == "cp1252"

    def test_clear_reseeds(self, make_settings):
        registry = EncodingRegistry(settings=make_settings(external_encoding="cp1252"))
        registry.set_process_encoding("ascii")
        registry.encoding(User, "UTF-16")

        registry.clear()

        assert registry.process_default.external == "cp1252"
        assert registry.default_for(User) == EncodingSpec()


# ─── Per-side configuration ───────────────────────────────────────────────────


class TestPerSideConfiguration:
    def test_external_then_internal_for_field(self, registry):
        registry.external_encoding(User, "ISO-8859-1", for_="comment")
        registry.internal_encoding(User, "UTF-16", for_="comment")

        assert registry.encodings_for(User) == {
            "comment": EncodingSpec(external="ISO-8859-1", internal="UTF-16")
        }

    def test_external_for_multiple_fields(self, registry):
        registry.external_encoding(User, "ISO-8859-1", for_=["first_name", "last_name"])
        assert set(registry.encodings_for(User)) == {"first_name", "last_name"}

    def test_entity_level_sides(self, registry):
        registry.external_encoding(User, "ISO-8859-1")
        registry.internal_encoding(User, "UTF-16")
        assert registry.default_for(User) == EncodingSpec(
            external="ISO-8859-1", internal="UTF-16"
        )

    def test_encoding_sets_both(self, registry):
        registry.encoding(User, "cp1252", for_="comment")
        spec = registry.resolve(User, "comment")
        assert spec == EncodingSpec(external="cp1252", internal="cp1252")

    def test_encoding_replaces_field_spec(self, registry):
        registry.internal_encoding(User, "UTF-16", for_="comment")
        registry.encoding(User, "cp1252", for_="comment")
        assert registry.resolve_internal(User, "comment") == "cp1252"

    def test_process_sides(self, registry):
        registry.set_process_external_encoding("ISO-8859-1")
        registry.set_process_internal_encoding("UTF-16")
        assert registry.process_default == EncodingSpec(
            external="ISO-8859-1", internal="UTF-16"
        )

    def test_encodings_for_is_a_copy(self, registry):
        registry.external_encoding(User, "ISO-8859-1", for_="comment")
        snapshot = registry.encodings_for(User)
        snapshot["name"] = EncodingSpec(external="cp1252")
        assert registry.resolve_external(User, "name") is None


# ─── Validation ───────────────────────────────────────────────────────────────


class TestValidation:
    def test_unknown_encoding_rejected(self, registry):
        with pytest.raises(UnknownEncodingError):
            registry.external_encoding(User, "not-a-codec")

    def test_unknown_encoding_is_lookup_error(self):
        with pytest.raises(LookupError):
            EncodingSpec(external="not-a-codec")

    def test_spec_is_immutable(self):
        spec = EncodingSpec(external="cp1252")
        with pytest.raises(Exception):
            spec.external = "ascii"

    def test_unknown_settings_encoding_rejected(self, make_settings):
        with pytest.raises(ValueError):
            make_settings(external_encoding="not-a-codec")


# ─── Concurrency ──────────────────────────────────────────────────────────────


class TestConcurrentWriters:
    def test_resolution_sees_whole_specs(self, registry):
        """Readers racing a writer only ever see one of the written specs."""
        specs = [
            EncodingSpec(external="ISO-8859-1", internal="UTF-16"),
            EncodingSpec(external="cp1252", internal="ascii"),
        ]
        seen = set()
        stop = threading.Event()

        def writer():
            i = 0
            while not stop.is_set():
                registry.set_field_override(User, "comment", specs[i % 2])
                i += 1

        thread = threading.Thread(target=writer)
        thread.start()
        try:
            for _ in range(2000):
                spec = registry.resolve(User, "comment")
                seen.add((spec.external, spec.internal))
        finally:
            stop.set()
            thread.join()

        assert seen <= {(s.external, s.internal) for s in specs} | {(None, "UTF-8")}


class TestProcessRegistry:
    def test_get_registry_is_cached(self):
        from encoding_aware.registry import get_registry

        assert get_registry() is get_registry()
