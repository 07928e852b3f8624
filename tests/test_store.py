"""
Tests unitaires pour le module Store.

Ces tests vérifient le comportement de sauvegarde et récupération
des traductions sur disque.
"""

import hashlib
import json

import pytest

from mdbook_translator.store import Store, hash_key


class TestHashKey:
    """Tests pour le calcul des empreintes."""

    def test_deterministic(self):
        assert hash_key("Hello", "French") == hash_key("Hello", "French")

    def test_language_changes_key(self):
        assert hash_key("Hello", "French") != hash_key("Hello", "German")

    def test_sha256_of_text_then_language(self):
        expected = hashlib.sha256("Bonjour Chinese".encode("utf-8")).hexdigest()

        assert hash_key("Bonjour ", "Chinese") == expected

    def test_hex_digest_format(self):
        key = hash_key("你好", "English")

        assert len(key) == 64
        assert all(c in "0123456789abcdef" for c in key)


class TestStore:
    """Tests pour la classe Store."""

    def test_load_missing_file(self, cache_file):
        store = Store(cache_file)

        assert store.load() == {}
        assert not cache_file.exists()

    def test_put_and_get(self, cache_file):
        store = Store(cache_file)
        store.load()

        store.put("k", "Bonjour")

        assert store.get("k") == "Bonjour"
        assert store.get("missing") is None

    def test_empty_translation_is_not_cached(self, cache_file):
        store = Store(cache_file)
        store.load()

        store.put("k", "")

        assert store.get("k") is None
        assert len(store) == 0

    def test_put_overwrites(self, cache_file):
        store = Store(cache_file)
        store.put("k", "un")
        store.put("k", "deux")

        assert store.get("k") == "deux"

    def test_persistence(self, cache_file):
        """Les traductions sont persistées entre instances."""
        store1 = Store(cache_file)
        store1.load()
        store1.put(hash_key("Hello", "French"), "Bonjour « monde »")
        store1.save()

        store2 = Store(cache_file)
        data = store2.load()

        assert data == {hash_key("Hello", "French"): "Bonjour « monde »"}

    def test_round_trip_keeps_keys_and_values(self, cache_file):
        mapping = {hash_key(f"text {i}", "fr"): f"texte {i}\n```\ncode\n```" for i in range(20)}
        store = Store(cache_file)
        store.load()
        for key, value in mapping.items():
            store.put(key, value)
        store.save()

        reloaded = Store(cache_file)
        reloaded.load()
        reloaded.save()

        assert Store(cache_file).load() == mapping

    def test_saved_file_is_utf8_json_object(self, cache_file):
        store = Store(cache_file)
        store.put("k", "中文")
        store.save()

        raw = cache_file.read_text(encoding="utf-8")
        assert "中文" in raw
        assert json.loads(raw) == {"k": "中文"}

    def test_save_overwrites_previous_content(self, cache_file):
        cache_file.write_text(json.dumps({"old": "ancien"}), encoding="utf-8")
        store = Store(cache_file)
        store.load()
        store.data.clear()
        store.put("new", "nouveau")
        store.save()

        assert json.loads(cache_file.read_text(encoding="utf-8")) == {"new": "nouveau"}

    def test_save_leaves_no_temporary_file(self, tmp_path):
        store = Store(tmp_path / "cache.json")
        store.put("k", "v")
        store.save()

        assert [p.name for p in tmp_path.iterdir() if p.name != "logs"] == ["cache.json"]

    def test_save_creates_parent_directory(self, tmp_path):
        store = Store(tmp_path / "nested" / "dir" / "cache.json")
        store.put("k", "v")
        store.save()

        assert (tmp_path / "nested" / "dir" / "cache.json").exists()

    def test_hit_counters(self, cache_file):
        store = Store(cache_file)
        store.load()
        store.put("k", "v")

        store.get("k")
        store.get("absent")

        assert store.lookups == 2
        assert store.hits == 1


class TestCorruptedCache:
    """Un cache corrompu n'est jamais fatal."""

    @pytest.mark.parametrize(
        "content",
        ["{ invalid json }", "[1, 2, 3]", '"just a string"', ""],
    )
    def test_corrupted_cache_is_treated_as_empty(self, cache_file, content):
        cache_file.write_text(content, encoding="utf-8")
        store = Store(cache_file)

        assert store.load() == {}

    def test_corrupted_cache_is_backed_up(self, cache_file):
        cache_file.write_text("{ invalid json }", encoding="utf-8")
        store = Store(cache_file)
        store.load()

        backup = cache_file.with_name("cache.json.backup")
        assert backup.read_text(encoding="utf-8") == "{ invalid json }"

    def test_save_after_corruption_contains_only_new_entries(self, cache_file):
        cache_file.write_text("{ invalid json }", encoding="utf-8")
        store = Store(cache_file)
        store.load()
        store.put("fresh", "frais")
        store.save()

        assert json.loads(cache_file.read_text(encoding="utf-8")) == {"fresh": "frais"}

    def test_non_string_values_are_dropped(self, cache_file):
        cache_file.write_text(
            json.dumps({"good": "bon", "bad": 42, "worse": None}), encoding="utf-8"
        )
        store = Store(cache_file)

        assert store.load() == {"good": "bon"}
