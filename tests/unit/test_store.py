"""Tests for the artifact store implementations."""

import threading

import pytest
from autoscript.models import ArtifactBundle
from autoscript.store import InMemory, Store


class TestStoreInterface:
    def test_store_is_abstract(self):
        with pytest.raises(TypeError) as exc_info:
            Store()
        assert "abstract" in str(exc_info.value).lower()

    def test_store_requires_all_methods(self):
        class GetOnly(Store):
            def get(self):
                return None

        with pytest.raises(TypeError) as exc_info:
            GetOnly()
        assert "replace" in str(exc_info.value)


class TestInMemory:
    def test_empty_before_first_generation(self):
        assert InMemory().get() is None

    def test_replace_and_get(self, sample_bundle):
        store = InMemory()
        store.replace(sample_bundle)
        assert store.get() is sample_bundle

    def test_replace_overwrites_everything(self, sample_bundle):
        store = InMemory(sample_bundle)
        new = ArtifactBundle(primary_file="new", manifest="", docs="new docs")
        store.replace(new)
        assert store.get() == new
        assert store.get().manifest == ""

    def test_rejects_non_bundles(self):
        store = InMemory()
        with pytest.raises(TypeError):
            store.replace({"primary_file": "x", "manifest": "y", "docs": "z"})
        assert store.get() is None

    def test_readers_never_see_mixed_bundles(self):
        store = InMemory(ArtifactBundle(primary_file="0", manifest="0", docs="0"))
        mixed = []
        stop = threading.Event()

        def reader():
            while not stop.is_set():
                bundle = store.get()
                if len({bundle.primary_file, bundle.manifest, bundle.docs}) != 1:
                    mixed.append(bundle)

        thread = threading.Thread(target=reader)
        thread.start()
        try:
            for i in range(2000):
                value = str(i)
                store.replace(ArtifactBundle(primary_file=value, manifest=value, docs=value))
        finally:
            stop.set()
            thread.join()

        assert mixed == []
