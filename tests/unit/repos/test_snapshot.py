"""Tests for repository snapshot data structures."""

import hashlib

import pytest

from addonmirror.repos.base import (
    MANIFEST_FOOTER,
    MANIFEST_HEADER,
    ProjectFailure,
    RepositorySnapshot,
    build_manifest_document,
    compute_checksum,
)
from addonmirror.upstream.models import Release


class TestManifestDocument:
    """Tests for document assembly and checksum."""

    def test_document_layout(self):
        """Test header, fragments and footer are concatenated without extra whitespace."""
        document = build_manifest_document(["<a/>", "<b/>"])
        assert document == b'<?xml version="1.0" encoding="UTF-8"?>\n<addons><a/><b/></addons>'

    def test_empty_document(self):
        """Test an empty repository is still a valid document."""
        assert build_manifest_document([]) == (MANIFEST_HEADER + MANIFEST_FOOTER).encode()

    def test_checksum_is_md5_hex(self):
        """Test checksum format."""
        assert compute_checksum(b"abc") == hashlib.md5(b"abc").hexdigest()


class TestRepositorySnapshot:
    """Tests for RepositorySnapshot."""

    def test_sorted_key_order(self, manifest_factory):
        """Test ids are sorted regardless of insertion order."""
        snapshot = RepositorySnapshot.from_manifests(
            [manifest_factory("plugin.video.b"), manifest_factory("plugin.video.a")]
        )

        assert snapshot.addon_ids == ("plugin.video.a", "plugin.video.b")
        assert [m.addon_id for m in snapshot] == ["plugin.video.a", "plugin.video.b"]

    def test_document_follows_sorted_order(self, manifest_factory):
        """Test fragments appear in sorted id order."""
        snapshot = RepositorySnapshot.from_manifests(
            [manifest_factory("z.addon"), manifest_factory("a.addon")]
        )
        document = snapshot.manifest_document.decode()

        assert document.index('id="a.addon"') < document.index('id="z.addon"')
        assert snapshot.checksum == hashlib.md5(snapshot.manifest_document).hexdigest()

    def test_checksum_stable(self, manifest_factory):
        """Test equal content gives an equal checksum."""
        first = RepositorySnapshot.from_manifests([manifest_factory("a"), manifest_factory("b")])
        second = RepositorySnapshot.from_manifests([manifest_factory("b"), manifest_factory("a")])

        assert first.checksum == second.checksum

    def test_checksum_changes_with_fragment(self, manifest_factory):
        """Test any fragment change changes the checksum."""
        first = RepositorySnapshot.from_manifests([manifest_factory("a", "1.0.0")])
        second = RepositorySnapshot.from_manifests([manifest_factory("a", "1.0.1")])

        assert first.checksum != second.checksum

    def test_immutable(self, manifest_factory):
        """Test the addon mapping cannot be modified."""
        snapshot = RepositorySnapshot.from_manifests([manifest_factory("a")])

        with pytest.raises(TypeError):
            snapshot.addons["b"] = manifest_factory("b")
        with pytest.raises(AttributeError):
            snapshot.checksum = "x"

    def test_source_mapping_copied(self, manifest_factory):
        """Test later changes to the input mapping do not leak in."""
        addons = {"a": manifest_factory("a")}
        snapshot = RepositorySnapshot(addons=addons)
        addons["b"] = manifest_factory("b")

        assert "b" not in snapshot
        assert len(snapshot) == 1

    def test_empty(self):
        snapshot = RepositorySnapshot.empty()

        assert snapshot.is_empty
        assert snapshot.manifest_document == build_manifest_document([])

    def test_summary(self, manifest_factory):
        snapshot = RepositorySnapshot.from_manifests(
            [manifest_factory("a")],
            [ProjectFailure("owner/bad", "FetchError", "boom")],
        )
        summary = snapshot.summary()

        assert summary["addons"] == 1
        assert summary["failures"] == 1
        assert summary["checksum"] == snapshot.checksum


class TestAddonManifest:
    """Tests for AddonManifest helpers."""

    def test_primary_asset_prefers_versioned_zip(self, manifest_factory):
        """Test the zip matching the declared version wins."""
        manifest = manifest_factory("a", "1.0.0", assets=["a-1.0.0.zip", "extras.zip", "icon.png"])
        assert manifest.primary_asset().name == "a-1.0.0.zip"

    def test_primary_asset_falls_back_to_last_zip(self, manifest_factory):
        """Test without a versioned zip the last zip is used."""
        manifest = manifest_factory("a", "1.0.0", assets=["one.zip", "two.zip", "icon.png"])
        assert manifest.primary_asset().name == "two.zip"

    def test_primary_asset_none(self, manifest_factory):
        manifest = manifest_factory("a", assets=["icon.png"])
        assert manifest.primary_asset() is None

    def test_changelog_newest_first(self, manifest_factory):
        """Test changelog lists every release in stored order."""
        older = Release(tag="v0.9.0", changelog_body="old notes")
        manifest = manifest_factory("a", "1.0.0", extra_releases=[older])

        assert manifest.changelog() == (
            "v1.0.0\n-------\nnotes 1.0.0\n\n"
            "v0.9.0\n-------\nold notes\n\n"
        )
