"""Tests for uploaded image removal."""

from venuebook.services.images import purge_images, resolve_upload


class TestResolveUpload:
    def test_paths_resolve_under_uploads(self, uploads_dir):
        expected = (uploads_dir / "a.jpg").resolve()
        assert resolve_upload("/uploads/a.jpg") == expected
        assert resolve_upload("uploads/a.jpg") == expected
        assert resolve_upload("a.jpg") == expected

    def test_escape_is_refused(self, uploads_dir):
        assert resolve_upload("../secret.txt") is None
        assert resolve_upload("/uploads/../../etc/passwd") is None
        assert resolve_upload("/") is None


class TestPurgeImages:
    def test_counts_only_removed_files(self, uploads_dir):
        (uploads_dir / "one.jpg").write_bytes(b"1")
        (uploads_dir / "two.png").write_bytes(b"2")

        deleted = purge_images(["/uploads/one.jpg", "two.png", "missing.jpg", ""])

        assert deleted == 2
        assert list(uploads_dir.iterdir()) == []
