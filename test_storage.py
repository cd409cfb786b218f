"""
Storage Tests

Validates scoped stream access and artifact references for dataset files.
"""

import hashlib

import pytest


class TestArtifacts:
    """Dataset file writes."""

    def test_write_returns_reference(self, tmp_path):
        """The reference describes exactly what was written."""
        from storage.artifacts import write_text_artifact
        path = tmp_path / "nested" / "customers.json"
        ref = write_text_artifact(path, lambda w: w.write("[]"))

        assert path.read_text(encoding="utf-8") == "[]"
        assert ref.storage_uri == str(path.absolute())
        assert ref.content_hash == hashlib.sha256(b"[]").hexdigest()
        assert ref.content_type == "application/json"
        assert ref.size_bytes == 2

    def test_failing_producer_keeps_old_file(self, tmp_path):
        """Nothing is written if rendering fails."""
        from storage.artifacts import write_text_artifact
        path = tmp_path / "invoices.csv"
        path.write_text("old\n", encoding="utf-8")

        def explode(writer):
            writer.write("partial")
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            write_text_artifact(path, explode)
        assert path.read_text(encoding="utf-8") == "old\n"

    def test_open_for_read_missing(self, tmp_path):
        """Reading a missing file raises and nothing is created."""
        from storage.artifacts import open_for_read
        path = tmp_path / "missing.flat"
        with pytest.raises(FileNotFoundError):
            with open_for_read(path):
                pass
        assert not path.exists()

    def test_stream_released_after_pass(self, tmp_path):
        """The stream is closed when the block exits."""
        from storage.artifacts import open_for_read, open_for_write
        path = tmp_path / "customers.csv"
        with open_for_write(path) as writer:
            writer.write("Customer,One,CASH\r\n")
        with open_for_read(path) as reader:
            assert reader.read() == "Customer,One,CASH\r\n"
        assert reader.closed
        assert writer.closed
