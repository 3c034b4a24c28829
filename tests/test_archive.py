"""Archive extraction tests."""

from __future__ import annotations

import io
import logging
import struct
import zipfile

import pytest

from permabundle.archive import ArchiveReader
from permabundle.errors import ArchiveError, EmptyBundleError
from tests._fixtures.archive_builder import ArchiveBuilder


def _corrupt_entry(data: bytes, name: str) -> bytes:
    """Overwrite the start of an entry's compressed stream with 0xFF bytes."""
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        offset = archive.getinfo(name).header_offset
    name_length, extra_length = struct.unpack("<HH", data[offset + 26 : offset + 30])
    start = offset + 30 + name_length + extra_length
    return data[:start] + b"\xff" * 8 + data[start + 8 :]


def test_extracts_text_assets_and_skips_binary_entries(archive_builder: ArchiveBuilder) -> None:
    data = (
        archive_builder.directory("site")
        .directory("site/assets")
        .write(
            {
                "site/index.html": "<html><body>Hi</body></html>",
                "site/assets/app.js": "console.log('hi');",
                "site/assets/logo.png": b"\x89PNG\r\n\x1a\n",
                "site/package.json": '{"name": "demo"}',
            }
        )
        .build()
    )

    bundle = ArchiveReader().extract_text_assets(data)

    assert bundle.paths() == ["site/index.html", "site/assets/app.js", "site/package.json"]
    assert bundle.get("site/assets/app.js") == "console.log('hi');"
    assert "site/assets/logo.png" not in bundle


def test_undecodable_entry_is_dropped_and_logged(
    archive_builder: ArchiveBuilder, caplog: pytest.LogCaptureFixture
) -> None:
    data = archive_builder.write(
        {
            "index.html": "<p>ok</p>",
            "broken.js": b"\xff\xfe\xfa invalid",
            "style.css": "p{margin:0}",
        }
    ).build()
    logger = logging.getLogger("tests.archive")

    with caplog.at_level(logging.WARNING, logger="tests.archive"):
        bundle = ArchiveReader(logger=logger).extract_text_assets(data)

    assert bundle.paths() == ["index.html", "style.css"]
    assert any("broken.js" in record.getMessage() for record in caplog.records)


def test_bom_is_stripped(archive_builder: ArchiveBuilder) -> None:
    data = archive_builder.write({"index.html": b"\xef\xbb\xbf<p>bom</p>"}).build()

    bundle = ArchiveReader().extract_text_assets(data)

    assert bundle.get("index.html") == "<p>bom</p>"


def test_suffix_matching_is_case_insensitive(archive_builder: ArchiveBuilder) -> None:
    data = archive_builder.write({"INDEX.HTML": "<p>upper</p>"}).build()

    bundle = ArchiveReader().extract_text_assets(data)

    assert bundle.paths() == ["INDEX.HTML"]


def test_custom_suffix_allow_list(archive_builder: ArchiveBuilder) -> None:
    data = archive_builder.write({"index.html": "<p></p>", "notes.md": "# notes"}).build()

    bundle = ArchiveReader([".html"]).extract_text_assets(data)

    assert bundle.paths() == ["index.html"]


def test_empty_bundle_raises(archive_builder: ArchiveBuilder) -> None:
    data = archive_builder.write({"image.png": b"\x89PNG"}).build()

    with pytest.raises(EmptyBundleError):
        ArchiveReader().extract_text_assets(data)


def test_empty_bundle_allowed_when_requested(archive_builder: ArchiveBuilder) -> None:
    data = archive_builder.directory("empty").build()

    bundle = ArchiveReader(allow_empty=True).extract_text_assets(data)

    assert len(bundle) == 0


def test_invalid_archive_bytes_raise_archive_error() -> None:
    with pytest.raises(ArchiveError):
        ArchiveReader().extract_text_assets(b"definitely not a zip")


def test_single_worker_matches_parallel_result(archive_builder: ArchiveBuilder) -> None:
    files = {f"src/module_{index}.js": f"export const n = {index};" for index in range(25)}
    data = archive_builder.write(files).build()

    serial = ArchiveReader(max_workers=1).extract_text_assets(data)
    parallel = ArchiveReader(max_workers=8).extract_text_assets(data)

    assert serial == parallel
    assert serial.paths() == list(files)


def test_corrupt_deflate_stream_only_drops_that_entry(
    archive_builder: ArchiveBuilder, caplog: pytest.LogCaptureFixture
) -> None:
    data = archive_builder.write(
        {
            "index.html": "<html><body>Hi</body></html>",
            "broken.js": "console.log('never read');\n" * 40,
        }
    ).build()
    logger = logging.getLogger("tests.archive")

    with caplog.at_level(logging.WARNING, logger="tests.archive"):
        bundle = ArchiveReader(logger=logger).extract_text_assets(_corrupt_entry(data, "broken.js"))

    assert bundle.paths() == ["index.html"]
    assert any("broken.js" in record.getMessage() for record in caplog.records)


def test_truncated_entry_stream_only_drops_that_entry(
    archive_builder: ArchiveBuilder, monkeypatch: pytest.MonkeyPatch
) -> None:
    data = archive_builder.write({"index.html": "<p>ok</p>", "cut.css": "p{margin:0}"}).build()
    original_read = zipfile.ZipFile.read

    def fake_read(self: zipfile.ZipFile, name: object, pwd: bytes | None = None) -> bytes:
        filename = name.filename if isinstance(name, zipfile.ZipInfo) else name
        if filename == "cut.css":
            raise EOFError("Compressed file ended before the end-of-stream marker was reached")
        return original_read(self, name, pwd)

    monkeypatch.setattr(zipfile.ZipFile, "read", fake_read)

    bundle = ArchiveReader().extract_text_assets(data)

    assert bundle.paths() == ["index.html"]
