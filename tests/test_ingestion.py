"""Tests covering folder scanning, metadata extraction and timezone lookup."""

import math
import os
import struct
import zlib
from datetime import datetime, timezone
from pathlib import Path

import pytest
from PIL import ExifTags, Image

from reshape.ingestion import (
    DirectoryNotFoundError,
    FolderScanner,
    GpsCoordinates,
    MetadataProvider,
    ScanResponse,
    TimezoneResolver,
    normalize_extensions,
)
from reshape.ingestion.extractors import gps_from_ifd


def _write_photo(path: Path, *, taken: str | None = None, make: str | None = None) -> Path:
    exif = Image.Exif()
    if taken is not None:
        exif[ExifTags.Base.DateTime] = taken
    if make is not None:
        exif[ExifTags.Base.Make] = make
    Image.new("RGB", (40, 20), color="blue").save(path, format="JPEG", exif=exif)
    return path


def _png_chunk(kind: bytes, data: bytes) -> bytes:
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data))


def _write_png_header(path: Path, width: int, height: int) -> Path:
    header = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    path.write_bytes(
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", header)
        + _png_chunk(b"IDAT", zlib.compress(b""))
        + _png_chunk(b"IEND", b"")
    )
    return path


@pytest.mark.parametrize(
    ("longitude", "expected"),
    [
        (139.7, "Asia/Tokyo"),
        (0.0, "Europe/London"),
        (7.5, "Europe/London"),
        (22.5, "Europe/Athens"),
        (-74.0, "America/New_York"),
        (179.9, "Pacific/Auckland"),
        (-180.0, "Etc/GMT+12"),
    ],
)
def test_timezone_resolver_maps_longitude(longitude: float, expected: str) -> None:
    assert TimezoneResolver().resolve(10.0, longitude) == expected


@pytest.mark.parametrize(
    ("latitude", "longitude"),
    [(91.0, 0.0), (0.0, 181.0), (math.nan, 10.0), (10.0, math.inf)],
)
def test_timezone_resolver_rejects_invalid_coordinates(latitude: float, longitude: float) -> None:
    assert TimezoneResolver().resolve(latitude, longitude) is None


def test_to_utc_uses_gps_zone() -> None:
    resolver = TimezoneResolver()
    local = datetime(2024, 1, 15, 10, 0, 0)

    converted = resolver.to_utc(local, GpsCoordinates(latitude=35.6, longitude=139.7))

    assert converted == datetime(2024, 1, 15, 1, 0, 0, tzinfo=timezone.utc)


def test_to_utc_without_gps_treats_local_time_as_utc() -> None:
    converted = TimezoneResolver().to_utc(datetime(2024, 1, 15, 10, 0, 0))

    assert converted == datetime(2024, 1, 15, 10, 0, 0, tzinfo=timezone.utc)


def test_gps_from_ifd_applies_hemisphere_refs() -> None:
    gps = gps_from_ifd(
        {
            ExifTags.GPS.GPSLatitudeRef: "S",
            ExifTags.GPS.GPSLatitude: (33.0, 52.0, 12.0),
            ExifTags.GPS.GPSLongitudeRef: "E",
            ExifTags.GPS.GPSLongitude: (151.0, 12.0, 36.0),
        }
    )

    assert gps is not None
    assert gps.latitude == pytest.approx(-33.87)
    assert gps.longitude == pytest.approx(151.21)


def test_gps_from_ifd_missing_tags_returns_none() -> None:
    assert gps_from_ifd({ExifTags.GPS.GPSLatitude: (1.0, 0.0, 0.0)}) is None
    assert gps_from_ifd({}) is None


def test_metadata_provider_reads_filesystem_keys(tmp_path: Path) -> None:
    note = tmp_path / "Notes.TXT"
    note.write_text("hello", encoding="utf-8")
    stamp = datetime(2023, 6, 7, 8, 9, 10).timestamp()
    os.utime(note, (stamp, stamp))

    extracted = MetadataProvider().extract(note)

    assert extracted.metadata["filename"] == "Notes"
    assert extracted.metadata["ext"] == "txt"
    assert extracted.metadata["size"] == "5"
    assert extracted.metadata["modified"] == "2023-06-07"
    assert extracted.metadata["modified_time"] == "08-09-10"
    assert (extracted.metadata["year"], extracted.metadata["month"]) == ("2023", "06")
    assert extracted.date_taken is None
    assert extracted.gps is None


def test_metadata_provider_prefers_exif_capture_date(tmp_path: Path) -> None:
    photo = _write_photo(tmp_path / "photo.jpg", taken="2024:01:15 14:30:00", make="Canon")

    extracted = MetadataProvider().extract(photo)

    assert extracted.date_taken == datetime(2024, 1, 15, 14, 30, 0)
    assert extracted.metadata["date_taken"] == "2024-01-15"
    assert extracted.metadata["time_taken"] == "14-30-00"
    assert extracted.metadata["year"] == "2024"
    assert extracted.metadata["day"] == "15"
    assert extracted.metadata["camera_make"] == "Canon"
    assert extracted.metadata["width"] == "40"
    assert extracted.metadata["height"] == "20"


def test_metadata_provider_survives_corrupt_image(tmp_path: Path) -> None:
    broken = tmp_path / "broken.jpg"
    broken.write_bytes(b"not really a jpeg")

    extracted = MetadataProvider().extract(broken)

    assert extracted.metadata["filename"] == "broken"
    assert "date_taken" not in extracted.metadata
    assert extracted.date_taken is None


def test_normalize_extensions() -> None:
    assert normalize_extensions([".JPG", "png", " ", ".Heic"]) == {".jpg", ".png", ".heic"}
    assert normalize_extensions(None) == frozenset()


def test_scanner_missing_folder_raises(tmp_path: Path) -> None:
    with pytest.raises(DirectoryNotFoundError):
        FolderScanner().scan(tmp_path / "missing")


def test_scanner_filters_and_orders_records(tmp_path: Path) -> None:
    _write_photo(tmp_path / "b.JPG", taken="2024:01:16 09:00:00")
    _write_photo(tmp_path / "a.jpg", taken="2024:01:15 09:00:00")
    (tmp_path / "notes.txt").write_text("skip me", encoding="utf-8")
    nested = tmp_path / "trip" / "day"
    nested.mkdir(parents=True)
    _write_photo(nested / "c.jpg")

    records = FolderScanner().scan(tmp_path, [".jpg"])

    assert [record.name for record in records] == ["a.jpg", "b.JPG", "c.jpg"]
    assert [record.relative_path for record in records] == ["", "", "trip/day"]
    assert records[1].extension == ".jpg"
    assert records[0].date_taken_utc == datetime(2024, 1, 15, 9, 0, 0, tzinfo=timezone.utc)
    assert records[2].date_taken_utc is None
    assert all(record.full_path.is_absolute() for record in records)


def test_scanner_non_recursive_and_hidden_options(tmp_path: Path) -> None:
    (tmp_path / "visible.txt").write_text("a", encoding="utf-8")
    (tmp_path / ".hidden.txt").write_text("b", encoding="utf-8")
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "deep.txt").write_text("c", encoding="utf-8")

    everything = FolderScanner().scan(tmp_path)
    shallow = FolderScanner(recursive=False, include_hidden=False).scan(tmp_path)

    assert sorted(record.name for record in everything) == [".hidden.txt", "deep.txt", "visible.txt"]
    assert [record.name for record in shallow] == ["visible.txt"]


def test_scan_response_payload_uses_camel_case(tmp_path: Path) -> None:
    (tmp_path / "one.txt").write_text("1", encoding="utf-8")
    records = FolderScanner().scan(tmp_path)

    payload = ScanResponse(folder_path=str(tmp_path), files=records, total_count=1).to_payload()

    assert payload["totalCount"] == 1
    assert payload["files"][0]["fullPath"].endswith("one.txt")
    assert payload["files"][0]["isSelected"] is True


def test_scanner_keeps_oversized_image_with_filesystem_metadata(tmp_path: Path) -> None:
    _write_png_header(tmp_path / "huge.png", 16320, 12240)

    [record] = FolderScanner().scan(tmp_path)

    assert record.name == "huge.png"
    assert record.metadata["filename"] == "huge"
    assert "width" not in record.metadata
    assert record.date_taken_utc is None


def test_scanner_follows_symlinked_directories_when_enabled(tmp_path: Path) -> None:
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "linked.txt").write_text("l", encoding="utf-8")
    root = tmp_path / "root"
    root.mkdir()
    (root / "own.txt").write_text("o", encoding="utf-8")
    try:
        (root / "link").symlink_to(outside, target_is_directory=True)
        (outside / "loop").symlink_to(root, target_is_directory=True)
    except (OSError, NotImplementedError):
        pytest.skip("symlinks are not supported here")

    default = FolderScanner().scan(root)
    followed = FolderScanner(follow_symlinks=True).scan(root)

    assert [record.name for record in default] == ["own.txt"]
    assert sorted(record.relative_path + "/" + record.name for record in followed) == [
        "/own.txt",
        "link/linked.txt",
    ]
