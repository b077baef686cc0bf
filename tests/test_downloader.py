import requests

from brand_media.archive import MediaArchive
from brand_media.downloader import (
    download_media,
    entry_path,
    extension_from_content_type,
    infer_extension,
)

from conftest import FakeResponse, FakeSession

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def test_failed_url_leaves_gap_in_numbering():
    urls = [
        "https://cdn.example.com/one.jpg",
        "https://cdn.example.com/two.jpg",
        "https://cdn.example.com/three.mp4",
    ]
    session = FakeSession({urls[1]: FakeResponse(status=404)})
    archive = MediaArchive()

    result = download_media(urls, "website", archive, session=session)

    assert result.count == 2
    assert len(result.failed) == 1
    assert result.failed[0].url == urls[1]
    assert "404" in result.failed[0].reason
    assert archive.paths == ["website/00001.jpg", "website/00003.mp4"]
    assert result.entries == archive.paths
    assert session.calls == urls


def test_network_errors_are_recorded_and_batch_continues():
    urls = ["https://a.example.com/x.png", "https://b.example.com/y.png"]
    session = FakeSession({urls[0]: requests.ConnectionError()})
    archive = MediaArchive()

    result = download_media(urls, "instagram", archive, session=session)

    assert result.count == 1
    assert result.failed[0].url == urls[0]
    assert result.failed[0].reason == "ConnectionError"
    assert archive.paths == ["instagram/00002.png"]


def test_every_url_has_exactly_one_outcome():
    urls = [f"https://cdn.example.com/{i}.jpg" for i in range(1, 8)]
    session = FakeSession(
        {
            urls[0]: FakeResponse(status=500),
            urls[3]: requests.Timeout("read timed out"),
            urls[6]: FakeResponse(status=302),
        }
    )
    result = download_media(urls, "tiktok", MediaArchive(), session=session)

    assert result.count == 4
    assert len(result.failed) == 3
    assert all(failure.reason for failure in result.failed)
    assert result.count + len(result.failed) == len(urls)


def test_extension_falls_back_to_content_type_then_signature_then_bin():
    session = FakeSession(
        {
            "https://x.example.com/a": FakeResponse(content=b"x", content_type="video/mp4; codecs=avc1"),
            "https://x.example.com/b": FakeResponse(content=PNG_BYTES),
            "https://x.example.com/c": FakeResponse(content=b"plain text"),
        }
    )
    archive = MediaArchive()
    download_media(
        ["https://x.example.com/a", "https://x.example.com/b", "https://x.example.com/c"],
        "facebook/",
        archive,
        session=session,
    )
    assert archive.paths == ["facebook/00001.mp4", "facebook/00002.png", "facebook/00003.bin"]
    assert archive.get("facebook/00002.png") == PNG_BYTES


def test_empty_url_list_does_nothing():
    result = download_media([], "website", MediaArchive(), session=FakeSession())
    assert result.count == 0
    assert result.failed == []


def test_extension_helpers():
    assert infer_extension("https://a.example.com/p.webp?w=1", "image/png", b"") == ".webp"
    assert extension_from_content_type("IMAGE/JPEG") == ".jpg"
    assert extension_from_content_type(None) is None
    assert entry_path("google_maps", 12, ".jpg") == "google_maps/00012.jpg"


def test_extension_in_path_wins_over_query_string():
    session = FakeSession()
    archive = MediaArchive()
    download_media(["https://cdn.example.com/clip.mp4?thumb=x.jpeg"], "tiktok", archive, session=session)
    assert archive.paths == ["tiktok/00001.mp4"]
    assert infer_extension("https://cdn.example.com/watch?src=a.webm", None, b"") == ".webm"
