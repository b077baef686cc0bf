import pytest

from brand_media.normalizers import (
    NORMALIZERS,
    normalize_facebook,
    normalize_google_maps,
    normalize_instagram,
    normalize_records,
    normalize_tiktok,
    normalize_website,
)


def test_instagram_post_yields_images_and_video_with_shared_fields():
    record = {
        "url": "https://www.instagram.com/p/abc/",
        "caption": "Fresh bread",
        "timestamp": "2024-05-01T10:00:00.000Z",
        "shortCode": "abc",
        "displayResources": [
            {"src": "https://cdn.example.com/1.jpg"},
            {"src": "https://cdn.example.com/2.jpg"},
        ],
        "videoUrl": "https://cdn.example.com/v.mp4",
    }
    items = normalize_instagram(record, "Acme Cafe")

    assert [item.type for item in items] == ["image", "image", "video"]
    assert {item.post_url for item in items} == {"https://www.instagram.com/p/abc/"}
    assert {item.caption for item in items} == {"Fresh bread"}
    assert items[0].taken_at == "2024-05-01T10:00:00.000Z"
    assert items[2].media_url == "https://cdn.example.com/v.mp4"
    assert items[0].extra == {"brandName": "Acme Cafe", "shortcode": "abc"}


def test_instagram_drops_resources_without_src():
    record = {"displayResources": [{"src": ""}, {"width": 10}, "https://cdn.example.com/ok.jpg"]}
    items = normalize_instagram(record, "Acme")
    assert [item.media_url for item in items] == ["https://cdn.example.com/ok.jpg"]
    assert items[0].post_url is None
    assert items[0].caption is None


def test_facebook_uses_message_and_created_time():
    record = {
        "id": "42",
        "postUrl": "https://facebook.com/acme/posts/42",
        "message": "Grand opening",
        "createdTime": "2024-01-01",
        "imageUrls": ["https://fb.example.com/a.jpg", None],
        "videoUrl": "https://fb.example.com/v.mp4",
    }
    items = normalize_facebook(record, "Acme")
    assert [(item.type, item.media_url) for item in items] == [
        ("image", "https://fb.example.com/a.jpg"),
        ("video", "https://fb.example.com/v.mp4"),
    ]
    assert items[0].caption == "Grand opening"
    assert items[0].taken_at == "2024-01-01"
    assert items[1].extra == {"brandName": "Acme", "id": "42"}


def test_tiktok_post_url_prefers_share_url():
    record = {
        "id": "7",
        "text": "dance",
        "createTime": 1700000000,
        "coverImageUrl": "https://tt.example.com/cover.jpg",
        "webVideoUrl": "https://www.tiktok.com/@acme/video/7",
        "shareUrl": "https://vm.tiktok.com/share7",
    }
    items = normalize_tiktok(record, "Acme")
    assert [item.type for item in items] == ["image", "video"]
    assert {item.post_url for item in items} == {"https://vm.tiktok.com/share7"}
    assert items[0].taken_at == 1700000000


def test_tiktok_post_url_falls_back_to_web_video_url():
    record = {"webVideoUrl": "https://www.tiktok.com/@acme/video/7"}
    items = normalize_tiktok(record, "Acme")
    assert len(items) == 1
    assert items[0].type == "video"
    assert items[0].post_url == "https://www.tiktok.com/@acme/video/7"


def test_google_maps_photos_are_undated_images():
    record = {
        "title": "Acme Cafe",
        "placeId": "pid",
        "url": "https://maps.google.com/?cid=1",
        "photos": [{"url": "https://lh3.example.com/p1"}, {"url": ""}, {}],
        "imageUrls": ["https://lh3.example.com/p2"],
    }
    items = normalize_google_maps(record, "Acme")
    assert [item.media_url for item in items] == [
        "https://lh3.example.com/p1",
        "https://lh3.example.com/p2",
    ]
    assert all(item.taken_at is None for item in items)
    assert items[0].caption == "Acme Cafe"
    assert items[0].extra["placeId"] == "pid"


def test_website_adds_og_image_with_kind():
    record = {
        "url": "https://acme.example.com/",
        "title": "Acme",
        "images": ["https://acme.example.com/a.png"],
        "ogImage": "https://acme.example.com/og.png",
    }
    items = normalize_website(record, "Acme")
    assert [item.media_url for item in items] == [
        "https://acme.example.com/a.png",
        "https://acme.example.com/og.png",
    ]
    assert "kind" not in items[0].extra
    assert items[1].extra == {"brandName": "Acme", "kind": "og:image"}
    assert items[1].taken_at is None


@pytest.mark.parametrize("source", sorted(NORMALIZERS))
@pytest.mark.parametrize("record", [{}, {"unrelated": 1}, None, "text", [1, 2], {"photos": "nope"}])
def test_records_without_media_yield_nothing(source, record):
    assert NORMALIZERS[source](record, "Acme") == []


def test_to_dict_uses_camel_case_keys():
    item = normalize_website({"images": ["https://a.example.com/x.png"]}, "Acme")[0]
    assert item.to_dict() == {
        "source": "website",
        "type": "image",
        "mediaUrl": "https://a.example.com/x.png",
        "postUrl": None,
        "caption": None,
        "takenAt": None,
        "extra": {"brandName": "Acme"},
    }


def test_normalize_records_dispatches_and_ignores_unknown_sources():
    records = [{"images": ["https://a.example.com/x.png"]}, {"images": ["https://a.example.com/y.png"]}]
    assert len(normalize_records("website", records, "Acme")) == 2
    assert normalize_records("keywordSearch", records, "Acme") == []
