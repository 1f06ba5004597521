"""
Tests for the image collection normalizer.
"""

import json
import logging
import pytest

from postimages.core import config
from postimages.core.constants import PLACEHOLDER_URL
from postimages.core.error_handler import MalformedCollectionError
from postimages.images.models import ImageDescriptor
from postimages.images.normalizer import (
    decode_envelope,
    parse_collection,
    serialize_collection,
    resolve_main_image,
    has_real_images,
    count_selected,
    get_post_images,
    get_main_image_url
)

# Collection as written by the generation backend
STORED_COLLECTION = json.dumps({
    "images": [
        {
            "url": "https://cdn.example.com/post-7/flux-0.png",
            "prompt": "A sunrise over a coffee cup, watercolor",
            "order": 3,
            "isSelected": False,
            "metadata": {"style": "watercolor", "width": 1024, "height": 1024, "service": "flux"}
        },
        {
            "url": "blob:http://localhost:3000/2f0c",
            "prompt": "Uploaded preview",
            "order": 1,
            "isSelected": True
        },
        {
            "url": "/uploads/post-7/manual.jpg",
            "isSelected": True
        }
    ]
})


class TestDecodeEnvelope:
    """
    Tests for the envelope decode step.
    """

    def test_flat_shape(self):
        """
        Test decoding {"images": [...]}.
        """
        assert decode_envelope({"images": [{"url": "/a.png"}]}) == [{"url": "/a.png"}]

    def test_nested_shape(self):
        """
        Test decoding the legacy {"images": {"images": [...]}}.
        """
        assert decode_envelope({"images": {"images": [{"url": "/a.png"}]}}) == [{"url": "/a.png"}]

    @pytest.mark.parametrize("data", [
        [],
        None,
        "images",
        {},
        {"images": None},
        {"images": "x"},
        {"images": {"pictures": []}},
        {"pictures": []},
    ])
    def test_unknown_shapes(self, data):
        """
        Test that anything else is rejected.
        """
        with pytest.raises(MalformedCollectionError):
            decode_envelope(data)


class TestParseCollection:
    """
    Tests for parse_collection.
    """

    def test_parse_stored_collection(self):
        """
        Test parsing a typical stored collection.
        """
        images = parse_collection(STORED_COLLECTION)

        assert len(images) == 3
        assert images[0] == ImageDescriptor(
            url="https://cdn.example.com/post-7/flux-0.png",
            prompt="A sunrise over a coffee cup, watercolor",
            order=3,
            is_selected=False,
            metadata={"style": "watercolor", "width": 1024, "height": 1024, "service": "flux"}
        )

        # blob URLs are never surfaced
        assert images[1].url == PLACEHOLDER_URL
        assert images[1].is_selected is True

        # Missing fields get defaults
        assert images[2].prompt == "Image"
        assert images[2].order == 0
        assert images[2].metadata == {"style": "default", "width": 400, "height": "300"}

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_empty_input(self, raw):
        """
        Test that an empty field is an empty collection.
        """
        assert parse_collection(raw) == []

    def test_not_json(self, caplog):
        """
        Test that malformed JSON yields an empty collection and is logged.
        """
        with caplog.at_level(logging.ERROR, logger="postimages.images.normalizer"):
            images = parse_collection("not json")

        assert images == []
        assert has_real_images(images) is False
        assert "Error parsing images JSON" in caplog.text

    @pytest.mark.parametrize("raw", ["[]", "null", "42", '{"images": null}', '{"other": []}'])
    def test_unexpected_shapes(self, raw):
        """
        Test that valid JSON in an unknown shape yields an empty collection.
        """
        assert parse_collection(raw) == []

    def test_corrupt_user_config(self, tmp_path, monkeypatch):
        """
        Test that an unreadable user configuration does not break parsing.
        """
        user_path = tmp_path / "config.json"
        user_path.write_text("{not json")
        monkeypatch.setattr(config, "USER_CONFIG_PATH", str(user_path))
        monkeypatch.setattr(config, "_config_cache", {})

        images = parse_collection('{"images": [{"url": "http://x/a.png"}]}')

        assert [image.url for image in images] == ["http://x/a.png"]

    def test_non_string_input(self):
        """
        Test that a non-string value does not raise.
        """
        assert parse_collection({"images": []}) == []

    def test_nested_and_flat_shapes_match(self):
        """
        Test that the legacy nested shape parses like the flat shape.
        """
        nested = parse_collection('{"images": {"images": [{"url": "/p.png"}]}}')
        flat = parse_collection('{"images": [{"url": "/p.png"}]}')

        assert nested == flat
        assert nested[0].url == "/p.png"

    def test_non_object_entries_skipped(self):
        """
        Test that entries that are not objects are dropped.
        """
        images = parse_collection('{"images": [null, "http://x/a.png", 3, {"url": "http://x/b.png"}]}')

        assert [image.url for image in images] == ["http://x/b.png"]

    @pytest.mark.parametrize("value, expected", [
        (True, True),
        (False, False),
        (None, False),
        (1, True),
        (0, False),
        ("yes", True),
        ("", False),
    ])
    def test_is_selected_coerced(self, value, expected):
        """
        Test that isSelected is coerced by truthiness.
        """
        raw = json.dumps({"images": [{"url": "/a.png", "isSelected": value}]})
        assert parse_collection(raw)[0].is_selected is expected

    @pytest.mark.parametrize("value, expected", [
        (2, 2),
        ("5", 5),
        (1.0, 1),
        (-3, 0),
        ("first", 0),
        (None, 0),
        (True, 0),
    ])
    def test_order_coerced(self, value, expected):
        """
        Test that order is coerced to a non-negative integer.
        """
        raw = json.dumps({"images": [{"url": "/a.png", "order": value}]})
        assert parse_collection(raw)[0].order == expected

    def test_non_object_metadata_defaulted(self):
        """
        Test that non-object metadata is replaced by the default.
        """
        raw = json.dumps({"images": [{"url": "/a.png", "metadata": "watercolor"}]})
        assert parse_collection(raw)[0].metadata == {"style": "default", "width": 400, "height": "300"}

    def test_parse_is_deterministic(self):
        """
        Test that identical input gives identical output.
        """
        assert parse_collection(STORED_COLLECTION) == parse_collection(STORED_COLLECTION)


class TestSerializeCollection:
    """
    Tests for serialize_collection.
    """

    def test_orders_rewritten(self):
        """
        Test that order follows position regardless of stored values.
        """
        images = [
            ImageDescriptor(url="/c.png", order=7),
            ImageDescriptor(url="/a.png", order=7),
            ImageDescriptor(url="/b.png", order=0),
        ]

        data = json.loads(serialize_collection(images))

        assert [image["order"] for image in data["images"]] == [0, 1, 2]
        assert [image["url"] for image in data["images"]] == ["/c.png", "/a.png", "/b.png"]

    def test_input_not_mutated(self):
        """
        Test that serializing leaves the descriptors untouched.
        """
        images = [ImageDescriptor(url="/a.png", order=4)]
        serialize_collection(images)
        assert images[0].order == 4

    def test_stored_shape(self):
        """
        Test the stored field names.
        """
        data = json.loads(serialize_collection([ImageDescriptor(url="/a.png", is_selected=True)]))

        assert data == {
            "images": [
                {
                    "url": "/a.png",
                    "prompt": "Image",
                    "order": 0,
                    "isSelected": True,
                    "metadata": {"style": "default", "width": 400, "height": "300"}
                }
            ]
        }

    def test_empty_collection(self):
        """
        Test serializing an empty collection.
        """
        assert json.loads(serialize_collection([])) == {"images": []}

    def test_round_trip(self):
        """
        Test that parse/serialize is stable once a collection is normalized.
        """
        normalized = serialize_collection(parse_collection(STORED_COLLECTION))

        once = parse_collection(normalized)
        twice = parse_collection(serialize_collection(once))

        assert twice == once
        assert serialize_collection(twice) == normalized


class TestResolveMainImage:
    """
    Tests for resolve_main_image.
    """

    def test_selected_image(self):
        """
        Test that a selected image wins.
        """
        images = parse_collection('{"images": [{"url": "http://x/a.png", "isSelected": true}]}')
        assert resolve_main_image(images, "") == "http://x/a.png"

    def test_first_selected_wins(self):
        """
        Test that the first of several selected images wins.
        """
        images = parse_collection(json.dumps({"images": [
            {"url": "http://x/a.png"},
            {"url": "http://x/b.png", "isSelected": True},
            {"url": "http://x/c.png", "isSelected": True},
        ]}))
        assert resolve_main_image(images, "http://x/fallback.png") == "http://x/b.png"

    def test_fallback_field(self):
        """
        Test that the standalone image is used without a selection.
        """
        images = parse_collection('{"images": []}')
        assert resolve_main_image(images, "http://x/b.png") == "http://x/b.png"

    def test_fallback_before_unselected_images(self):
        """
        Test that the standalone image beats unselected gallery images.
        """
        images = parse_collection('{"images": [{"url": "http://x/a.png"}]}')
        assert resolve_main_image(images, "/legacy.png") == "/legacy.png"

    def test_invalid_selected_image_skipped(self):
        """
        Test that a selected image with a rejected URL is skipped.
        """
        images = parse_collection(json.dumps({"images": [
            {"url": "blob:abc", "isSelected": True},
            {"url": "http://x/a.png"},
        ]}))
        assert resolve_main_image(images, "blob:def") == "http://x/a.png"

    def test_blob_only(self):
        """
        Test that a gallery of blob URLs resolves to the placeholder.
        """
        images = parse_collection('{"images": [{"url": "blob:abc"}]}')
        assert resolve_main_image(images, "") == PLACEHOLDER_URL

    def test_seeded_placeholder_fallback_skipped(self):
        """
        Test that a seeded placeholder in the standalone field is not used.
        """
        seeded = "/placeholder.svg?height=300&width=400&text=Placeholder_image"
        images = parse_collection('{"images": [{"url": "http://x/a.png"}]}')

        assert resolve_main_image(images, seeded) == "http://x/a.png"
        assert resolve_main_image([], seeded) == PLACEHOLDER_URL

    @pytest.mark.parametrize("fallback", [None, "", "blob:abc", "/placeholder.svg"])
    def test_never_empty(self, fallback):
        """
        Test that an empty gallery and unusable fallback give the placeholder.
        """
        assert resolve_main_image([], fallback) == PLACEHOLDER_URL


class TestCollectionQueries:
    """
    Tests for has_real_images, count_selected and the post helpers.
    """

    def test_has_real_images(self):
        """
        Test real image detection.
        """
        assert has_real_images(parse_collection(STORED_COLLECTION)) is True
        assert has_real_images(parse_collection('{"images": [{"url": "blob:abc"}]}')) is False
        assert has_real_images(parse_collection(
            '{"images": [{"url": "/placeholder.svg?height=300&width=400&text=Placeholder_image"}]}'
        )) is False
        assert has_real_images([]) is False

    def test_count_selected(self):
        """
        Test counting selected images, including ones with rejected URLs.
        """
        assert count_selected(parse_collection(STORED_COLLECTION)) == 2
        assert count_selected([]) == 0

    def test_post_helpers(self):
        """
        Test reading images straight from a post record.
        """
        post = {"id": 7, "images": STORED_COLLECTION, "imageUrl": "http://x/legacy.png"}

        assert len(get_post_images(post)) == 3
        assert get_main_image_url(post) == "/uploads/post-7/manual.jpg"
        assert get_post_images({"id": 8}) == []
        assert get_main_image_url({"id": 8}) == PLACEHOLDER_URL
