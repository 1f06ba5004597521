"""
Tests for the image URL validator.
"""

import logging
import pytest
from unittest.mock import patch

from postimages.core.constants import PLACEHOLDER_URL, SEED_PLACEHOLDER_URL
from postimages.images.url_validator import (
    is_valid_image_url,
    is_placeholder_url,
    is_real_image_url
)


class TestIsValidImageUrl:
    """
    Tests for is_valid_image_url.
    """

    @pytest.mark.parametrize("url", [
        "http://example.com/a.png",
        "https://cdn.example.com/images/b.jpg?w=400",
        "/uploads/post-1.png",
        PLACEHOLDER_URL,
        "data:image/png;base64,iVBORw0KGgo=",
    ])
    def test_accepted_urls(self, url):
        """
        Test that http, site-relative and inline image URLs are valid.
        """
        assert is_valid_image_url(url) is True

    @pytest.mark.parametrize("url", [
        "blob:http://localhost:3000/6c1b0f8e-1d5e",
        "blob:abc",
        "ftp://example.com/a.png",
        "data:text/html,<p>hi</p>",
        "images/a.png",
        "",
        None,
        42,
        {"url": "http://example.com/a.png"},
    ])
    def test_rejected_urls(self, url):
        """
        Test that blob, relative, non-image data and non-string values are invalid.
        """
        assert is_valid_image_url(url) is False

    @patch("postimages.images.url_validator.is_production", return_value=False)
    def test_shortener_logged_outside_production(self, mock_is_production, caplog):
        """
        Test that link-shortener URLs are noted but stay valid in development.
        """
        with caplog.at_level(logging.INFO, logger="postimages.images.url_validator"):
            assert is_valid_image_url("https://tinyurl.com/abc123") is True

        assert "tinyurl.com" in caplog.text

    @patch("postimages.images.url_validator.is_production", return_value=True)
    def test_shortener_not_logged_in_production(self, mock_is_production, caplog):
        """
        Test that production skips the link-shortener note.
        """
        with caplog.at_level(logging.INFO, logger="postimages.images.url_validator"):
            assert is_valid_image_url("https://bit.ly/xyz") is True

        assert "link shortener" not in caplog.text

    @patch("postimages.images.url_validator.is_production", return_value=False)
    def test_shortener_does_not_rescue_invalid_url(self, mock_is_production):
        """
        Test that the diagnostic never changes the result.
        """
        assert is_valid_image_url("tinyurl.com/abc123") is False


class TestPlaceholderUrls:
    """
    Tests for placeholder detection.
    """

    def test_placeholder_urls(self):
        """
        Test that both the sentinel and seeded placeholders are detected.
        """
        assert is_placeholder_url(PLACEHOLDER_URL)
        assert is_placeholder_url(SEED_PLACEHOLDER_URL)
        assert not is_placeholder_url("http://example.com/a.png")
        assert not is_placeholder_url(None)

    def test_real_image_urls(self):
        """
        Test that real images must be valid and not placeholders.
        """
        assert is_real_image_url("http://example.com/a.png")
        assert not is_real_image_url(PLACEHOLDER_URL)
        assert not is_real_image_url("blob:abc")
        assert not is_real_image_url("")
