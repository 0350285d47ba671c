"""Shared fixtures for the nrrdcard test suite."""

import io
from datetime import datetime, timezone

import pytest
from PIL import Image

from nrrdcard.errors import FetchError
from nrrdcard.vcard import Vcard

FIXED_NOW = datetime(2021, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_image(fmt="PNG"):
    img = Image.new("RGB", (4, 4), (100, 150, 200))
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    return make_image("PNG")


@pytest.fixture
def jpeg_bytes():
    return make_image("JPEG")


@pytest.fixture
def fetched():
    """Records the URLs requested through the fake fetcher."""
    return []


@pytest.fixture
def vcard(png_bytes, fetched):
    """A Vcard with a fixed clock, UTC zone, and an offline fetcher."""

    def fake_fetch(url):
        fetched.append(url)
        if "missing" in url:
            raise FetchError(f"unable to fetch '{url}'", value=url)
        return png_bytes

    return Vcard(
        data_dir="/cards",
        default_timezone="UTC",
        fetch=fake_fetch,
        clock=lambda: FIXED_NOW,
    )
