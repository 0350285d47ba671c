# -*- coding: utf-8 -*-
"""nrrdcard.fetch

I/O collaborators used by the vCard builder: retrieving image bytes,
identifying image formats, and writing finished vCards to disk.

Copyright © 2021 Sean O'Connell. Released under MIT license.

"""
import io
import logging
import os

import requests
from PIL import Image, UnidentifiedImageError

from nrrdcard.errors import FetchError, VcardError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


def fetch_bytes(url, timeout=DEFAULT_TIMEOUT):
    """Retrieve the raw bytes at a URL. 'file://' URLs are read from
    the local filesystem.

    Args:
        url (str):      the http(s), ftp, or file URL.
        timeout (int):  seconds to wait for a remote server.

    Returns:
        data (bytes):   the retrieved content.

    """
    if url.startswith("file://"):
        filename = os.path.expandvars(
            os.path.expanduser(url.replace("file://", "", 1)))
        try:
            with open(filename, "rb") as in_file:
                return in_file.read()
        except OSError as exc:
            raise FetchError(
                f"unable to read '{filename}'", value=url) from exc
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise FetchError(f"unable to fetch '{url}'", value=url) from exc
    logger.debug("fetched %d bytes from %s", len(response.content), url)
    return response.content


def image_format(data):
    """Identify an image format from its content.

    Args:
        data (bytes):   the image bytes.

    Returns:
        format (str or None):   an upper-case format name (e.g., 'JPEG',
    'PNG', 'GIF') or None if the data is not a recognized image.

    """
    if not data:
        return None
    try:
        with Image.open(io.BytesIO(data)) as image:
            fmt = image.format
    except (UnidentifiedImageError, OSError):
        return None
    return fmt.upper() if fmt else None


def write_file(filename, content):
    """Write vCard text to a file, creating the directory if needed.
    Line endings are written as-is.

    Args:
        filename (str): the file to write.
        content (str):  the vCard text.

    """
    filename = os.path.expandvars(os.path.expanduser(filename))
    directory = os.path.dirname(filename)
    try:
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(filename, "w", encoding="utf-8",
                  newline="") as vcard_file:
            vcard_file.write(content)
    except OSError as exc:
        raise VcardError(
            f"unable to write vCard file '{filename}'",
            value=filename) from exc
    logger.debug("wrote vCard to %s", filename)
