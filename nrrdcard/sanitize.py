# -*- coding: utf-8 -*-
"""nrrdcard.sanitize

Validation and normalization of raw contact data. Every sanitizer
returns the normalized value, or None when the input is rejected.

Copyright © 2021 Sean O'Connell. Released under MIT license.

"""
import re
from urllib.parse import urlparse

import phonenumbers

EMAIL_RE = re.compile(
    r"^[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+"
    r"(?:\.[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+)*"
    r"@"
    r"(?:[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?\.)+"
    r"[A-Za-z]{2,63}$")
TIME_ZONE_RE = re.compile(r"^([+-])?(\d{1,2})(?::?(\d{2}))?$")
URL_SCHEMES = ("http", "https", "ftp")
# region used to parse numbers written without a country code
DEFAULT_REGION = "US"

# inclusive UTC-offset range, in minutes
TZ_MIN_OFFSET = -14 * 60
TZ_MAX_OFFSET = 12 * 60


def sanitize_phone(phone, default_area_code=None, region=DEFAULT_REGION):
    """Strip a phone number down to digits (and a leading '+').

    Extensions ('ext. 56', 'x56') are dropped. A seven-digit local
    number is prefixed with the default area code when one is provided.

    Args:
        phone (str):                the phone number.
        default_area_code (str):    area code for local numbers.
        region (str):               region for numbers without a
    country code.

    Returns:
        phone (str or None):    the sanitized number.

    """
    if phone is None:
        return None
    phone = str(phone).strip()
    plus = "+" if phone.startswith("+") else ""
    try:
        parsed = phonenumbers.parse(phone, region)
    except phonenumbers.NumberParseException:
        digits = phonenumbers.normalize_digits_only(phone)
    else:
        digits = phonenumbers.national_significant_number(parsed)
        if plus:
            digits = f"{parsed.country_code}{digits}"
    if not digits:
        return None
    if not plus and len(digits) == 7 and default_area_code:
        area_code = phonenumbers.normalize_digits_only(
            str(default_area_code))
        digits = f"{area_code}{digits}"
    return f"{plus}{digits}"


def sanitize_email(email):
    """Validate an email address.

    Args:
        email (str):    the email address.

    Returns:
        email (str or None):    the trimmed address if well-formed.

    """
    if not email:
        return None
    email = str(email).strip()
    if len(email) > 254 or not EMAIL_RE.match(email):
        return None
    return email


def sanitize_url(url):
    """Validate an http, https, or ftp URL.

    Args:
        url (str):  the URL.

    Returns:
        url (str or None):  the trimmed URL if well-formed.

    """
    if not url:
        return None
    url = str(url).strip()
    if re.search(r"\s", url):
        return None
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    if parsed.scheme.lower() not in URL_SCHEMES or not parsed.netloc:
        return None
    return url


def sanitize_time_zone(offset):
    """Normalize a UTC offset to '±HH:MM'.

    Accepts '±H', '±HH', '±H:MM', '±HH:MM' (the sign is optional and
    defaults to '+'). The offset must fall between -14:00 and +12:00,
    inclusive.

    Args:
        offset (str):   the UTC offset.

    Returns:
        offset (str or None):   the normalized offset.

    """
    if offset is None:
        return None
    match = TIME_ZONE_RE.match(str(offset).strip())
    if not match:
        return None
    sign, hours, minutes = match.groups()
    sign = sign or "+"
    hours = int(hours)
    minutes = int(minutes or 0)
    if minutes > 59:
        return None
    total = hours * 60 + minutes
    if sign == "-":
        total = -total
    if not TZ_MIN_OFFSET <= total <= TZ_MAX_OFFSET:
        return None
    # -0 is written as +00:00
    if total == 0:
        sign = "+"
    return f"{sign}{hours:02d}:{minutes:02d}"


def sanitize_lat_long(lat, long):
    """Validate a latitude/longitude pair. Both must be present and in
    range, or the pair is rejected.

    Args:
        lat (str or float):     decimal latitude (-90 to 90).
        long (str or float):    decimal longitude (-180 to 180).

    Returns:
        coords (tuple or None): (latitude, longitude) as strings.

    """
    if lat is None or long is None:
        return None
    try:
        lat = float(lat)
        long = float(long)
    except (TypeError, ValueError):
        return None
    if not (-90 <= lat <= 90 and -180 <= long <= 180):
        return None
    return f"{lat:.6f}", f"{long:.6f}"
