# -*- coding: utf-8 -*-
"""nrrdcard.vcard

Build a vCard (RFC 2426, version 3.0) one field at a time and
serialize it to folded, CRLF-terminated text.

Known limitations:
  - Date-time values are not supported for BDAY (dates only).
  - Text values are not supported for TZ (UTC offsets only).
  - AGENT, SOUND, and KEY are not supported.

Copyright © 2021 Sean O'Connell. Released under MIT license.

"""
import base64
import binascii
import logging
import os
import pprint
import re
import uuid
from collections import namedtuple
from datetime import date, datetime, timezone

import tzlocal
from dateutil import parser as dtparser
from dateutil import tz as dttz

from nrrdcard.errors import (
    DuplicateFieldError,
    FetchError,
    InvalidFieldValueError,
    UnsupportedFieldError,
    VcardError)
from nrrdcard.fetch import fetch_bytes, image_format, write_file
from nrrdcard.fields import (
    ADDRESS_TYPES,
    CLASSIFICATIONS,
    DEFAULT_ADDRESS_TYPES,
    DEFAULT_EMAIL_TYPES,
    DEFAULT_TELEPHONE_TYPES,
    TELEPHONE_TYPES,
    FieldKey,
    multiple_allowed,
    template)
from nrrdcard.sanitize import (
    sanitize_email,
    sanitize_lat_long,
    sanitize_phone,
    sanitize_time_zone,
    sanitize_url)

logger = logging.getLogger(__name__)

FOLD_WIDTH = 75
FOLD_CHUNK = 73
CRLF = "\r\n"
REV_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
FILENAME_FORMAT = "%Y.%m.%d.%H.%M.%S"
# RFC 2426 x-name characters
X_NAME_RE = re.compile(r"[A-Za-z0-9-]+")

Property = namedtuple("Property", ["key", "value"])


def escape(text):
    """Escape the vCard delimiters ',', ';', and ':' (and newlines).

    Args:
        text (str): the text to escape.

    Returns:
        escaped (str or None):  the escaped text, or None for empty
    input.

    """
    if text is None:
        return None
    text = str(text)
    if not text:
        return None
    for char in (",", ";", ":"):
        text = text.replace(char, f"\\{char}")
    return (text.replace("\r\n", "\\n")
            .replace("\r", "\\n")
            .replace("\n", "\\n"))


class Text(namedtuple("Text", ["value"])):
    """A single escaped value."""
    __slots__ = ()

    def render(self, delimiter=","):
        return escape(self.value)


class TextList(namedtuple("TextList", ["values"])):
    """A list of values, escaped individually and joined with the
    field's delimiter. Empty items are dropped.

    """
    __slots__ = ()

    def render(self, delimiter=","):
        items = [escape(value) for value in self.values or []]
        joined = delimiter.join(item for item in items if item is not None)
        return joined or None


def format_field(key, parts, delimiter=","):
    """Render positional values into the template for a field.

    Args:
        key (FieldKey):     the vCard field.
        parts (list):       Text or TextList values, in template order.
        delimiter (str):    joins the items of any TextList.

    Returns:
        line (str): the formatted property.

    """
    rendered = []
    for part in parts:
        value = part.render(delimiter)
        rendered.append("" if value is None else value)
    return template(key).format(*rendered)


def fold(line):
    """Fold a line longer than 75 octets into 73-octet chunks joined
    by CRLF and a single space. Multi-byte characters are never split.

    Args:
        line (str): an unterminated vCard line.

    Returns:
        folded (str): the folded line.

    """
    if len(line.encode("utf-8")) <= FOLD_WIDTH:
        return line
    chunks = []
    current = ""
    size = 0
    for char in line:
        char_size = len(char.encode("utf-8"))
        if current and size + char_size > FOLD_CHUNK:
            chunks.append(current)
            current = ""
            size = 0
        current += char
        size += char_size
    if current:
        chunks.append(current)
    return f"{CRLF} ".join(chunks)


def _one_line(text):
    return " ".join(str(text).splitlines()) if text else text


def _strip_spaces(text):
    return text.replace(" ", "") if text else text


def _decode_image(photo):
    """Decode base64 image data (optionally as a data: URI). Raw bytes
    that are not base64 are returned unchanged.

    """
    if not photo:
        return None
    is_text = isinstance(photo, str)
    raw = photo.encode("utf-8") if is_text else bytes(photo)
    encoded = raw
    if encoded.startswith(b"data:") and b"," in encoded:
        encoded = encoded.split(b",", 1)[1]
    try:
        return base64.b64decode(b"".join(encoded.split()), validate=True)
    except (binascii.Error, ValueError):
        return None if is_text else raw


class Vcard():
    """A vCard under construction.

    Attributes:
        data_dir (str):             directory for written vCard files.
        default_area_code (str):    prefix for seven-digit phone numbers.
        default_timezone (tzinfo):  zone for naive dates and filenames.
        fetch (callable):           url -> bytes, raises FetchError.
        write (callable):           (filename, content) file writer.
        clock (callable):           returns the current datetime.
        extended_item_count (int):  next iOS item label number.

    """
    def __init__(
            self,
            data_dir=None,
            default_area_code=None,
            default_timezone=None,
            fetch=fetch_bytes,
            write=write_file,
            clock=None):
        """Initializes an empty Vcard() object."""
        self.data_dir = data_dir or os.getcwd()
        self.default_area_code = default_area_code
        if default_timezone is None:
            self.default_timezone = tzlocal.get_localzone()
        elif isinstance(default_timezone, str):
            self.default_timezone = dttz.gettz(default_timezone)
            if self.default_timezone is None:
                raise VcardError(
                    f"Unknown time zone: '{default_timezone}'",
                    value=default_timezone)
        else:
            self.default_timezone = default_timezone
        self.fetch = fetch
        self.write = write
        self.clock = clock or (lambda: datetime.now(tz=timezone.utc))
        self.extended_item_count = 1
        self._properties = []
        self._defined = set()

    @property
    def properties(self):
        """The stored (key, value) properties in output order."""
        return list(self._properties)

    @property
    def defined_fields(self):
        """The set of fields defined so far."""
        return frozenset(self._defined)

    def debug(self):
        """Summarize the stored properties and defined fields.

        Returns:
            message (str):  a printable summary.

        """
        properties = pprint.pformat(
            [(str(prop.key), prop.value) for prop in self._properties])
        defined = pprint.pformat(sorted(str(key) for key in self._defined))
        return (
            f"**PROPERTIES**\n{properties}\n\n"
            f"**DEFINED ELEMENTS**\n{defined}"
        )

    # property store

    def _define(self, key):
        if not multiple_allowed(key) and key in self._defined:
            raise DuplicateFieldError(key)
        self._defined.add(key)

    def _set_property(self, key, value):
        self._define(key)
        self._properties.append(Property(key, value))

    def _construct(self, key, parts, delimiter=","):
        self._set_property(key, format_field(key, parts, delimiter))

    def _add_extended_item(self, key, value):
        self._construct(
            key, [Text(value), Text(str(self.extended_item_count))])
        self.extended_item_count += 1

    def _localize(self, timeobj):
        if timeobj.tzinfo is None:
            timeobj = timeobj.replace(tzinfo=self.default_timezone)
        return timeobj

    def _photo_property(self, key, photo, is_url=True):
        """Embed an image as base64 data. Images that cannot be fetched,
        decoded, or identified are skipped.

        Args:
            key (FieldKey):         PHOTO or LOGO.
            photo (str or bytes):   a URL, base64 data, or raw bytes.
            is_url (bool):          treat 'photo' as a URL.

        """
        if is_url:
            if str(photo).startswith("file://"):
                url = str(photo)
            else:
                url = sanitize_url(photo)
            if not url:
                logger.warning("skipping %s: invalid URL '%s'", key, photo)
                return
            try:
                data = self.fetch(url)
            except FetchError as exc:
                logger.warning("skipping %s: %s", key, exc)
                return
        else:
            data = _decode_image(photo)
        mime_type = image_format(data)
        if not mime_type:
            logger.warning("skipping %s: unrecognized image data", key)
            return
        encoded = base64.b64encode(data).decode("ascii")
        self._set_property(key, template(key).format(mime_type, encoded))

    # identification

    def add_full_name(self, name):
        """Add the formatted name (FN). RFC 2426 section 3.1.1.

        Args:
            name (str): the full name.

        """
        self._construct(FieldKey.FN, [Text(name)])

    def add_name(
            self,
            last_name,
            first_name=None,
            additional_names=None,
            prefixes=None,
            suffixes=None):
        """Add the structured name (N). RFC 2426 section 3.1.2.

        The values are not escaped so that comma-delimited middle names,
        prefixes, and suffixes survive; spaces are removed from those
        three parts instead. Line breaks in any part become spaces.

        Args:
            last_name (str):        family name.
            first_name (str):       given name.
            additional_names (str): middle name(s), comma-delimited.
            prefixes (str):         honorific prefix(es), comma-delimited.
            suffixes (str):         honorific suffix(es), comma-delimited.

        """
        values = [
            _one_line(last_name),
            _one_line(first_name),
            _strip_spaces(_one_line(additional_names)),
            _strip_spaces(_one_line(prefixes)),
            _strip_spaces(_one_line(suffixes)),
        ]
        self._set_property(
            FieldKey.N,
            template(FieldKey.N).format(
                *("" if value is None else value for value in values)))

    def add_nicknames(self, names):
        """Add nickname(s) (NICKNAME). RFC 2426 section 3.1.3.

        Args:
            names (list):   the nicknames.

        """
        self._construct(FieldKey.NICKNAME, [TextList(names)])

    def add_photo(self, photo, is_url=True):
        """Add a photo (PHOTO), embedded as base64. RFC 2426 section
        3.1.4.

        Args:
            photo (str or bytes):   a URL, base64 data, or image bytes.
            is_url (bool):          'photo' is a URL to fetch.

        """
        self._photo_property(FieldKey.PHOTO, photo, is_url)

    def add_birthday(self, month, day, year=None):
        """Add a birthday (BDAY). RFC 2426 section 3.1.5.

        Without a year, the iOS 'X-APPLE-OMIT-YEAR' form is written and
        BDAY is still considered defined.

        Args:
            month (int):    month of birth.
            day (int):      day of birth.
            year (int):     year of birth (optional).

        """
        try:
            birthday = date(
                1604 if year is None else int(year), int(month), int(day))
        except (TypeError, ValueError) as exc:
            raise InvalidFieldValueError(
                f"Invalid birthday: '{year}-{month}-{day}'",
                field=str(FieldKey.BDAY),
                value=(year, month, day)) from exc
        if year is not None:
            self._set_property(
                FieldKey.BDAY,
                template(FieldKey.BDAY).format(birthday.isoformat()))
        else:
            self._define(FieldKey.BDAY)
            self._set_property(
                FieldKey.BDAY_NO_YEAR,
                template(FieldKey.BDAY_NO_YEAR).format(birthday.isoformat()))

    # delivery addressing

    @staticmethod
    def _address_types(types, field):
        types = [str(kind).lower() for kind in types or []]
        if not types or not set(types) <= ADDRESS_TYPES:
            raise InvalidFieldValueError(
                f"Invalid address type(s): '{','.join(types)}'",
                field=str(field),
                value=types)
        return types

    def add_address(
            self,
            po_box=None,
            extended=None,
            street=None,
            city=None,
            state=None,
            zip_code=None,
            country=None,
            types=DEFAULT_ADDRESS_TYPES):
        """Add a delivery address (ADR). RFC 2426 section 3.2.1.

        Args:
            po_box (str):   post office box.
            extended (str): extended address.
            street (str):   street address.
            city (str):     city.
            state (str):    state or province.
            zip_code (str): postal code.
            country (str):  country.
            types (list):   any of dom, intl, postal, parcel, home, work,
        pref (default: intl, postal, parcel, work).

        """
        types = self._address_types(types, FieldKey.ADR)
        self._construct(
            FieldKey.ADR,
            [
                TextList(types),
                Text(po_box),
                Text(extended),
                Text(street),
                Text(city),
                Text(state),
                Text(zip_code),
                Text(country),
            ])

    def add_label(self, label, types=None):
        """Add a delivery label (LABEL). RFC 2426 section 3.2.2.

        Args:
            label (str):    the formatted label text.
            types (list):   address types, as for add_address().

        """
        if types is None:
            types = DEFAULT_ADDRESS_TYPES
        types = self._address_types(types, FieldKey.LABEL)
        self._construct(FieldKey.LABEL, [TextList(types), Text(label)])

    # telecommunications addressing

    def add_telephone(self, phone, types=None):
        """Add a telephone number (TEL). RFC 2426 section 3.3.1.

        Unknown types fall back to 'voice'; numbers that sanitize to
        nothing are skipped.

        Args:
            phone (str):    the phone number.
            types (list):   telephone types (default: voice).

        """
        types = [str(kind).lower() for kind in types or []]
        if not types or not set(types) <= TELEPHONE_TYPES:
            types = list(DEFAULT_TELEPHONE_TYPES)
        number = sanitize_phone(phone, self.default_area_code)
        if not number:
            logger.debug("skipping TEL: invalid number '%s'", phone)
            return
        self._construct(FieldKey.TEL, [TextList(types), Text(number)])

    def add_email(self, email, types=None):
        """Add an email address (EMAIL). RFC 2426 section 3.3.2.
        Malformed addresses are skipped.

        Args:
            email (str):    the email address.
            types (list):   e.g. internet, x400, pref (default: internet).

        """
        types = list(types or DEFAULT_EMAIL_TYPES)
        address = sanitize_email(email)
        if not address:
            logger.debug("skipping EMAIL: invalid address '%s'", email)
            return
        self._construct(FieldKey.EMAIL, [TextList(types), Text(address)])

    def add_mailer(self, mailer):
        """Add the mail software (MAILER). RFC 2426 section 3.3.3."""
        self._construct(FieldKey.MAILER, [Text(mailer)])

    # geographical

    def add_time_zone(self, offset):
        """Add a UTC offset (TZ). RFC 2426 section 3.4.1. Offsets outside
        -14:00 to +12:00 or in an unknown format are skipped.

        Args:
            offset (str):   e.g. '-7', '-07:00', '+5:30'.

        """
        sanitized = sanitize_time_zone(offset)
        if not sanitized:
            logger.debug("skipping TZ: invalid offset '%s'", offset)
            return
        self._set_property(
            FieldKey.TZ, template(FieldKey.TZ).format(sanitized))

    def add_lat_long(self, lat, long):
        """Add a position (GEO). RFC 2426 section 3.4.2. Invalid pairs
        are skipped.

        Args:
            lat (str or float):     decimal latitude.
            long (str or float):    decimal longitude.

        """
        coords = sanitize_lat_long(lat, long)
        if not coords:
            logger.debug("skipping GEO: invalid position '%s;%s'", lat, long)
            return
        self._construct(FieldKey.GEO, [Text(coords[0]), Text(coords[1])])

    # organizational

    def add_title(self, title):
        """Add a job title (TITLE). RFC 2426 section 3.5.1."""
        self._construct(FieldKey.TITLE, [Text(title)])

    def add_role(self, role):
        """Add a role or occupation (ROLE). RFC 2426 section 3.5.2."""
        self._construct(FieldKey.ROLE, [Text(role)])

    def add_logo(self, logo, is_url=True):
        """Add a logo (LOGO), embedded as base64. RFC 2426 section 3.5.3.

        Args:
            logo (str or bytes):    a URL, base64 data, or image bytes.
            is_url (bool):          'logo' is a URL to fetch.

        """
        self._photo_property(FieldKey.LOGO, logo, is_url)

    def add_agent(self, *args, **kwargs):
        """AGENT (RFC 2426 section 3.5.4) is not supported."""
        raise UnsupportedFieldError(FieldKey.AGENT)

    def add_organizations(self, organizations):
        """Add the organization name and units (ORG). RFC 2426 section
        3.5.5.

        Args:
            organizations (list):   organization name, then unit names.

        """
        self._construct(FieldKey.ORG, [TextList(organizations)], ";")

    # explanatory

    def add_categories(self, categories):
        """Add categories (CATEGORIES). RFC 2426 section 3.6.1."""
        self._construct(FieldKey.CATEGORIES, [TextList(categories)])

    def add_note(self, note):
        """Add a note (NOTE). RFC 2426 section 3.6.2."""
        self._construct(FieldKey.NOTE, [Text(note)])

    def add_product_id(self, product_id):
        """Add the producing product identifier (PRODID). RFC 2426
        section 3.6.3.

        """
        self._construct(FieldKey.PRODID, [Text(product_id)])

    def add_revision(self, when=None):
        """Add the revision timestamp (REV). RFC 2426 section 3.6.4.

        Args:
            when (datetime or str): the revision time (default: now).
        Naive values are taken to be in the default time zone.

        """
        if when is None:
            timeobj = self.clock()
        elif isinstance(when, datetime):
            timeobj = when
        else:
            try:
                timeobj = dtparser.parse(str(when))
            except (TypeError, ValueError, OverflowError,
                    dtparser.ParserError) as exc:
                raise InvalidFieldValueError(
                    f"Invalid revision date: '{when}'",
                    field=str(FieldKey.REV),
                    value=when) from exc
        timestamp = (self._localize(timeobj)
                     .astimezone(tz=timezone.utc)
                     .strftime(REV_FORMAT))
        self._set_property(
            FieldKey.REV, template(FieldKey.REV).format(timestamp))

    def add_sort_string(self, sort_string):
        """Add the sort string (SORT-STRING). RFC 2426 section 3.6.5."""
        self._construct(FieldKey.SORT_STRING, [Text(sort_string)])

    def add_sound(self, *args, **kwargs):
        """SOUND (RFC 2426 section 3.6.6) is not supported."""
        raise UnsupportedFieldError(FieldKey.SOUND)

    def add_unique_identifier(self, uid=None):
        """Add a unique identifier (UID). RFC 2426 section 3.6.7.

        Args:
            uid (str):  the identifier (default: a random UUID).

        """
        uid = str(uuid.uuid4()) if uid is None else uid
        self._construct(FieldKey.UID, [Text(uid)])

    def add_url(self, url):
        """Add a URL (URL). RFC 2426 section 3.6.8. Malformed URLs are
        skipped.

        """
        sanitized = sanitize_url(url)
        if not sanitized:
            logger.debug("skipping URL: invalid URL '%s'", url)
            return
        self._set_property(
            FieldKey.URL, template(FieldKey.URL).format(sanitized))

    # security

    def add_classification(self, classification="PUBLIC"):
        """Add the access classification (CLASS). RFC 2426 section 3.7.1.

        Args:
            classification (str):   PUBLIC, PRIVATE, or CONFIDENTIAL.

        """
        value = str(classification).upper()
        if value not in CLASSIFICATIONS:
            raise InvalidFieldValueError(
                f"Invalid classification: '{classification}'",
                field=str(FieldKey.CLASS),
                value=classification)
        self._construct(FieldKey.CLASS, [Text(value)])

    def add_key(self, *args, **kwargs):
        """KEY (RFC 2426 section 3.7.2) is not supported."""
        raise UnsupportedFieldError(FieldKey.KEY)

    # extended types

    def add_extended_type(self, label, value):
        """Add a custom 'X-' type. RFC 2426 section 3.8.

        Args:
            label (str):    the name following 'X-'.
            value (str):    the value.

        """
        if label is None or not X_NAME_RE.fullmatch(str(label)):
            raise InvalidFieldValueError(
                f"Invalid extended type name: '{label}'",
                field=str(FieldKey.X),
                value=label)
        self._construct(FieldKey.X, [Text(label), Text(value)])

    def add_anniversary(self, anniversary):
        """Add an iOS anniversary date item.

        Args:
            anniversary (str or date):  the anniversary.

        """
        if isinstance(anniversary, date):
            when = anniversary
        else:
            try:
                when = dtparser.parse(str(anniversary))
            except (TypeError, ValueError, OverflowError,
                    dtparser.ParserError) as exc:
                raise InvalidFieldValueError(
                    f"Invalid date for anniversary: '{anniversary}'",
                    field=str(FieldKey.ANNIVERSARY),
                    value=anniversary) from exc
        self._add_extended_item(
            FieldKey.ANNIVERSARY, when.strftime("%Y-%m-%d"))

    def add_supervisor(self, supervisor):
        """Add an iOS related-name item labeled 'Manager'."""
        self._add_extended_item(FieldKey.SUPERVISOR, supervisor)

    def add_spouse(self, spouse):
        """Add an iOS related-name item labeled 'Spouse'."""
        self._add_extended_item(FieldKey.SPOUSE, spouse)

    def add_child(self, child):
        """Add an iOS related-name item labeled 'Child'. May be used more
        than once.

        """
        self._add_extended_item(FieldKey.CHILD, child)

    # output

    def build(self, write=False, filename=None):
        """Build the vCard, adding a REV timestamp if none was set.

        Args:
            write (bool):       also write the vCard to 'data_dir'.
            filename (str):     name of the file (default: a local
        timestamp). '.vcf' is appended if missing.

        Returns:
            vcard (str):    the vCard text.

        """
        if FieldKey.REV not in self._defined:
            self.add_revision()
        lines = ["BEGIN:VCARD", "VERSION:3.0"]
        for prop in self._properties:
            for line in prop.value.split(CRLF):
                lines.append(fold(line))
        lines.append("END:VCARD")
        vcard = "".join(f"{line}{CRLF}" for line in lines) + CRLF
        if write:
            if not filename:
                filename = (self._localize(self.clock())
                            .astimezone(tz=self.default_timezone)
                            .strftime(FILENAME_FORMAT))
            if not filename.endswith(".vcf"):
                filename = f"{filename}.vcf"
            self.write(os.path.join(self.data_dir, filename), vcard)
        return vcard
