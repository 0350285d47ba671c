# -*- coding: utf-8 -*-
"""nrrdcard.fields

vCard 3.0 type names, output templates, and the allowed values for
constrained parameters (RFC 2426).

Copyright © 2021 Sean O'Connell. Released under MIT license.

"""
from enum import Enum


class FieldKey(Enum):
    """vCard type names handled by nrrdcard."""
    FN = "FN"
    N = "N"
    NICKNAME = "NICKNAME"
    PHOTO = "PHOTO"
    BDAY = "BDAY"
    BDAY_NO_YEAR = "BDAY-NO-YEAR"
    ADR = "ADR"
    LABEL = "LABEL"
    TEL = "TEL"
    EMAIL = "EMAIL"
    MAILER = "MAILER"
    TZ = "TZ"
    GEO = "GEO"
    TITLE = "TITLE"
    ROLE = "ROLE"
    LOGO = "LOGO"
    AGENT = "AGENT"
    ORG = "ORG"
    CATEGORIES = "CATEGORIES"
    NOTE = "NOTE"
    PRODID = "PRODID"
    REV = "REV"
    SORT_STRING = "SORT-STRING"
    SOUND = "SOUND"
    UID = "UID"
    URL = "URL"
    CLASS = "CLASS"
    KEY = "KEY"
    X = "X-"
    ANNIVERSARY = "ANNIVERSARY"
    SUPERVISOR = "SUPERVISOR"
    SPOUSE = "SPOUSE"
    CHILD = "CHILD"

    def __str__(self):
        return self.value


# fields that may appear more than once in a single vCard
MULTIPLE_ALLOWED = frozenset([
    FieldKey.EMAIL,
    FieldKey.ADR,
    FieldKey.LABEL,
    FieldKey.TEL,
    FieldKey.URL,
    FieldKey.X,
    FieldKey.CHILD,
])

# fields that are recognized but deliberately not implemented
UNSUPPORTED = frozenset([
    FieldKey.AGENT,
    FieldKey.SOUND,
    FieldKey.KEY,
])

# positional str.format() templates, one per supported field. The
# iOS extended items span two physical lines sharing an item label.
TEMPLATES = {
    FieldKey.FN: "FN:{0}",
    FieldKey.N: "N:{0};{1};{2};{3};{4}",
    FieldKey.NICKNAME: "NICKNAME:{0}",
    FieldKey.PHOTO: "PHOTO;ENCODING=b;TYPE={0}:{1}",
    FieldKey.BDAY: "BDAY:{0}",
    FieldKey.BDAY_NO_YEAR: "BDAY;X-APPLE-OMIT-YEAR=1604:{0}",
    FieldKey.ADR: "ADR;TYPE={0}:{1};{2};{3};{4};{5};{6};{7}",
    FieldKey.LABEL: "LABEL;TYPE={0}:{1}",
    FieldKey.TEL: "TEL;TYPE={0}:{1}",
    FieldKey.EMAIL: "EMAIL;TYPE={0}:{1}",
    FieldKey.MAILER: "MAILER:{0}",
    FieldKey.TZ: "TZ:{0}",
    FieldKey.GEO: "GEO:{0};{1}",
    FieldKey.TITLE: "TITLE:{0}",
    FieldKey.ROLE: "ROLE:{0}",
    FieldKey.LOGO: "LOGO;ENCODING=b;TYPE={0}:{1}",
    FieldKey.ORG: "ORG:{0}",
    FieldKey.CATEGORIES: "CATEGORIES:{0}",
    FieldKey.NOTE: "NOTE:{0}",
    FieldKey.PRODID: "PRODID:{0}",
    FieldKey.REV: "REV:{0}",
    FieldKey.SORT_STRING: "SORT-STRING:{0}",
    FieldKey.UID: "UID:{0}",
    FieldKey.URL: "URL:{0}",
    FieldKey.CLASS: "CLASS:{0}",
    FieldKey.X: "X-{0}:{1}",
    FieldKey.ANNIVERSARY: (
        "item{1}.X-ABDATE;type=pref:{0}\r\n"
        "item{1}.X-ABLabel:_$!<Anniversary>!$_"),
    FieldKey.SUPERVISOR: (
        "item{1}.X-ABRELATEDNAMES:{0}\r\n"
        "item{1}.X-ABLabel:_$!<Manager>!$_"),
    FieldKey.SPOUSE: (
        "item{1}.X-ABRELATEDNAMES:{0}\r\n"
        "item{1}.X-ABLabel:_$!<Spouse>!$_"),
    FieldKey.CHILD: (
        "item{1}.X-ABRELATEDNAMES:{0}\r\n"
        "item{1}.X-ABLabel:_$!<Child>!$_"),
}

ADDRESS_TYPES = frozenset([
    "dom",
    "intl",
    "postal",
    "parcel",
    "home",
    "work",
    "pref",
])

DEFAULT_ADDRESS_TYPES = ("intl", "postal", "parcel", "work")

TELEPHONE_TYPES = frozenset([
    "home",
    "msg",
    "work",
    "pref",
    "voice",
    "fax",
    "cell",
    "video",
    "pager",
    "bbs",
    "modem",
    "car",
    "isdn",
    "pcs",
    "iphone",   # non-standard, used by iOS
])

DEFAULT_TELEPHONE_TYPES = ("voice",)

DEFAULT_EMAIL_TYPES = ("internet",)

CLASSIFICATIONS = ("PUBLIC", "PRIVATE", "CONFIDENTIAL")


def template(key):
    """Look up the output template for a field.

    Args:
        key (FieldKey): the vCard field.

    Returns:
        template (str): the str.format() template.

    """
    return TEMPLATES[key]


def multiple_allowed(key):
    """Returns True if the field may appear more than once."""
    return key in MULTIPLE_ALLOWED
