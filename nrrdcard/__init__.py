# -*- coding: utf-8 -*-
"""nrrdcard: RFC 2426 vCard builder."""

__version__ = "0.0.1"

from nrrdcard.errors import (  # noqa: E402
    DuplicateFieldError,
    FetchError,
    InvalidFieldValueError,
    UnsupportedFieldError,
    VcardError)
from nrrdcard.fields import FieldKey  # noqa: E402
from nrrdcard.vcard import Vcard, escape, fold  # noqa: E402

__all__ = [
    'Vcard',
    'FieldKey',
    'escape',
    'fold',
    'VcardError',
    'DuplicateFieldError',
    'InvalidFieldValueError',
    'UnsupportedFieldError',
    'FetchError',
]
