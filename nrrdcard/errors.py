# -*- coding: utf-8 -*-
"""nrrdcard.errors

Exceptions raised while building a vCard.

Copyright © 2021 Sean O'Connell. Released under MIT license.

"""


class VcardError(Exception):
    """Base exception for vCard construction failures.

    Attributes:
        field (str):    the vCard type name involved, if any.
        value (obj):    the offending value, if any.

    """
    def __init__(self, message, field=None, value=None):
        self.message = message
        self.field = field
        self.value = value
        super().__init__(message)


class DuplicateFieldError(VcardError):
    """A single-occurrence field was set more than once."""
    def __init__(self, field):
        super().__init__(
            f'You can only set "{field}" once', field=str(field))


class InvalidFieldValueError(VcardError):
    """A value is out of range or malformed for its field."""


class UnsupportedFieldError(VcardError):
    """The requested vCard type is not supported."""
    def __init__(self, field):
        super().__init__(
            f'"{field}" is not a currently supported element',
            field=str(field))


class FetchError(VcardError):
    """Remote or local image bytes could not be retrieved."""
