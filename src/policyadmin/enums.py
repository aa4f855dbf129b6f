"""Enumeration type definitions"""

from enum import Enum


class FieldType(str, Enum):
    """Closed set of form field variants"""

    TEXT = "text"
    EMAIL = "email"
    NUMBER = "number"
    DATE = "date"
    SELECT = "select"
    SELECT_REF = "selectRef"


class Mode(str, Enum):
    """Editing state of a form session"""

    BROWSING = "browsing"
    CREATING = "creating"
    EDITING = "editing"


class NoticeLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
