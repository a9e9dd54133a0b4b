"""Types for the structured-field extractors.

Extracted values are modelled as a small tagged variant so callers have to
say which shape they expect:

    JsonString   raw quoted text (escapes preserved)
    JsonBoolean  the literals true/false
    JsonArray    a list of strings
    JsonObject   a mapping of field names to any of the above
"""

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class JsonString:
    value: str


@dataclass(frozen=True)
class JsonBoolean:
    value: bool


@dataclass(frozen=True)
class JsonArray:
    values: tuple[str, ...] = ()


@dataclass(frozen=True)
class JsonObject:
    fields: dict[str, "JsonValue"] = field(default_factory=dict)

    def get(self, name: str) -> "JsonValue | None":
        return self.fields.get(name)


JsonValue = Union[JsonString, JsonBoolean, JsonArray, JsonObject]


def line_and_column(document: str, index: int) -> tuple[int, int]:
    """Return the 1-based (line, column) of a character index in document."""
    index = max(0, min(index, len(document)))
    line = document.count("\n", 0, index) + 1
    column = index - (document.rfind("\n", 0, index) + 1) + 1
    return line, column


class ExtractionError(Exception):
    """Raised when a field cannot be extracted from a document.

    Carries the failure position (1-based line and column), the field being
    looked up and the full document so the caller can diagnose the input.
    """

    def __init__(self, message: str, field_name: str, document: str, index: int):
        self.field_name = field_name
        self.document = document
        self.index = index
        self.line, self.column = line_and_column(document, index)
        self.reason = message
        super().__init__(
            f"{message} (field '{field_name}', line:{self.line}, column:{self.column}) in: {document}"
        )


class MissingFieldError(ExtractionError):
    """Raised when the requested field does not occur in the document."""
