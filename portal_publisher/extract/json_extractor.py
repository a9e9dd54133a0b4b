"""Crude JSON field extractor for Portal API responses.

Only the handful of shapes the Portal returns are supported:

    value  ::= object | array | boolean | string
    object ::= '{' [ string ':' value ( ',' string ':' value )* ] '}'
    array  ::= '[' [ string ( ',' string )* ] ']'

Strings may be quoted with either ' or ", the opening quote decides the
closing one, and a backslash escapes the following character. Escapes are
NOT decoded, the raw text between the quotes is returned.

Anything else (numbers, null, nested arrays) fails with an ExtractionError
pointing at the offending line and column.
"""

from portal_publisher.extract.types import (
    ExtractionError,
    JsonArray,
    JsonBoolean,
    JsonObject,
    JsonString,
    JsonValue,
    MissingFieldError,
)

_QUOTES = ("'", '"')
_BOOLEANS = {"true": True, "false": False}
_VALUE_TERMINATORS = ",}]"


class JsonExtractor:
    """Looks up single fields in a JSON document without parsing all of it."""

    def __init__(self, document: str):
        self.document = document

    def get(self, field_name: str) -> JsonValue:
        """Return the value of the first occurrence of field_name."""
        i = self._find_end_of_field_name(field_name)
        i = self._skip_separator(field_name, i)
        value, _ = self._parse_value(field_name, i)
        return value

    def get_string(self, field_name: str) -> str:
        return self._expect(field_name, JsonString).value

    def get_boolean(self, field_name: str) -> bool:
        return self._expect(field_name, JsonBoolean).value

    def get_strings(self, field_name: str) -> list[str]:
        return list(self._expect(field_name, JsonArray).values)

    def get_object(self, field_name: str) -> JsonObject:
        return self._expect(field_name, JsonObject)

    # ------------------------------------------------------------------
    # Field lookup
    # ------------------------------------------------------------------

    def _expect(self, field_name: str, kind: type):
        value = self.get(field_name)
        if not isinstance(value, kind):
            raise ExtractionError(
                f"Expected {kind.__name__} but found {type(value).__name__}",
                field_name,
                self.document,
                self._find_end_of_field_name(field_name),
            )
        return value

    def _find_end_of_field_name(self, field_name: str) -> int:
        # ....'fieldName'  :  'fieldValue'....
        #                ^ returned index
        candidates = [
            i for i in (self.document.find(f"{q}{field_name}{q}") for q in _QUOTES) if i != -1
        ]
        if not candidates:
            raise MissingFieldError(
                "Found no field", field_name, self.document, len(self.document)
            )
        return min(candidates) + len(field_name) + 2

    def _skip_separator(self, field_name: str, i: int) -> int:
        i = self._skip_whitespace(i)
        if i >= len(self.document) or self.document[i] != ":":
            raise ExtractionError("Expected ':' after field name", field_name, self.document, i)
        return self._skip_whitespace(i + 1)

    def _skip_whitespace(self, i: int) -> int:
        while i < len(self.document) and self.document[i].isspace():
            i += 1
        return i

    # ------------------------------------------------------------------
    # Value decoding (recursive descent); each returns (value, next index)
    # ------------------------------------------------------------------

    def _parse_value(self, field_name: str, i: int) -> tuple[JsonValue, int]:
        if i >= len(self.document):
            raise ExtractionError("Unexpected end of document", field_name, self.document, i)

        c = self.document[i]
        if c == "{":
            return self._parse_object(field_name, i)
        if c == "[":
            return self._parse_array(field_name, i)
        if c in ("t", "f"):
            return self._parse_boolean(field_name, i)
        if c in _QUOTES:
            text, i = self._parse_string(field_name, i)
            return JsonString(text), i
        raise ExtractionError(
            f"Unsupported value starting with {c!r}", field_name, self.document, i
        )

    def _parse_string(self, field_name: str, i: int) -> tuple[str, int]:
        if i >= len(self.document) or self.document[i] not in _QUOTES:
            raise ExtractionError("Expected quoted string", field_name, self.document, i)

        quote = self.document[i]
        start = i + 1
        escaped = False
        for j in range(start, len(self.document)):
            c = self.document[j]
            if c == quote and not escaped:
                return self.document[start:j], j + 1
            escaped = c == "\\" and not escaped
        raise ExtractionError("Unterminated string", field_name, self.document, len(self.document))

    def _parse_boolean(self, field_name: str, i: int) -> tuple[JsonBoolean, int]:
        for literal, value in _BOOLEANS.items():
            end = i + len(literal)
            if self.document.startswith(literal, i):
                if end < len(self.document) and not (
                    self.document[end].isspace() or self.document[end] in _VALUE_TERMINATORS
                ):
                    raise ExtractionError(
                        "Unexpected character after boolean", field_name, self.document, end
                    )
                return JsonBoolean(value), end
        raise ExtractionError("Expected true or false", field_name, self.document, i)

    def _parse_array(self, field_name: str, i: int) -> tuple[JsonArray, int]:
        values: list[str] = []
        i = self._skip_whitespace(i + 1)
        if i < len(self.document) and self.document[i] == "]":
            return JsonArray(()), i + 1

        while True:
            text, i = self._parse_string(field_name, i)
            values.append(text)
            i = self._skip_whitespace(i)
            if i >= len(self.document):
                raise ExtractionError("Unterminated array", field_name, self.document, i)
            if self.document[i] == "]":
                return JsonArray(tuple(values)), i + 1
            if self.document[i] != ",":
                raise ExtractionError("Expected ',' or ']'", field_name, self.document, i)
            i = self._skip_whitespace(i + 1)

    def _parse_object(self, field_name: str, i: int) -> tuple[JsonObject, int]:
        fields: dict[str, JsonValue] = {}
        i = self._skip_whitespace(i + 1)
        if i < len(self.document) and self.document[i] == "}":
            return JsonObject(fields), i + 1

        while True:
            name, i = self._parse_string(field_name, i)
            i = self._skip_whitespace(i)
            if i >= len(self.document) or self.document[i] != ":":
                raise ExtractionError("Expected ':'", field_name, self.document, i)
            value, i = self._parse_value(field_name, self._skip_whitespace(i + 1))
            fields[name] = value
            i = self._skip_whitespace(i)
            if i >= len(self.document):
                raise ExtractionError("Unterminated object", field_name, self.document, i)
            if self.document[i] == "}":
                return JsonObject(fields), i + 1
            if self.document[i] != ",":
                raise ExtractionError("Expected ',' or '}'", field_name, self.document, i)
            i = self._skip_whitespace(i + 1)
