"""Structured-field extractors for Portal responses and POM files.

Public API:
    JsonExtractor(document).get(field) -> JsonValue
    XmlExtractor(document).get(field) -> str
"""

from portal_publisher.extract.json_extractor import JsonExtractor
from portal_publisher.extract.types import (
    ExtractionError,
    JsonArray,
    JsonBoolean,
    JsonObject,
    JsonString,
    JsonValue,
    MissingFieldError,
)
from portal_publisher.extract.xml_extractor import XmlExtractor

__all__ = [
    "ExtractionError",
    "JsonArray",
    "JsonBoolean",
    "JsonExtractor",
    "JsonObject",
    "JsonString",
    "JsonValue",
    "MissingFieldError",
    "XmlExtractor",
]
