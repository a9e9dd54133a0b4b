"""Crude XML field extractor for POM coordinates.

Finds the first <name> opening tag and returns the text up to the next
</name>. No entity decoding, no namespaces, no attributes on the tag.
POMs written by Maven/Gradle publishing are regular enough for this.
"""

from portal_publisher.extract.types import ExtractionError, MissingFieldError


class XmlExtractor:
    def __init__(self, document: str):
        self.document = document

    def get(self, field_name: str) -> str:
        """Return the stripped text of the first <field_name> element."""
        open_tag = f"<{field_name}>"
        close_tag = f"</{field_name}>"

        start = self.document.find(open_tag)
        if start == -1:
            raise MissingFieldError("Found no element", field_name, self.document, len(self.document))

        value_start = start + len(open_tag)
        end = self.document.find(close_tag, value_start)
        if end == -1:
            raise ExtractionError("Element is not closed", field_name, self.document, value_start)

        return self.document[value_start:end].strip()
