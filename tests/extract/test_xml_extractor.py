"""Unit tests for the crude XML field extractor."""

import pytest

from portal_publisher.extract import ExtractionError, MissingFieldError, XmlExtractor
from portal_publisher.extract.types import line_and_column
from tests.conftest import TEST_POM


class TestXmlExtractor:
    def test_extracts_pom_coordinates(self):
        xex = XmlExtractor(TEST_POM)

        assert xex.get("groupId") == "dk.mada"
        assert xex.get("artifactId") == "action-maven-publish-test"
        assert xex.get("version") == "0.0.0"

    def test_first_occurrence_wins(self):
        doc = "<project><version>1.0</version><dependency><version>2.0</version></dependency></project>"
        assert XmlExtractor(doc).get("version") == "1.0"

    def test_strips_surrounding_whitespace(self):
        assert XmlExtractor("<version>\n  1.2.3\n</version>").get("version") == "1.2.3"

    def test_no_entity_decoding(self):
        assert XmlExtractor("<name>a &amp; b</name>").get("name") == "a &amp; b"

    def test_missing_element(self):
        with pytest.raises(MissingFieldError, match="groupId"):
            XmlExtractor("<project></project>").get("groupId")

    def test_unclosed_element_reports_position(self):
        doc = "<project>\n  <version>1.0\n</project>"

        with pytest.raises(ExtractionError) as exc_info:
            XmlExtractor(doc).get("version")

        assert (exc_info.value.line, exc_info.value.column) == (2, 12)


class TestLineAndColumn:
    @pytest.mark.parametrize(
        "index, expected",
        [(0, (1, 1)), (2, (1, 3)), (3, (2, 1)), (6, (3, 1)), (8, (3, 3))],
    )
    def test_positions(self, index, expected):
        assert line_and_column("ab\ncd\nef", index) == expected
