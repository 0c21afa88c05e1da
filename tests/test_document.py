"""Tests for loading templates into lxml trees."""

from pathlib import Path

import pytest
from lxml import etree

from plantilla import DocumentLoadError, load_file, load_string
from plantilla.document import serialize


class TestLoadString:
    def test_text_source(self) -> None:
        tree = load_string("<root><a/></root>")
        assert isinstance(tree, etree._ElementTree)
        assert tree.getroot().tag == "root"

    def test_bytes_source(self) -> None:
        assert load_string(b"<root/>").getroot().tag == "root"

    def test_text_with_declaration(self) -> None:
        """lxml rejects str input with an encoding declaration; the loader does not."""
        tree = load_string('<?xml version="1.0" encoding="UTF-8"?>\n<root/>')
        assert tree.getroot().tag == "root"
        assert tree.docinfo.encoding == "UTF-8"

    def test_declared_encoding_kept(self) -> None:
        tree = load_string('<?xml version="1.0" encoding="ISO-8859-1"?><root>día</root>')
        assert tree.docinfo.encoding == "ISO-8859-1"
        assert tree.getroot().text == "día"

    def test_text_outside_declared_encoding(self) -> None:
        with pytest.raises(DocumentLoadError) as exc_info:
            load_string(
                '<?xml version="1.0" encoding="ISO-8859-1"?>\n<root>€</root>',
                source_file="euro.xml",
            )
        assert exc_info.value.lineno == 2
        assert exc_info.value.source_file == "euro.xml"
        assert isinstance(exc_info.value.__cause__, UnicodeEncodeError)

    def test_unknown_declared_encoding(self) -> None:
        with pytest.raises(DocumentLoadError, match="Unknown encoding") as exc_info:
            load_string('<?xml version="1.0" encoding="no-such-codec"?><root/>')
        assert isinstance(exc_info.value.__cause__, LookupError)

    def test_cdata_preserved(self) -> None:
        tree = load_string("<root><![CDATA[a < b]]></root>")
        assert "<![CDATA[a < b]]>" in serialize(tree)

    def test_comments_and_pis_preserved(self) -> None:
        tree = load_string("<root><!--c--><?pi data?></root>")
        assert serialize(tree) == "<root><!--c--><?pi data?></root>"

    def test_whitespace_preserved(self) -> None:
        source = "<root>\n  <a/>\n</root>"
        assert serialize(load_string(source)) == source

    def test_line_numbers(self) -> None:
        tree = load_string("<root>\n\n<a/>\n</root>")
        assert tree.getroot()[0].sourceline == 3

    def test_malformed(self) -> None:
        with pytest.raises(DocumentLoadError) as exc_info:
            load_string("<root>\n<a></root>", source_file="broken.xml")
        assert exc_info.value.source_file == "broken.xml"
        assert exc_info.value.lineno == 2
        assert str(exc_info.value).startswith("broken.xml:2 ")
        assert isinstance(exc_info.value.__cause__, etree.XMLSyntaxError)


class TestLoadFile:
    def test_load_file(self, tmp_path: Path) -> None:
        path = tmp_path / "page.xml"
        path.write_text('<root xmlns:ex="urn:ex"><p ex:If="{% a %}"/></root>', encoding="utf-8")
        tree = load_file(path)
        assert tree.getroot()[0].get("{urn:ex}If") == "{% a %}"

    def test_load_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_file(tmp_path / "missing.xml")

    def test_malformed_file_reports_path(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.xml"
        path.write_text("<root>", encoding="utf-8")
        with pytest.raises(DocumentLoadError) as exc_info:
            load_file(path)
        assert exc_info.value.source_file == str(path)
