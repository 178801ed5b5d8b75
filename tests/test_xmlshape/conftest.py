"""Shared fixtures for xmlshape tests."""

import pytest

CATALOG_XML = """<?xml version="1.0" encoding="utf-8"?>
<catalog version="2">
  <!-- two books -->
  <book id="b1" lang="en">
    <title>Dune</title>
    <price>9.99</price>
  </book>
  <book id="b2">
    <title>Solaris</title>
    <note><![CDATA[<rare>]]></note>
    <empty/>
  </book>
</catalog>
"""

CATALOG_VALUE = {
    "catalog": {
        "$": {"version": "2"},
        "book": [
            {
                "$": {"id": "b1", "lang": "en"},
                "title": ["Dune"],
                "price": ["9.99"],
            },
            {
                "$": {"id": "b2"},
                "title": ["Solaris"],
                "note": ["<rare>"],
                "empty": [""],
            },
        ],
    }
}


@pytest.fixture
def catalog_xml():
    """A small document exercising attributes, repeats, CDATA and empty tags."""
    return CATALOG_XML


@pytest.fixture
def catalog_value():
    """Value tree of ``catalog_xml`` under the default configuration."""
    return CATALOG_VALUE


@pytest.fixture
def catalog_file(tmp_path):
    """``catalog_xml`` written to disk as UTF-8 with a byte order mark."""
    path = tmp_path / "catalog.xml"
    path.write_bytes(b"\xef\xbb\xbf" + CATALOG_XML.encode("utf-8"))
    return path
