"""Test module for xmlshape package initialization."""


def test_package_import() -> None:
    """Test that the package can be imported successfully."""
    # Arrange & Act
    import xmlshape

    # Assert
    assert xmlshape is not None


def test_package_has_version() -> None:
    """Test that the package has a version attribute."""
    import xmlshape

    assert isinstance(xmlshape.__version__, str)
    assert xmlshape.__version__ == "0.1.0"


def test_package_has_author() -> None:
    """Test that the package has an author attribute."""
    import xmlshape

    assert xmlshape.__author__ == "xmlshape Team"


def test_package_all_exports() -> None:
    """Test that __all__ contains expected exports and that they resolve."""
    import xmlshape

    expected = {
        "parse", "parse_string", "parse_file", "parse_async",
        "Parser", "ParserConfig", "processors", "ParseResult",
        "ParseError", "ValidationError", "UnclosedDocumentError",
        "MalformedInputError", "InvalidArgumentError", "ParserBusyError",
    }
    assert expected <= set(xmlshape.__all__)
    for name in xmlshape.__all__:
        assert hasattr(xmlshape, name)


def test_level_one_round_trip() -> None:
    """Test the simplest entry point end to end."""
    import xmlshape

    assert xmlshape.parse_string("<greeting>hello</greeting>") == {"greeting": "hello"}
