from __future__ import annotations

import pytest

from httpfluent import ContentDisposition, HeaderParseError, MediaType


class TestMediaType:
    def test_parse_simple(self) -> None:
        media_type = MediaType.parse("application/json")
        assert media_type.media_type == "application/json"
        assert media_type.parameters == ()
        assert str(media_type) == "application/json"

    def test_parse_is_case_insensitive(self) -> None:
        media_type = MediaType.parse("Text/HTML; Charset=UTF-8")
        assert media_type.media_type == "text/html"
        assert media_type.charset == "UTF-8"

    def test_parse_parameters(self) -> None:
        media_type = MediaType.parse('multipart/form-data; boundary="a b"; q=0.5')
        assert media_type.get_parameter("Boundary") == "a b"
        assert media_type.quality == 0.5

    def test_str_normalizes_spacing(self) -> None:
        assert str(MediaType.parse("text/plain;charset=utf-8")) == "text/plain; charset=utf-8"

    def test_str_quotes_non_token_values(self) -> None:
        media_type = MediaType("text/plain", (("name", 'a "b"'),))
        assert str(media_type) == 'text/plain; name="a \\"b\\""'

    def test_trailing_semicolon_is_allowed(self) -> None:
        assert MediaType.parse("text/plain;").media_type == "text/plain"

    @pytest.mark.parametrize(
        "value",
        ["", "json", "text/", "text/plain; charset", "text/plain garbage"],
    )
    def test_invalid_values_raise(self, value: str) -> None:
        with pytest.raises(HeaderParseError):
            MediaType.parse(value)

    def test_parse_error_is_a_value_error(self) -> None:
        with pytest.raises(ValueError):
            MediaType.parse("nope")

    def test_invalid_quality_raises(self) -> None:
        with pytest.raises(HeaderParseError):
            MediaType.parse("text/plain; q=high").quality


class TestContentDisposition:
    def test_parse_attachment(self) -> None:
        disposition = ContentDisposition.parse('attachment; filename="report 2024.pdf"')
        assert disposition.disposition_type == "attachment"
        assert disposition.is_attachment
        assert disposition.filename == "report 2024.pdf"

    def test_parse_inline(self) -> None:
        disposition = ContentDisposition.parse("inline")
        assert not disposition.is_attachment
        assert disposition.filename is None

    def test_extended_filename_takes_precedence(self) -> None:
        disposition = ContentDisposition.parse(
            "attachment; filename=\"fallback.txt\"; filename*=UTF-8''na%C3%AFve.txt"
        )
        assert disposition.filename == "naïve.txt"

    def test_form_data_name_and_size(self) -> None:
        disposition = ContentDisposition.parse('form-data; name="field"; size=12')
        assert disposition.name == "field"
        assert disposition.size == 12

    def test_str(self) -> None:
        disposition = ContentDisposition.parse("attachment;filename=a.txt")
        assert str(disposition) == "attachment; filename=a.txt"

    @pytest.mark.parametrize("value", ["", "attachment; filename", "attachment filename=a"])
    def test_invalid_values_raise(self, value: str) -> None:
        with pytest.raises(HeaderParseError):
            ContentDisposition.parse(value)

    def test_invalid_extended_value_raises(self) -> None:
        disposition = ContentDisposition.parse("attachment; filename*=broken")
        with pytest.raises(HeaderParseError):
            disposition.filename
