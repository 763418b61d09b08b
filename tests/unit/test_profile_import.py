"""
Tests for parsing profile CSV imports.
"""

from __future__ import annotations

from marketing_console.components.export import (
    format_csv,
    parse_csv,
    profile_rows_from_csv,
    profile_values,
)


class TestParseCsv:
    def test_headers_lowercased_and_values_trimmed(self) -> None:
        rows = parse_csv(" Email , First_Name\n ada@example.com , Ada \n")
        assert rows == [{"email": "ada@example.com", "first_name": "Ada"}]

    def test_quoted_commas_and_doubled_quotes(self) -> None:
        rows = parse_csv('name,company\n"Lovelace, Ada","The ""Engine"" Co"')
        assert rows == [{"name": "Lovelace, Ada", "company": 'The "Engine" Co'}]

    def test_crlf_and_blank_lines(self) -> None:
        text = "email,phone\r\n\r\na@example.com,1\r\n   \r\nb@example.com,2\r\n"
        rows = parse_csv(text)
        assert [r["email"] for r in rows] == ["a@example.com", "b@example.com"]

    def test_short_rows_pad_with_empty_strings(self) -> None:
        assert parse_csv("email,phone,city\nx@example.com") == [
            {"email": "x@example.com", "phone": "", "city": ""}
        ]

    def test_empty_text(self) -> None:
        assert parse_csv("") == []
        assert parse_csv("\n \r\n") == []

    def test_reads_back_own_export_format(self) -> None:
        text = format_csv(["name", "note"], [["Ada", 'says "hi", twice']])
        assert parse_csv(text) == [{"name": "Ada", "note": 'says "hi", twice'}]


class TestProfileValues:
    def test_aliases_map_to_profile_fields(self) -> None:
        row = {
            "firstname": "Grace",
            "lastname": "Hopper",
            "phone_number": "555",
            "device": "dev-1",
            "street": "1 Main St",
            "city": "Arlington",
            "state": "VA",
            "zip": "22201",
            "country": "US",
            "favourite_colour": "blue",
        }
        values = profile_values(row, "acc-1")
        assert values == {
            "account_id": "acc-1",
            "first_name": "Grace",
            "last_name": "Hopper",
            "email": None,
            "phone": "555",
            "device_id": "dev-1",
            "address_street": "1 Main St",
            "address_city": "Arlington",
            "address_state": "VA",
            "address_zip": "22201",
            "address_country": "US",
            "attributes": {},
        }

    def test_canonical_header_wins_over_alias(self) -> None:
        values = profile_values({"address_city": "Paris", "city": "Lyon"}, "acc-1")
        assert values["address_city"] == "Paris"

    def test_name_split_when_first_name_missing(self) -> None:
        values = profile_values({"name": "Ada King Lovelace"}, "acc-1")
        assert (values["first_name"], values["last_name"]) == ("Ada", "King Lovelace")

    def test_single_word_name(self) -> None:
        values = profile_values({"name": "Cher"}, "acc-1")
        assert (values["first_name"], values["last_name"]) == ("Cher", None)

    def test_first_name_column_beats_name(self) -> None:
        values = profile_values({"name": "Ada Lovelace", "first_name": "Augusta"}, "acc-1")
        assert (values["first_name"], values["last_name"]) == ("Augusta", None)

    def test_rows_from_csv(self) -> None:
        rows = profile_rows_from_csv("email\na@example.com\nb@example.com", "acc-9")
        assert [(r["account_id"], r["email"]) for r in rows] == [
            ("acc-9", "a@example.com"),
            ("acc-9", "b@example.com"),
        ]
