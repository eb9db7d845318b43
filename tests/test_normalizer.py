import unittest
from datetime import date, datetime, timedelta, timezone

from parameterized import parameterized

from entity_schema import CoercionError, coerce, format_date


class TestCoerce(unittest.TestCase):

    @parameterized.expand([
        ("str_unchanged", "abc", "string", "abc"),
        ("int_to_str", 123, "string", "123"),
        ("integral_float_to_str", 2.0, "string", "2"),
        ("float_to_str", 2.5, "string", "2.5"),
        ("true_to_str", True, "string", "true"),
        ("false_to_str", False, "string", "false"),
        ("date_to_str", date(2020, 1, 2), "string", "2020-01-02"),
        ("int_str_to_number", "42", "number", 42),
        ("float_str_to_number", " 4.5 ", "number", 4.5),
        ("bool_to_number", True, "number", 1),
        ("number_unchanged", 7, "number", 7),
        ("true_str", "Yes", "boolean", True),
        ("false_str", "off", "boolean", False),
        ("empty_str_false", "", "boolean", False),
        ("zero_false", 0, "boolean", False),
        ("number_true", 3, "boolean", True),
        ("iso_str_to_date", "2020-01-02T03:04:05", "date", datetime(2020, 1, 2, 3, 4, 5)),
        (
            "zulu_str_to_date",
            "2020-01-02T03:04:05Z",
            "date",
            datetime(2020, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        ),
        ("ms_to_date", 86400000, "date", datetime(1970, 1, 2, tzinfo=timezone.utc)),
        ("object_unchanged", {"a": 1}, "object", {"a": 1}),
        ("any_unchanged", [1], "any", [1]),
        ("unknown_tag_unchanged", 1, "decimal", 1),
    ])
    def test_scalar(self, name, value, type_tag, expected):
        """
        Values convert to the requested primitive type.
        """
        self.assertEqual(coerce(value, type_tag), expected)

    @parameterized.expand([
        ("string", "string"),
        ("number", "number"),
        ("boolean", "boolean"),
        ("date", "date"),
        ("list", ["number"]),
    ])
    def test_none_passes_through(self, name, type_tag):
        """
        None is never converted.
        """
        self.assertIsNone(coerce(None, type_tag))

    @parameterized.expand([
        ("dict_to_string", {"a": 1}, "string"),
        ("list_to_string", [1], "string"),
        ("text_to_number", "abc", "number"),
        ("text_to_boolean", "maybe", "boolean"),
        ("text_to_date", "yesterday", "date"),
        ("bool_to_date", True, "date"),
        ("dict_to_number", {}, "number"),
    ])
    def test_failures(self, name, value, type_tag):
        """
        Values with no representation in the type raise CoercionError.
        """
        with self.assertRaises(CoercionError) as cm:
            coerce(value, type_tag)
        self.assertEqual(cm.exception.type_tag, type_tag)
        self.assertIn(type_tag, str(cm.exception))

    def test_list_elements(self):
        """
        A list tag converts every element.
        """
        self.assertEqual(coerce([123, True, "pingpong"], ["string"]), ["123", "true", "pingpong"])
        self.assertEqual(coerce(("1", 2), ["number"]), [1, 2])

    def test_list_tag_with_scalar(self):
        """
        A scalar given for a list tag is left alone unless coerce is requested.
        """
        self.assertEqual(coerce("a,b", ["string"]), "a,b")
        self.assertEqual(coerce(5, ["number"]), 5)
        self.assertEqual(coerce("a, b", ["string"], {"coerce": True}), ["a", "b"])
        self.assertEqual(coerce("  ", ["string"], {"coerce": True}), [])

    def test_date_to_number(self):
        """
        Dates become epoch milliseconds.
        """
        moment = datetime(2020, 1, 1, tzinfo=timezone.utc)
        self.assertEqual(coerce(moment, "number"), 1577836800000)


class TestFormatDate(unittest.TestCase):

    def test_iso(self):
        """
        iso uses isoformat().
        """
        self.assertEqual(format_date(datetime(1990, 1, 1, 8, 30), "iso"), "1990-01-01T08:30:00")
        self.assertEqual(format_date(date(1990, 1, 1), "iso"), "1990-01-01")

    def test_timestamp_aware(self):
        """
        timestamp gives integer epoch milliseconds.
        """
        moment = datetime(1970, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=1, milliseconds=500)
        self.assertEqual(format_date(moment, "timestamp"), 1500)

    def test_timestamp_naive(self):
        """
        Naive values follow datetime.timestamp().
        """
        moment = datetime(1990, 1, 1)
        self.assertEqual(format_date(moment, "timestamp"), int(round(moment.timestamp() * 1000)))
        self.assertEqual(
            format_date(date(1990, 1, 1), "timestamp"),
            int(round(moment.timestamp() * 1000)),
        )

    def test_unknown_format(self):
        """
        Unknown tokens return the value unchanged.
        """
        moment = datetime(1990, 1, 1)
        self.assertIs(format_date(moment, None), moment)
        self.assertIs(format_date(moment, "rfc"), moment)


if __name__ == "__main__":
    unittest.main()
