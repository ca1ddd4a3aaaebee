# Copyright (C) 2026 Alex Stoyanov
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with this program.
# If not, see <https://www.gnu.org/licenses/>.

import unittest

from qrtoolkit.core.errors import EncodeOptionsError
from qrtoolkit.core.models import CredentialMode, coerce_enum
from qrtoolkit.core.validation import (
    require_color,
    require_int,
    require_int_range,
    require_number_range,
)


class TestValidation(unittest.TestCase):
    def test_require_int_rejects_bool_and_float(self) -> None:
        self.assertEqual(require_int(5, label="n"), 5)
        for value in (True, 1.0, "1", None):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    require_int(value, label="n")

    def test_require_int_range_bounds_are_inclusive(self) -> None:
        self.assertEqual(require_int_range(1, min_val=1, max_val=3, label="n"), 1)
        self.assertEqual(require_int_range(3, min_val=1, max_val=3, label="n"), 3)
        with self.assertRaisesRegex(ValueError, "n must be between 1 and 3"):
            require_int_range(4, min_val=1, max_val=3, label="n")

    def test_require_int_range_custom_error(self) -> None:
        with self.assertRaises(EncodeOptionsError):
            require_int_range(0, min_val=1, max_val=3, label="n", error=EncodeOptionsError)

    def test_require_number_range(self) -> None:
        self.assertEqual(require_number_range(5, min_val=5.0, max_val=30.0, label="p"), 5.0)
        for value in (4.99, 30.01, float("nan"), True, "10"):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    require_number_range(value, min_val=5.0, max_val=30.0, label="p")

    def test_require_color(self) -> None:
        for value in ("#000", "#ff00ff", "red", " white ", (1, 2, 3), [1, 2, 3, 4]):
            with self.subTest(value=value):
                require_color(value, label="dark")
        for value in ("nope", (1, 2), (256, 0, 0), (True, 0, 0), 7, None):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    require_color(value, label="dark")

    def test_coerce_enum_is_case_insensitive(self) -> None:
        cases = (
            ("apiKey", CredentialMode.API_KEY),
            ("APIKEY", CredentialMode.API_KEY),
            (" oauth2 ", CredentialMode.OAUTH2),
            (CredentialMode.CUSTOM, CredentialMode.CUSTOM),
        )
        for value, expected in cases:
            with self.subTest(value=value):
                self.assertIs(coerce_enum(CredentialMode, value, label="mode"), expected)
        with self.assertRaisesRegex(ValueError, "mode must be one of"):
            coerce_enum(CredentialMode, "kerberos", label="mode")


if __name__ == "__main__":
    unittest.main()
