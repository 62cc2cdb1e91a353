# PATH: tests/unit/test_error_codes.py
"""
Unit tests for the ErrorCode contract.

Ensures every ErrorCode referenced in the codebase exists in the enum
and that typed exceptions carry the expected codes.

Run: python -m pytest tests/unit/test_error_codes.py -v
"""

import re
import unittest
from pathlib import Path
from typing import Set

from core.constants import ErrorCode
from core.exceptions import (
    ConfigError,
    DecodeError,
    IndexerError,
    RegistryError,
    StartingPointError,
)


class TestErrorCodeContract(unittest.TestCase):
    """Test that all ErrorCode usages in codebase are valid."""

    SCAN_PATTERNS = [
        "core/**/*.py",
        "config/**/*.py",
        "chains/**/*.py",
        "discovery/**/*.py",
        "indexer/**/*.py",
    ]

    def find_errorcode_usages(self, filepath: Path) -> Set[str]:
        """Find all ErrorCode.XXXX usages in a file."""
        content = filepath.read_text(encoding="utf-8")
        return set(re.findall(r"ErrorCode\.([A-Z_]+)", content))

    def test_all_errorcode_enum_usages_exist(self):
        """Verify all ErrorCode.XXXX usages reference valid enum members."""
        project_root = Path(__file__).parent.parent.parent
        valid_names = {code.name for code in ErrorCode}

        all_usages = set()
        files_scanned = 0

        for pattern in self.SCAN_PATTERNS:
            for filepath in project_root.glob(pattern):
                if "__pycache__" in str(filepath):
                    continue
                all_usages.update(self.find_errorcode_usages(filepath))
                files_scanned += 1

        invalid_usages = all_usages - valid_names

        self.assertEqual(
            invalid_usages,
            set(),
            f"Invalid ErrorCode usages found: {invalid_usages}\n"
            f"Valid codes: {sorted(valid_names)}"
        )
        self.assertGreater(files_scanned, 0, "No files scanned!")

    def test_no_duplicate_error_code_values(self):
        values = [code.value for code in ErrorCode]
        duplicates = [v for v in values if values.count(v) > 1]
        self.assertEqual(duplicates, [], f"Duplicate ErrorCode values: {set(duplicates)}")

    def test_errorcode_values_are_uppercase(self):
        """Verify all ErrorCode values follow UPPER_SNAKE_CASE."""
        for code in ErrorCode:
            self.assertRegex(
                code.value,
                r"^[A-Z][A-Z0-9_]+$",
                f"ErrorCode.{code.name} value should be UPPER_SNAKE_CASE: {code.value}"
            )


class TestTypedExceptions(unittest.TestCase):
    """Typed exceptions carry their error codes."""

    def test_default_code(self):
        self.assertEqual(IndexerError().code, ErrorCode.UNKNOWN)

    def test_str_includes_code(self):
        error = IndexerError(ErrorCode.INFRA_HTTP_ERROR, "mirror node down")
        self.assertEqual(str(error), "[INFRA_HTTP_ERROR] mirror node down")

    def test_to_dict(self):
        error = RegistryError("cannot write", details={"path": "/tmp/x"})
        self.assertEqual(error.to_dict(), {
            "error_code": "REGISTRY_IO_ERROR",
            "message": "cannot write",
            "details": {"path": "/tmp/x"},
        })

    def test_subclass_codes(self):
        self.assertEqual(ConfigError("bad").code, ErrorCode.CONFIG_INVALID)
        self.assertEqual(
            ConfigError("missing", code=ErrorCode.CONFIG_MISSING).code,
            ErrorCode.CONFIG_MISSING,
        )
        self.assertEqual(DecodeError("bad hex").code, ErrorCode.DECODE_FAILED)
        self.assertEqual(
            StartingPointError("unresolved").code,
            ErrorCode.STARTING_POINT_UNRESOLVED,
        )

    def test_all_are_indexer_errors(self):
        for cls in (ConfigError, DecodeError, StartingPointError, RegistryError):
            self.assertTrue(issubclass(cls, IndexerError))


if __name__ == "__main__":
    unittest.main()
