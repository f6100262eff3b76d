# PATH: tests/unit/test_error_codes.py
"""
Unit tests for ErrorCode contract.

Ensures all ErrorCode values used in the codebase actually exist in the enum
and that each exception type carries the code the error policy expects.

Run: python -m pytest tests/unit/test_error_codes.py -v
"""

import re
import unittest
from pathlib import Path
from typing import Set

from core.exceptions import (
    DecodeError,
    ErrorCode,
    FetchError,
    IllFormedPoolError,
    InfraError,
    InsufficientPoolsError,
    MethodNotFoundError,
    NoLiquidityError,
    PartialParseError,
    RpcCallError,
    RpcTimeoutError,
    ScannerError,
    ValidationError,
)


class TestErrorCodeContract(unittest.TestCase):
    """Test that all ErrorCode usages in codebase are valid."""

    SCAN_PATTERNS = [
        "chains/**/*.py",
        "core/**/*.py",
        "discovery/**/*.py",
        "strategy/**/*.py",
        "monitoring/**/*.py",
    ]

    def find_errorcode_usages(self, filepath: Path) -> Set[str]:
        """Find all ErrorCode.XXXX usages in a file."""
        content = filepath.read_text(encoding="utf-8")
        return set(re.findall(r'ErrorCode\.([A-Z_]+)', content))

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

    def test_errorcode_values_are_upper_snake_case(self):
        for code in ErrorCode:
            self.assertRegex(
                code.value,
                r'^[A-Z][A-Z0-9_]+$',
                f"ErrorCode.{code.name} value should be UPPER_SNAKE_CASE: {code.value}"
            )


class TestExceptionCodes(unittest.TestCase):
    """Each exception type maps to exactly one code."""

    def test_codes(self):
        cases = [
            (InfraError("x"), ErrorCode.INFRA_RPC_ERROR),
            (RpcTimeoutError("x"), ErrorCode.INFRA_TIMEOUT),
            (FetchError("x"), ErrorCode.FETCH_FAILED),
            (RpcCallError("x"), ErrorCode.RPC_CALL_ERROR),
            (MethodNotFoundError("x"), ErrorCode.METHOD_NOT_FOUND),
            (DecodeError("x"), ErrorCode.DECODE_FAILED),
            (PartialParseError("x"), ErrorCode.PARTIAL_PARSE),
            (ValidationError("x"), ErrorCode.VALIDATION_FAILED),
            (IllFormedPoolError("x"), ErrorCode.ILL_FORMED_POOL),
            (NoLiquidityError("x"), ErrorCode.NO_LIQUIDITY),
            (InsufficientPoolsError("x"), ErrorCode.INSUFFICIENT_POOLS),
        ]
        for error, code in cases:
            with self.subTest(error=type(error).__name__):
                self.assertEqual(error.code, code)
                self.assertIsInstance(error, ScannerError)

    def test_str_includes_code(self):
        self.assertEqual(str(FetchError("no code")), "[FETCH_FAILED] no code")

    def test_subclass_relations(self):
        self.assertIsInstance(RpcTimeoutError("t"), InfraError)
        self.assertIsInstance(MethodNotFoundError("m"), RpcCallError)
        self.assertIsInstance(IllFormedPoolError("p"), ValidationError)

    def test_partial_parse_keeps_fields(self):
        error = PartialParseError("partial", partial={"amounts": [1, 2]}, missing=["token_account_ids"])
        self.assertEqual(error.partial, {"amounts": [1, 2]})
        self.assertEqual(error.missing, ["token_account_ids"])

    def test_details_default_empty(self):
        self.assertEqual(ScannerError("x").details, {})
        self.assertEqual(ScannerError("x").code, ErrorCode.UNKNOWN)

    def test_insufficient_pools_found(self):
        self.assertEqual(InsufficientPoolsError("only one", found=1).found, 1)


if __name__ == "__main__":
    unittest.main()
