"""
tests/unit/test_scanner.py - Bytecode signature scanner tests.
"""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from core.constants import ScanConfidence, ScanSource
from discovery.scanner import (
    BytecodeSignatureScanner,
    NullDisassembler,
    WasmDisassembler,
    extract_exports,
    match_exports,
    match_strings,
    printable_strings,
    select_disassembler,
)


class FakeDisassembler:
    available = True

    def __init__(self, listing):
        self.listing = listing
        self.closed = False

    def disassemble(self, name, code):
        return self.listing

    def close(self):
        self.closed = True


class TestExtractExports:
    def test_function_exports_in_order(self, wasm_listing):
        assert extract_exports(wasm_listing) == [
            "new",
            "get_pools",
            "add_liquidity",
            "storage_deposit",
            "get_return",
            "swap",
        ]

    def test_memory_export_ignored(self, wasm_listing):
        assert "memory" not in extract_exports(wasm_listing)

    def test_empty_listing(self):
        assert extract_exports("") == []


class TestMatchExports:
    def test_each_name_attributed_once(self):
        # "get_pool" is a substring of "get_pools"; the name must still appear once
        matches = match_exports(["get_pools"], ["get_pool", "get_pools"])

        assert len(matches) == 1
        assert matches[0].name == "get_pools"
        assert matches[0].signature == "get_pool"

    def test_export_order_kept(self):
        names = ["swap", "new", "get_deposits", "add_liquidity"]
        signatures = ["add_liquidity", "get_deposit", "swap"]

        matches = match_exports(names, signatures)

        assert [m.name for m in matches] == ["swap", "get_deposits", "add_liquidity"]

    def test_non_matching_names_dropped(self):
        assert match_exports(["new", "ft_metadata"], ["swap"]) == []


class TestStringFallback:
    def test_printable_runs(self):
        code = b"\x00\x01get_pool_info\x00ab\x00swap_tokens\xff"
        assert printable_strings(code, 4) == ["get_pool_info", "swap_tokens"]

    def test_short_runs_ignored(self):
        assert printable_strings(b"\x00abc\x00", 4) == []

    def test_keyword_matches_capped(self):
        code = b"\x00".join(b"pool_%d" % i for i in range(25))

        matches = match_strings(code, keywords=["pool"], cap=10)

        assert len(matches) == 10
        assert matches[0].name == "pool_0"

    def test_first_keyword_wins(self):
        matches = match_strings(b"\x00swap_pool\x00", keywords=["pool", "swap"])
        assert matches[0].signature == "pool"


class TestBytecodeSignatureScanner:
    def test_listing_scan_is_high_confidence(self, wasm_listing):
        scanner = BytecodeSignatureScanner(disassembler=FakeDisassembler(wasm_listing))

        result = scanner.scan("v2.ref-finance.near", b"\x00asm")

        assert result.source == ScanSource.EXPORTS
        assert result.confidence == ScanConfidence.HIGH
        assert result.names == ["get_pools", "add_liquidity", "get_return", "swap"]
        assert result.is_pool_like

    def test_listing_without_matches(self):
        scanner = BytecodeSignatureScanner(
            disassembler=FakeDisassembler('(export "new" (func $new))'),
        )

        result = scanner.scan("token.near", b"\x00asm")

        assert result.source == ScanSource.NONE
        assert not result.is_pool_like

    def test_failed_disassembly_falls_back_to_strings(self):
        scanner = BytecodeSignatureScanner(disassembler=FakeDisassembler(None))

        result = scanner.scan("dex.near", b"\x00\x00add_liquidity\x00")

        assert result.source == ScanSource.STRINGS
        assert result.confidence == ScanConfidence.LOW
        assert result.names == ["add_liquidity"]

    def test_null_disassembler_uses_strings(self):
        scanner = BytecodeSignatureScanner(disassembler=NullDisassembler())

        result = scanner.scan("dex.near", b"\x00reserve_a\x00")

        assert result.source == ScanSource.STRINGS
        assert result.is_pool_like

    def test_per_venue_signatures_override(self, wasm_listing):
        scanner = BytecodeSignatureScanner(disassembler=FakeDisassembler(wasm_listing))

        result = scanner.scan("v2.ref-finance.near", b"", signatures=["swap"])

        assert result.names == ["swap"]

    def test_empty_venue_signatures_match_nothing(self, wasm_listing):
        scanner = BytecodeSignatureScanner(disassembler=FakeDisassembler(wasm_listing))

        result = scanner.scan("v2.ref-finance.near", b"", signatures=())

        assert result.matches == []
        assert not result.is_pool_like

    def test_to_dict(self, wasm_listing):
        scanner = BytecodeSignatureScanner(disassembler=FakeDisassembler(wasm_listing))

        data = scanner.scan("v2.ref-finance.near", b"").to_dict()

        assert data["source"] == "EXPORTS"
        assert data["is_pool_like"] is True
        assert data["matches"][0] == {"name": "get_pools", "signature": "get_pool"}


class TestDisassemblerSelection:
    def test_missing_binary_selects_null(self):
        with patch("discovery.scanner.shutil.which", return_value=None):
            disassembler = select_disassembler("wasm-dis")

        assert isinstance(disassembler, NullDisassembler)
        assert not disassembler.available

    def test_present_binary_selects_wasm_dis(self):
        with patch("discovery.scanner.shutil.which", return_value="/usr/bin/wasm-dis"):
            disassembler = select_disassembler("wasm-dis")

        assert isinstance(disassembler, WasmDisassembler)
        assert disassembler.available


class TestWasmDisassembler:
    def test_reads_listing_and_cleans_up(self):
        disassembler = WasmDisassembler("wasm-dis")

        def fake_run(args, **kwargs):
            out_path = args[args.index("-o") + 1]
            with open(out_path, "w", encoding="utf-8") as f:
                f.write('(export "swap" (func $swap))')
            return MagicMock(returncode=0)

        with patch("discovery.scanner.subprocess.run", side_effect=fake_run):
            listing = disassembler.disassemble("v2.ref-finance.near", b"\x00asm")

        workdir = disassembler.workdir
        assert listing == '(export "swap" (func $swap))'
        assert workdir.exists()

        disassembler.close()
        assert not workdir.exists()

    def test_failure_returns_none(self):
        disassembler = WasmDisassembler("wasm-dis")
        error = subprocess.CalledProcessError(1, ["wasm-dis"])

        try:
            with patch("discovery.scanner.subprocess.run", side_effect=error):
                assert disassembler.disassemble("bad.near", b"junk") is None
        finally:
            disassembler.close()

    def test_close_without_use(self):
        WasmDisassembler("wasm-dis").close()


@pytest.mark.parametrize("name", ["get_pool", "swap", "ft_transfer_call"])
def test_default_signatures_cover_common_exports(name):
    scanner = BytecodeSignatureScanner()
    assert scanner.scan_listing("x.near", f'(export "{name}" (func $f))').is_pool_like
