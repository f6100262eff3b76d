"""
discovery/scanner.py - Bytecode signature scanner.

Classifies a contract as pool-like from its exported function names.

Pipeline:
1. Disassemble the WASM module into a text listing (if a disassembler is available)
2. Extract `(export "name" (func ...))` entries in listing order
3. Attribute each export to the first matching signature
4. Without a listing, fall back to printable strings in the raw bytes
   (low confidence, never mixed with export matches)
"""

import re
import shutil
import subprocess
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Protocol, Sequence

from core.constants import (
    FALLBACK_KEYWORDS,
    FALLBACK_MATCH_CAP,
    MIN_STRING_LENGTH,
    POOL_SIGNATURES,
    ScanConfidence,
    ScanSource,
)
from core.logging import get_logger

logger = get_logger(__name__)

EXPORT_PATTERN = re.compile(r'\(export\s+"([^"]+)"\s+\(func')

DEFAULT_DISASSEMBLER_BINARY = "wasm-dis"
DISASSEMBLE_TIMEOUT_SECONDS = 60


# =============================================================================
# DISASSEMBLER CAPABILITY
# =============================================================================

class Disassembler(Protocol):
    """Turns compiled WASM bytes into a textual listing."""

    @property
    def available(self) -> bool: ...

    def disassemble(self, name: str, code: bytes) -> str | None: ...

    def close(self) -> None: ...


class NullDisassembler:
    """Used when no disassembler binary is installed."""

    available = False

    def disassemble(self, name: str, code: bytes) -> str | None:
        return None

    def close(self) -> None:
        pass


class WasmDisassembler:
    """
    Wraps the binaryen `wasm-dis` binary.

    Module bytes and listings are written to a temporary directory owned by
    this instance and removed on close().
    """

    available = True

    def __init__(self, binary: str = DEFAULT_DISASSEMBLER_BINARY, timeout_seconds: int = DISASSEMBLE_TIMEOUT_SECONDS):
        self.binary = binary
        self.timeout_seconds = timeout_seconds
        self._workdir: Path | None = None

    @property
    def workdir(self) -> Path:
        if self._workdir is None:
            self._workdir = Path(tempfile.mkdtemp(prefix="aquascope-"))
        return self._workdir

    def disassemble(self, name: str, code: bytes) -> str | None:
        """Return the WAT listing, or None if wasm-dis fails."""
        safe_name = re.sub(r"[^A-Za-z0-9._-]", "_", name) or "module"
        wasm_path = self.workdir / f"{safe_name}.wasm"
        wat_path = self.workdir / f"{safe_name}.wat"
        wasm_path.write_bytes(code)

        try:
            subprocess.run(
                [self.binary, str(wasm_path), "-o", str(wat_path)],
                check=True,
                capture_output=True,
                timeout=self.timeout_seconds,
            )
            return wat_path.read_text(encoding="utf-8", errors="replace")
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError) as e:
            logger.warning(
                f"Disassembly failed for {name}, using string fallback",
                extra={"context": {"account_id": name, "error": str(e)}},
            )
            return None

    def close(self) -> None:
        if self._workdir is not None:
            shutil.rmtree(self._workdir, ignore_errors=True)
            self._workdir = None


def select_disassembler(binary: str = DEFAULT_DISASSEMBLER_BINARY) -> Disassembler:
    """Pick the disassembler variant once, at startup."""
    if shutil.which(binary):
        logger.debug(f"Using {binary} for export listings")
        return WasmDisassembler(binary)

    logger.info(
        f"{binary} not found, scanner will use string fallback",
        extra={"context": {"binary": binary}},
    )
    return NullDisassembler()


# =============================================================================
# MATCHING
# =============================================================================

@dataclass
class SignatureMatch:
    """One matched name and the signature (or keyword) it was attributed to."""
    name: str
    signature: str


@dataclass
class ScanResult:
    """Outcome of classifying one contract."""
    account_id: str
    source: ScanSource
    confidence: ScanConfidence
    matches: list[SignatureMatch] = field(default_factory=list)

    @property
    def names(self) -> list[str]:
        return [m.name for m in self.matches]

    @property
    def is_pool_like(self) -> bool:
        return bool(self.matches)

    def to_dict(self) -> dict:
        return {
            "account_id": self.account_id,
            "source": self.source.value,
            "confidence": self.confidence.value,
            "is_pool_like": self.is_pool_like,
            "matches": [{"name": m.name, "signature": m.signature} for m in self.matches],
        }


def extract_exports(listing: str) -> list[str]:
    """Exported function names, in listing order."""
    return EXPORT_PATTERN.findall(listing)


def match_exports(names: Iterable[str], signatures: Sequence[str]) -> list[SignatureMatch]:
    """
    Attribute each name to the first signature it contains.

    Names with no matching signature are dropped; export order is kept.
    """
    matches = []
    for name in names:
        for signature in signatures:
            if signature in name:
                matches.append(SignatureMatch(name=name, signature=signature))
                break
    return matches


def printable_strings(code: bytes, min_length: int = MIN_STRING_LENGTH) -> list[str]:
    """Runs of printable ASCII at least `min_length` long, like strings(1)."""
    pattern = re.compile(rb"[\x20-\x7e\t]{%d,}" % min_length)
    return [m.group().decode("ascii") for m in pattern.finditer(code)]


def match_strings(
    code: bytes,
    keywords: Sequence[str] = FALLBACK_KEYWORDS,
    cap: int = FALLBACK_MATCH_CAP,
    min_length: int = MIN_STRING_LENGTH,
) -> list[SignatureMatch]:
    """First `cap` printable strings containing any keyword."""
    matches = []
    for text in printable_strings(code, min_length):
        keyword = next((k for k in keywords if k in text), None)
        if keyword is None:
            continue
        matches.append(SignatureMatch(name=text, signature=keyword))
        if len(matches) >= cap:
            break
    return matches


class BytecodeSignatureScanner:
    """
    Classifies contracts as pool-like.

    Usage:
        scanner = BytecodeSignatureScanner(disassembler=select_disassembler())
        result = scanner.scan("v2.ref-finance.near", code)
        if result.is_pool_like: ...
    """

    def __init__(
        self,
        signatures: Sequence[str] = POOL_SIGNATURES,
        disassembler: Disassembler | None = None,
        fallback_keywords: Sequence[str] = FALLBACK_KEYWORDS,
        fallback_cap: int = FALLBACK_MATCH_CAP,
        min_string_length: int = MIN_STRING_LENGTH,
    ):
        self.signatures = tuple(signatures)
        self.disassembler = disassembler or NullDisassembler()
        self.fallback_keywords = tuple(fallback_keywords)
        self.fallback_cap = fallback_cap
        self.min_string_length = min_string_length

    def scan_listing(
        self,
        account_id: str,
        listing: str,
        signatures: Sequence[str] | None = None,
    ) -> ScanResult:
        """Classify from a disassembled export listing."""
        if signatures is None:
            signatures = self.signatures
        matches = match_exports(extract_exports(listing), signatures)
        return ScanResult(
            account_id=account_id,
            source=ScanSource.EXPORTS if matches else ScanSource.NONE,
            confidence=ScanConfidence.HIGH,
            matches=matches,
        )

    def scan_raw(self, account_id: str, code: bytes) -> ScanResult:
        """Classify from printable strings in the raw module bytes."""
        matches = match_strings(
            code,
            keywords=self.fallback_keywords,
            cap=self.fallback_cap,
            min_length=self.min_string_length,
        )
        return ScanResult(
            account_id=account_id,
            source=ScanSource.STRINGS if matches else ScanSource.NONE,
            confidence=ScanConfidence.LOW,
            matches=matches,
        )

    def scan(
        self,
        account_id: str,
        code: bytes,
        signatures: Sequence[str] | None = None,
    ) -> ScanResult:
        """Disassemble and match exports, falling back to raw strings."""
        listing = self.disassembler.disassemble(account_id, code) if self.disassembler.available else None

        if listing is not None:
            result = self.scan_listing(account_id, listing, signatures)
        else:
            result = self.scan_raw(account_id, code)

        logger.info(
            f"Pool functions found: {len(result.matches)}",
            extra={
                "context": {
                    "account_id": account_id,
                    "source": result.source.value,
                    "confidence": result.confidence.value,
                }
            },
        )
        return result
