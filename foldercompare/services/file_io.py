"""
File I/O service for reading files to compare.

Handles:
- Encoding detection
- Binary file detection
- Streaming text lines with their original line endings
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Optional

import chardet


# Line terminators recognized when splitting text, longest first.
LINE_TERMINATORS = ('\r\n', '\n', '\r')


def split_line_ending(line: str) -> tuple[str, str]:
    """
    Split a line into its body and its terminator.

    >>> split_line_ending('abc\\r\\n')
    ('abc', '\\r\\n')
    """
    for terminator in LINE_TERMINATORS:
        if line.endswith(terminator):
            return line[:-len(terminator)], terminator
    return line, ''


class FileIOService:
    """Service for reading files safely."""

    # Binary file signatures (magic bytes)
    BINARY_SIGNATURES = [
        b'\x00',           # Null byte (strong indicator)
        b'\x89PNG',        # PNG
        b'\xff\xd8\xff',   # JPEG
        b'GIF8',           # GIF
        b'PK\x03\x04',     # ZIP
        b'\x1f\x8b',       # GZIP
        b'%PDF',           # PDF
        b'\x7fELF',        # ELF
    ]

    # BOMs mark text even though UTF-16 text holds null bytes
    TEXT_BOMS = (b'\xef\xbb\xbf', b'\xff\xfe', b'\xfe\xff')

    def __init__(
        self,
        default_encoding: str = 'utf-8',
        binary_check_size: int = 8192,
        encoding_sample_size: int = 4096
    ):
        self.default_encoding = default_encoding
        self.binary_check_size = binary_check_size
        self.encoding_sample_size = encoding_sample_size

    def is_binary_file(self, path: Path | str) -> bool:
        """
        Check if a file is binary by sniffing its first bytes.

        Raises:
            OSError: if the file cannot be read
        """
        with open(path, 'rb') as f:
            chunk = f.read(self.binary_check_size)

        if chunk.startswith(self.TEXT_BOMS):
            return False

        # Check for binary signatures
        for sig in self.BINARY_SIGNATURES:
            if chunk.startswith(sig):
                return True

        # Check for null bytes
        if b'\x00' in chunk:
            return True

        # Check ratio of non-text bytes
        non_text = sum(1 for b in chunk if b < 9 or (b > 13 and b < 32))
        if len(chunk) > 0 and non_text / len(chunk) > 0.3:
            return True

        return False

    def detect_encoding(self, content: bytes) -> str:
        """Detect encoding of content."""
        if not content:
            return self.default_encoding

        # Use chardet for detection
        result = chardet.detect(content)

        if result['confidence'] > 0.7 and result['encoding']:
            encoding = result['encoding'].lower()
            # Normalize encoding names
            if encoding == 'ascii':
                return 'utf-8'  # ASCII is subset of UTF-8
            return encoding

        return self.default_encoding

    def detect_encoding_quick(self, path: Path | str) -> str:
        """
        Quick encoding detection from file header.

        Raises:
            OSError: if the file cannot be read
        """
        with open(path, 'rb') as f:
            header = f.read(self.encoding_sample_size)
        return self.detect_encoding(header)

    def detect_shared_encoding(self, path_a: Path | str, path_b: Path | str) -> str:
        """
        Pick one encoding to read two files that are compared with each other.

        Both files are decoded with the same codec so that equal text means
        equal bytes. When the sniffed encodings disagree the default
        encoding is used for both.

        Raises:
            OSError: if either file cannot be read
        """
        encoding_a = self.detect_encoding_quick(path_a)
        encoding_b = self.detect_encoding_quick(path_b)
        if encoding_a == encoding_b:
            return encoding_a
        logging.debug(
            f"FileIOService - Encodings differ ({encoding_a} vs {encoding_b}), "
            f"reading both as {self.default_encoding}"
        )
        return self.default_encoding

    def read_lines(
        self,
        path: Path | str,
        encoding: Optional[str] = None,
        errors: str = 'surrogateescape'
    ) -> Iterator[str]:
        """
        Read a text file line by line (memory efficient for large files).

        Lines keep their original terminator (LF, CRLF or CR); only the
        last line may have none. Decoding is lossless by default:
        undecodable bytes become lone surrogates, so different bytes never
        read as the same text.

        Raises:
            OSError: if the file cannot be read
            UnicodeDecodeError: if the codec cannot escape a bad sequence
        """
        path = Path(path)
        encoding = encoding or self.detect_encoding_quick(path)

        try:
            f = open(path, 'r', encoding=encoding, errors=errors, newline='')
        except LookupError:
            logging.warning(
                f"FileIOService - Unknown encoding {encoding!r} for {path}, "
                f"using {self.default_encoding}"
            )
            f = open(path, 'r', encoding=self.default_encoding, errors=errors, newline='')

        with f:
            for line in f:
                yield line
