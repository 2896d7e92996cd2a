"""
Hashing service for raw file content comparison.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Optional

import xxhash


class HashAlgorithm(Enum):
    """Supported hash algorithms."""
    MD5 = auto()
    SHA256 = auto()
    XXH64 = auto()  # Fast non-cryptographic hash


@dataclass(frozen=True)
class HashResult:
    """Result of a hash operation."""
    algorithm: HashAlgorithm
    hash_hex: str
    file_size: int

    def matches(self, other: 'HashResult') -> bool:
        """Check if this hash matches another."""
        return (self.algorithm == other.algorithm and
                self.hash_hex == other.hash_hex)


class HashingService:
    """Service for computing file hashes."""

    def __init__(
        self,
        default_algorithm: HashAlgorithm = HashAlgorithm.SHA256,
        chunk_size: int = 65536
    ):
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.default_algorithm = default_algorithm
        self.chunk_size = chunk_size

    def hash_file(
        self,
        path: Path | str,
        algorithm: Optional[HashAlgorithm] = None
    ) -> HashResult:
        """
        Compute hash of a file.

        The file is read in chunks of ``chunk_size`` bytes.

        Args:
            path: Path to the file
            algorithm: Hash algorithm to use

        Returns:
            HashResult with the computed hash

        Raises:
            OSError: if the file cannot be read
        """
        path = Path(path)
        algorithm = algorithm or self.default_algorithm
        hasher = self._create_hasher(algorithm)

        file_size = 0
        with open(path, 'rb') as f:
            while chunk := f.read(self.chunk_size):
                hasher.update(chunk)
                file_size += len(chunk)

        return HashResult(
            algorithm=algorithm,
            hash_hex=hasher.hexdigest(),
            file_size=file_size
        )

    def hash_bytes(
        self,
        data: bytes,
        algorithm: Optional[HashAlgorithm] = None
    ) -> HashResult:
        """Compute hash of bytes."""
        algorithm = algorithm or self.default_algorithm
        hasher = self._create_hasher(algorithm)
        hasher.update(data)

        return HashResult(
            algorithm=algorithm,
            hash_hex=hasher.hexdigest(),
            file_size=len(data)
        )

    def compare_files_by_hash(
        self,
        path1: Path | str,
        path2: Path | str,
        algorithm: Optional[HashAlgorithm] = None
    ) -> bool:
        """
        Compare two files by their hash values.

        Files of different sizes are reported different without being read.
        """
        path1, path2 = Path(path1), Path(path2)

        size1 = path1.stat().st_size
        size2 = path2.stat().st_size
        if size1 != size2:
            logging.debug(f"HashingService - Size mismatch: {path1} ({size1}) vs {path2} ({size2})")
            return False

        hash1 = self.hash_file(path1, algorithm)
        hash2 = self.hash_file(path2, algorithm)
        return hash1.matches(hash2)

    def _create_hasher(self, algorithm: HashAlgorithm):
        """Create a hasher for the given algorithm."""
        if algorithm == HashAlgorithm.MD5:
            return hashlib.md5()
        elif algorithm == HashAlgorithm.SHA256:
            return hashlib.sha256()
        elif algorithm == HashAlgorithm.XXH64:
            return xxhash.xxh64()
        else:
            raise ValueError(f"Unknown algorithm: {algorithm}")
