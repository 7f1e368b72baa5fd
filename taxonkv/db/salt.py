"""Salted row keys for the range-partitioned match table.

Rows of the backing table are stored in key order, so sequential or similar
logical keys would all land in the same region. Prefixing each key with a
hash-derived bucket spreads them across the key space while keeping each
bucket contiguous and scannable on its own.

The bucket count is baked into every stored key. Once a table holds data its
bucket count must not change; keys computed with a different count will not
be found.

"""

import hashlib
from dataclasses import dataclass


def stable_hash(key: bytes) -> int:
    """Hash that is stable across processes and Python versions (unlike hash())."""
    return int.from_bytes(hashlib.sha256(key).digest()[:8], "big")


def _to_bytes(key: str | bytes) -> bytes:
    if isinstance(key, str):
        return key.encode("utf-8")
    return key


@dataclass(frozen=True)
class SaltedKeyGenerator:
    num_of_buckets: int

    def __post_init__(self) -> None:
        if self.num_of_buckets <= 0:
            raise ValueError(
                f"number of buckets must be positive, got {self.num_of_buckets}"
            )

    @property
    def padding(self) -> int:
        return len(str(self.num_of_buckets))

    def bucket_of(self, logical_key: str | bytes) -> int:
        return stable_hash(_to_bytes(logical_key)) % self.num_of_buckets

    def prefix(self, bucket: int) -> bytes:
        return str(bucket).zfill(self.padding).encode("ascii")

    def bucket_prefixes(self) -> list[bytes]:
        return [self.prefix(bucket) for bucket in range(self.num_of_buckets)]

    def compute_key(self, logical_key: str | bytes) -> bytes:
        key = _to_bytes(logical_key)
        return self.prefix(self.bucket_of(key)) + key

    def logical_key_of(self, salted_key: bytes) -> bytes:
        return salted_key[self.padding :]
