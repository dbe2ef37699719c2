"""Vector to bytes encoding for Redis hash fields.

RediSearch reads FLOAT32 vector fields as packed little-endian IEEE-754
values, so every vector written or queried goes through ``encode_vector``.
"""

from collections.abc import Sequence

import numpy as np

VECTOR_DTYPE = np.dtype("<f4")


def encode_vector(components: Sequence[float]) -> bytes:
    """Pack float components into ``4 * len(components)`` bytes.

    Dimension is not checked here; the store rejects mismatched sizes.
    """
    return np.asarray(components, dtype=VECTOR_DTYPE).tobytes()


def decode_vector(blob: bytes) -> list[float]:
    """Unpack bytes produced by ``encode_vector``.

    Raises:
        ValueError: If the blob length is not a multiple of 4.
    """
    if len(blob) % VECTOR_DTYPE.itemsize:
        raise ValueError(
            f"vector blob length {len(blob)} is not a multiple of "
            f"{VECTOR_DTYPE.itemsize}"
        )
    return np.frombuffer(blob, dtype=VECTOR_DTYPE).tolist()
