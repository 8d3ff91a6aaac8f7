"""
Embedding vector validation.

Every vector is checked here before it is returned by the embedding
client or written by the index store.

Dependencies: numpy, doclib.core.exceptions
System role: Guard on the embedding write and query paths
"""

from collections.abc import Sequence

import numpy as np

from doclib.core.exceptions import ValidationError


def validate_embedding(vector: Sequence[float], dimension: int) -> list[float]:
    """
    Validate an embedding vector.

    Args:
        vector: Candidate embedding
        dimension: Expected number of components

    Returns:
        list[float]: The vector as plain floats

    Raises:
        ValidationError: Empty, wrong dimension, non-numeric or non-finite
    """
    if vector is None or len(vector) == 0:
        raise ValidationError("Embedding is empty", field="embedding")

    if len(vector) != dimension:
        raise ValidationError(
            f"Embedding dimension {len(vector)} does not match expected {dimension}",
            field="embedding",
            details={"expected": dimension, "actual": len(vector)},
        )

    try:
        array = np.asarray(vector, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise ValidationError("Embedding contains non-numeric values", field="embedding") from e

    if not np.isfinite(array).all():
        bad = int(np.flatnonzero(~np.isfinite(array))[0])
        raise ValidationError(
            "Embedding contains non-finite values",
            field="embedding",
            details={"index": bad},
        )

    # Values past the float32 range would be stored as inf
    if np.abs(array).max() > np.finfo(np.float32).max:
        raise ValidationError("Embedding value exceeds float32 range", field="embedding")

    return array.tolist()


def is_valid_blob(blob: bytes, dimension: int) -> bool:
    """
    Check a stored float32 blob.

    Args:
        blob: Raw bytes from the embeddings table
        dimension: Expected number of components

    Returns:
        bool: False for wrong byte length, zero vector or non-finite values
    """
    if blob is None or len(blob) != dimension * 4:
        return False
    array = np.frombuffer(blob, dtype="<f4")
    return bool(np.isfinite(array).all() and np.any(array != 0.0))
