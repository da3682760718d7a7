"""
Content hashing for cache-busting polyfill file names.
"""

import hashlib
import logging
from typing import Union

logger = logging.getLogger(__name__)

DEFAULT_HASH_ALGORITHM = "md5"


def compute_content_hash(
    content: Union[str, bytes], algorithm: str = DEFAULT_HASH_ALGORITHM
) -> str:
    """
    Compute hash of in-memory content.

    The digest is only used to version file names, so md5 is fine here.

    Args:
        content: Text (encoded as UTF-8) or raw bytes
        algorithm: Any algorithm name accepted by hashlib.new

    Returns:
        Hex digest of the content

    Raises:
        ValueError: If algorithm is not supported

    Example:
        >>> compute_content_hash("console.log(1);")
        'c4a1e3b1...'
    """
    if isinstance(content, str):
        content = content.encode("utf-8")

    try:
        hasher = hashlib.new(algorithm)
    except ValueError:
        raise ValueError(f"Unsupported hash algorithm: {algorithm}")

    hasher.update(content)
    return hasher.hexdigest()


__all__ = ["DEFAULT_HASH_ALGORITHM", "compute_content_hash"]
