import hashlib


class HashingService:
    """Hashing helpers for secrets that must be looked up by their hash."""

    @staticmethod
    def hash_api_key(plain_key: str) -> str:
        """
        Hash an API key with SHA-256.

        The digest is deterministic so the stored hash doubles as the lookup
        key; API keys carry enough entropy that a salt adds nothing.

        Args:
            plain_key: The plain text API key to hash

        Returns:
            The hex digest of the key
        """
        return hashlib.sha256(plain_key.encode("utf-8")).hexdigest()

    @staticmethod
    def mask_api_key(plain_key: str) -> str:
        """Return a display-safe form of a key: its last six characters."""
        return f"...{plain_key[-6:]}" if len(plain_key) > 6 else plain_key
