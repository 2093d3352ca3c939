"""
GUID service for event identifiers.

Event rows are keyed by a free-form ``uid``. Clients supply their own uid
for events they create by hand; instances produced by series expansion get
a server-generated uid so the two are easy to tell apart.

GUID Format: {prefix}_{base32_uuid}
- prefix: 3-character provenance marker (gen = server-generated instance)
- base32_uuid: 26-character Crockford Base32 encoded UUIDv7
"""

import uuid

import base32_crockford
from uuid_extensions import uuid7

# Prefix used for every uid minted by the server
SERVER_UID_PREFIX = "gen"

ENTITY_PREFIXES = {
    SERVER_UID_PREFIX: "GeneratedEvent",
}

# Upper bound shared by uid and series_id columns
MAX_IDENTIFIER_LENGTH = 255


class GuidService:
    """
    Service for GUID operations.

    Provides static methods for:
    - Generating new UUIDv7 values
    - Encoding UUIDs to GUID strings
    - Checking caller-supplied identifiers
    """

    @staticmethod
    def generate_uuid() -> uuid.UUID:
        """
        Generate a new UUIDv7 value.

        UUIDv7 is time-ordered, so uids of one expansion sort in
        creation order.

        Returns:
            New UUID object
        """
        return uuid7()

    @staticmethod
    def encode_uuid(uuid_value: uuid.UUID, prefix: str) -> str:
        """
        Encode a UUID to a GUID string.

        Args:
            uuid_value: UUID to encode
            prefix: Provenance prefix (gen)

        Returns:
            GUID string (e.g., "gen_01hgw2bbg...")

        Raises:
            ValueError: If prefix is invalid
        """
        if prefix not in ENTITY_PREFIXES:
            raise ValueError(
                f"Invalid prefix '{prefix}'. "
                f"Valid prefixes: {', '.join(ENTITY_PREFIXES.keys())}"
            )

        if isinstance(uuid_value, bytes):
            uuid_int = int.from_bytes(uuid_value, "big")
        else:
            uuid_int = int.from_bytes(uuid_value.bytes, "big")

        encoded = base32_crockford.encode(uuid_int)
        # Pad to 26 characters
        encoded = encoded.zfill(26)
        return f"{prefix}_{encoded.lower()}"

    @staticmethod
    def generate_guid(prefix: str = SERVER_UID_PREFIX) -> str:
        """
        Generate a new GUID with the specified prefix.

        Example:
            >>> uid = GuidService.generate_guid()
            >>> uid.startswith("gen_")
            True
        """
        return GuidService.encode_uuid(GuidService.generate_uuid(), prefix)

    @staticmethod
    def is_valid_identifier(identifier: str) -> bool:
        """
        Check a caller-supplied uid or series id.

        Any non-blank string up to MAX_IDENTIFIER_LENGTH characters is
        accepted; surrounding whitespace is not.
        """
        if not identifier or not isinstance(identifier, str):
            return False
        if identifier != identifier.strip():
            return False
        return len(identifier) <= MAX_IDENTIFIER_LENGTH
