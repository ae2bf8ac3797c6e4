"""Hashing of household financial data before it reaches the logs."""
import hashlib
import json
import os
from typing import Any, Dict, Optional, Union

# Request fields that describe a household's finances or whereabouts
SENSITIVE_FIELD_NAMES = (
    "household_income",
    "income",
    "family_size",
    "employment_status",
    "zip_code",
    "ai_query",
    "location",
    "insurance",
    "user_profile",
)

# Deterministic hashing with a salt so equal inputs can be correlated in
# the audit trail without being readable
_HASH_SALT = os.getenv("AUDIT_HASH_SALT", "default-salt-change-in-production")


def hash_value(value: Any, salt: Optional[str] = None) -> str:
    """
    SHA-256 of a normalized value (trimmed, lower-cased) with a salt.

    Returns "" for None or blank values.
    """
    if value is None:
        return ""

    normalized = str(value).strip().lower()
    if not normalized:
        return ""

    hash_input = f"{salt or _HASH_SALT}:{normalized}"
    return hashlib.sha256(hash_input.encode("utf-8")).hexdigest()


def is_sensitive_field(key: str) -> bool:
    key_lower = key.lower()
    return any(name in key_lower for name in SENSITIVE_FIELD_NAMES)


def extract_and_hash_fields(data: Dict[str, Any], max_depth: int = 5) -> Dict[str, str]:
    """
    Hash every sensitive field in ``data``.

    Nested dictionaries are walked and their keys prefixed with the parent
    key, e.g. ``{"user_profile.zip_code": "ab12..."}``.
    """
    if max_depth <= 0:
        return {}

    hashed: Dict[str, str] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            for nested_key, nested_hash in extract_and_hash_fields(value, max_depth - 1).items():
                hashed[f"{key}.{nested_key}"] = nested_hash
        elif is_sensitive_field(key) and value is not None:
            digest = hash_value(value)
            if digest:
                hashed[key] = digest
    return hashed


def create_audit_identifier(data: Union[Dict[str, Any], str, bytes, None]) -> Optional[str]:
    """
    One hash standing for a whole request body.

    Deterministic, so identical requests share an identifier. Returns None
    when there is nothing to hash.
    """
    if data is None:
        return None

    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(data, str):
        if not data.strip():
            return None
        try:
            data = json.loads(data)
        except json.JSONDecodeError:
            return hash_value(data)

    return hash_value(json.dumps(data, sort_keys=True, default=str))
