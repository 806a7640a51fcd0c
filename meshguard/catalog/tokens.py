"""
meshguard/catalog/tokens.py

Bearer tokens used as fixtures. The harness never issues or validates tokens;
it loads pre-signed ones from a JSON file or MESHGUARD_TOKEN_* variables.

File format:
    {"issuer1": "<jwt>", "issuer2": "<jwt>", "expired": "<jwt>", "invalid": "<anything>"}
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from meshguard.errors import ConfigError, ErrorCode

logger = logging.getLogger(__name__)

_ENV_PREFIX = "MESHGUARD_TOKEN_"


def payload_segment(token: str) -> str:
    """Return the base64url payload segment (the middle part) of a compact JWT."""
    parts = token.split(".")
    if len(parts) != 3:
        raise ValueError("token is not a three-segment JWT")
    return parts[1]


class TokenSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    issuer1: str
    issuer2: str
    expired: str
    # Deliberately malformed; any string is accepted
    invalid: str = "invalid-token"

    @field_validator("issuer1", "issuer2", "expired")
    @classmethod
    def validate_jwt(cls, v: str) -> str:
        v = v.strip()
        payload_segment(v)
        return v

    def payload(self, token: str) -> str:
        return payload_segment(token)

    @classmethod
    def from_file(cls, path: str) -> "TokenSet":
        file_path = Path(path).expanduser()
        try:
            data = json.loads(file_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raise ConfigError(
                f"Token file not found: {file_path}",
                code=ErrorCode.CONFIG_MISSING_REQUIRED,
            ) from None
        except json.JSONDecodeError as e:
            raise ConfigError(f"Token file {file_path} is not valid JSON: {e}") from e
        return cls._validated(data, source=str(file_path))

    @classmethod
    def from_env(cls) -> "TokenSet":
        data = {}
        for key in ("issuer1", "issuer2", "expired", "invalid"):
            value = os.getenv(_ENV_PREFIX + key.upper())
            if value:
                data[key] = value
        return cls._validated(data, source="environment")

    @classmethod
    def load(cls, path: Optional[str] = None) -> "TokenSet":
        if path:
            return cls.from_file(path)
        return cls.from_env()

    @classmethod
    def _validated(cls, data: dict, source: str) -> "TokenSet":
        try:
            tokens = cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(
                f"Invalid fixture tokens from {source}",
                details={"errors": [err["msg"] for err in e.errors()]},
                code=ErrorCode.CONFIG_MISSING_REQUIRED,
            ) from e
        logger.debug("Loaded fixture tokens from %s", source)
        return tokens
