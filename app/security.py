from typing import Optional

from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader

from app.settings import get_settings

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def require_api_key(key: Optional[str] = Security(api_key_header)) -> None:
    """
    Simple API key check using X-API-Key header and configured API keys.

    - Settings.api_keys_raw is a comma-separated list of keys.
    - If api_keys_raw is empty -> auth disabled (dev mode).
    """
    allowed = get_settings().api_keys
    if not allowed:
        return
    if not key or key not in allowed:
        raise HTTPException(status_code=401, detail="invalid API key")
