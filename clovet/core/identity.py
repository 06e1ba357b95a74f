from fastapi import Header, HTTPException


async def resolve_user_id(
    x_user_id: str | None = Header(default=None),
) -> str:
    """
    Dependency to resolve the calling user from request headers.
    - Session handling lives in front of this service; it forwards the
      authenticated id as 'X-User-Id'.
    - Missing or blank header is rejected with 401.
    """
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return user_id


async def optional_user_id(
    x_user_id: str | None = Header(default=None),
) -> str | None:
    """Same header, for endpoints that also serve anonymous callers."""
    return (x_user_id or "").strip() or None
