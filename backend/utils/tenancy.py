from typing import Optional

from fastapi import Header, HTTPException

SYSTEM_USER = "system"

def get_tenant_id(x_tenant_id: str = Header(...)) -> str:
    if not x_tenant_id or not x_tenant_id.strip():
        raise HTTPException(status_code=400, detail="X-Tenant-ID header is missing")
    return x_tenant_id.strip()

def get_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """Actor recorded in audit fields. Authentication happens upstream."""
    if x_user_id and x_user_id.strip():
        return x_user_id.strip()
    return SYSTEM_USER
