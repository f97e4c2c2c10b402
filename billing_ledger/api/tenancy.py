"""
Tenant resolution for API requests.

Authentication happens in front of this service; the gateway
forwards the caller's tenant in the X-Tenant-Id header.
"""

from fastapi import Header


def get_tenant_id(x_tenant_id: int = Header(gt=0)) -> int:
    """Tenant the current request acts on."""
    return x_tenant_id
