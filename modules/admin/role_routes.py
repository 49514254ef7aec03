"""
Admin Module - Role Management Routes
=======================================
CRUD for staff roles and the capability catalog used by the role editor.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from modules.admin.console import AdminConsole
from modules.admin.deps import get_console

router = APIRouter(tags=["role-admin"])


# ==========================================
# Schemas
# ==========================================

class RoleCreate(BaseModel):
    name: str = Field("", max_length=100)
    description: str = Field("", max_length=500)
    color: Optional[str] = Field(None, max_length=20)
    capability_ids: List[str] = Field(default_factory=list)


class RolePatch(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    color: Optional[str] = Field(None, max_length=20)
    capability_ids: Optional[List[str]] = None


# ==========================================
# Routes
# ==========================================

@router.get("/admin/roles")
async def list_roles(console: AdminConsole = Depends(get_console)):
    roles = console.list_roles()
    return {"total": len(roles), "roles": [r.to_dict() for r in roles]}


@router.get("/admin/roles/capabilities")
async def capability_catalog(console: AdminConsole = Depends(get_console)):
    return {"modules": console.capability_catalog()}


@router.post("/admin/roles", status_code=status.HTTP_201_CREATED)
async def create_role(body: RoleCreate, console: AdminConsole = Depends(get_console)):
    role = console.create_role(body.name, body.description, body.color, body.capability_ids)
    return role.to_dict()


@router.patch("/admin/roles/{role_id}")
async def update_role(role_id: str, body: RolePatch, console: AdminConsole = Depends(get_console)):
    role = console.update_role(role_id, body.model_dump(exclude_none=True))
    return role.to_dict()


@router.delete("/admin/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role(role_id: str, console: AdminConsole = Depends(get_console)):
    """Delete a role (the UI has already asked for confirmation). Assigned staff keep the stale role id."""
    console.delete_role(role_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
