"""
Admin Module - Routes
======================
Navigation and dashboard endpoints for the back-office shell.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from modules.admin.console import AdminConsole
from modules.admin.deps import get_console

router = APIRouter(tags=["admin"])


@router.get("/admin/navigation")
async def admin_navigation(
    active: Optional[str] = Query(None),
    console: AdminConsole = Depends(get_console),
):
    """Visible sections, the (corrected) active section and per-section action flags."""
    if active:
        console.select_section(active)
    permissions = console.permissions
    role = permissions.role
    return {
        "sections": console.navigation(),
        "active_section": console.active_section,
        "actions": console.section_actions(),
        "role": role.to_dict() if role else None,
        "show_all": permissions.show_all,
    }


@router.get("/admin/dashboard/api/stats")
async def dashboard_stats_api(console: AdminConsole = Depends(get_console)):
    """JSON API for dashboard stats (for AJAX refresh)."""
    return console.stats()
