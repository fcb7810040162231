"""FastAPI dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from labour_cost.calculators.types import StaffRole
from labour_cost.calculators.visibility import check_access
from labour_cost.config import Settings, get_settings


async def get_caller_role(
    x_user_role: Annotated[str | None, Header()] = None
) -> StaffRole:
    """Extract the caller's organization role from header.

    A missing header is an unauthenticated request. Roles other than
    MANAGER and ADMIN raise AccessDenied, which the app maps to 403.
    """
    if not x_user_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-Role header is required",
        )
    return check_access(x_user_role.strip().upper())


# Type aliases for cleaner dependency injection
CallerRole = Annotated[StaffRole, Depends(get_caller_role)]
AppSettings = Annotated[Settings, Depends(get_settings)]
