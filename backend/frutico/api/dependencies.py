import hmac
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status

from ..core.context import AppContext


def get_context(request: Request) -> AppContext:
    ctx = getattr(request.app.state, "context", None)
    if ctx is None:
        # Startup has not run (or shutdown already did)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Service starting")
    return ctx


def get_db(ctx: AppContext = Depends(get_context)):
    db = ctx.session_factory()
    try:
        yield db
    finally:
        db.close()


def require_staff(
    x_staff_token: Optional[str] = Header(default=None, alias="X-Staff-Token", convert_underscores=False),
    ctx: AppContext = Depends(get_context),
) -> None:
    """Gate counter-only actions behind the shared staff token."""
    expected = ctx.settings.STAFF_REDEEM_TOKEN
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Ticket redemption is not enabled",
        )
    if not x_staff_token or not hmac.compare_digest(x_staff_token.encode("utf-8"), expected.encode("utf-8")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate staff credentials",
        )
