from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.schemas.vat import GreetingOut
from app.services.greeting_service import GreetingService, build_counter_store

router = APIRouter()


@router.get("/{tenant_id}/greeting", response_model=GreetingOut)
def next_greeting(
    tenant_id: Annotated[str, Path(min_length=1, max_length=64)],
    db: Annotated[Session, Depends(get_db)],
):
    """Next rotating order confirmation greeting for the tenant."""
    greeting = GreetingService(build_counter_store(db)).next_greeting(tenant_id)
    return GreetingOut(
        tenant_id=tenant_id,
        index=greeting.index,
        message=greeting.message,
        source=greeting.source,
    )
