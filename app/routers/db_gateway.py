from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.resume import GatewayRequest, GatewayResponse
from app.services.db_gateway import dispatch

router = APIRouter()


@router.post("/db", response_model=GatewayResponse)
def run_action(
    payload: GatewayRequest,
    db: Session = Depends(get_db),
):
    """
    Named-action persistence endpoint used by trusted callers. Params carry
    their own user ids, so this route is not scoped to the X-User-Id header.
    """
    return GatewayResponse(success=True, data=dispatch(db, payload.action, payload.params))
