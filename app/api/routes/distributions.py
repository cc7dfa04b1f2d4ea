"""Distribution routes — save, list and email money distributions.

POST /send-distribution-email keeps its flat error contract: a missing
field is ``400 {"error": "Missing required data."}`` and any failed
delivery is ``500 {"error": "Failed to send emails."}``.  Per-friend
failure detail only reaches the logs.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_dispatcher
from app.db.models import DistributionRecord
from app.db.repositories import DistributionRepository
from app.distribution.dispatcher import DistributionDispatcher
from app.distribution.exceptions import ValidationError
from app.distribution.models import Distribution, Payment

logger = logging.getLogger(__name__)

router = APIRouter(tags=["distributions"])


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

class PaymentBody(BaseModel):
    description: str = ""
    amount: Decimal = Field(ge=0)
    paid: bool = False


class SaveDistributionBody(BaseModel):
    user_id: UUID
    amount: Decimal | None = None
    friends: list[str] | None = None
    spender: str | None = None
    description: str | None = None
    distribution: dict | None = None


class SendDistributionEmailBody(BaseModel):
    friends: list[str] | None = None
    friendEmails: list[str] | None = None
    distribution: dict[str, dict[str, list[PaymentBody]]] | None = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _serialize_record(record: DistributionRecord) -> dict:
    return {
        "id": str(record.id),
        "user_id": str(record.user_id),
        "amount": float(record.amount) if record.amount is not None else None,
        "friends": record.friends or [],
        "spender": record.spender,
        "description": record.description,
        "distribution": record.distribution or {},
        "created_at": record.created_at.isoformat() if record.created_at else None,
    }


def _to_distribution(
    raw: dict[str, dict[str, list[PaymentBody]]] | None,
) -> Distribution | None:
    if raw is None:
        return None
    return {
        friend: {
            spender: [
                Payment(description=p.description, amount=p.amount, paid=p.paid)
                for p in payments
            ]
            for spender, payments in ledger.items()
        }
        for friend, ledger in raw.items()
    }


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.post("/distribution", summary="Save a distribution record")
def save_distribution(body: SaveDistributionBody, db: Session = Depends(get_db)):
    try:
        record = DistributionRepository(db).create(
            user_id=body.user_id,
            amount=body.amount,
            friends=body.friends,
            spender=body.spender,
            description=body.description,
            distribution=body.distribution,
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to save distribution")
        return JSONResponse(status_code=500, content={"error": "Failed to save distribution"})
    logger.info("Saved distribution %s", record.id)
    return {"message": "Distribution saved successfully"}


@router.get("/distributions/{user_id}", summary="List a user's distributions")
def list_distributions(user_id: UUID, db: Session = Depends(get_db)):
    return [_serialize_record(r) for r in DistributionRepository(db).list_for_user(user_id)]


@router.post("/send-distribution-email", summary="Email each friend their distribution")
async def send_distribution_email(
    body: SendDistributionEmailBody,
    dispatcher: DistributionDispatcher = Depends(get_dispatcher),
):
    try:
        result = await dispatcher.dispatch(
            body.friends,
            body.friendEmails,
            _to_distribution(body.distribution),
        )
    except ValidationError as exc:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    if not result.succeeded:
        failed = ", ".join(o.friend_name for o in result.failed_tasks)
        logger.error("Failed to send emails for: %s", failed)
        return JSONResponse(status_code=500, content={"error": "Failed to send emails."})
    return {"message": "Emails sent successfully."}
