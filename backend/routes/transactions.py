# backend/routes/transactions.py
from fastapi import APIRouter, Depends, Form, Query, Request
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from models.users import User
from services.exceptions import InvalidMovementError, MovementError
from services.movements import apply_movement, list_movements, parse_day
from utils.tokenJWT import get_current_user
from utils.audit import write_log, client_ip
from utils.response import respond_success
from schemas.common import ApiResponse
import schemas.stock as stock_schemas

router = APIRouter(prefix="/transactions", tags=["Transactions"])


# Form values arrive as text; anything unparsable becomes 0 and fails validation
def _to_int(value: Optional[str]) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return 0


@router.post("/create", response_model=ApiResponse[stock_schemas.TransactionCreated])
def create_transaction(
    request: Request,
    product_id: Optional[str] = Form(None),
    user_id: Optional[str] = Form(None),
    quantity: Optional[str] = Form(None),
    move_type: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    caller_id = current_user.id

    # The acting user defaults to the authenticated caller
    if user_id is None or not user_id.strip():
        actor_id = caller_id
    else:
        actor_id = _to_int(user_id)
        if actor_id <= 0:
            raise InvalidMovementError()

    pid = _to_int(product_id)
    qty = _to_int(quantity)
    try:
        result = apply_movement(db, pid, actor_id, qty, move_type)
    except MovementError as e:
        write_log(db, user_id=caller_id, action="STOCK_MOVEMENT", resource="transactions", status="FAIL",
                  ip=client_ip(request), meta={"product_id": pid, "quantity": qty, "move_type": move_type,
                                               "reason": e.message})
        raise

    write_log(db, user_id=caller_id, action="STOCK_MOVEMENT", resource="transactions", status="SUCCESS",
              ip=client_ip(request), meta={"id": result.id, "product_id": pid, "move_type": result.move_type})

    return respond_success(stock_schemas.TransactionCreated.model_validate(result), "Transaction created successfully")


@router.get("", response_model=ApiResponse[List[stock_schemas.TransactionOut]])
def get_transactions(
    start_date: Optional[str] = Query(None, description="Start date (YYYY-MM-DD)"),
    end_date: Optional[str] = Query(None, description="End date (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    start = parse_day(start_date, "start_date")
    end = parse_day(end_date, "end_date")

    items = list_movements(db, start, end)
    data = [stock_schemas.TransactionOut.model_validate(m) for m in items]
    return respond_success(data, "Transactions fetched successfully")
