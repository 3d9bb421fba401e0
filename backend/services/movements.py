# backend/services/movements.py
"""Stock movements: the only code path that changes a product's quantity.

apply_movement() locks the product's stock row, applies the signed delta and
appends the ledger entry in one database transaction. Concurrent movements on
the same product queue up on the row lock, so no update is lost and the
quantity never drops below zero. Movements on different products lock
different rows and do not wait for each other.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.product import Product
from models.stock import MoveType, Stock, Transaction
from models.users import User
from services.exceptions import (
    InsufficientStockError,
    InvalidMovementError,
    MovementError,
    MovementFailedError,
    StockNotFoundError,
)

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"

# Upper bound of the integer quantity columns
MAX_QUANTITY = 2**31 - 1


@dataclass(frozen=True)
class MovementResult:
    id: int
    product_id: int
    user_id: int
    quantity: int
    move_type: str
    stock_quantity: int
    created_at: datetime


@dataclass(frozen=True)
class MovementView:
    id: int
    product_id: int
    product_name: Optional[str]
    sku: Optional[str]
    user_id: int
    user_name: Optional[str]
    quantity: int
    move_type: str
    created_at: datetime


def validate_movement(product_id: int, quantity: int, move_type: str) -> MoveType:
    """Check a movement request without touching the database.

    Checks run in a fixed order: product id, quantity (1..MAX_QUANTITY),
    move type.
    """
    if not product_id:
        raise InvalidMovementError()
    if quantity is None or quantity <= 0 or quantity > MAX_QUANTITY:
        raise InvalidMovementError()
    try:
        return MoveType((move_type or "").strip().upper())
    except ValueError:
        raise InvalidMovementError()


def apply_movement(db: Session, product_id: int, user_id: int, quantity: int, move_type: str) -> MovementResult:
    kind = validate_movement(product_id, quantity, move_type)

    # Discard whatever the session holds (the read left by the auth lookup,
    # unflushed edits) so only the stock row and ledger entry are committed.
    if db.in_transaction() or db.new or db.dirty or db.deleted:
        db.rollback()

    try:
        stock = db.execute(
            select(Stock)
            .where(Stock.product_id == product_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

        if stock is None:
            raise StockNotFoundError()

        current = stock.quantity
        if kind is MoveType.OUT:
            new_quantity = current - quantity
            if new_quantity < 0:
                raise InsufficientStockError()
        else:
            new_quantity = current + quantity
            if new_quantity > MAX_QUANTITY:
                raise InvalidMovementError("Stock quantity would exceed the maximum")

        now = datetime.utcnow()
        stock.quantity = new_quantity
        stock.updated_at = now
        db.flush()

        movement = Transaction(
            product_id=product_id,
            user_id=user_id,
            quantity=quantity,
            move_type=kind,
            created_at=now,
        )
        db.add(movement)
        db.flush()

        result = MovementResult(
            id=movement.id,
            product_id=product_id,
            user_id=user_id,
            quantity=quantity,
            move_type=kind.value,
            stock_quantity=new_quantity,
            created_at=now,
        )
        db.commit()
    except MovementError as e:
        db.rollback()
        logger.warning("Stock movement rejected: product=%s type=%s qty=%s reason=%s",
                       product_id, kind.value, quantity, e.message)
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Stock movement rolled back: product=%s type=%s qty=%s", product_id, kind.value, quantity)
        raise MovementFailedError() from e

    logger.info("Stock movement %s committed: product=%s type=%s qty=%s stock=%s -> %s",
                result.id, product_id, result.move_type, quantity, current, new_quantity)
    return result


def parse_day(value: Optional[str], field: str) -> Optional[date]:
    if not value:
        return None
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        raise InvalidMovementError(f"{field} must be in YYYY-MM-DD format")


def list_movements(db: Session, start_date: Optional[date] = None, end_date: Optional[date] = None) -> List[MovementView]:
    """Return movements newest first, optionally limited to an inclusive day range."""
    query = (
        db.query(Transaction, Product.name, Product.sku, User.name)
        .outerjoin(Product, Product.id == Transaction.product_id)
        .outerjoin(User, User.id == Transaction.user_id)
    )

    if start_date:
        query = query.filter(Transaction.created_at >= datetime.combine(start_date, time.min))
    if end_date:
        query = query.filter(Transaction.created_at < datetime.combine(end_date + timedelta(days=1), time.min))

    query = query.order_by(Transaction.created_at.desc(), Transaction.id.desc())

    return [
        MovementView(
            id=t.id,
            product_id=t.product_id,
            product_name=product_name,
            sku=sku,
            user_id=t.user_id,
            user_name=user_name,
            quantity=t.quantity,
            move_type=t.move_type.value,
            created_at=t.created_at,
        )
        for t, product_name, sku, user_name in query.all()
    ]
