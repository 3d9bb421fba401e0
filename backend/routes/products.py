# backend/routes/products.py
import random
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from sqlalchemy.orm import Session, joinedload

from database import get_db
from models.category import Category
from models.product import Product
from models.stock import Stock, Transaction
from models.users import User
from utils.tokenJWT import get_current_user
from utils.audit import write_log, client_ip
from utils.images import read_image
from utils.response import respond_success
from schemas.common import ApiResponse
from schemas.product import ProductOut, ProductPatch

router = APIRouter(prefix="/products", tags=["Products"])


# ---- HELPERS ----
def generate_sku() -> str:
    """SKU-<UTC yyyymmddHHMMSS>-<000..999>"""
    ts = datetime.utcnow().strftime("%Y%m%d%H%M%S")
    return f"SKU-{ts}-{random.randint(0, 999):03d}"


def _unique_sku(db: Session) -> str:
    for _ in range(10):
        sku = generate_sku()
        if not db.query(Product.id).filter(Product.sku == sku).first():
            return sku
    raise HTTPException(status_code=500, detail="Could not generate a unique SKU")


def _parse_category_id(value: Optional[str]) -> Optional[int]:
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError:
        raise HTTPException(status_code=400, detail="category_id must be a number")


def _parse_price(value: Optional[str]) -> Optional[Decimal]:
    if value is None or not value.strip():
        return None
    try:
        price = Decimal(value.strip())
    except InvalidOperation:
        raise HTTPException(status_code=400, detail="price must be a number")
    if not price.is_finite() or price < 0:
        raise HTTPException(status_code=400, detail="price must be >= 0")
    return price


def _check_category(db: Session, category_id: Optional[int]):
    if category_id is not None and not db.query(Category.id).filter(Category.id == category_id).first():
        raise HTTPException(status_code=404, detail="Category not found")


def _serialize(p: Product) -> ProductOut:
    return ProductOut(
        id=p.id,
        name=p.name,
        category_id=p.category_id,
        category=p.category.name if p.category else None,
        sku=p.sku,
        brand=p.brand,
        price=p.price,
        quantity=p.stock.quantity if p.stock else 0,
        image=p.image,
        created_at=p.created_at,
    )


def _get_or_404(db: Session, product_id: int) -> Product:
    product = (
        db.query(Product)
        .options(joinedload(Product.category), joinedload(Product.stock))
        .filter(Product.id == product_id)
        .first()
    )
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


# =========================
# LIST
# =========================
@router.get("", response_model=ApiResponse[List[ProductOut]])
def list_products(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    products = (
        db.query(Product)
        .options(joinedload(Product.category), joinedload(Product.stock))
        .order_by(Product.id.desc())
        .all()
    )
    return respond_success([_serialize(p) for p in products], "Products fetched successfully")


# =========================
# DETAIL
# =========================
@router.get("/detail/{product_id}", response_model=ApiResponse[ProductOut])
def get_product(product_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return respond_success(_serialize(_get_or_404(db, product_id)), "Product fetched successfully")


# =========================
# CREATE
# =========================
@router.post("/create", response_model=ApiResponse[ProductOut])
def create_product(
    request: Request,
    name: str = Form(...),
    category_id: Optional[str] = Form(None),
    brand: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    name = name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="name is required")

    cat_id = _parse_category_id(category_id)
    _check_category(db, cat_id)
    price_value = _parse_price(price)
    image_bytes = read_image(image)

    product = Product(
        name=name,
        category_id=cat_id,
        sku=_unique_sku(db),
        brand=brand,
        price=price_value if price_value is not None else Decimal("0"),
        image=image_bytes,
    )
    # Every product starts with an empty stock row; quantities only change through movements
    product.stock = Stock(quantity=0, updated_at=datetime.utcnow())

    db.add(product)
    db.commit()

    write_log(db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
              status="SUCCESS", ip=client_ip(request), meta={"id": product.id, "sku": product.sku})

    return respond_success(_serialize(_get_or_404(db, product.id)), "Product created successfully")


# =========================
# PARTIAL UPDATE
# =========================
@router.patch("/update/{product_id}", response_model=ApiResponse[ProductOut])
def update_product(
    product_id: int,
    request: Request,
    name: Optional[str] = Form(None),
    category_id: Optional[str] = Form(None),
    brand: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product = _get_or_404(db, product_id)

    patch = ProductPatch(
        name=(name or "").strip() or None,
        category_id=_parse_category_id(category_id),
        brand=(brand or "").strip() or None,
        price=_parse_price(price),
        image=read_image(image),
    )
    changes = patch.model_dump(exclude_none=True)
    if not changes:
        raise HTTPException(status_code=400, detail="no fields to update")
    _check_category(db, patch.category_id)

    for key, value in changes.items():
        setattr(product, key, value)
    db.commit()

    write_log(db, user_id=current_user.id, action="PRODUCT_UPDATE", resource="products",
              status="SUCCESS", ip=client_ip(request), meta={"id": product_id, "fields": sorted(changes)})

    return respond_success(_serialize(_get_or_404(db, product_id)), "Product updated successfully")


# =========================
# DELETE
# =========================
@router.delete("/delete/{product_id}", response_model=ApiResponse[dict])
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product = _get_or_404(db, product_id)

    # The ledger is append-only, so products with history stay
    if db.query(Transaction.id).filter(Transaction.product_id == product.id).first():
        raise HTTPException(status_code=409, detail="Cannot delete product with recorded transactions")

    db.delete(product)
    db.commit()

    write_log(db, user_id=current_user.id, action="PRODUCT_DELETE", resource="products",
              status="SUCCESS", ip=client_ip(request), meta={"id": product_id})
    return respond_success({"id": product_id}, "Product deleted successfully")
