# backend/routes/categories.py
from fastapi import APIRouter, Depends, Form, HTTPException, Request
from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from models.category import Category
from models.product import Product
from models.users import User
from utils.tokenJWT import get_current_user
from utils.audit import write_log, client_ip
from utils.response import respond_success
from schemas.common import ApiResponse
from schemas.category import CategoryOut, CategoryPatch

router = APIRouter(prefix="/categories", tags=["Categories"])


# Case- and whitespace-insensitive duplicate check
def _name_taken(db: Session, name: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(Category).filter(func.lower(func.trim(Category.name)) == name.strip().lower())
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    return query.first() is not None


def _get_or_404(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.get("", response_model=ApiResponse[List[CategoryOut]])
def list_categories(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    categories = db.query(Category).order_by(Category.id.desc()).all()
    return respond_success([CategoryOut.model_validate(c) for c in categories], "Categories fetched successfully")


@router.post("/create", response_model=ApiResponse[CategoryOut])
def create_category(
    request: Request,
    name: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    name = (name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="name is required")
    if _name_taken(db, name):
        raise HTTPException(status_code=409, detail=f"{name} is already registered")

    category = Category(name=name)
    db.add(category)
    db.commit()
    db.refresh(category)

    write_log(db, user_id=current_user.id, action="CATEGORY_CREATE", resource="categories",
              status="SUCCESS", ip=client_ip(request), meta={"id": category.id})
    return respond_success(CategoryOut.model_validate(category), "Category created successfully")


@router.put("/update/{category_id}", response_model=ApiResponse[CategoryOut])
def update_category(
    category_id: int,
    request: Request,
    name: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    category = _get_or_404(db, category_id)

    patch = CategoryPatch(name=(name or "").strip() or None)
    changes = patch.model_dump(exclude_none=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")
    if _name_taken(db, patch.name, exclude_id=category.id):
        raise HTTPException(status_code=409, detail="Category with this name exists")

    for key, value in changes.items():
        setattr(category, key, value)
    db.commit()
    db.refresh(category)

    write_log(db, user_id=current_user.id, action="CATEGORY_UPDATE", resource="categories",
              status="SUCCESS", ip=client_ip(request), meta={"id": category.id})
    return respond_success(CategoryOut.model_validate(category), "Category updated successfully")


@router.delete("/delete/{category_id}", response_model=ApiResponse[dict])
def delete_category(
    category_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    category = _get_or_404(db, category_id)

    in_use = db.query(Product.id).filter(Product.category_id == category.id).first()
    if in_use:
        raise HTTPException(status_code=409, detail="Cannot delete category, products with this category exist")

    db.delete(category)
    db.commit()

    write_log(db, user_id=current_user.id, action="CATEGORY_DELETE", resource="categories",
              status="SUCCESS", ip=client_ip(request), meta={"id": category_id})
    return respond_success({"id": category_id}, "Category deleted successfully")
