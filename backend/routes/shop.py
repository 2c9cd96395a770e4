# backend/routes/shop.py
from typing import List, Literal
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database import get_db
from models.product import Product
from schemas.cart import CartProduct
from schemas.product import ProductListPage

router = APIRouter(
    prefix="/shop",
    tags=["Shop"]
)

@router.get("/products", response_model=ProductListPage)
def list_products_for_shop(
    page: int = Query(1, ge=1),
    page_size: int = Query(12, ge=1, le=100),
    sort_by: Literal["name", "price", "stock"] = "name",
    order: Literal["asc", "desc"] = "asc",
    db: Session = Depends(get_db),
):
    query = db.query(Product).filter(Product.stock > 0) # Filter only available products

    # Configure sorting logic
    allowed = {
        "name": Product.name,
        "price": Product.price,
        "stock": Product.stock,
    }
    sort_col = allowed.get(sort_by, Product.name)
    if order == "desc":
        query = query.order_by(sort_col.desc())
    else:
        query = query.order_by(sort_col.asc())

    total = query.count()
    items: List[Product] = query.offset((page - 1) * page_size).limit(page_size).all()

    return {"items": items, "total": total, "page": page, "page_size": page_size}

# Snapshot used when a guest puts the product into a local cart or wishlist
@router.get("/products/{product_id}", response_model=CartProduct)
def get_product_snapshot(product_id: str, db: Session = Depends(get_db)):
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
