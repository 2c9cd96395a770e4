# backend/routes/cart.py
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
from database import get_db
from utils.tokenJWT import get_current_user, get_optional_user
from utils.audit import write_log, client_ip
from models.users import User
from models.product import Product
from models.cart import CartItem
from schemas.cart import (
    CartAddItem, CartUpdateItem, CartDeleteItem, CartOut, CartLine, CartProduct, CartActionResult
)

router = APIRouter(prefix="/cart", tags=["Cart"])

def _line_to_out(item: CartItem) -> CartLine:
    return CartLine(
        id=str(item.id),
        product_id=item.product_id,
        quantity=item.quantity,
        size=item.size,
        color=item.color,
        product=CartProduct.model_validate(item.product) if item.product else None,
    )

def _owned_item(db: Session, user: User, item_id: str) -> CartItem:
    # Lines of other users are reported exactly like missing ones
    try:
        pk = int(item_id)
    except (TypeError, ValueError):
        pk = None
    item = None
    if pk is not None:
        item = db.query(CartItem).filter(CartItem.id == pk, CartItem.user_id == user.id).first()
    if not item:
        raise HTTPException(status_code=404, detail="Cart item not found")
    return item

@router.get("/get", response_model=CartOut)
def get_cart(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_optional_user)
):
    # Anonymous visitors simply have an empty server cart
    if current_user is None:
        return CartOut(cart=[])

    items = (
        db.query(CartItem)
        .filter(CartItem.user_id == current_user.id)
        .order_by(CartItem.created_at.desc(), CartItem.id.desc())
        .all()
    )
    return CartOut(cart=[_line_to_out(it) for it in items])

@router.post("/add", response_model=CartActionResult, status_code=status.HTTP_200_OK)
def add_to_cart(
    payload: CartAddItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    product = db.query(Product).filter(Product.id == payload.product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    # Validate stock availability
    if product.stock < payload.quantity:
        raise HTTPException(status_code=400, detail="Not enough stock available")

    item = db.query(CartItem).filter(
        CartItem.user_id == current_user.id,
        CartItem.product_id == payload.product_id,
        CartItem.size.is_(None) if payload.size is None else CartItem.size == payload.size,
        CartItem.color.is_(None) if payload.color is None else CartItem.color == payload.color,
    ).first()

    if item:
        new_qty = item.quantity + payload.quantity
        if new_qty > product.stock:
            raise HTTPException(status_code=400, detail="Cannot add more than available stock")
        item.quantity = new_qty
        message = "Cart updated"
    else:
        item = CartItem(
            user_id=current_user.id,
            product_id=product.id,
            quantity=payload.quantity,
            size=payload.size,
            color=payload.color,
        )
        db.add(item)
        message = "Added to cart"

    db.commit()
    db.refresh(item)

    write_log(
        db,
        user_id=current_user.id,
        action="CART_ADD",
        resource="cart",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"product_id": product.id, "qty": payload.quantity, "line_qty": item.quantity},
    )
    return CartActionResult(success=True, message=message)

@router.put("/update", response_model=CartActionResult)
def update_cart_item(
    payload: CartUpdateItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    item = _owned_item(db, current_user, payload.item_id)

    # A quantity below one removes the line instead of storing it
    if payload.quantity < 1:
        db.delete(item)
        db.commit()
        write_log(
            db,
            user_id=current_user.id,
            action="CART_DELETE",
            resource="cart",
            status="SUCCESS",
            ip=client_ip(request),
            meta={"item_id": payload.item_id, "qty": payload.quantity},
        )
        return CartActionResult(success=True, message="Item removed")

    # Validate stock for the new quantity
    if item.product and payload.quantity > item.product.stock:
        raise HTTPException(status_code=400, detail="Exceeds available stock")

    item.quantity = payload.quantity
    db.commit()

    write_log(
        db,
        user_id=current_user.id,
        action="CART_UPDATE",
        resource="cart",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"item_id": payload.item_id, "qty": payload.quantity},
    )
    return CartActionResult(success=True, message="Cart updated")

@router.delete("/delete", response_model=CartActionResult)
def delete_cart_item(
    payload: CartDeleteItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    item = _owned_item(db, current_user, payload.item_id)

    db.delete(item)
    db.commit()

    write_log(
        db,
        user_id=current_user.id,
        action="CART_DELETE",
        resource="cart",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"item_id": payload.item_id},
    )
    return CartActionResult(success=True, message="Item removed")
