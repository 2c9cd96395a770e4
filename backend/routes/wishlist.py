# backend/routes/wishlist.py
from fastapi import APIRouter, Depends, HTTPException, status, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from database import get_db
from utils.tokenJWT import get_current_user, get_optional_user
from utils.audit import write_log, client_ip
from models.users import User
from models.product import Product
from models.wishlist import WishlistItem
from schemas.cart import CartProduct, CartActionResult
from schemas.wishlist import WishlistAddItem, WishlistDeleteItem, WishlistOut, WishlistLine, WishlistCheckOut

router = APIRouter(prefix="/wishlist", tags=["Wishlist"])

def _find(db: Session, user_id: int, product_id: str):
    return db.query(WishlistItem).filter(
        WishlistItem.user_id == user_id, WishlistItem.product_id == product_id
    ).first()

@router.get("/get", response_model=WishlistOut)
def get_wishlist(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_optional_user)
):
    if current_user is None:
        return WishlistOut(wishlist=[])

    items = (
        db.query(WishlistItem)
        .filter(WishlistItem.user_id == current_user.id)
        .order_by(WishlistItem.created_at.desc(), WishlistItem.id.desc())
        .all()
    )
    return WishlistOut(wishlist=[
        WishlistLine(
            id=str(it.id),
            product_id=it.product_id,
            product=CartProduct.model_validate(it.product) if it.product else None,
        )
        for it in items
    ])

@router.post("/add", response_model=CartActionResult, status_code=status.HTTP_201_CREATED)
def add_to_wishlist(
    payload: WishlistAddItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    product = db.query(Product).filter(Product.id == payload.product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    # Adding twice is not an error
    if _find(db, current_user.id, payload.product_id):
        return JSONResponse(status_code=200, content={"success": True, "message": "Already in wishlist"})

    db.add(WishlistItem(user_id=current_user.id, product_id=product.id))
    db.commit()

    write_log(
        db,
        user_id=current_user.id,
        action="WISHLIST_ADD",
        resource="wishlist",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"product_id": product.id},
    )
    return CartActionResult(success=True, message="Added to wishlist")

@router.delete("/delete", response_model=CartActionResult)
def delete_from_wishlist(
    payload: WishlistDeleteItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    item = _find(db, current_user.id, payload.product_id)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found in wishlist")

    db.delete(item)
    db.commit()

    write_log(
        db,
        user_id=current_user.id,
        action="WISHLIST_DELETE",
        resource="wishlist",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"product_id": payload.product_id},
    )
    return CartActionResult(success=True, message="Removed from wishlist")

@router.get("/check/{product_id}", response_model=WishlistCheckOut)
def check_wishlist(
    product_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_optional_user)
):
    if current_user is None:
        return WishlistCheckOut(in_wishlist=False)
    return WishlistCheckOut(in_wishlist=_find(db, current_user.id, product_id) is not None)
