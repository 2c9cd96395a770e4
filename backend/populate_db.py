import os
import sys

# Add 'backend' folder to Python path
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from sqlalchemy.orm import Session

from database import SessionLocal, init_db
from models.product import Product
from models.users import User
from utils.hashing import get_password_hash

# Configuration
DEMO_CUSTOMER_EMAIL = "demo@storefront.io"
DEMO_CUSTOMER_PASSWORD = "demo1234"

DEMO_PRODUCTS = [
    {"id": "tee-classic", "name": "Classic Tee", "category": "Apparel", "price": 19.99, "original_price": 24.99, "stock": 40},
    {"id": "hoodie-zip", "name": "Zip Hoodie", "category": "Apparel", "price": 49.0, "original_price": None, "stock": 12},
    {"id": "cap-logo", "name": "Logo Cap", "category": "Accessories", "price": 14.5, "original_price": None, "stock": 25},
    {"id": "mug-enamel", "name": "Enamel Mug", "category": "Home", "price": 9.0, "original_price": 12.0, "stock": 3},
]
# End Configuration

def seed_demo_data(session: Session) -> dict:
    """Inserts the demo customer and catalog, skipping rows that already exist."""
    created = {"users": 0, "products": 0}

    if not session.query(User).filter(User.email == DEMO_CUSTOMER_EMAIL).first():
        session.add(User(
            email=DEMO_CUSTOMER_EMAIL,
            password_hash=get_password_hash(DEMO_CUSTOMER_PASSWORD),
            role="customer",
            first_name="Demo",
            last_name="Customer",
        ))
        created["users"] += 1

    for row in DEMO_PRODUCTS:
        if session.get(Product, row["id"]) is None:
            session.add(Product(thumbnail=f"/uploads/{row['id']}.jpg", **row))
            created["products"] += 1

    session.commit()
    return created


if __name__ == "__main__":
    init_db()
    session = SessionLocal()
    try:
        result = seed_demo_data(session)
        print(f"Dodano użytkowników: {result['users']}, produktów: {result['products']}")
    finally:
        session.close()
