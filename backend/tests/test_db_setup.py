from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from models.product import Product
from models.users import User
from populate_db import DEMO_PRODUCTS, seed_demo_data

BACKEND_DIR = Path(__file__).resolve().parent.parent


def test_migrations_create_all_tables(tmp_path):
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    cfg = Config()
    cfg.set_main_option("script_location", str(BACKEND_DIR / "alembic"))
    cfg.set_main_option("sqlalchemy.url", url)

    command.upgrade(cfg, "head")

    tables = set(inspect(create_engine(url)).get_table_names())
    assert {"users", "products", "cart_items", "wishlist_items", "logs"} <= tables


def test_seed_is_idempotent(db):
    first = seed_demo_data(db)
    second = seed_demo_data(db)

    assert first == {"users": 1, "products": len(DEMO_PRODUCTS)}
    assert second == {"users": 0, "products": 0}
    assert db.query(Product).count() == len(DEMO_PRODUCTS)
    assert db.query(User).count() == 1
