# backend/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from database import init_db

# Import routerów
from routes.auth import router as auth_router
from routes.shop import router as shop_router
from routes.cart import router as cart_router
from routes.wishlist import router as wishlist_router

logging.basicConfig(level=settings.LOG_LEVEL)

# Inicjalizacja
init_db()

app = FastAPI(title="Storefront Cart API", version="1.0.0")

# CORS Configuration
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
if settings.FRONTEND_URL:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rejestracja routerów
app.include_router(auth_router)
app.include_router(shop_router)
app.include_router(cart_router)
app.include_router(wishlist_router)

@app.get("/")
def read_root():
    return {"message": "Storefront Cart API działa!"}
