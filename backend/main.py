# backend/main.py
import logging
from pathlib import Path
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from dotenv import load_dotenv

load_dotenv()

from config import settings
from database import init_db

from routes.auth import router as auth_router
from routes.cart import router as cart_router
from routes.products import router as products_router
from routes.farmers import router as farmers_router
from routes.farmer import router as farmer_router
from routes.parcels import router as parcels_router
from routes.sales import router as sales_router
from routes.orders import router as orders_router
from routes.messages import buyer_router as buyer_messages_router
from routes.messages import farmer_router as farmer_messages_router
from routes.diagnostic import router as diagnostic_router
from routes.weather import router as weather_router
from routes.admin import router as admin_router
from routes.ml_model import router as ml_model_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

init_db()

app = FastAPI(title="Agri Marketplace API", version="1.0.0")

# Uploaded pictures are served as static files
Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
if settings.FRONTEND_URL and settings.FRONTEND_URL not in origins:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(cart_router)
app.include_router(products_router)
app.include_router(farmers_router)
app.include_router(farmer_router)
app.include_router(parcels_router)
app.include_router(sales_router)
app.include_router(orders_router)
app.include_router(buyer_messages_router)
app.include_router(farmer_messages_router)
app.include_router(diagnostic_router)
app.include_router(weather_router)
app.include_router(admin_router)
app.include_router(ml_model_router)


@app.get("/")
def read_root():
    return {"message": "Agri Marketplace API is running"}
