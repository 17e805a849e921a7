# stockdesk/main.py
import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from stockdesk.config import settings  # noqa: E402

# Routers
from stockdesk.routes.auth import router as auth_router  # noqa: E402
from stockdesk.routes.products import router as products_router  # noqa: E402
from stockdesk.routes.categories import router as categories_router  # noqa: E402
from stockdesk.routes.suppliers import router as suppliers_router  # noqa: E402
from stockdesk.routes.warehouses import router as warehouses_router  # noqa: E402
from stockdesk.routes.stock import router as stock_router  # noqa: E402
from stockdesk.routes.orders import router as orders_router  # noqa: E402

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Stockdesk", version="1.0.0")

# CORS: local dev servers plus the deployed frontend, if configured
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
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

# Router registration
app.include_router(auth_router)
app.include_router(products_router)
app.include_router(categories_router)
app.include_router(suppliers_router)
app.include_router(warehouses_router)
app.include_router(stock_router)
app.include_router(orders_router)


@app.get("/")
def read_root():
    return {"message": "Stockdesk is running", "backend": settings.API_URL}
