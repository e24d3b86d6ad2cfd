"""
Spartan Bites - Order Backend API
FastAPI backend that takes food orders, keeps them in memory, and exports CSV
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, List, Optional

import structlog
from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from config import Settings, get_settings
from store import OrderStore, OrderValidationError, utc_timestamp

MISSING_INFO_MESSAGE = "Missing required order information"
PROCESSING_FAILED_MESSAGE = "Failed to process order"


def configure_logging(log_level: str) -> None:
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )


# Configure structured logging
configure_logging(get_settings().log_level)
logger = structlog.get_logger()


# Pydantic models
class CustomerInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[Any] = None
    email: Optional[Any] = None
    phone: Optional[Any] = None
    special_requests: Optional[Any] = Field(None, alias="specialRequests")


class OrderItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[Any] = None
    price: Optional[Any] = None
    qty: Optional[Any] = None
    item_total: Optional[Any] = Field(None, alias="itemTotal")


class OrderSubmission(BaseModel):
    """Incoming order. Every field is optional here; presence is checked by the store."""
    model_config = ConfigDict(populate_by_name=True)

    customer_info: Optional[CustomerInfo] = Field(None, alias="customerInfo")
    items: Optional[List[OrderItem]] = None
    total: Optional[Any] = None


class OrderCreatedResponse(BaseModel):
    success: bool = True
    message: str = "Order received successfully!"
    order_id: int = Field(..., serialization_alias="orderId")
    timestamp: str


class HealthResponse(BaseModel):
    status: str = "ok"
    orders_stored: int = Field(..., serialization_alias="ordersStored")
    timestamp: str


def failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message}
    )


def get_store(request: Request) -> OrderStore:
    return request.app.state.store


router = APIRouter()


# API Routes

@router.post(
    "/api/orders",
    status_code=status.HTTP_201_CREATED,
    response_model=OrderCreatedResponse
)
async def create_order(
    submission: OrderSubmission,
    store: OrderStore = Depends(get_store)
):
    """
    Create a new order and return its id
    """
    try:
        customer_info = (
            submission.customer_info.model_dump(by_alias=True)
            if submission.customer_info is not None else None
        )
        items = (
            [item.model_dump(by_alias=True) for item in submission.items]
            if submission.items is not None else None
        )
        order = store.submit_order(customer_info, items, submission.total)
    except OrderValidationError:
        logger.warning(
            "order_rejected_missing_fields",
            has_customer_info=submission.customer_info is not None,
            items_count=len(submission.items or []),
            total=submission.total
        )
        return failure(status.HTTP_400_BAD_REQUEST, MISSING_INFO_MESSAGE)
    except Exception:
        logger.exception("order_processing_failed")
        return failure(status.HTTP_500_INTERNAL_SERVER_ERROR, PROCESSING_FAILED_MESSAGE)

    logger.info(
        "order_created",
        order_id=order.order_id,
        total=order.order_total,
        items_count=len(order.items)
    )

    return OrderCreatedResponse(order_id=order.order_id, timestamp=order.order_date)


@router.get("/api/orders")
async def list_orders(store: OrderStore = Depends(get_store)):
    """All orders in the order they were received"""
    orders = store.list_orders()
    return {
        "success": True,
        "totalOrders": len(orders),
        "orders": [order.to_dict() for order in orders]
    }


@router.get("/api/health", response_model=HealthResponse)
async def health_check(store: OrderStore = Depends(get_store)):
    """Health check endpoint for monitoring"""
    return HealthResponse(orders_stored=store.count(), timestamp=utc_timestamp())


@router.get("/api/export/csv")
async def export_csv(store: OrderStore = Depends(get_store)):
    csv = store.export_csv()
    logger.info("orders_exported", rows=store.count())
    return Response(
        content=csv,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=orders.csv"}
    )


# Error handlers
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning("order_payload_invalid", path=request.url.path, errors=len(exc.errors()))
    return failure(status.HTTP_400_BAD_REQUEST, MISSING_INFO_MESSAGE)


async def global_exception_handler(request: Request, exc: Exception):
    logger.error("unhandled_exception", error=str(exc), path=request.url.path)
    return failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    settings = app.state.settings
    logger.info(
        "application_startup",
        app_name=settings.app_name,
        port=settings.port,
        orders=app.state.store.count()
    )
    yield
    logger.info("application_shutdown", orders=app.state.store.count())


def create_app(
    store: Optional[OrderStore] = None,
    settings: Optional[Settings] = None
) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Order intake API with in-memory storage and CSV export",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.store = (
        store if store is not None
        else OrderStore(first_order_id=settings.first_order_id)
    )

    # CORS - any origin unless CORS_ORIGINS says otherwise
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.include_router(router)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "app:app",
        host=settings.host,
        port=settings.port,
        workers=1,
        reload=False,
        log_level=settings.log_level
    )
