"""
FastAPI Web Application - Rufheld Review API
=============================================

JSON API behind the review removal frontend:
- loads a place's Google reviews (cached)
- accepts removal orders, stores them and emails the customer and admin
- admin views on stored orders
"""

import logging
import re
import threading
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..application import (
    DETAILED_HINT,
    OrderNotFoundError,
    OrderValidationError,
    StorageUnavailableError,
    VALIDATION_MESSAGE,
)
from ..infrastructure.config import Settings, get_settings
from ..infrastructure.email import MailerError, diagnostic_email_message
from ..infrastructure.persistence import DEFAULT_LIST_LIMIT
from ..infrastructure.reviews import ReviewFetchError
from .services import Services, build_services

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# ── Error messages ─────────────────────────────────────────────────
UNEXPECTED_ERROR = "Ein unerwarteter Fehler ist aufgetreten."
NOT_FOUND_ERROR = "Endpoint nicht gefunden."
INVALID_REQUEST = "Ungültige Anfrage."
SUBMIT_ERROR = "Fehler beim Verarbeiten der Anfrage."
DATABASE_UNAVAILABLE = "Database not available"
ORDERS_ERROR = "Fehler beim Laden der Bestellungen."
ORDERS_DETAILED_ERROR = "Fehler beim Laden der detaillierten Bestellungen."
ORDER_DETAIL_ERROR = "Fehler beim Laden der Bestellungsdetails."
ORDER_NOT_FOUND = "Bestellung nicht gefunden"

router = APIRouter(prefix="/api")


def get_services(request: Request) -> Services:
    return request.app.state.services


def error_response(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message, **extra})


def parse_offset(raw: Optional[str]) -> int:
    """Leading integer of the query value; anything else (or negative) is 0."""
    if not raw:
        return 0
    match = re.match(r"\s*(-?\d+)", raw)
    if not match:
        return 0
    return max(int(match.group(1)), 0)


# ── Request models ─────────────────────────────────────────────────

class OrderRequest(BaseModel):
    # Only place id and reviews are checked; other values are taken as sent
    businessPlaceId: Optional[Any] = None
    businessName: Optional[Any] = None
    selectedReviews: Optional[List[Dict[str, Any]]] = None
    customerName: Optional[Any] = None
    customerEmail: Optional[Any] = None
    customerPhone: Optional[Any] = None
    # Accepted for compatibility; the server computes the price
    totalPrice: Optional[Any] = None


# ══════════════════════════════════════════════════════════════════
#  ROUTES
# ══════════════════════════════════════════════════════════════════

# ── Reviews ────────────────────────────────────────────────────────

@router.get("/reviews/{place_id}")
def get_reviews(
    place_id: str,
    offset: Optional[str] = None,
    sort: Optional[str] = None,
    services: Services = Depends(get_services),
):
    page_offset = parse_offset(offset)
    sort_mode = sort or services.settings.review_api.default_sort

    try:
        return services.fetcher.fetch_reviews(place_id, page_offset, sort_mode)
    except ReviewFetchError as e:
        extra = {} if services.settings.is_production else {"details": e.detail}
        return error_response(500, e.message, **extra)


# ── Orders ─────────────────────────────────────────────────────────

@router.post("/submit-order")
def submit_order(
    body: OrderRequest,
    background_tasks: BackgroundTasks,
    services: Services = Depends(get_services),
):
    recorder = services.recorder
    try:
        order = recorder.create_order(body.model_dump())
    except OrderValidationError as e:
        return error_response(400, e.message)
    except Exception as e:
        logger.exception(f"Error submitting order: {e}")
        return error_response(500, SUBMIT_ERROR)

    # Storage and email never change the customer's response
    background_tasks.add_task(recorder.persist, order)
    background_tasks.add_task(recorder.notify, order)

    return recorder.confirmation(order)


# ── Admin ──────────────────────────────────────────────────────────

@router.get("/admin/orders")
def admin_orders(
    limit: int = Query(DEFAULT_LIST_LIMIT, ge=1, le=DEFAULT_LIST_LIMIT),
    services: Services = Depends(get_services),
):
    try:
        orders = services.reporting.list_orders(limit)
    except StorageUnavailableError:
        return error_response(503, DATABASE_UNAVAILABLE)
    except Exception as e:
        logger.exception(f"Error fetching orders: {e}")
        return error_response(500, ORDERS_ERROR)

    return {"success": True, "orders": orders, "total": len(orders)}


@router.get("/admin/orders-detailed")
def admin_orders_detailed(
    limit: int = Query(DEFAULT_LIST_LIMIT, ge=1, le=DEFAULT_LIST_LIMIT),
    services: Services = Depends(get_services),
):
    try:
        orders = services.reporting.list_orders_detailed(limit)
    except StorageUnavailableError:
        return error_response(503, DATABASE_UNAVAILABLE)
    except Exception as e:
        logger.exception(f"Error fetching detailed orders: {e}")
        return error_response(500, ORDERS_DETAILED_ERROR)

    return {"success": True, "orders": orders, "total": len(orders), "hinweis": DETAILED_HINT}


@router.get("/admin/order/{order_id}")
def admin_order(order_id: str, services: Services = Depends(get_services)):
    try:
        detail = services.reporting.get_order(order_id)
    except StorageUnavailableError:
        return error_response(503, DATABASE_UNAVAILABLE)
    except OrderNotFoundError:
        return error_response(404, ORDER_NOT_FOUND)
    except Exception as e:
        logger.exception(f"Error fetching order details: {e}")
        return error_response(500, ORDER_DETAIL_ERROR)

    return {"success": True, **detail}


# ── Misc ───────────────────────────────────────────────────────────

@router.get("/health")
def health(services: Services = Depends(get_services)):
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": services.settings.environment,
        "database": services.database is not None,
        "email": services.mailer is not None,
    }


@router.get("/business/{place_id}")
async def business_details(place_id: str):
    # TODO: look the place up via the Google Places API instead of returning placeholders
    return {
        "success": True,
        "business": {
            "placeId": place_id,
            "name": "Business Name",
            "address": "Business Address",
        },
    }


@router.get("/test-email")
def send_test_email(services: Services = Depends(get_services)):
    """Send a diagnostic mail to the configured test recipient. Always 200."""
    if services.mailer is None:
        return {"success": False, "error": "Email not configured"}

    sent_at = datetime.now(timezone.utc)
    try:
        services.mailer.send(diagnostic_email_message(services.settings.email.test_recipient, sent_at))
    except MailerError as e:
        logger.error(f"Test email failed: {e}")
        return {"success": False, "error": str(e)}

    return {
        "success": True,
        "message": "Test email sent successfully!",
        "timestamp": sent_at.isoformat(),
    }


@router.get("/debug/orders-raw")
def debug_orders_raw(services: Services = Depends(get_services)):
    try:
        return {"success": True, "debug": services.reporting.raw_review_dump()}
    except StorageUnavailableError:
        return {"success": False, "error": DATABASE_UNAVAILABLE}
    except Exception as e:
        logger.exception(f"Debug dump failed: {e}")
        return {"success": False, "error": str(e)}


# ══════════════════════════════════════════════════════════════════
#  ERROR HANDLERS
# ══════════════════════════════════════════════════════════════════

async def handle_validation_error(request: Request, exc: RequestValidationError):
    logger.info(f"Rejected request to {request.url.path}: {exc.errors()}")
    message = VALIDATION_MESSAGE if request.url.path.endswith("/submit-order") else INVALID_REQUEST
    return error_response(400, message)


async def handle_http_error(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return error_response(404, NOT_FOUND_ERROR)
    return error_response(exc.status_code, str(exc.detail))


async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return error_response(500, UNEXPECTED_ERROR)


# ══════════════════════════════════════════════════════════════════
#  APP FACTORY
# ══════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None, services: Optional[Services] = None) -> FastAPI:
    """
    Build the FastAPI app.

    Collaborators are created in the lifespan hook, after the required
    configuration has been checked. Pass `services` to supply them directly.
    """
    settings = settings or (services.settings if services else get_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings.require()
        for issue in settings.validate():
            logger.warning(issue)

        svc = services or build_services(settings)
        app.state.services = svc

        if svc.mailer is not None:
            threading.Thread(target=svc.mailer.verify, name="smtp-verify", daemon=True).start()

        logger.info(f"Rufheld API ready (environment: {settings.environment})")
        logger.info(f"Wextractor API configured: {bool(settings.review_api.api_key)}")
        logger.info(f"Database: {'Connected' if svc.database else 'Not configured'}")
        logger.info(f"Email: {'Configured' if svc.mailer else 'Not configured'}")
        yield
        svc.close()

    app = FastAPI(
        title="Rufheld Review API",
        description="Google review removal orders",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    # Frontend files; mounted last so /api routes take precedence
    if settings.static_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(settings.static_dir), html=True), name="static")

    return app


app = create_app()
