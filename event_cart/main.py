from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from event_cart.api.cart.cart_routes import cart_router
from event_cart.api.catalog.catalog_routes import package_router, service_router
from event_cart.config import setup_logging
from event_cart.store.db import init_db

app = FastAPI(title="Event Cart Service")


@app.on_event("startup")
def _on_startup() -> None:
    setup_logging()
    init_db()


@app.exception_handler(StarletteHTTPException)
async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        {"success": False, "message": str(exc.detail)},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = "; ".join(error.get("msg", "invalid value") for error in exc.errors())
    return JSONResponse({"success": False, "message": message}, status_code=400)


app.include_router(cart_router)
app.include_router(package_router)
app.include_router(service_router)
