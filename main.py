import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError, PyMongoError

from config import Settings, get_settings
from context import DomainContext
from database import InvalidReference, ensure_indexes, rollback_on_error
from routes import routers
from schemas import Account, Employee, EmployeeRole
from security import hash_password

logger = logging.getLogger(__name__)


def seed_admin(context: DomainContext, settings: Settings) -> Optional[dict]:
    """Create the default administrator unless its account already exists."""
    if context.accounts.find_by_email(settings.admin_email):
        return None
    with rollback_on_error() as undo:
        account = context.accounts.create(Account(
            first_name="root",
            last_name="admin",
            email=settings.admin_email,
            password_hash=hash_password(settings.admin_password),
        ))
        undo.append(lambda: context.accounts.delete_by_id(account["_id"]))
        employee = context.employees.create(Employee(role=EmployeeRole.ADMIN, user=account["_id"]))
    logger.info("Seeded administrator %s", settings.admin_email)
    return employee


def create_app(context: Optional[DomainContext] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = app.state.context is None
        if owned:
            app.state.context = DomainContext.connect(settings)
        ensure_indexes(app.state.context.db)
        seed_admin(app.state.context, settings)
        yield
        if owned:
            app.state.context.close()
            app.state.context = None

    app = FastAPI(title="ESGIKing Delivery API", version="1.0.0", lifespan=lifespan)
    app.state.context = context
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ===================== Error handlers =====================
    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    @app.exception_handler(InvalidReference)
    async def invalid_reference(request: Request, exc: InvalidReference):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(DuplicateKeyError)
    async def duplicate_key(request: Request, exc: DuplicateKeyError):
        return JSONResponse(status_code=409, content={"detail": "Document already exists"})

    @app.exception_handler(PyMongoError)
    async def store_error(request: Request, exc: PyMongoError):
        logger.error("Store failure on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=503, content={"detail": "Database unavailable"})

    # ===================== Public Endpoints =====================
    @app.get("/")
    def root():
        return {"message": "ESGIKing Delivery API running"}

    @app.get("/test")
    def test_database():
        response = {
            "backend": "✅ Running",
            "database": "❌ Not Available",
            "database_url": "✅ Set" if settings.database_url else "❌ Not Set",
            "database_name": "✅ Set" if settings.database_name else "❌ Not Set",
            "connection_status": "Not Connected",
            "collections": [],
        }
        if app.state.context is not None:
            try:
                response["collections"] = app.state.context.db.list_collection_names()
                response["database"] = "✅ Available"
                response["connection_status"] = "Connected"
            except PyMongoError as e:
                response["database"] = f"❌ Error: {str(e)[:80]}"
        return response

    for router in routers:
        app.include_router(router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", settings.port)))
