from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mappify import DatabaseEngine, Session, SchemaGenerator
from mappify.exceptions import ValidationError, NotFoundError, AssociationError

from models import ALL_MODELS
from endpoints.products_endpoints import router as products_router
from endpoints.categories_endpoints import router as categories_router


def create_app(engine=None):
    app = FastAPI(title="mappify example")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    engine = engine or DatabaseEngine()
    SchemaGenerator().create_all(engine, ALL_MODELS)
    app.state.session = Session(engine)

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(AssociationError)
    async def _association_error(request: Request, exc: AssociationError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    app.include_router(products_router)
    app.include_router(categories_router)
    return app


app = create_app()
