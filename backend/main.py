import logging
from datetime import datetime, timezone

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from mangum import Mangum

from api.exception_handlers import setup_exception_handlers
from api.routes import admin_router, profile_router, users_router
from auth.dependencies import enforce_access_policy
from auth.oauth2_routes import router as oauth2_router
from auth.policy import API_V1, build_policy
from auth.routes import router as auth_router
from config.settings import settings

logging.getLogger().setLevel(logging.INFO)

# Routers are served at the root and under the versioned prefix
ROUTE_PREFIXES = ("", API_V1)


def create_app() -> FastAPI:
    development = settings.is_development()

    app = FastAPI(
        title="Ember API",
        description="Local and Google OAuth2 authentication backend",
        version="1.0.0",
        # Interactive docs exist only where the policy makes them public
        docs_url="/docs" if development else None,
        redoc_url="/redoc" if development else None,
        openapi_url="/openapi.json" if development else None,
        dependencies=[Depends(enforce_access_policy)],
    )
    app.state.access_policy = build_policy(development)

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_allowed_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=[
            "Authorization",
            "Content-Type",
            "X-Requested-With",
            "Accept",
            "Origin",
            "Access-Control-Request-Method",
            "Access-Control-Request-Headers",
        ],
        expose_headers=["Authorization", "Content-Disposition"],
        max_age=3600,
    )

    setup_exception_handlers(app)

    # Include routers
    for prefix in ROUTE_PREFIXES:
        app.include_router(auth_router, prefix=f"{prefix}/auth", tags=["Authentication"])
        app.include_router(users_router, prefix=f"{prefix}/users", tags=["Users"])
        app.include_router(profile_router, prefix=f"{prefix}/profile", tags=["Users"])
        app.include_router(admin_router, prefix=f"{prefix}/admin", tags=["Admin"])
    app.include_router(oauth2_router, tags=["OAuth2"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    return app


app = create_app()

# Lambda handler
handler = Mangum(app, lifespan="off")
