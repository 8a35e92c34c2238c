from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from mca_api.db.init_db import init_db
from mca_api.logging_config import configure_app_logging
from mca_api.routers import (
    access_logs,
    accounts,
    admins,
    applications,
    catalog,
    funders,
    fundings,
    health,
    isos,
    lenders,
    links,
    logins,
    me,
    merchants,
    paybacks,
    payouts,
    syndications,
    syndicators,
)
from mca_api.security.config import load_security_config
from mca_api.security.dependencies import enforce_security
from mca_api.security.tokens import AccessTokenValidator
from mca_api.settings import get_settings

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings = get_settings()
        configure_app_logging(settings.log_level)
        logger.info("App startup beginning")

        app.state.security_config = load_security_config(settings.resolved_security_config_path())
        logger.info("Loaded security config: %s", settings.resolved_security_config_path())

        app.state.token_validator = AccessTokenValidator.from_settings(settings)

        init_db()
        logger.info("Database initialized (tables ensured, demo seed=%s)", settings.seed_demo_data)

        yield

    # Authentication and role checks run for every route; owner scoping is
    # applied inside the handlers through AuthContext.
    app = FastAPI(title="MCA CRM API", dependencies=[Depends(enforce_security)], lifespan=lifespan)

    app.include_router(health.router)
    app.include_router(me.router)

    app.include_router(funders.router)
    app.include_router(lenders.router)
    app.include_router(isos.router)
    app.include_router(merchants.router)
    app.include_router(syndicators.router)

    app.include_router(applications.router)
    app.include_router(fundings.router)
    app.include_router(paybacks.router)
    app.include_router(syndications.router)
    app.include_router(payouts.router)

    app.include_router(catalog.fee_types_router)
    app.include_router(catalog.expense_types_router)
    for router in accounts.routers:
        app.include_router(router)

    for router in links.routers:
        app.include_router(router)

    for router in logins.routers:
        app.include_router(router)

    app.include_router(admins.router)
    app.include_router(access_logs.router)

    return app


app = create_app()
