from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from dicebox.config import settings
from dicebox.routers import rolls


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logging.getLogger("dicebox").setLevel(settings.log_level.upper())
    yield


app = FastAPI(title="Dicebox", debug=settings.debug, lifespan=lifespan)

app.include_router(rolls.router)
