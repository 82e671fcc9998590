#!/usr/bin/env python3
"""
Run script for the Ecos de México API
"""
import uvicorn

from ecos.config.settings import settings
from ecos.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port, reload=settings.debug)
