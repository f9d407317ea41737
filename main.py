from __future__ import annotations

import logging
import os

from food_assistant.app.api.app import create_app
from food_assistant.core.config import (
    load_app_config,
    load_dotenv_file,
    required_env_report,
)

LOGGER = logging.getLogger("food_assistant")

dotenv_keys: list[str] = []
if os.getenv("APP_ENV", "development") != "production":
    dotenv_keys = load_dotenv_file(".env")

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
if dotenv_keys:
    LOGGER.info("dotenv_loaded keys=%s", ",".join(sorted(dotenv_keys)))
for env_name, present in required_env_report().items():
    LOGGER.info("env_check %s=%s", env_name, "present" if present else "missing")

config = load_app_config()
app = create_app(config)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=config.port)
