from dotenv import load_dotenv
load_dotenv()
from tortoise import Tortoise
from contextlib import asynccontextmanager
import logging
import os


logger = logging.getLogger(__name__)

db_url = os.getenv("DATABASE_URI")
if not db_url:
    raise ValueError("DATABASE_URI environment variable is not set.")


MODEL_MODULES = [
    "models.user",
    "models.doctor_profile",
    "models.appointment",
    "models.prescription",
]

TORTOISE_CONFIG = {

    'connections': {
        'default': db_url
    },
    "apps": {
        "models": {
            "models": [*MODEL_MODULES, "aerich.models"],
            "default_connection": "default",
        }
    }
    }


@asynccontextmanager
async def lifespan(_):
    await Tortoise.init(config=TORTOISE_CONFIG)
    if os.getenv("GENERATE_SCHEMAS", "false").lower() == "true":
        # local development only, production schema comes from aerich migrations
        await Tortoise.generate_schemas(safe=True)
        logger.info("Database schemas generated")
    try:
        yield
    finally:
        await Tortoise.close_connections()
