from dotenv import load_dotenv
load_dotenv()
import logging
import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from helpers.tortoise_config import lifespan
from helpers.exception_handlers import register_exception_handlers
from controllers.auth_controller import auth_router
from controllers.appointment_controller import appointment_router
from controllers.prescription_controller import prescription_router


logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logging.getLogger("tortoise").setLevel(logging.WARNING)


app = FastAPI(lifespan=lifespan)


app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


app.include_router(auth_router, prefix='/api', tags=['Authentication'])
app.include_router(appointment_router, prefix='/api', tags=['Appointments'])
app.include_router(prescription_router, prefix='/api', tags=['Prescriptions'])


@app.get('/')
def greetings():
    return {
        "success": True,
        "message": "API is running..."
    }
