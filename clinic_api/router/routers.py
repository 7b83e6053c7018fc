# clinic_api/router/routers.py

from fastapi import FastAPI
from clinic_api.auth.auth_controller import router as auth_router
from clinic_api.modules.appointments.appointments_controller import router as appointments_router
from clinic_api.modules.billing.billing_controller import router as billing_router
from clinic_api.modules.doctors.doctors_controller import router as doctors_router
from clinic_api.modules.patients.patients_controller import router as patients_router
from clinic_api.modules.chatbot.chatbot_controller import router as chatbot_router

def include_routers(app: FastAPI) -> None:
    """Include all API routers in the FastAPI application."""
    app.include_router(auth_router)
    app.include_router(appointments_router)
    app.include_router(billing_router)
    app.include_router(doctors_router)
    app.include_router(patients_router)
    app.include_router(chatbot_router)
