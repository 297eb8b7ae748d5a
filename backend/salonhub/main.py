"""
# `salonhub/main.py` - Application entry point

## Overview
Creates the FastAPI application, configures logging and CORS, registers the callable
error envelope and includes the routers.

---

## Routers
- callable functions at the root (`/ensureUserProfile`, `/addSalon`, `/updateSalon`,
  `/deleteSalon`, `/getAuthUserProfile`, `/getAllUserProfiles`, `/updateAuthUserProfile`,
  `/searchUsersByEmail`)
- `/salons`: public salon reads
- `/users`: current user profile and photo upload
- `/health`: liveness

---

## Events
- `startup`: Firebase Admin SDK is initialized (service account from env or file).
"""
import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from salonhub.config import init_firebase, settings
from salonhub.core.errors import CallableError, callable_error_handler, validation_error_handler
from salonhub.routers import functions, salons, users

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("salonhub")

# Initialize FastAPI app
app = FastAPI(
    title="Salon Booking API",
    description="Profile lifecycle and admin salon management for the salon booking app.",
    version="1.0.0",
    redirect_slashes=False,
)

# Configure CORS (allow front-end domain or all origins as specified)
allow_origins = [origin.strip() for origin in settings.allowed_origins.split(',')] if settings.allowed_origins else ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(CallableError, callable_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)

app.include_router(functions.router)
app.include_router(salons.router)
app.include_router(users.router)


@app.get("/health", tags=["Health"])
def health():
    return {"status": "ok"}


@app.on_event("startup")
async def _startup_firebase():
    init_firebase()
    logger.info("Salon Booking API started (app_id=%s)", settings.firebase_app_id)


# Run the app directly with uvicorn (for development)
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("salonhub.main:app", host="0.0.0.0", port=8000, reload=True)
