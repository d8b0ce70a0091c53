from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from phone_cleaner.config import settings
from phone_cleaner.logging_config import configure_logging
from phone_cleaner.routes.cleaning import router as cleaning_router

configure_logging(settings.LOG_LEVEL)

app = FastAPI(title="Phone Cleaner API", version="1.0.0", debug=settings.DEBUG)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def root():
    return {"message": "Phone Cleaner API is running", "version": "1.0.0"}


@app.get("/health")
def health():
    return {"status": "healthy"}


app.include_router(cleaning_router)
