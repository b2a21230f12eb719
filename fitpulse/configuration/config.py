import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

class Config:
    # FitPulse REST backend
    API_URL = os.getenv("FITPULSE_API_URL", "http://localhost:8080")
    API_TIMEOUT = float(os.getenv("FITPULSE_API_TIMEOUT", "30"))

    # Local persisted state ("file" or "memory")
    STORAGE_BACKEND = os.getenv("FITPULSE_STORAGE", "file")
    STORAGE_PATH = os.getenv("FITPULSE_STORAGE_PATH", ".fitpulse/local_storage.json")

    # Application Insights
    APPLICATIONINSIGHTS_CONNECTION_STRING = os.getenv("APPINSIGHTS_INSTRUMENTATIONKEY")
    SERVICE_NAME = os.getenv("FITPULSE_SERVICE_NAME", "fitpulseclient")
