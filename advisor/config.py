# config.py

import os
from dotenv import load_dotenv

load_dotenv()

MONGODB_URI = os.environ.get("MONGODB_URI", "mongodb://localhost:27017")
MONGODB_DB = os.environ.get("MONGODB_DB", "advisor")

MIN_SCORE = int(os.environ.get("MIN_SCORE", "3"))
LEGACY_SCORING = os.environ.get("LEGACY_SCORING", "False") == "True"
TOP_EXPANDED = int(os.environ.get("TOP_EXPANDED", "3"))

NOTIFY_URL = os.environ.get("NOTIFY_URL")
NOTIFY_TIMEOUT = float(os.environ.get("NOTIFY_TIMEOUT", "10"))
NOTIFY_RETRIES = int(os.environ.get("NOTIFY_RETRIES", "2"))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

API_HOST = os.environ.get("API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("API_PORT", "8080"))
