import os

from dotenv import load_dotenv

load_dotenv()

# ===================== Config =====================
API_URL = os.getenv("STOREFRONT_API_URL", "http://localhost:8081/api")
TIMEOUT = float(os.getenv("STOREFRONT_TIMEOUT", "10"))
RETRIES = int(os.getenv("STOREFRONT_RETRIES", "2"))
SESSION_FILE = os.getenv(
    "STOREFRONT_SESSION_FILE",
    os.path.join(os.path.expanduser("~"), ".storefront", "session.json"),
)
CURRENCY = os.getenv("STOREFRONT_CURRENCY", "INR")
