# config.py
import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///storefront.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # JWT for bearer sessions
    JWT_SECRET = os.getenv("JWT_SECRET", "devsecret")
    JWT_ALGO = "HS256"
    JWT_TTL_HOURS = int(os.getenv("JWT_TTL_HOURS", "24"))

    # CORS for the storefront SPA
    CORS_ORIGIN = os.getenv("CORS_ORIGIN", "http://localhost:5173")

    PORT = int(os.getenv("PORT", "8081"))
