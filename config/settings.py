"""
FoodHub Admin - Centralized Configuration
==========================================
All environment variables and constants are loaded here.
No other module should call os.getenv() directly.
"""

import os
import sys
from dotenv import load_dotenv

load_dotenv()


# ==========================================
# 🔐 Security
# ==========================================
SECRET_KEY = os.getenv("SECRET_KEY")

if not SECRET_KEY:
    print("[ERROR] Critical: SECRET_KEY missing in .env")
    sys.exit(1)

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24 * 7  # 7 days


# ==========================================
# 🗄️ Order Persistence
# ==========================================
ORDERS_BACKEND = os.getenv("ORDERS_BACKEND", "sql").lower()  # "sql" | "http"

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///foodhub.db")

# PostgREST-style order service (used when ORDERS_BACKEND=http)
ORDERS_API_URL = os.getenv("ORDERS_API_URL", "http://127.0.0.1:54321")
ORDERS_API_KEY = os.getenv("ORDERS_API_KEY", "")
ORDERS_API_TIMEOUT = float(os.getenv("ORDERS_API_TIMEOUT") or "10")  # seconds

if ORDERS_BACKEND not in ("sql", "http"):
    print(f"[ERROR] Critical: ORDERS_BACKEND must be 'sql' or 'http', got '{ORDERS_BACKEND}'")
    sys.exit(1)


# ==========================================
# 🛡️ Permissions
# ==========================================
# "show_all_on_incomplete_data" | "strict"
PERMISSION_POLICY = os.getenv("PERMISSION_POLICY", "show_all_on_incomplete_data").lower()


# ==========================================
# 🔧 App
# ==========================================
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()

APP_VERSION = "1.0.0"
