# storefront/utils/settings.py
import os
from dotenv import load_dotenv

load_dotenv()

API_URL = os.getenv("API_URL", "http://api-gateway:8000/api")
API_TIMEOUT_SECONDS = float(os.getenv("API_TIMEOUT_SECONDS", 5))

# file | redis | memory
CART_STORAGE_BACKEND = os.getenv("CART_STORAGE_BACKEND", "file")
CART_STORAGE_PATH = os.getenv("CART_STORAGE_PATH", ".storefront/carts")
CART_STORAGE_KEY = os.getenv("CART_STORAGE_KEY", "storefront:cart")
REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")

SESSION_COOKIE = os.getenv("SESSION_COOKIE", "session")
VISITOR_COOKIE = os.getenv("VISITOR_COOKIE", "visitor_id")

# proby dla bledow transportu (GET produktu, redis), POST /orders nigdy nie jest ponawiany
RETRY_ATTEMPTS = int(os.getenv("RETRY_ATTEMPTS", 3))
