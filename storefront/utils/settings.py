# storefront/utils/settings.py
import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./storefront.db")
REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://redis:6379/1")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://redis:6379/2")
CELERY_TASK_ALWAYS_EAGER = _flag("CELERY_TASK_ALWAYS_EAGER", "false")

# viacep, /{cep}/json/
ADDRESS_LOOKUP_URL = os.getenv("ADDRESS_LOOKUP_URL", "https://viacep.com.br/ws")
ADDRESS_LOOKUP_TIMEOUT = int(os.getenv("ADDRESS_LOOKUP_TIMEOUT", 5))

CART_LOCKS_ENABLED = _flag("CART_LOCKS_ENABLED", "true")
CART_LOCK_TTL_SECONDS = int(os.getenv("CART_LOCK_TTL_SECONDS", 10))
CART_LOCK_WAIT_SECONDS = float(os.getenv("CART_LOCK_WAIT_SECONDS", 2))
CART_COOKIE_MAX_AGE = int(os.getenv("CART_COOKIE_MAX_AGE", 60 * 60 * 24 * 30))

# true -> checkout odrzuca zamowienie gdy kupon przestal byc wazny
STRICT_CHECKOUT_COUPONS = _flag("STRICT_CHECKOUT_COUPONS", "false")
DEFAULT_SHIPPING_COUNTRY = os.getenv("DEFAULT_SHIPPING_COUNTRY", "Brasil")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
