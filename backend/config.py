# backend/config.py
"""
Configuration read from the environment
"""
import os


def _env_bool(name, default):
    return os.environ.get(name, str(default)).lower() in ("1", "true", "yes")


class Config:
    EPSILON = float(os.environ.get("SQUADSPLIT_EPSILON", "0.01"))
    PERMISSIVE_MEMBERS = _env_bool("SQUADSPLIT_PERMISSIVE_MEMBERS", False)
    CURRENCY_SYMBOL = os.environ.get("SQUADSPLIT_CURRENCY_SYMBOL", "$")
    CORS_ORIGINS = os.environ.get("SQUADSPLIT_CORS_ORIGINS", "*")
    DEBUG = _env_bool("FLASK_DEBUG", False)
    PORT = int(os.environ.get("PORT", "5000"))


config = Config()
