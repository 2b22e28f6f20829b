import os


def _flag(name: str, default: str) -> bool:
    return bool(int(os.environ.get(name, default)))


class Config:
    """Settings shared by every environment; environment modules override a few."""

    SECRET_KEY = os.environ.get("SECRET_KEY") or "change-me"

    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "hr_payroll")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    AUTO_INIT_DB = _flag("AUTO_INIT_DB", "0")

    # Attendance rules
    OFFICE_START_HOUR = int(os.environ.get("OFFICE_START_HOUR", "9"))
    OFFICE_END_HOUR = int(os.environ.get("OFFICE_END_HOUR", "17"))
    ORPHAN_BREAK_MINUTES = int(os.environ.get("ORPHAN_BREAK_MINUTES", "30"))
    MAX_BREAKS_PER_DAY = int(os.environ.get("MAX_BREAKS_PER_DAY", "4"))

    PAYMENT_CURRENCY = os.environ.get("PAYMENT_CURRENCY", "INR")


SECRET_KEY = Config.SECRET_KEY
DB_CONFIG = {
    "host": Config.DB_HOST,
    "port": Config.DB_PORT,
    "user": Config.DB_USER,
    "password": Config.DB_PASSWORD,
    "database": Config.DB_NAME,
}

DEBUG = _flag("DEBUG", "0")
LOG_LEVEL = Config.LOG_LEVEL
AUTO_INIT_DB = Config.AUTO_INIT_DB

OFFICE_START_HOUR = Config.OFFICE_START_HOUR
OFFICE_END_HOUR = Config.OFFICE_END_HOUR
ORPHAN_BREAK_MINUTES = Config.ORPHAN_BREAK_MINUTES
MAX_BREAKS_PER_DAY = Config.MAX_BREAKS_PER_DAY
PAYMENT_CURRENCY = Config.PAYMENT_CURRENCY
