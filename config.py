import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./securebidz.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # Session/Token issuer
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    JWT_ALGORITHM = data.get("JWT_ALGORITHM", "HS256")
    JWT_EXPIRE_DAYS = int(data.get("JWT_EXPIRE_DAYS", 7))
    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")

    # Credentials
    BCRYPT_ROUNDS = max(12, int(data.get("BCRYPT_ROUNDS", 12)))
    BACKUP_CODE_BCRYPT_ROUNDS = int(data.get("BACKUP_CODE_BCRYPT_ROUNDS", 10))
    MFA_BACKUP_CODE_COUNT = int(data.get("MFA_BACKUP_CODE_COUNT", 10))
    PASSWORD_HISTORY_SIZE = int(data.get("PASSWORD_HISTORY_SIZE", 5))

    # Lockout
    LOCKOUT_THRESHOLD = int(data.get("LOCKOUT_THRESHOLD", 5))
    LOCKOUT_DURATION_MINUTES = int(data.get("LOCKOUT_DURATION_MINUTES", 120))

    # MFA
    EMAIL_MFA_CODE_TTL_MINUTES = int(data.get("EMAIL_MFA_CODE_TTL_MINUTES", 10))
    MFA_CHALLENGE_TTL_MINUTES = int(data.get("MFA_CHALLENGE_TTL_MINUTES", 10))
    TOTP_VALID_WINDOW = int(data.get("TOTP_VALID_WINDOW", 2))
    MFA_ISSUER = data.get("MFA_ISSUER", "SecureBidz")

    # Auctions
    AUCTION_DURATION_HOURS = int(data.get("AUCTION_DURATION_HOURS", 24))

    # Risk engine
    RISK_WINDOW_MINUTES = int(data.get("RISK_WINDOW_MINUTES", 60))
    SUSPICIOUS_THRESHOLD = int(data.get("SUSPICIOUS_THRESHOLD", 50))
    BID_FREQUENCY_THRESHOLD = int(data.get("BID_FREQUENCY_THRESHOLD", 10))
    FAILED_LOGIN_THRESHOLD = int(data.get("FAILED_LOGIN_THRESHOLD", 3))

    # Rate limiting
    RATE_LIMIT_ENABLED = bool(data.get("RATE_LIMIT_ENABLED", True))
    AUTH_RATE_LIMIT = data.get("AUTH_RATE_LIMIT", "5/15 seconds")
    BID_RATE_LIMIT = data.get("BID_RATE_LIMIT", "10/minute")
    DEFAULT_RATE_LIMIT = data.get("DEFAULT_RATE_LIMIT", "100/15 minutes")

    # Email
    EMAIL_BACKEND = data.get("EMAIL_BACKEND", "console")
    SMTP_HOST = data.get("SMTP_HOST", "localhost")
    SMTP_PORT = int(data.get("SMTP_PORT", 587))
    SMTP_USERNAME = data.get("SMTP_USERNAME", "")
    SMTP_PASSWORD = data.get("SMTP_PASSWORD", "")
    SMTP_FROM = data.get("SMTP_FROM", "no-reply@securebidz.local")
    SMTP_USE_TLS = bool(data.get("SMTP_USE_TLS", True))
    SMTP_TIMEOUT_SECONDS = int(data.get("SMTP_TIMEOUT_SECONDS", 10))
