"""
Application Configuration

FLOW OVERVIEW
- Config.__init__
  • Reads FLASK_ENV to select which .env file to load (dev/prod). Testing bypasses file load.
- Properties expose configuration values, defaulting to sensible development-safe defaults.
- Auth provider tokens are verified with AUTH_JWT_SECRET / AUTH_JWT_AUDIENCE.
"""

import os
from dotenv import load_dotenv


def _env_bool(name, default):
    return os.getenv(name, default).lower() == 'true'


class Config:
    """Base configuration class"""

    def __init__(self):
        # Load environment variables based on FLASK_ENV
        env_file = os.getenv('FLASK_ENV', 'development')
        if env_file == 'testing':
            # For testing, don't load config files, use environment variables directly
            pass
        elif env_file == 'production':
            load_dotenv('config.prod.env')
        else:
            load_dotenv('config.env')  # Default to development

    @property
    def SECRET_KEY(self):
        """Application secret key"""
        return os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')

    @property
    def SQLALCHEMY_DATABASE_URI(self):
        """Database connection URI"""
        return os.getenv('DATABASE_URL', 'sqlite:///bloomdesk.db')

    @property
    def SQLALCHEMY_TRACK_MODIFICATIONS(self):
        return False

    @property
    def AUTH_JWT_SECRET(self):
        """Shared secret the auth provider signs access tokens with"""
        return os.getenv('AUTH_JWT_SECRET', 'dev-auth-secret-change-in-production')

    @property
    def AUTH_JWT_AUDIENCE(self):
        """Expected `aud` claim of access tokens"""
        return os.getenv('AUTH_JWT_AUDIENCE', 'authenticated')

    @property
    def AUTH_JWT_ALGORITHMS(self):
        return [a.strip() for a in os.getenv('AUTH_JWT_ALGORITHMS', 'HS256').split(',') if a.strip()]

    @property
    def MAIL_SERVER(self):
        """Mail server hostname"""
        return os.getenv('MAIL_SERVER', 'localhost')

    @property
    def MAIL_PORT(self):
        """Mail server port"""
        return int(os.getenv('MAIL_PORT', 587))

    @property
    def MAIL_USE_TLS(self):
        return _env_bool('MAIL_USE_TLS', 'True')

    @property
    def MAIL_USE_SSL(self):
        return _env_bool('MAIL_USE_SSL', 'False')

    @property
    def MAIL_USERNAME(self):
        return os.getenv('MAIL_USERNAME')

    @property
    def MAIL_PASSWORD(self):
        return os.getenv('MAIL_PASSWORD')

    @property
    def MAIL_DEFAULT_SENDER(self):
        """Default sender email address"""
        return os.getenv('MAIL_DEFAULT_SENDER', 'noreply@bloomdesk.local')

    @property
    def MAIL_SUPPRESS_SEND(self):
        return _env_bool('MAIL_SUPPRESS_SEND', 'False')

    @property
    def APP_BASE_URL(self):
        """Public URL of the web client, used for invite links"""
        return os.getenv('APP_BASE_URL', 'http://localhost:3000').rstrip('/')

    @property
    def ATTENTION_UPCOMING_DAYS(self):
        """Window in which understaffed projects are raised to the review queue"""
        return int(os.getenv('ATTENTION_UPCOMING_DAYS', 7))

    @property
    def REMINDER_DAYS(self):
        """Default look-ahead of the send-reminders command"""
        return int(os.getenv('REMINDER_DAYS', 3))

    @property
    def LOG_LEVEL(self):
        return os.getenv('LOG_LEVEL', 'INFO').upper()

    @property
    def SESSION_COOKIE_SECURE(self):
        """Whether session cookies should be secure (HTTPS only)"""
        return _env_bool('SESSION_COOKIE_SECURE', 'False')

    @property
    def SESSION_COOKIE_HTTPONLY(self):
        return True

    @property
    def SESSION_COOKIE_SAMESITE(self):
        """Session cookie SameSite policy"""
        return 'Lax'

    @property
    def PERMANENT_SESSION_LIFETIME(self):
        """Session lifetime in seconds"""
        return int(os.getenv('PERMANENT_SESSION_LIFETIME', 3600))
