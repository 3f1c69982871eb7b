import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    # Provide a safe development fallback to avoid 500s when SECRET_KEY is missing.
    SECRET_KEY = os.getenv('SECRET_KEY') or 'dev-secret-key-change-me'
    DATABASE_URL = os.getenv('DATABASE_URL')
    SQLALCHEMY_DATABASE_URI = DATABASE_URL or 'sqlite:///ihsm.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SESSION_COOKIE_SECURE = os.getenv('SESSION_COOKIE_SECURE', 'true').lower() in ('1', 'true', 'yes')
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    REMEMBER_COOKIE_SECURE = SESSION_COOKIE_SECURE
    REMEMBER_COOKIE_HTTPONLY = True
    WTF_CSRF_TIME_LIMIT = None

    RATELIMIT_STORAGE_URI = os.getenv('RATELIMIT_STORAGE_URI', 'memory://')

    # Image hosting (ImgBB compatible). The key stays on the server.
    IMGBB_API_KEY = os.getenv('IMGBB_API_KEY')
    IMAGE_UPLOAD_URL = os.getenv('IMAGE_UPLOAD_URL', 'https://api.imgbb.com/1/upload')
    UPLOAD_TIMEOUT = float(os.getenv('UPLOAD_TIMEOUT', '15'))
    MAX_IMAGE_SIZE = int(os.getenv('MAX_IMAGE_SIZE', str(2 * 1024 * 1024)))

    # Origin used when building shareable registration URLs
    PUBLIC_ORIGIN = os.getenv('PUBLIC_ORIGIN')


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SECRET_KEY = 'test-secret-key'
    WTF_CSRF_ENABLED = False
    RATELIMIT_ENABLED = False
    SESSION_COOKIE_SECURE = False
    REMEMBER_COOKIE_SECURE = False
    IMGBB_API_KEY = 'test-imgbb-key'
    PUBLIC_ORIGIN = 'http://localhost:5173'
