# Configuration settings
import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


class Config:
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///social_network.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'dev-only-jwt-secret-key-0123456789abcdef')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=int(os.getenv('JWT_ACCESS_TOKEN_EXPIRES_HOURS', '24')))
    BCRYPT_LOG_ROUNDS = int(os.getenv('BCRYPT_LOG_ROUNDS', '12'))
    # bcrypt only takes 72 bytes; Flask-Bcrypt pre-hashes with SHA-256 instead
    BCRYPT_HANDLE_LONG_PASSWORDS = True
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    DEBUG = False
    TESTING = False


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG')


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    JWT_SECRET_KEY = 'test-only-jwt-secret-key-0123456789abcdef'
    # bcrypt's minimum work factor keeps the suite fast
    BCRYPT_LOG_ROUNDS = 4
    LOG_LEVEL = 'WARNING'


class ProductionConfig(Config):
    DEBUG = False
    # No fallback: create_app refuses to start without a key
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')


config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}
