import os, secrets
from typing import Any
from dotenv import load_dotenv

load_dotenv()


def env_flag(name:str, default:bool) -> bool:
    value : str = os.getenv(name, '')
    if not value:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def load_config() -> dict[str, Any]:
    '''Settings read from the environment (and ``.env`` when present).'''
    return {
        'SECRET_KEY': os.getenv('SECRET_KEY') or secrets.token_hex(16),
        'SQLALCHEMY_DATABASE_URI': os.getenv('DATABASE_URL', 'sqlite:///postboard.db'),
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'AUTO_MIGRATE': env_flag('AUTO_MIGRATE', True),
        'LOG_LEVEL': os.getenv('LOG_LEVEL', 'INFO').upper(),
        'HOST': os.getenv('HOST', '127.0.0.1'),
        'PORT': int(os.getenv('PORT', '5000')),
    }
