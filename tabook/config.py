import os
from pathlib import Path

from dotenv import load_dotenv

# .env лежит рядом с пакетом, поэтому не зависим от каталога запуска
load_dotenv(Path(__file__).with_name(".env"))

DATABASE_URL = os.getenv("DATABASE_URL", "")

JWT_SECRET = os.getenv("JWT_SECRET", "default_secret")
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# Код, который преподаватель вводит при регистрации
TEACHER_PASSCODE = os.getenv("TEACHER_PASSCODE", "PASSWORD")

CORS_ORIGIN = os.getenv("CORS_ORIGIN", "http://localhost:5173")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "2345"))
