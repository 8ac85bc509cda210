from pydantic import BaseModel
import os

class Settings(BaseModel):
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./hours.db")
    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret")
    jwt_expires_min: int = int(os.getenv("JWT_EXPIRES_MIN", "120"))
    admin_email: str = os.getenv("ADMIN_EMAIL", "admin@example.com").strip().lower()
    admin_password: str = os.getenv("ADMIN_PASSWORD", "admin1234!@")
    admin_name: str = os.getenv("ADMIN_NAME", "Administrator")

settings = Settings()
