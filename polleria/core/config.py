from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List, Optional

class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Polleria Back-Office"
    APP_PORT: int = 9202
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    
    # Database
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "polleria"
    POSTGRES_PORT: int = 5432
    DATABASE_URL_OVERRIDE: Optional[str] = None  # e.g. sqlite:///./polleria.db
    
    # WhatsApp Business (Meta Cloud API)
    WHATSAPP_ACCESS_TOKEN: Optional[str] = None
    WHATSAPP_PHONE_NUMBER_ID: Optional[str] = None
    WHATSAPP_VERIFY_TOKEN: str = "mi_token_secreto_123"
    WHATSAPP_APP_SECRET: Optional[str] = None
    WHATSAPP_API_VERSION: str = "v21.0"
    WHATSAPP_TIMEOUT_SECONDS: float = 15.0
    WHATSAPP_STAFF_NUMBERS: str = ""  # comma separated: "521234567890,529876543210"
    WHATSAPP_DISPLAY_NUMBER: Optional[str] = None
    
    # Message interpreter
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-1.5-flash"
    GEMINI_TIMEOUT_SECONDS: float = 30.0
    
    # Order intake
    DEFAULT_COUNTRY_CODE: str = "52"
    DEFAULT_LOCATION_ID: int = 1
    FRIED_LOCATION_NAME: str = "Pollo Frito"
    BULK_LOCATION_NAME: str = "Pollo a Granel"
    ATOMIC_ORDER_WRITES: bool = False
    
    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
    
    @property
    def whatsapp_configured(self) -> bool:
        return bool(self.WHATSAPP_ACCESS_TOKEN and self.WHATSAPP_PHONE_NUMBER_ID)
    
    @property
    def staff_numbers(self) -> List[str]:
        return [n.strip() for n in self.WHATSAPP_STAFF_NUMBERS.split(",") if n.strip()]
    
    class Config:
        env_file = ".env"
        extra = "ignore"

@lru_cache()
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
