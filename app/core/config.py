from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

class Settings(BaseSettings):
    BOT_TOKEN: str
    BACKEND_URL: str
    BACKEND_API_KEY: str
    DRAFT_DB_PATH: str = "local_data/drafts.db"
    DRAFT_DEBOUNCE_SECONDS: float = 0.5
    FSM_TIMEOUT_MINUTES: int = 30

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

settings = Settings()

BOT_TOKEN = settings.BOT_TOKEN
BACKEND_URL = settings.BACKEND_URL.rstrip("/")
BACKEND_API_KEY = settings.BACKEND_API_KEY
DRAFT_DB_PATH = settings.DRAFT_DB_PATH
DRAFT_DEBOUNCE_SECONDS = settings.DRAFT_DEBOUNCE_SECONDS
FSM_TIMEOUT_MINUTES = settings.FSM_TIMEOUT_MINUTES
