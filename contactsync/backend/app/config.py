from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # --- Runtime ---
    ENV: str = "dev"  # dev|prod
    CONTACTSYNC_DB_URL: str = "sqlite+aiosqlite:///./contactsync.db"

    # --- Remote user-profile API ---
    # GET  <base>/<externalId>
    # POST <base>/add
    USER_API_BASE_URL: str = "https://dummyjson.com/users"
    USER_API_TIMEOUT_S: int = 20

    # --- Callout orchestration ---
    # When False the app never installs the flush hook (handy for bulk imports).
    CALLOUTS_ENABLED: bool = True
    JOB_MISFIRE_GRACE_S: int = 300  # 0 = run however late


settings = Settings()
