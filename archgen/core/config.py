from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    app_name: str = "archgen"
    api_host: str = "0.0.0.0"
    api_port: int = 8080

    database_url: str = "sqlite:///./archgen.db"
    run_migrations_on_startup: bool = True

    workspaces_dir: str = "/data/workspaces"

    git_enabled: bool = True
    git_author_name: str = "archgen"
    git_author_email: str = "archgen@localhost"

settings = Settings()
