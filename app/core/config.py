from functools import lru_cache
from typing import Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    name: str = Field(default="study-buddy", alias="APP_NAME")
    version: str = Field(default="v1", alias="API_VERSION")
    port: int = Field(default=3000, alias="APP_PORT")
    mode: str = Field(default="prod", alias="MODE")
    auth_required: bool = Field(default=True, alias="AUTH_REQUIRED")
    max_query_length: int = Field(default=500, alias="MAX_QUERY_LENGTH")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"], alias="CORS_ORIGINS"
    )
    static_dir: Optional[str] = Field(default="public", alias="STATIC_DIR")

    @computed_field
    def is_production(self) -> bool:
        return self.mode != "dev"


class CompletionSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    gemini_api_key: Optional[str] = Field(default=None, alias="GEMINI_API_KEY")
    gemini_model: str = Field(default="gemini-2.0-flash", alias="GEMINI_MODEL")

    # Model provider selection: "google" or "openrouter"
    model_provider: str = Field(default="google", alias="MODEL_PROVIDER")
    openrouter_api_key: Optional[str] = Field(default=None, alias="OPENROUTER_API_KEY")
    openrouter_model: str = Field(
        default="google/gemini-2.0-flash-001", alias="OPENROUTER_MODEL"
    )


class JWTSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    # HS256 shared secret (e.g. the identity provider's project JWT secret)
    secret: Optional[str] = Field(default=None, alias="JWT_SECRET")
    # RS256 verification key, either a PEM public key or a JSON key set
    public_key: Optional[str] = Field(default=None, alias="JWT_PUBLIC_KEY")
    jwks: Optional[str] = Field(default=None, alias="JWT_JWKS")
    algorithm: Optional[str] = Field(default=None, alias="JWT_ALGORITHM")
    audience: Optional[str] = Field(default="authenticated", alias="JWT_AUDIENCE")
    issuer: Optional[str] = Field(default=None, alias="JWT_ISSUER")

    @computed_field
    def resolved_algorithm(self) -> str:
        if self.algorithm:
            return self.algorithm
        return "HS256" if self.secret else "RS256"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=lambda: AppSettings())
    completion: CompletionSettings = Field(
        default_factory=lambda: CompletionSettings()
    )
    jwt: JWTSettings = Field(default_factory=lambda: JWTSettings())


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, built once and read-only afterwards."""
    return Settings()
