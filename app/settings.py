from pydantic import HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.learning_map.layout import LayoutOptions


class Settings(BaseSettings):
    """App configuration"""

    model_config = SettingsConfigDict(  # pyright: ignore[reportUnannotatedClassAttribute]
        env_file='.env', env_file_encoding='utf-8', extra='ignore'
    )

    openai_api_key: str
    openai_base_url: HttpUrl = HttpUrl('https://api.openai.com/v1')
    model_name: str = 'gpt-4o-mini'
    language: str = 'en'

    # seconds a single generator call may take before the node is released
    generation_timeout: float = 60.0
    max_sessions: int = 1000
    log_level: str = 'INFO'

    node_width: float = 220
    node_height: float = 100
    nodesep: float = 100
    ranksep: float = 150

    @property
    def layout_options(self) -> LayoutOptions:
        return LayoutOptions(
            node_width=self.node_width,
            node_height=self.node_height,
            nodesep=self.nodesep,
            ranksep=self.ranksep,
        )


settings = Settings()  # pyright: ignore[reportCallIssue]
