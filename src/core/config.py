from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # 앱 설정
    APP_NAME: str = "watermark-overlay"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "DEBUG"

    # 서버 설정
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # 워터마크 에셋(오버레이 이미지, 폰트)의 기준 경로
    ASSET_DIR: str = "."
    FONT_DIRS: list[str] = []
    # fontconfig 설정 파일 경로 (FONTCONFIG_PATH가 비어 있을 때만 적용)
    FONT_CONFIG_PATH: str | None = None

    # 출력/스트리밍 설정
    DEFAULT_FORMAT: str = "png"
    STREAM_CHUNK_SIZE: int = 64 * 1024

    # executor 스레드 수
    WORKERS: int = 4

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
