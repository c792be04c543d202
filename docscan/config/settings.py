from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"
    log_file: str | None = None

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "docscan"
    db_username: str = "docscan"
    db_password: str = "secret"
    db_pool_max_size: int = 10

    scan_working_dir: str = "uploads/scans"
    scan_pacing_seconds: float = 2.0
    scanner_backends: str = "sane,wia"
    sane_command: str = "scanimage"
    wia_command: str = "wia-cmd-scanner"
    discovery_timeout_seconds: int = 15
    capture_timeout_seconds: int = 180

    ocr_engine_path: str = "tesseract"
    ocr_language: str = "eng"
    ocr_page_segmentation_mode: int = 6
    ocr_timeout_seconds: int = 120
    ocr_max_workers: int = 1

    pdf_engine: str = "pdfplumber"
    pdftotext_command: str = "pdftotext"
    pdf_timeout_seconds: int = 60

    audit_sink: str = "log"
