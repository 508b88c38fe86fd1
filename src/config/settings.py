# src/config/settings.py

"""Central configuration for the precios_cr comparison service."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the precios_cr comparison service."""

    # --- Generator backend ---
    # "mock" draws random records, "ai" asks the chat-completion service.
    GENERATOR_BACKEND: str = os.getenv("PRECIOS_BACKEND", "mock").lower()
    MOCK_DELAY_RANGE: tuple[float, float] = (0.5, 1.5)  # Seconds
    MOCK_PROMO_PROBABILITY: float = 0.6
    MOCK_PROMO_FACTOR: float = 0.85

    # --- Generative text service ---
    LLM_BASE_URL: str = os.getenv(
        "LLM_BASE_URL", "https://api.openai.com/v1"
    )
    LLM_API_KEY: str = os.getenv("LLM_API_KEY", "")
    LLM_MODEL: str = os.getenv("LLM_MODEL", "gpt-4o-mini")
    LLM_TEMPERATURE: float = 0.7
    LLM_MAX_TOKENS: int = 3000
    REQUEST_TIMEOUT: int = 60           # Seconds before a request times out
    MAX_RETRIES: int = 3                # Retry count on transient failures
    RETRY_DELAY: float = 2.0            # Base seconds between retries
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"

    # --- Records ---
    CURRENCY_SYMBOL: str = "₡"
    NO_PROMO_TEXT: str = "Sin precio promocional"
    UNKNOWN_PRODUCT_NAME: str = "Producto desconocido"
    PLACEHOLDER_IMAGE_URL: str = (
        "https://via.placeholder.com/300x300/4A90E2/FFFFFF?text="
    )

    # --- Batch uploads ---
    ALLOWED_UPLOAD_EXTENSIONS: list[str] = [".xlsx", ".xls", ".csv", ".tsv"]
    SAMPLE_BATCH_TERMS: list[str] = [
        "Samsung Galaxy S25 Ultra 256GB",
        "iPhone 16 Pro 128GB",
        "Televisor LG 55 pulgadas 4K",
        "Refrigeradora Mabe 14 pies",
        "Lavadora Whirlpool 18kg",
        "Laptop HP Pavilion 15",
        "Freidora de aire Oster",
        "Audífonos Sony WH-1000XM5",
        "Microondas Panasonic 1.2 pies",
        "PlayStation 5 Slim",
    ]

    # --- HTTP server ---
    SERVER_HOST: str = os.getenv("PRECIOS_HOST", "127.0.0.1")
    SERVER_PORT: int = int(os.getenv("PRECIOS_PORT", "8000"))

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    RESULTS_DIR: Path = BASE_DIR / "results"
    UPLOADS_DIR: Path = BASE_DIR / "temp"
    LOGS_DIR: Path = BASE_DIR / "logs"

    # --- Stores (registry; each store owns a fixed error code) ---
    AVAILABLE_STORES: list[dict[str, str | int | float]] = [
        {
            "id": "gollo",
            "label": "Gollo",
            "domain": "gollo.cr",
            "error_code": 100,
            "price_multiplier": 1.0,
        },
        {
            "id": "monge",
            "label": "Monge",
            "domain": "monge.cr",
            "error_code": 101,
            "price_multiplier": 1.05,
        },
        {
            "id": "mexpress",
            "label": "MExpress",
            "domain": "mexpress.cr",
            "error_code": 102,
            "price_multiplier": 0.95,
        },
    ]
