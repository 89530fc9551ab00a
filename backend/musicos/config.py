from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./dev.db"
    FRONTEND_ORIGINS: List[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"

    # beneficiary account copied into every bank-transfer order
    BANK_IBAN: str = "LT98 3250 0007 9827 7556"
    BANK_BIC: str = "REVOLT21"
    BANK_BENEFICIARY: str = "Bruno Novaes Souza"
    BANK_NAME: str = "Revolut Bank UAB"
    BANK_ADDRESS: str = "Konstitucijos ave. 21B, 08130, Vilnius, Lithuania"
    BANK_CURRENCY: str = "EUR"

    PAYMENT_REFERENCE_STYLE: str = "mus"  # mus, mb
    REFERENCE_MAX_ATTEMPTS: int = 3
    ORDER_TTL_DAYS: int = 7
    ORDER_EXPIRY_ENFORCED: bool = False
    MAINTENANCE_INTERVAL_SECONDS: int = 300
    PAYPAL_ME_HANDLE: str = "pagamentos@musicosbooking.pt"

    UPLOAD_DIR: str = "./uploads"
    PUBLIC_UPLOAD_URL: str = "http://127.0.0.1:8000/uploads"
    MAX_PROOF_BYTES: int = 5 * 1024 * 1024

    EMAIL_HOST: str = "localhost"
    EMAIL_PORT: int = 587
    EMAIL_SECURE: bool = False
    EMAIL_USER: str = ""
    EMAIL_PASSWORD: str = ""
    EMAIL_RECEIVE: str = "geral@musicosbooking.pt"
    EMAIL_TIMEOUT_SECONDS: int = 10

    RATE_LIMIT_MAX_ATTEMPTS: int = 5
    RATE_LIMIT_WINDOW_SECONDS: int = 900
    CSRF_PROTECTION: bool = True
    CSRF_TTL_SECONDS: int = 3600
    TOKEN_TTL_HOURS: int = 24

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    def bank_details(self) -> dict:
        return {
            "iban": self.BANK_IBAN,
            "bic": self.BANK_BIC,
            "beneficiary": self.BANK_BENEFICIARY,
            "bankName": self.BANK_NAME,
            "bankAddress": self.BANK_ADDRESS,
            "currency": self.BANK_CURRENCY,
        }

settings = Settings()
