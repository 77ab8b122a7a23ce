import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-change-me")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Requests without an X-Operator-Id header act for this operator
    DEFAULT_OPERATOR_ID = os.environ.get("DEFAULT_OPERATOR_ID", "default")
    DEFAULT_CLIENT_PRICE = float(os.environ.get("DEFAULT_CLIENT_PRICE", "35.00"))

    # Renewal messages
    PAYMENT_KEY = os.environ.get("PAYMENT_KEY", "")
    OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY", "")
    OPENAI_MODEL = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")
    OPENAI_TIMEOUT_S = float(os.environ.get("OPENAI_TIMEOUT_S", "30"))
