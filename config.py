import os

# База данных
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./tracker.db")
SQL_ECHO = os.getenv("SQL_ECHO", "0") == "1"

# Генерация кодов PROJ-#### / TASK-####
CODE_MAX_ATTEMPTS = int(os.getenv("CODE_MAX_ATTEMPTS", "10"))
CODE_INSERT_ATTEMPTS = int(os.getenv("CODE_INSERT_ATTEMPTS", "3"))

# Kafka (синхронизация пользователей из сервиса авторизации)
KAFKA_ENABLED = os.getenv("KAFKA_ENABLED", "0") == "1"
KAFKA_BOOTSTRAP_SERVERS = os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092")
KAFKA_GROUP_ID = os.getenv("KAFKA_GROUP_ID", "task-access-user-sync")
KAFKA_TOPIC = os.getenv("KAFKA_TOPIC", "auth.account-events")
KAFKA_SOURCE_NAME = "task-access-service"

CORS_ALLOW_ORIGINS = os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
