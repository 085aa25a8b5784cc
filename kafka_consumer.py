from confluent_kafka import Consumer, KafkaError
import json
import logging
from threading import Thread
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from datetime import datetime
from typing import Callable

from config import KAFKA_BOOTSTRAP_SERVERS, KAFKA_GROUP_ID, KAFKA_TOPIC, KAFKA_SOURCE_NAME, LOG_LEVEL
from models.user import UserDB, UserRole

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


class KafkaConsumer:
    """Синхронизация пользователей из событий сервиса авторизации"""

    def __init__(self, db_session_getter: Callable[[], Session]):
        logger.info("Kafka configuration:")
        logger.info(f"  Bootstrap servers: {KAFKA_BOOTSTRAP_SERVERS}")
        logger.info(f"  Group ID: {KAFKA_GROUP_ID}")
        logger.info(f"  Topic: {KAFKA_TOPIC}")

        self.config = {
            'bootstrap.servers': KAFKA_BOOTSTRAP_SERVERS,
            'group.id': KAFKA_GROUP_ID,
            'auto.offset.reset': 'earliest',
            'enable.auto.commit': False,
            'session.timeout.ms': 6000,
            'max.poll.interval.ms': 300000,
        }
        self.consumer = Consumer(self.config)
        self.db_session_getter = db_session_getter
        self.running = False
        self.thread = None
        self.topic = KAFKA_TOPIC

    def start(self):
        """Запуск потребителя в отдельном потоке"""
        self.consumer.subscribe([self.topic])
        self.running = True
        self.thread = Thread(target=self._consume_loop, daemon=True, name="KafkaConsumer")
        self.thread.start()
        logger.info(f"Kafka consumer started for topic '{self.topic}'")

    def stop(self):
        """Остановка потребителя"""
        self.running = False
        if self.thread:
            self.thread.join(timeout=5)
        self.consumer.close()
        logger.info("Kafka consumer stopped")

    def _consume_loop(self):
        """Основной цикл потребления сообщений"""
        while self.running:
            try:
                msg = self.consumer.poll(timeout=1.0)
                if msg is None:
                    continue

                if msg.error():
                    if msg.error().code() == KafkaError._PARTITION_EOF:
                        continue
                    logger.error(f"Kafka error: {msg.error()}")
                    continue
                self._process_message(msg.value())
                self.consumer.commit(msg)
            except Exception as e:
                logger.error(f"Error in consumer loop: {e}")

    def _process_message(self, message_bytes: bytes) -> bool:
        """Обработка одного события. Возвращает True, если событие применено"""
        if message_bytes is None:
            logger.warning("Skipping message without value")
            return False
        try:
            message = json.loads(message_bytes.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error(f"Invalid JSON: {e}")
            return False
        if not isinstance(message, dict):
            logger.error(f"Event must be a JSON object, got {type(message).__name__}")
            return False

        event_type = message.get('event_type')
        user_data = message.get('data') or {}
        if not isinstance(user_data, dict):
            logger.error(f"Event data must be a JSON object in {event_type}")
            return False
        if message.get('source') == KAFKA_SOURCE_NAME:
            logger.debug(f"Skipping self-generated event: {event_type}")
            return False

        handlers = {
            'account_created': self._handle_account_created,
            'account_updated': self._handle_account_updated,
            'account_deleted': self._handle_account_deleted,
        }
        handler = handlers.get(event_type)
        if handler is None:
            logger.warning(f"Unknown event type: {event_type}")
            return False

        db = self.db_session_getter()
        try:
            applied = handler(db, user_data)
            db.commit()
            return applied
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Database error processing {event_type}: {e}")
            return False
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            db.rollback()
            logger.error(f"Malformed {event_type} event: {e}")
            return False
        finally:
            db.close()

    @staticmethod
    def _parse_role(value) -> UserRole:
        try:
            return UserRole(value or 'user')
        except ValueError:
            logger.warning(f"Invalid role value: {value}, using 'user'")
            return UserRole.USER

    def _handle_account_created(self, db: Session, user_data: dict) -> bool:
        """Создание пользователя из события (только если его нет)"""
        user_id = user_data.get('user_id')
        email = (user_data.get('email') or '').strip().lower()
        if not user_id or not email:
            logger.error("Missing user_id or email in create event")
            return False
        if db.query(UserDB).filter(UserDB.id == user_id).first():
            logger.debug(f"User {user_id} already exists, skipping create")
            return False
        if db.query(UserDB).filter(UserDB.email == email).first():
            logger.warning(f"Email {email} already belongs to another user, skipping create of {user_id}")
            return False
        db.add(UserDB(
            id=user_id,
            name=user_data.get('name') or email,
            email=email,
            role=self._parse_role(user_data.get('role')),
            access_code=user_data.get('access_code'),
            created_at=datetime.fromisoformat(user_data['created_at'])
            if user_data.get('created_at') else datetime.utcnow()
        ))
        logger.info(f"Created user from Kafka: {email} (ID: {user_id})")
        return True

    def _handle_account_updated(self, db: Session, user_data: dict) -> bool:
        """Обновление пользователя из события"""
        user_id = user_data.get('user_id')
        if not user_id:
            logger.error("No user_id in update event")
            return False
        user = db.query(UserDB).filter(UserDB.id == user_id).first()
        if not user:
            logger.warning(f"User {user_id} not found for update, creating")
            return self._handle_account_created(db, user_data)
        if user_data.get('name'):
            user.name = user_data['name']
        if user_data.get('email'):
            user.email = user_data['email'].strip().lower()
        if 'role' in user_data:
            user.role = self._parse_role(user_data['role'])
        if 'access_code' in user_data:
            user.access_code = user_data['access_code']

        logger.info(f"Updated user from Kafka: {user.email}")
        return True

    def _handle_account_deleted(self, db: Session, user_data: dict) -> bool:
        """Удаление пользователя; ссылки на него в проектах и задачах остаются"""
        user_id = user_data.get('user_id')
        if not user_id:
            logger.error("No user_id in delete event")
            return False
        user = db.query(UserDB).filter(UserDB.id == user_id).first()
        if not user:
            logger.warning(f"User {user_id} not found for deletion")
            return False
        db.delete(user)
        logger.info(f"Deleted user from Kafka: {user_id}")
        return True
