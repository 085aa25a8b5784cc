from sqlalchemy.orm import Session
from typing import List

from models.chat import ChatDB
from permissions import Principal
from schemas.chat import ChatCreate


def get_task_chats(db: Session, task_id: int) -> List[ChatDB]:
    return db.query(ChatDB).filter(ChatDB.task_id == task_id).order_by(ChatDB.created_at, ChatDB.id).all()


def create_chat(db: Session, principal: Principal, chat: ChatCreate) -> ChatDB:
    """Сообщение в чат задачи; отправитель всегда текущий пользователь"""
    db_chat = ChatDB(
        task_id=chat.task_id,
        sender_id=principal.id,
        message=chat.message,
        message_type=chat.message_type
    )
    db.add(db_chat)
    db.commit()
    db.refresh(db_chat)
    return db_chat
