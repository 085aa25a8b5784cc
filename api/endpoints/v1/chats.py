from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from auth import current_user_auth
from database import get_db
from permissions import Principal
from schemas.chat import ChatCreate, ChatResponse
from schemas.response import StandardResponse
import crud.chat as chat_crud

router = APIRouter(prefix="/v1/chats", tags=["chats-v1"])


@router.get("/{task_id}", response_model=StandardResponse)
def read_task_chats(task_id: int, db: Session = Depends(get_db), principal: Principal = Depends(current_user_auth)):
    """Сообщения чата задачи в порядке создания"""
    chats = chat_crud.get_task_chats(db, task_id)
    return StandardResponse(
        message="Chats retrieved successfully",
        data=[ChatResponse.model_validate(c) for c in chats]
    )


@router.post("/", response_model=StandardResponse, status_code=status.HTTP_201_CREATED)
def create_chat(
        chat: ChatCreate,
        db: Session = Depends(get_db),
        principal: Principal = Depends(current_user_auth)
):
    """Отправить сообщение в чат задачи"""
    db_chat = chat_crud.create_chat(db, principal, chat)
    return StandardResponse(
        message="Message sent",
        data=ChatResponse.model_validate(db_chat)
    )
