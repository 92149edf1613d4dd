import logging
from datetime import datetime
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..errors import BusinessRuleViolation, Conflict, Forbidden, NotFound, ValidationFailed
from ..status import MESSAGING_STATUSES, SenderType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/messages", tags=["messages"])


@router.get("", response_model=Union[schemas.MessageThreadOut, schemas.ThreadList])
def list_messages(
    application_id: Optional[int] = None,
    hiring_manager_id: Optional[int] = None,
    candidate_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    """
    Return one application's thread, or the inbox thread summaries for a
    hiring manager or a candidate.
    """
    if application_id is not None:
        if not db.get(models.Application, application_id):
            raise NotFound("Application not found")
        return schemas.MessageThreadOut(messages=get_thread(db, application_id))

    if hiring_manager_id is not None:
        applications = (
            db.query(models.Application)
            .join(models.Role)
            .filter(
                models.Role.hiring_manager_id == hiring_manager_id,
                models.Application.status.in_(MESSAGING_STATUSES)
                | models.Application.messages.any(),
            )
            .all()
        )
        threads = [
            build_summary(db, app, SenderType.HIRING_MANAGER, hiring_manager_id)
            for app in applications
        ]
        return schemas.ThreadList(threads=sort_threads(threads))

    if candidate_id is not None:
        applications = (
            db.query(models.Application)
            .filter(
                models.Application.candidate_id == candidate_id,
                models.Application.status.in_(MESSAGING_STATUSES),
            )
            .all()
        )
        threads = [
            build_summary(db, app, SenderType.CANDIDATE, candidate_id)
            for app in applications
        ]
        return schemas.ThreadList(threads=sort_threads(threads))

    raise ValidationFailed("application_id, hiring_manager_id, or candidate_id is required")


def get_thread(db: Session, application_id: int) -> List[schemas.ThreadMessage]:
    messages = (
        db.query(models.Message)
        .filter(models.Message.application_id == application_id)
        .order_by(models.Message.created_at.asc(), models.Message.id.asc())
        .all()
    )
    return [
        schemas.ThreadMessage(
            id=m.id,
            content=m.content,
            created_at=m.created_at,
            sender=message_sender(m),
            client_token=m.client_token,
        )
        for m in messages
    ]


def message_sender(message: models.Message) -> schemas.MessageSender:
    if message.hiring_manager_id is not None:
        person, sender_type = message.hiring_manager, SenderType.HIRING_MANAGER
    else:
        person, sender_type = message.candidate, SenderType.CANDIDATE
    return schemas.MessageSender(
        type=sender_type, id=person.id, name=person.name, avatar_url=person.avatar_url
    )


def build_summary(
    db: Session, application: models.Application, viewer: SenderType, viewer_id: int
) -> schemas.ThreadSummary:
    role = application.role
    if viewer == SenderType.HIRING_MANAGER:
        other = application.candidate
    else:
        other = role.hiring_manager

    base = db.query(models.Message).filter(models.Message.application_id == application.id)
    last = base.order_by(models.Message.created_at.desc(), models.Message.id.desc()).first()

    last_message = None
    if last is not None:
        if viewer == SenderType.HIRING_MANAGER:
            is_from_me = last.hiring_manager_id == viewer_id
        else:
            is_from_me = last.candidate_id == viewer_id
        last_message = schemas.LastMessage(
            content=last.content, created_at=last.created_at, is_from_me=is_from_me
        )

    return schemas.ThreadSummary(
        application_id=application.id,
        application_status=application.status,
        role_id=role.id,
        role_title=role.title,
        company_id=role.company.id,
        company_name=role.company.name,
        other_party=schemas.OtherParty(name=other.name, avatar_url=other.avatar_url),
        last_message=last_message,
        message_count=base.count(),
    )


def sort_threads(threads: List[schemas.ThreadSummary]) -> List[schemas.ThreadSummary]:
    """Most recent activity first; threads without messages go last."""
    def key(thread: schemas.ThreadSummary):
        if thread.last_message is None:
            return (0, datetime.min, thread.application_id)
        created = thread.last_message.created_at.replace(tzinfo=None)
        return (1, created, thread.application_id)

    return sorted(threads, key=key, reverse=True)


@router.post("", response_model=schemas.MessageOut, status_code=status.HTTP_201_CREATED)
def send_message(
    message_in: schemas.MessageCreate,
    response: Response,
    db: Session = Depends(get_db),
):
    application = db.get(models.Application, message_in.application_id)
    if not application:
        raise NotFound("Application not found")

    # Checked on every send so a status change applies to the next message.
    if not application.messaging_available:
        raise BusinessRuleViolation(
            "Messaging is only available for applications in interview or accepted stage."
        )

    if message_in.hiring_manager_id is not None:
        if application.role.hiring_manager_id != message_in.hiring_manager_id:
            raise Forbidden("You are not the hiring manager for this role")
    elif application.candidate_id != message_in.candidate_id:
        raise Forbidden("You are not the candidate for this application")

    if message_in.client_token:
        existing = find_by_token(db, application.id, message_in.client_token)
        if existing is not None:
            return replay(existing, message_in, response)

    message = models.Message(
        application_id=application.id,
        content=message_in.content,
        hiring_manager_id=message_in.hiring_manager_id,
        candidate_id=message_in.candidate_id,
        client_token=message_in.client_token,
    )
    db.add(message)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = None
        if message_in.client_token:
            existing = find_by_token(db, application.id, message_in.client_token)
        if existing is None:
            raise
        return replay(existing, message_in, response)
    db.refresh(message)
    logger.info("Message %s sent on application %s", message.id, application.id)
    return message


def find_by_token(db: Session, application_id: int, client_token: str) -> Optional[models.Message]:
    return (
        db.query(models.Message)
        .filter(
            models.Message.application_id == application_id,
            models.Message.client_token == client_token,
        )
        .first()
    )


def replay(existing: models.Message, message_in: schemas.MessageCreate, response: Response) -> models.Message:
    """Return the stored message for a repeated token, if the same sender stored it."""
    if (
        existing.hiring_manager_id != message_in.hiring_manager_id
        or existing.candidate_id != message_in.candidate_id
    ):
        raise Conflict(
            "Client token already used by another sender in this thread",
            {"client_token": message_in.client_token},
        )
    logger.info("Replayed message %s for token %s", existing.id, message_in.client_token)
    response.status_code = status.HTTP_200_OK
    return existing
