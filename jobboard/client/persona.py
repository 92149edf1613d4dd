"""The visitor's acting identity, cached on disk. Nothing here is authenticated."""

import json
import logging
import os
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from ..config import settings

logger = logging.getLogger(__name__)


class CandidatePersona(BaseModel):
    type: Literal["candidate"] = "candidate"
    id: int
    name: str
    email: str
    avatar_url: Optional[str] = None
    headline: Optional[str] = None


class HiringManagerPersona(BaseModel):
    type: Literal["hiring-manager"] = "hiring-manager"
    id: int
    name: str
    email: str
    avatar_url: Optional[str] = None
    title: Optional[str] = None
    active_company_id: Optional[int] = None
    active_company_name: Optional[str] = None


Persona = Annotated[Union[CandidatePersona, HiringManagerPersona], Field(discriminator="type")]

_persona_adapter = TypeAdapter(Persona)


def persona_from_record(record: Dict[str, Any]) -> Union[CandidatePersona, HiringManagerPersona]:
    """Build a persona from a /personas record (or any candidate/manager payload)."""
    if record.get("type") == "hiring-manager":
        return HiringManagerPersona(
            id=record["id"],
            name=record["name"],
            email=record["email"],
            avatar_url=record.get("avatar_url"),
            title=record.get("title"),
        )
    return CandidatePersona(
        id=record["id"],
        name=record["name"],
        email=record["email"],
        avatar_url=record.get("avatar_url"),
        headline=record.get("headline"),
    )


class PersonaStore:
    """
    Explicitly initialized persona context.

    Nothing is read until ``load()``; ``save()`` and ``clear()`` keep the file
    and the in-memory value in step.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = os.path.expanduser(path or settings.persona_store_path)
        self.persona = None
        self.loaded = False

    def load(self):
        self.loaded = True
        self.persona = None
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, encoding="utf-8") as fh:
                self.persona = _persona_adapter.validate_python(json.load(fh))
        except (ValueError, ValidationError):
            logger.warning("Discarding unreadable persona file %s", self.path)
            os.remove(self.path)
        return self.persona

    def save(self, persona) -> None:
        if persona is None:
            self.clear()
            return
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as fh:
            json.dump(persona.model_dump(), fh)
        self.persona = persona
        self.loaded = True

    def clear(self) -> None:
        if os.path.exists(self.path):
            os.remove(self.path)
        self.persona = None
        self.loaded = True

    def set_active_company(self, company_id: int, company_name: Optional[str] = None) -> None:
        """Switch the working company; ignored unless acting as a hiring manager."""
        if not isinstance(self.persona, HiringManagerPersona):
            return
        self.save(self.persona.model_copy(
            update={"active_company_id": company_id, "active_company_name": company_name}
        ))
