"""Cleaned Trello entity models.

These are the reduced views returned to the agent: only semantically
meaningful fields, with member and label ids already resolved to names.
Colour, position, badge and other presentation fields have no place here.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class EntityKind(str, Enum):
    """Which kind of Trello payload a caller fetched."""

    BOARD = "board"
    LIST = "list"
    CARD = "card"


class CleanEntity(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with Trello-style keys, omitting children never attached."""

        return self.model_dump(by_alias=True, exclude_unset=True)


class CleanCard(CleanEntity):
    id: str = ""
    name: str = ""
    desc: str = ""
    due: Optional[str] = None
    labels: List[str] = Field(default_factory=list)
    members: List[str] = Field(default_factory=list)
    checklist_status: str = Field(default="0/0", alias="checklistStatus")
    url: str = ""
    closed: bool = False


class CleanList(CleanEntity):
    id: str = ""
    name: str = ""
    closed: bool = False
    cards: Optional[List[CleanCard]] = None


class CleanBoard(CleanEntity):
    id: str = ""
    name: str = ""
    desc: str = ""
    url: str = ""
    lists: Optional[List[CleanList]] = None
