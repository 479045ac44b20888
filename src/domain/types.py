from dataclasses import dataclass
from typing import Literal

AnnotationKind = Literal["highlight", "underline", "note", "image", "freehand"]

LibraryType = Literal["user", "group", "feed"]


@dataclass(frozen=True)
class AnnotationPosition:
    page_index: int


@dataclass(frozen=True)
class CapacitiesCredentials:
    api_token: str = ""
    space_id: str = ""

    def is_complete(self) -> bool:
        return bool(self.api_token and self.space_id)
