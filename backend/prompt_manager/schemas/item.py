"""Item, metadata and draft schemas.

Items travel as camelCase JSON (``parentId``, ``lastModified``) and are
serialized with ``exclude_none`` so that an absent field stays absent: a leaf
has no ``children`` key, a root item has no ``parentId`` key.
"""

from enum import Enum
from typing import Annotated, Any, List, Optional

from pydantic import AfterValidator, AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Shared by every wire model: camelCase aliases, snake_case attribute access.
CAMEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)

# Kind values written by earlier releases of the store.
_LEGACY_KINDS = {"prompt": "leaf"}


class ItemKind(str, Enum):
    """Item kind. Folders hold children, leaves hold prompt text."""
    FOLDER = "folder"
    LEAF = "leaf"


def _coerce_kind(v: Any) -> Any:
    if isinstance(v, str):
        return _LEGACY_KINDS.get(v, v)
    return v


def _validate_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Name cannot be empty")
    return v


KindField = Annotated[ItemKind, BeforeValidator(_coerce_kind)]
NameField = Annotated[str, AfterValidator(_validate_name)]


class ItemMetadata(BaseModel):
    """Open mapping of descriptive fields. Unknown keys are kept as-is."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    description: Optional[str] = None
    tags: Optional[List[str]] = None
    last_modified: Optional[int] = None  # epoch milliseconds
    provider: Optional[str] = None  # e.g. "OpenAI", "Anthropic"
    model_name: Optional[str] = None
    base_url: Optional[str] = None

    def merged_with(self, other: "ItemMetadata") -> "ItemMetadata":
        """Shallow key-by-key merge: keys set on *other* win, the rest are kept."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        data.update(other.model_dump(by_alias=True, exclude_unset=True))
        data.update(other.model_extra or {})
        return ItemMetadata.model_validate(data)


class Version(BaseModel):
    """Immutable snapshot of a prompt's content."""
    model_config = CAMEL_CONFIG

    id: str
    timestamp: int  # epoch milliseconds
    content: str
    label: Optional[str] = None


class Item(BaseModel):
    """A node in the forest: a folder or a leaf with text content."""
    model_config = CAMEL_CONFIG

    id: str
    name: str
    kind: KindField = Field(validation_alias=AliasChoices("kind", "type"))
    parent_id: Optional[str] = None
    children: Optional[List["Item"]] = None
    content: Optional[str] = None
    versions: Optional[List[Version]] = None
    metadata: ItemMetadata = Field(default_factory=ItemMetadata)

    @property
    def is_folder(self) -> bool:
        return self.kind == ItemKind.FOLDER

    def clone(self) -> "Item":
        """Structural deep copy; the clone shares nothing with the original."""
        return self.model_copy(deep=True)


class ItemDraft(BaseModel):
    """Caller-supplied fields for a new item. Ids and children are assigned by the store."""
    model_config = CAMEL_CONFIG

    name: NameField
    kind: KindField = Field(validation_alias=AliasChoices("kind", "type"))
    content: Optional[str] = None
    versions: Optional[List[Version]] = None
    metadata: Optional[ItemMetadata] = None


class ItemCreate(ItemDraft):
    """Request body for creating an item, optionally under a parent folder."""
    parent_id: Optional[str] = None

    model_config = {
        **CAMEL_CONFIG,
        "json_schema_extra": {
            "examples": [
                {
                    "parentId": "folder-1",
                    "name": "Summarizer",
                    "kind": "leaf",
                    "content": "Summarize the following text:\n\n{{text}}",
                    "metadata": {"description": "General purpose summary", "tags": ["writing"]},
                }
            ]
        },
    }


class ItemUpdate(BaseModel):
    """Partial update. Only fields present in the request are applied.

    ``id``, ``kind``, ``children``, ``parentId`` and ``versions`` are rejected.
    Placement changes go through a move, history through the version endpoints.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    name: Optional[NameField] = None
    content: Optional[str] = None
    metadata: Optional[ItemMetadata] = None


class ItemMoveRequest(BaseModel):
    """Move an item under a folder, or to root level when ``parentId`` is null."""
    model_config = CAMEL_CONFIG

    parent_id: Optional[str] = None
