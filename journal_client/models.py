"""Shared wire models for the journal client."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class EntityType(str, Enum):
    PERSON = "PERSON"
    HABIT = "HABIT"
    PROJECT = "PROJECT"
    GOAL = "GOAL"
    DREAM = "DREAM"
    EVENT = "EVENT"
    CUSTOM = "CUSTOM"


class PlanType(str, Enum):
    FREE = "FREE"
    PRO = "PRO"
    VISION = "VISION"


class SubscriptionStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PAST_DUE = "PAST_DUE"
    CANCELED = "CANCELED"
    TRIALING = "TRIALING"
    INCOMPLETE = "INCOMPLETE"


class TrackingFrequency(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ---------------------------------------------------------------------------
# Entities and tracking
# ---------------------------------------------------------------------------


class TrackingConfig(_WireModel):
    enabled: bool = False
    frequency: Optional[TrackingFrequency] = None
    goal: Optional[float] = None
    unit: Optional[str] = None
    value_type: Optional[str] = Field(default=None, alias="type")


class Entity(_WireModel):
    """A first-class object that journal text may reference."""

    id: str
    user_id: Optional[str] = Field(default=None, alias="userId")
    type: EntityType
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    tracking: Optional[TrackingConfig] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")
    archived_at: Optional[str] = Field(default=None, alias="archivedAt")

    @property
    def archived(self) -> bool:
        return self.archived_at is not None


class TrackingEvent(_WireModel):
    id: str
    user_id: Optional[str] = Field(default=None, alias="userId")
    entity_id: str = Field(alias="entityId")
    date: str
    value: Optional[int] = None
    decimal_value: Optional[float] = Field(default=None, alias="decimalValue")
    note: Optional[str] = None
    created_at: Optional[str] = Field(default=None, alias="createdAt")


class TrackingStats(_WireModel):
    total_days: int = Field(default=0, alias="totalDays")
    current_streak: int = Field(default=0, alias="currentStreak")
    longest_streak: int = Field(default=0, alias="longestStreak")
    avg_value: float = Field(default=0.0, alias="avgValue")
    first_tracked: Optional[str] = Field(default=None, alias="firstTracked")
    last_tracked: Optional[str] = Field(default=None, alias="lastTracked")


# ---------------------------------------------------------------------------
# Notes and folders
# ---------------------------------------------------------------------------


class NoteIndex(_WireModel):
    """List view of a note (no content)."""

    id: str
    user_id: Optional[str] = Field(default=None, alias="userId")
    folder_id: Optional[str] = Field(default=None, alias="folderId")
    title: str = ""
    preview: Optional[str] = None
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")
    archived_at: Optional[str] = Field(default=None, alias="archivedAt")


class NoteResponse(_WireModel):
    """Full note with content."""

    id: str
    user_id: Optional[str] = Field(default=None, alias="userId")
    folder_id: Optional[str] = Field(default=None, alias="folderId")
    title: str = ""
    content: str = ""
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")


class Folder(_WireModel):
    id: str
    user_id: Optional[str] = Field(default=None, alias="userId")
    name: str
    parent_id: Optional[str] = Field(default=None, alias="parentId")
    created_at: Optional[str] = Field(default=None, alias="createdAt")


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


class TopEntity(_WireModel):
    type: str
    id: str
    name: str
    mentions: int = 0


class DashboardMetrics(_WireModel):
    unique_people: int = Field(default=0, alias="uniquePeople")
    unique_projects: int = Field(default=0, alias="uniqueProjects")
    unique_habits: int = Field(default=0, alias="uniqueHabits")
    total_mentions: int = Field(default=0, alias="totalMentions")
    top_people: List[TopEntity] = Field(default_factory=list, alias="topPeople")
    top_projects: List[TopEntity] = Field(default_factory=list, alias="topProjects")
    top_habits: List[TopEntity] = Field(default_factory=list, alias="topHabits")


class MentionEntry(_WireModel):
    note_id: str = Field(alias="noteId")
    note_title: str = Field(default="", alias="noteTitle")
    date: str
    context: str = ""


class EntityTimeline(_WireModel):
    entity_id: str = Field(alias="entityId")
    entity_type: str = Field(alias="entityType")
    entity_name: str = Field(alias="entityName")
    total_mentions: int = Field(default=0, alias="totalMentions")
    heatmap: Dict[str, int] = Field(default_factory=dict)
    mentions: List[MentionEntry] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Accounts and subscriptions
# ---------------------------------------------------------------------------


class Subscription(_WireModel):
    id: str
    user_id: Optional[str] = Field(default=None, alias="userId")
    effective_plan: PlanType = Field(alias="effectivePlan")
    status: SubscriptionStatus
    max_entities: int = Field(default=0, alias="maxEntities")
    max_notes: int = Field(default=0, alias="maxNotes")
    max_habits: int = Field(default=0, alias="maxHabits")
    advanced_metrics: bool = Field(default=False, alias="advancedMetrics")
    data_export: bool = Field(default=False, alias="dataExport")
    current_period_end: Optional[str] = Field(default=None, alias="currentPeriodEnd")
    cancel_at_period_end: Optional[bool] = Field(default=None, alias="cancelAtPeriodEnd")
    in_grace_period: bool = Field(default=False, alias="inGracePeriod")


class CheckoutSession(_WireModel):
    session_id: str = Field(alias="sessionId")
    url: str


class User(_WireModel):
    id: str
    username: str
    email: str
    role: str = "USER"
    active: bool = True
    plan: PlanType = PlanType.FREE
    entity_count: int = Field(default=0, alias="entityCount")
    note_count: int = Field(default=0, alias="noteCount")
    habit_count: int = Field(default=0, alias="habitCount")
    vault_id: Optional[str] = Field(default=None, alias="vaultId")
    subscription_status: Optional[SubscriptionStatus] = Field(default=None, alias="subscriptionStatus")
    cancel_at_period_end: Optional[bool] = Field(default=None, alias="cancelAtPeriodEnd")
    max_entities: Optional[int] = Field(default=None, alias="maxEntities")
    max_notes: Optional[int] = Field(default=None, alias="maxNotes")
    max_habits: Optional[int] = Field(default=None, alias="maxHabits")


class AuthResponse(_WireModel):
    token: str
    user_id: Optional[str] = Field(default=None, alias="userId")
    username: Optional[str] = None
    email: Optional[str] = None
    plan: Optional[PlanType] = None


# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class _RequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class LoginRequest(_RequestModel):
    email: str
    password: str


class RegisterRequest(_RequestModel):
    username: str
    email: str
    password: str


class CreateNoteRequest(_RequestModel):
    content: str
    folder_id: Optional[str] = Field(default=None, alias="folderId")


class UpdateNoteRequest(_RequestModel):
    content: str


class MoveNoteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    folder_id: Optional[str] = Field(default=None, alias="folderId")

    def to_wire(self) -> Dict[str, Any]:
        # folderId: null moves the note to the root, so None is kept.
        return self.model_dump(by_alias=True, mode="json")


class EntityCreateRequest(_RequestModel):
    name: str
    type: EntityType
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    tracking: Optional[TrackingConfig] = None
    metadata: Optional[Dict[str, Any]] = None


class EntityUpdateRequest(_RequestModel):
    name: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    tracking: Optional[TrackingConfig] = None
    metadata: Optional[Dict[str, Any]] = None


class TrackRequest(_RequestModel):
    date: Optional[str] = None
    value: Optional[int] = None
    decimal_value: Optional[float] = Field(default=None, alias="decimalValue")
    note: Optional[str] = None


class CreateFolderRequest(_RequestModel):
    name: str
    parent_id: Optional[str] = Field(default=None, alias="parentId")


class AccountUpdateRequest(_RequestModel):
    username: Optional[str] = None
    email: Optional[str] = None


class ChangePasswordRequest(_RequestModel):
    current_password: str = Field(alias="currentPassword")
    new_password: str = Field(alias="newPassword")
