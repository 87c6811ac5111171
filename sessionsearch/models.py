"""Pydantic models for the session corpus, queries and API payloads."""
from __future__ import annotations

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ── Corpus entities ─────────────────────────────────────────────────
# Field names follow the per-engineer export format. Entities are frozen:
# back-references are copied in once at load time and never re-resolved.


class _Entity(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class Engineer(_Entity):
    username: str = ""
    email: str = ""
    role: str = ""

    @field_validator("username", "email", "role", mode="before")
    @classmethod
    def null_as_empty_string(cls, value):
        return "" if value is None else value


class ProjectMetadata(_Entity):
    primaryLanguage: Optional[str] = None
    framework: Optional[str] = None


class Project(_Entity):
    id: str
    name: str = ""
    workingDirectory: str = ""
    metadata: ProjectMetadata = Field(default_factory=ProjectMetadata)

    @field_validator("name", "workingDirectory", mode="before")
    @classmethod
    def null_as_empty_string(cls, value):
        return "" if value is None else value

    @field_validator("metadata", mode="before")
    @classmethod
    def null_metadata_as_default(cls, value):
        return {} if value is None else value


class SessionMetadata(_Entity):
    taskDescription: Optional[str] = None


class Session(_Entity):
    id: str
    projectId: Optional[str] = None
    startedAt: Optional[str] = None
    endedAt: Optional[str] = None
    producer: Optional[str] = None
    producerVersion: Union[str, int, None] = None
    schemaVersion: Union[str, int, None] = None
    username: Optional[str] = None
    metadata: SessionMetadata = Field(default_factory=SessionMetadata)

    # Enrichment
    engineer: Optional[Engineer] = None
    project: Optional[Project] = None

    @field_validator("metadata", mode="before")
    @classmethod
    def null_metadata_as_default(cls, value):
        return {} if value is None else value


class Message(_Entity):
    id: str
    sessionId: Optional[str] = None
    type: str = ""
    sequenceNumber: Optional[int] = None
    timestamp: Optional[str] = None
    parentId: Optional[str] = None
    content: Optional[str] = None
    rawMetadata: dict = Field(default_factory=dict)
    typeSpecificData: dict = Field(default_factory=dict)

    # Enrichment
    engineer: Optional[Engineer] = None
    session: Optional[Session] = None
    project: Optional[Project] = None

    @field_validator("type", mode="before")
    @classmethod
    def null_type_as_empty(cls, value):
        return "" if value is None else value

    @field_validator("rawMetadata", "typeSpecificData", mode="before")
    @classmethod
    def null_payloads_as_empty(cls, value):
        return {} if value is None else value


# ── Queries ─────────────────────────────────────────────────────────

class SearchFilters(BaseModel):
    """Recognized filter fields; an empty list or ``None`` means no constraint."""

    users: list[str] = Field(default_factory=list)
    projectNames: list[str] = Field(default_factory=list)
    workingDirectories: list[str] = Field(default_factory=list)
    dateFrom: Optional[str] = None
    dateTo: Optional[str] = None

    def is_empty(self) -> bool:
        return not (
            self.users
            or self.projectNames
            or self.workingDirectories
            or self.dateFrom
            or self.dateTo
        )


class DateFilter(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    before: Optional[str] = None
    after: Optional[str] = None
    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None

    def describe(self) -> str:
        if self.from_ and self.to:
            return f"Between {self.from_} and {self.to}"
        if self.before:
            return f"Before {self.before}"
        if self.after:
            return f"After {self.after}"
        return ""


IntentType = Literal["user", "project", "statistics", "directory", "general"]


class Intent(BaseModel):
    type: IntentType
    value: Optional[str] = None
    dateFilter: Optional[DateFilter] = None
    rule: str = ""


# ── Aggregations ────────────────────────────────────────────────────

class FilterOptions(BaseModel):
    users: list[str] = Field(default_factory=list)
    projects: list[str] = Field(default_factory=list)
    workingDirectories: list[str] = Field(default_factory=list)
    dates: list[str] = Field(default_factory=list)


class DateRange(BaseModel):
    earliest: Optional[str] = None
    latest: Optional[str] = None
    totalDays: int = 0


class ProjectActivity(BaseModel):
    name: str
    workingDirectory: str = ""
    primaryLanguage: Optional[str] = None
    framework: Optional[str] = None
    messageCount: int = 0
    firstDate: Optional[str] = None
    lastDate: Optional[str] = None


class UserSummary(BaseModel):
    username: str
    email: str = ""
    role: str = ""
    totalMessages: int = 0
    totalProjects: int = 0
    totalDirectories: int = 0
    totalSessions: int = 0
    projects: list[ProjectActivity] = Field(default_factory=list)
    directories: list[str] = Field(default_factory=list)
    dateRange: DateRange = Field(default_factory=DateRange)


class ProjectSummary(BaseModel):
    name: str
    workingDirectory: str = ""
    primaryLanguage: Optional[str] = None
    framework: Optional[str] = None
    totalMessages: int = 0
    users: list[str] = Field(default_factory=list)
    directories: list[str] = Field(default_factory=list)
    dateRange: DateRange = Field(default_factory=DateRange)


class GlobalStatistics(BaseModel):
    totalUsers: int = 0
    totalProjects: int = 0
    totalDirectories: int = 0
    totalMessages: int = 0
    totalSessions: int = 0
    users: list[str] = Field(default_factory=list)
    projects: list[str] = Field(default_factory=list)
    directories: list[str] = Field(default_factory=list)


# ── API views ───────────────────────────────────────────────────────

class EngineerView(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None


class SessionRefView(BaseModel):
    id: Optional[str] = None
    taskDescription: Optional[str] = None


class ProjectRefView(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    primaryLanguage: Optional[str] = None
    framework: Optional[str] = None


class MessageView(BaseModel):
    id: str
    type: str = ""
    content: Optional[str] = None
    timestamp: Optional[str] = None
    engineer: EngineerView = Field(default_factory=EngineerView)
    session: SessionRefView = Field(default_factory=SessionRefView)
    project: ProjectRefView = Field(default_factory=ProjectRefView)

    @classmethod
    def from_message(cls, message: Message) -> "MessageView":
        engineer = message.engineer
        session = message.session
        project = message.project
        return cls(
            id=message.id,
            type=message.type,
            content=message.content,
            timestamp=message.timestamp,
            engineer=EngineerView(
                username=engineer.username if engineer else None,
                email=engineer.email if engineer else None,
                role=engineer.role if engineer else None,
            ),
            session=SessionRefView(
                id=session.id if session else None,
                taskDescription=session.metadata.taskDescription if session else None,
            ),
            project=ProjectRefView(
                id=project.id if project else None,
                name=project.name if project else None,
                primaryLanguage=project.metadata.primaryLanguage if project else None,
                framework=project.metadata.framework if project else None,
            ),
        )


class SessionView(BaseModel):
    id: str
    engineer: Optional[Engineer] = None
    project: Optional[Project] = None
    taskDescription: Optional[str] = None
    startedAt: Optional[str] = None
    endedAt: Optional[str] = None
    producer: Optional[str] = None
    producerVersion: Union[str, int, None] = None

    @classmethod
    def from_session(cls, session: Session) -> "SessionView":
        return cls(
            id=session.id,
            engineer=session.engineer,
            project=session.project,
            taskDescription=session.metadata.taskDescription,
            startedAt=session.startedAt,
            endedAt=session.endedAt,
            producer=session.producer,
            producerVersion=session.producerVersion,
        )


class SearchResponse(BaseModel):
    results: list[MessageView] = Field(default_factory=list)
    total: int = 0
    query: str = ""
    filters: Optional[SearchFilters] = None
    searchMode: Optional[str] = None


class SessionListResponse(BaseModel):
    sessions: list[SessionView] = Field(default_factory=list)
    total: int = 0


class SessionDetailResponse(BaseModel):
    session: SessionView
    messages: list[MessageView] = Field(default_factory=list)
    messageCount: int = 0


class AISearchRequest(BaseModel):
    query: str = ""
    limit: Optional[int] = Field(default=None, ge=1)


class ChatRequest(BaseModel):
    message: str = ""
    stream: bool = False
    model: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    top_p: Optional[float] = None
    stop: Optional[list[str]] = None


class ChatResponse(BaseModel):
    success: bool = True
    message: str
    response: str
    intent: Optional[Intent] = None
    timestamp: str


class AIStatus(BaseModel):
    available: bool
    message: str


class StoreStatus(BaseModel):
    generation: int = 0
    loadedAt: Optional[str] = None
    trigger: str = ""
    sourcesLoaded: list[str] = Field(default_factory=list)
    sourcesSkipped: list[str] = Field(default_factory=list)
    totalSessions: int = 0
    totalMessages: int = 0
