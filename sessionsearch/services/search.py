"""Read-only search, filtering and aggregation over one corpus snapshot."""
from __future__ import annotations

from datetime import datetime
from typing import Callable, Iterable, Optional

from sessionsearch.date_utils import day_end, day_start, parse_timestamp, timestamp_epoch, to_day
from sessionsearch.entity_store import EntityStore
from sessionsearch.models import (
    DateFilter,
    DateRange,
    FilterOptions,
    GlobalStatistics,
    Message,
    ProjectActivity,
    ProjectSummary,
    SearchFilters,
    Session,
    UserSummary,
)
from sessionsearch.observability import record_query

_MISSING_EPOCH = float("-inf")


def _contains(value: Optional[str], query: str) -> bool:
    return bool(value) and query in value.lower()


def message_matches(message: Message, query: str) -> bool:
    """True when ``query`` (case-insensitive) occurs in any searchable field."""
    lowered = (query or "").strip().lower()
    if not lowered:
        return False
    session = message.session
    engineer = message.engineer
    project = message.project
    return (
        _contains(message.content, lowered)
        or _contains(session.metadata.taskDescription if session else None, lowered)
        or _contains(engineer.username if engineer else None, lowered)
        or _contains(engineer.email if engineer else None, lowered)
        or _contains(project.name if project else None, lowered)
    )


def newest_first(messages: Iterable[Message]) -> list[Message]:
    # sorted() is stable with reverse=True, so equal timestamps keep load order.
    # Messages without a usable timestamp go last.
    return sorted(
        messages,
        key=lambda m: _epoch_or_missing(m.timestamp),
        reverse=True,
    )


def _epoch_or_missing(value: Optional[str]) -> float:
    epoch = timestamp_epoch(value)
    return _MISSING_EPOCH if epoch is None else epoch


def _sequence_key(message: Message) -> tuple[int, int]:
    seq = message.sequenceNumber
    return (1, 0) if seq is None else (0, seq)


def _date_bounds(
    lower: Optional[datetime],
    upper: Optional[datetime],
) -> Callable[[Message], bool]:
    def _within(message: Message) -> bool:
        moment = parse_timestamp(message.timestamp)
        if moment is None:
            return False
        if lower is not None and moment < lower:
            return False
        if upper is not None and moment > upper:
            return False
        return True

    return _within


def _latest(lower_a: Optional[datetime], lower_b: Optional[datetime]) -> Optional[datetime]:
    candidates = [value for value in (lower_a, lower_b) if value is not None]
    return max(candidates) if candidates else None


def _earliest(upper_a: Optional[datetime], upper_b: Optional[datetime]) -> Optional[datetime]:
    candidates = [value for value in (upper_a, upper_b) if value is not None]
    return min(candidates) if candidates else None


def _date_range(days: set[str], *, with_total: bool = True) -> DateRange:
    ordered = sorted(days)
    return DateRange(
        earliest=ordered[0] if ordered else None,
        latest=ordered[-1] if ordered else None,
        totalDays=len(ordered) if with_total else 0,
    )


class SearchEngine:
    """Pure queries over a single :class:`EntityStore` snapshot.

    Build one per request from ``StoreManager.store``; every method reads the
    same snapshot, so results stay consistent across a concurrent reload.
    """

    def __init__(self, store: EntityStore):
        self.store = store

    # ── Search ──────────────────────────────────────────────────────

    def search(self, query: Optional[str]) -> list[Message]:
        lowered = (query or "").strip().lower()
        if not lowered:
            return []
        results = newest_first(m for m in self.store.messages if message_matches(m, lowered))
        record_query("search", len(results))
        return results

    def search_with_filters(
        self,
        query: Optional[str],
        filters: Optional[SearchFilters] = None,
    ) -> list[Message]:
        filters = filters or SearchFilters()
        results: Iterable[Message] = self.store.messages

        lowered = (query or "").strip().lower()
        if lowered:
            results = [m for m in results if message_matches(m, lowered)]

        if filters.users:
            allowed_users = set(filters.users)
            results = [m for m in results if m.engineer is not None and m.engineer.username in allowed_users]

        if filters.projectNames:
            allowed_projects = set(filters.projectNames)
            results = [m for m in results if m.project is not None and m.project.name in allowed_projects]

        if filters.workingDirectories:
            allowed_dirs = set(filters.workingDirectories)
            results = [
                m for m in results
                if m.project is not None and m.project.workingDirectory in allowed_dirs
            ]

        if filters.dateFrom or filters.dateTo:
            within = _date_bounds(
                day_start(filters.dateFrom) if filters.dateFrom else None,
                day_end(filters.dateTo) if filters.dateTo else None,
            )
            results = [m for m in results if within(m)]

        ordered = newest_first(results)
        record_query("filtered_search", len(ordered))
        return ordered

    def suggestions(self, query: Optional[str], limit: int) -> list[Message]:
        return self.search(query)[: max(0, limit)]

    # ── Options ─────────────────────────────────────────────────────

    def available_filters(self) -> FilterOptions:
        users: set[str] = set()
        projects: set[str] = set()
        directories: set[str] = set()
        dates: set[str] = set()

        for message in self.store.messages:
            if message.engineer and message.engineer.username:
                users.add(message.engineer.username)
            if message.project and message.project.name:
                projects.add(message.project.name)
            if message.project and message.project.workingDirectory:
                directories.add(message.project.workingDirectory)
            day = to_day(message.timestamp)
            if day:
                dates.add(day)

        return FilterOptions(
            users=sorted(users),
            projects=sorted(projects),
            workingDirectories=sorted(directories),
            dates=sorted(dates),
        )

    # ── Sessions ────────────────────────────────────────────────────

    def all_sessions(self) -> list[Session]:
        return list(self.store.sessions)

    def session_by_id(self, session_id: str) -> Optional[Session]:
        return self.store.get_session(session_id)

    def session_messages(self, session_id: str) -> list[Message]:
        """Messages of one session in conversational (sequence) order.

        Membership follows the reference resolved at load time, so a message
        whose ``sessionId`` did not resolve in its own export is never listed.
        """
        return sorted(
            (m for m in self.store.messages if m.session is not None and m.session.id == session_id),
            key=_sequence_key,
        )

    # ── Aggregations ────────────────────────────────────────────────

    def user_summary(
        self,
        username: str,
        date_filter: Optional[DateFilter] = None,
    ) -> Optional[UserSummary]:
        """Activity summary for one engineer, or ``None`` when nothing matches."""
        wanted = (username or "").lower()
        messages = [
            m for m in self.store.messages
            if m.engineer is not None and m.engineer.username.lower() == wanted
        ]

        if date_filter is not None:
            # before/to are inclusive of their whole day; after/from start at midnight.
            lower = _latest(
                day_start(date_filter.after) if date_filter.after else None,
                day_start(date_filter.from_) if date_filter.from_ else None,
            )
            upper = _earliest(
                day_end(date_filter.before) if date_filter.before else None,
                day_end(date_filter.to) if date_filter.to else None,
            )
            if lower is not None or upper is not None:
                within = _date_bounds(lower, upper)
                messages = [m for m in messages if within(m)]

        if not messages:
            return None

        projects: dict[str, ProjectActivity] = {}
        first_seen: dict[str, float] = {}
        last_seen: dict[str, float] = {}
        directories: set[str] = set()
        days: set[str] = set()
        sessions: set[str] = set()

        for message in messages:
            project = message.project
            if project is not None and project.name:
                activity = projects.get(project.name)
                if activity is None:
                    activity = ProjectActivity(
                        name=project.name,
                        workingDirectory=project.workingDirectory,
                        primaryLanguage=project.metadata.primaryLanguage,
                        framework=project.metadata.framework,
                        firstDate=message.timestamp,
                        lastDate=message.timestamp,
                    )
                    projects[project.name] = activity
                activity.messageCount += 1
                epoch = timestamp_epoch(message.timestamp)
                if epoch is not None:
                    if project.name not in first_seen or epoch < first_seen[project.name]:
                        first_seen[project.name] = epoch
                        activity.firstDate = message.timestamp
                    if project.name not in last_seen or epoch > last_seen[project.name]:
                        last_seen[project.name] = epoch
                        activity.lastDate = message.timestamp
            if project is not None and project.workingDirectory:
                directories.add(project.workingDirectory)
            day = to_day(message.timestamp)
            if day:
                days.add(day)
            if message.sessionId:
                sessions.add(message.sessionId)

        engineer = messages[0].engineer
        summary = UserSummary(
            username=engineer.username if engineer else username,
            email=engineer.email if engineer else "",
            role=engineer.role if engineer else "",
            totalMessages=len(messages),
            totalProjects=len(projects),
            totalDirectories=len(directories),
            totalSessions=len(sessions),
            projects=list(projects.values()),
            directories=sorted(directories),
            dateRange=_date_range(days),
        )
        record_query("user_summary", summary.totalMessages)
        return summary

    def project_summary(self, project_name: str) -> Optional[ProjectSummary]:
        """Summary for one project (case-insensitive name), or ``None``."""
        wanted = (project_name or "").lower()
        messages = [
            m for m in self.store.messages
            if m.project is not None and m.project.name.lower() == wanted
        ]
        if not messages:
            return None

        users: set[str] = set()
        directories: set[str] = set()
        days: set[str] = set()
        for message in messages:
            if message.engineer and message.engineer.username:
                users.add(message.engineer.username)
            if message.project and message.project.workingDirectory:
                directories.add(message.project.workingDirectory)
            day = to_day(message.timestamp)
            if day:
                days.add(day)

        project = messages[0].project
        summary = ProjectSummary(
            name=project.name,
            workingDirectory=project.workingDirectory,
            primaryLanguage=project.metadata.primaryLanguage,
            framework=project.metadata.framework,
            totalMessages=len(messages),
            users=sorted(users),
            directories=sorted(directories),
            dateRange=_date_range(days, with_total=False),
        )
        record_query("project_summary", summary.totalMessages)
        return summary

    def global_statistics(self) -> GlobalStatistics:
        options = self.available_filters()
        return GlobalStatistics(
            totalUsers=len(options.users),
            totalProjects=len(options.projects),
            totalDirectories=len(options.workingDirectories),
            totalMessages=len(self.store.messages),
            totalSessions=len(self.store.sessions),
            users=options.users,
            projects=options.projects,
            directories=options.workingDirectories,
        )
