"""Render classified intents as fixed-format grounding text for the assistant."""
from __future__ import annotations

from typing import Optional

from sessionsearch.models import Intent, ProjectSummary, UserSummary
from sessionsearch.services.intent import IntentClassifier
from sessionsearch.services.search import SearchEngine


def _or_na(value: Optional[str]) -> str:
    return value or "N/A"


def _bullets(values: list[str]) -> str:
    return "\n".join(f"- {value}" for value in values)


def render_user_summary(summary: UserSummary, date_filter_info: str = "") -> str:
    header = f"\n\n**Search Results for User: {summary.username}**"
    if date_filter_info:
        header += f"\n**Date Filter Applied:** {date_filter_info}"
    project_lines = "\n".join(
        f"- {p.name} ({p.workingDirectory})\n"
        f"  Language: {_or_na(p.primaryLanguage)}, Framework: {_or_na(p.framework)}\n"
        f"  Messages: {p.messageCount}, Date Range: {p.firstDate} to {p.lastDate}"
        for p in summary.projects
    )
    return (
        f"{header}\n"
        f"Email: {summary.email}\n"
        f"Role: {summary.role}\n"
        f"Total Messages: {summary.totalMessages}\n"
        f"Total Projects: {summary.totalProjects}\n"
        f"Total Directories: {summary.totalDirectories}\n"
        f"Total Sessions: {summary.totalSessions}\n\n"
        f"**Projects:**\n{project_lines}\n\n"
        f"**Working Directories:**\n{_bullets(summary.directories)}\n\n"
        f"**Date Range:** {summary.dateRange.earliest} to {summary.dateRange.latest}"
        f" ({summary.dateRange.totalDays} unique days)"
    )


def render_project_summary(summary: ProjectSummary) -> str:
    return (
        f"\n\n**Search Results for Project: {summary.name}**\n"
        f"Working Directory: {summary.workingDirectory}\n"
        f"Primary Language: {_or_na(summary.primaryLanguage)}\n"
        f"Framework: {_or_na(summary.framework)}\n"
        f"Total Messages: {summary.totalMessages}\n\n"
        f"**Users who worked on this project:**\n{_bullets(summary.users)}\n\n"
        f"**Directories:**\n{_bullets(summary.directories)}\n\n"
        f"**Date Range:** {summary.dateRange.earliest} to {summary.dateRange.latest}"
    )


class ContextBuilder:
    """Runs the aggregation an intent asks for and renders the result."""

    def __init__(self, engine: SearchEngine):
        self.engine = engine

    def classify(self, message: str) -> Intent:
        return IntentClassifier(self.engine.available_filters()).classify(message)

    def build_for_message(self, message: str) -> tuple[Intent, str]:
        intent = self.classify(message)
        return intent, self.build(intent)

    def build(self, intent: Intent) -> str:
        if intent.type == "user":
            return self._user_context(intent)
        if intent.type == "project":
            return self._project_context(intent)
        if intent.type == "statistics":
            return self._statistics_context()
        return self._summary_context()

    def _user_context(self, intent: Intent) -> str:
        username = intent.value or ""
        summary = self.engine.user_summary(username, intent.dateFilter)
        if summary is not None:
            info = intent.dateFilter.describe() if intent.dateFilter else ""
            return render_user_summary(summary, info)

        no_data = f'No data found for user "{username}"'
        if intent.dateFilter is not None:
            no_data += " with the specified date filter"
        users = ", ".join(self.engine.available_filters().users)
        return f"\n\n**Search Results:** {no_data}. Available users: {users}"

    def _project_context(self, intent: Intent) -> str:
        name = intent.value or ""
        summary = self.engine.project_summary(name)
        if summary is not None:
            return render_project_summary(summary)
        projects = ", ".join(self.engine.available_filters().projects)
        return f'\n\n**Search Results:** No data found for project "{name}". Available projects: {projects}'

    def _statistics_context(self) -> str:
        stats = self.engine.global_statistics()
        return (
            "\n\n**Database Statistics:**\n"
            f"Total Users: {stats.totalUsers}\n"
            f"Total Projects: {stats.totalProjects}\n"
            f"Total Directories: {stats.totalDirectories}\n"
            f"Total Messages: {stats.totalMessages}\n"
            f"Total Sessions: {stats.totalSessions}\n\n"
            f"**Users:** {', '.join(stats.users)}\n"
            f"**Projects:** {', '.join(stats.projects)}\n"
            f"**Directories:** {', '.join(stats.directories)}"
        )

    def _summary_context(self) -> str:
        options = self.engine.available_filters()
        return (
            "\n\n**Available Data Summary:**\n"
            f"Users: {', '.join(options.users)}\n"
            f"Projects: {', '.join(options.projects)}\n"
            f"Directories: {', '.join(options.workingDirectories)}\n"
            f"Total Messages: {len(self.engine.store.messages)}"
        )
