"""Azure DevOps collaborator: fetches domain data and mutates work items."""

from __future__ import annotations

import html
import logging
import re
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from functools import wraps
from typing import Any, TypeVar

from azure.devops.connection import Connection
from azure.devops.v7_1.work.models import TeamContext
from azure.devops.v7_1.work_item_tracking.models import JsonPatchOperation, Wiql
from msrest.authentication import BasicAuthentication

from sprintboard.config import Config
from sprintboard.filters import ALL, ME, FilterQuery
from sprintboard.models import (
    PATH_SEPARATOR,
    Area,
    Iteration,
    StateInfo,
    TeamMember,
    WorkItem,
    WorkItemState,
    WorkItemType,
    normalize_area_path,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

BATCH_SIZE = 200
AREA_DEPTH = 10

WORK_ITEM_FIELDS = [
    "System.Id",
    "System.Title",
    "System.State",
    "System.WorkItemType",
    "System.AssignedTo",
    "System.IterationPath",
    "System.AreaPath",
    "System.Description",
    "System.Tags",
    "System.Parent",
    "Microsoft.VSTS.Common.Priority",
    "System.CreatedDate",
    "System.ChangedDate",
]

_TAG_RE = re.compile(r"<[^>]*>")


class ApiError(Exception):
    """An Azure DevOps request failed."""

    def __init__(self, operation: str, cause: BaseException) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} failed: {cause}")


def api_operation(operation: str) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Wrap SDK failures in ApiError so callers only handle one type."""

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return func(*args, **kwargs)
            except ApiError:
                raise
            except Exception as e:
                logger.warning("%s failed: %s", operation, e)
                raise ApiError(operation, e) from e

        return wrapper

    return decorator


def escape_wiql(value: str) -> str:
    return value.replace("'", "''")


def build_wiql(query: FilterQuery) -> str:
    """Build the WIQL statement for a filter query.

    ``"all"`` (or empty) drops that condition. Area matching uses ``UNDER``
    so child areas are included.
    """
    lines = [
        "SELECT [System.Id], [System.Title], [System.State], [System.WorkItemType]",
        "FROM WorkItems",
        "WHERE [System.TeamProject] = @project",
    ]
    if query.sprint_path and query.sprint_path != ALL:
        lines.append(f"  AND [System.IterationPath] = '{escape_wiql(query.sprint_path)}'")
    if query.state and query.state != ALL:
        lines.append(f"  AND [System.State] = '{escape_wiql(query.state)}'")
    if query.assigned == ME:
        lines.append("  AND [System.AssignedTo] = @me")
    if query.area_path and query.area_path != ALL:
        area = query.area_path.strip(PATH_SEPARATOR)
        lines.append(f"  AND [System.AreaPath] UNDER '{escape_wiql(area)}'")
    lines.append("ORDER BY [System.ChangedDate] DESC")
    return "\n".join(lines)


def strip_html(text: str | None) -> str:
    """Remove tags and decode entities from an HTML description."""
    if not text:
        return ""
    text = _TAG_RE.sub("", text)
    text = html.unescape(text).replace("\xa0", " ")
    return text.strip()


def flatten_areas(node: Any) -> list[Area]:
    """Flatten a classification node tree, normalising each path once."""
    path = normalize_area_path(getattr(node, "path", None) or node.name)
    areas = [Area(id=node.id, name=node.name, path=path)]
    for child in getattr(node, "children", None) or []:
        areas.extend(flatten_areas(child))
    return areas


def _parse_date(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


def _parse_tags(value: str | None) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(tag.strip() for tag in value.split(";") if tag.strip())


class AzureDevOpsClient:
    """Thin wrapper around the azure-devops SDK clients for one team."""

    def __init__(self, config: Config, connection: Connection | None = None) -> None:
        self.config = config
        self.project = config.project
        self.team = config.team
        if connection is None:
            credentials = BasicAuthentication("", config.pat)
            connection = Connection(base_url=config.organization_url, creds=credentials)
        self.connection = connection
        self._wit_client = None
        self._work_client = None
        self._core_client = None

    @property
    def wit_client(self):
        """Lazy load work item tracking client"""
        if not self._wit_client:
            self._wit_client = self.connection.clients_v7_1.get_work_item_tracking_client()
        return self._wit_client

    @property
    def work_client(self):
        if not self._work_client:
            self._work_client = self.connection.clients_v7_1.get_work_client()
        return self._work_client

    @property
    def core_client(self):
        if not self._core_client:
            self._core_client = self.connection.clients_v7_1.get_core_client()
        return self._core_client

    def work_item_web_url(self, item_id: int) -> str:
        return self.config.work_item_web_url(item_id)

    @api_operation("Fetching iterations")
    def fetch_iterations(self) -> list[Iteration]:
        team_context = TeamContext(project=self.project, team=self.team)
        iterations = self.work_client.get_team_iterations(team_context=team_context)
        result = []
        for it in iterations or []:
            attrs = it.attributes
            result.append(
                Iteration(
                    id=str(it.id),
                    name=it.name,
                    path=it.path,
                    start_date=_parse_date(attrs.start_date) if attrs else None,
                    finish_date=_parse_date(attrs.finish_date) if attrs else None,
                    time_frame=str(attrs.time_frame).lower()
                    if attrs and attrs.time_frame
                    else None,
                    url=it.url or "",
                )
            )
        logger.info("Loaded %d iterations", len(result))
        return result

    @api_operation("Fetching areas")
    def fetch_areas(self) -> list[Area]:
        root = self.wit_client.get_classification_node(
            project=self.project, structure_group="areas", depth=AREA_DEPTH
        )
        areas = sorted(flatten_areas(root), key=lambda a: a.path)
        logger.info("Loaded %d areas", len(areas))
        return areas

    @api_operation("Fetching work item states")
    def fetch_work_item_type_states(self) -> dict[str, list[StateInfo]]:
        types = self.wit_client.get_work_item_types(project=self.project)
        states_by_type: dict[str, list[StateInfo]] = {}
        for wit in types or []:
            try:
                states = self.wit_client.get_work_item_type_states(
                    project=self.project, type=wit.name
                )
            except Exception as e:
                # Some system types have no state workflow
                logger.debug("Skipping states for type %s: %s", wit.name, e)
                continue
            states_by_type[wit.name] = [
                StateInfo(name=s.name, color=s.color or "", category=s.category or "")
                for s in states or []
            ]
        return states_by_type

    @api_operation("Fetching team members")
    def fetch_team_members(self) -> list[TeamMember]:
        members = self.core_client.get_team_members_with_extended_properties(
            project_id=self.project, team_id=self.team
        )
        return [
            TeamMember(
                id=m.identity.id,
                display_name=m.identity.display_name,
                unique_name=m.identity.unique_name,
            )
            for m in members or []
            if m.identity is not None
        ]

    @api_operation("Querying work items")
    def query_work_items(self, query: FilterQuery) -> list[WorkItem]:
        wiql = build_wiql(query)
        logger.debug("WIQL:\n%s", wiql)
        team_context = TeamContext(project=self.project, team=self.team)
        result = self.wit_client.query_by_wiql(Wiql(query=wiql), team_context=team_context)
        ids = [ref.id for ref in (result.work_items or [])]
        items = self.get_work_items(ids)
        logger.info("Query returned %d work items", len(items))
        return items

    def get_work_items(self, ids: list[int]) -> list[WorkItem]:
        items: list[WorkItem] = []
        for start in range(0, len(ids), BATCH_SIZE):
            batch = ids[start : start + BATCH_SIZE]
            raw = self.wit_client.get_work_items(
                ids=batch, project=self.project, fields=WORK_ITEM_FIELDS
            )
            items.extend(self._convert(wi) for wi in raw or [])
        return self._with_parent_titles(items)

    def _with_parent_titles(self, items: list[WorkItem]) -> list[WorkItem]:
        parent_ids = sorted({i.parent_id for i in items if i.parent_id})
        if not parent_ids:
            return items
        try:
            titles: dict[int, str] = {}
            for start in range(0, len(parent_ids), BATCH_SIZE):
                raw = self.wit_client.get_work_items(
                    ids=parent_ids[start : start + BATCH_SIZE],
                    project=self.project,
                    fields=["System.Id", "System.Title"],
                    error_policy="omit",
                )
                for wi in raw or []:
                    if wi is not None:
                        titles[wi.id] = (wi.fields or {}).get("System.Title")
        except Exception as e:
            logger.debug("Parent title lookup failed: %s", e)
            return items
        return [
            replace(i, parent_title=titles.get(i.parent_id)) if i.parent_id else i
            for i in items
        ]

    def _convert(self, wi: Any) -> WorkItem:
        fields = wi.fields or {}
        assigned = fields.get("System.AssignedTo")
        if isinstance(assigned, dict):
            assigned = assigned.get("displayName")
        parent = fields.get("System.Parent")
        return WorkItem(
            id=wi.id,
            rev=wi.rev or 0,
            title=fields.get("System.Title", ""),
            state=WorkItemState(fields.get("System.State", "")),
            type=WorkItemType(fields.get("System.WorkItemType", "")),
            assigned_to=assigned or None,
            iteration_path=fields.get("System.IterationPath", ""),
            area_path=fields.get("System.AreaPath", ""),
            description=strip_html(fields.get("System.Description")),
            tags=_parse_tags(fields.get("System.Tags")),
            parent_id=int(parent) if parent else None,
            priority=int(fields.get("Microsoft.VSTS.Common.Priority") or 0),
            created_date=_parse_date(fields.get("System.CreatedDate")),
            changed_date=_parse_date(fields.get("System.ChangedDate")),
            url=wi.url or "",
            web_url=self.work_item_web_url(wi.id),
        )

    @api_operation("Updating state")
    def update_work_item_state(self, item_id: int, new_state: str) -> None:
        self._patch(item_id, "/fields/System.State", new_state)
        logger.info("Work item #%d state -> %s", item_id, new_state)

    @api_operation("Assigning work item")
    def assign_work_item(self, item_id: int, unique_name: str) -> None:
        """Assign to ``unique_name``; an empty string unassigns."""
        self._patch(item_id, "/fields/System.AssignedTo", unique_name)
        logger.info("Work item #%d assigned to %r", item_id, unique_name)

    def _patch(self, item_id: int, path: str, value: str) -> None:
        document = [JsonPatchOperation(op="add", path=path, value=value)]
        self.wit_client.update_work_item(document=document, id=item_id, project=self.project)
