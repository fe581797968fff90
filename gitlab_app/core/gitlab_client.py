"""GitLab GraphQL client wrapper (group-scoped queries + cursor pagination)."""

from __future__ import annotations

import logging
from typing import Any

import requests

from .config import GRAPHQL_NESTED_PAGE_SIZE, GRAPHQL_PAGE_SIZE, GRAPHQL_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

ITERATIONS_QUERY = """
query($group: ID!) {
  group(fullPath: $group) {
    iterations {
      nodes { id title startDate dueDate }
    }
  }
}
"""

ISSUES_QUERY = """
query($group: ID!, $first: Int!, $nested: Int!, $after: String) {
  group(fullPath: $group) {
    issues(includeSubgroups: true, first: $first, after: $after) {
      nodes {
        id
        iid
        title
        weight
        createdAt
        closedAt
        iteration { id title startDate }
        assignees { nodes { username } }
        timelogs(first: $nested) {
          nodes { timeSpent spentAt user { username } }
          pageInfo { endCursor hasNextPage }
        }
        blockedByIssues { nodes { id closedAt } }
      }
      pageInfo { endCursor hasNextPage }
    }
  }
}
"""

ISSUE_TIMELOGS_QUERY = """
query($id: IssueID!, $first: Int!, $after: String) {
  issue(id: $id) {
    timelogs(first: $first, after: $after) {
      nodes { timeSpent spentAt user { username } }
      pageInfo { endCursor hasNextPage }
    }
  }
}
"""

MERGE_REQUESTS_QUERY = """
query($group: ID!, $first: Int!, $nested: Int!, $after: String) {
  group(fullPath: $group) {
    mergeRequests(includeSubgroups: true, first: $first, after: $after) {
      nodes {
        title
        createdAt
        mergedAt
        approvedBy { nodes { username } }
        notes(first: $nested) { nodes { id } }
        pipelines(first: $nested) { nodes { status } }
      }
      pageInfo { endCursor hasNextPage }
    }
  }
}
"""

GROUP_MEMBERS_QUERY = """
query($group: ID!, $first: Int!, $after: String) {
  group(fullPath: $group) {
    groupMembers(first: $first, after: $after) {
      nodes { user { name username avatarUrl } }
      pageInfo { endCursor hasNextPage }
    }
  }
}
"""


class GitLabAPI:
    def __init__(
        self,
        url: str,
        token: str,
        group: str,
        *,
        session: requests.Session | None = None,
        page_size: int = GRAPHQL_PAGE_SIZE,
        nested_page_size: int = GRAPHQL_NESTED_PAGE_SIZE,
    ):
        self.url = url.rstrip("/")
        self.group = group
        self.page_size = page_size
        self.nested_page_size = nested_page_size
        self.session = session or requests.Session()
        # Token is forwarded verbatim (e.g. "Bearer <token>").
        self.session.headers.update({"Content-Type": "application/json", "Authorization": token})

    def query(self, query: str, variables: dict[str, Any] | None = None, *, root: str = "group") -> dict[str, Any]:
        """POST one GraphQL query and return the ``root`` object of its data.

        Group-scoped queries get ``$group`` filled in automatically.
        """
        variables = dict(variables or {})
        if root == "group":
            variables = {"group": self.group, **variables}
        payload = {"query": query, "variables": variables}
        try:
            resp = self.session.post(self.url, json=payload, timeout=GRAPHQL_TIMEOUT_SECONDS)
        except requests.RequestException as exc:
            raise RuntimeError(f"GraphQL request failed: {exc}") from exc
        if resp.status_code >= 400:
            raise RuntimeError(f"GraphQL request failed {resp.status_code}: {resp.text[:200]}")
        try:
            data = resp.json()
        except ValueError as exc:
            raise RuntimeError(f"GraphQL response is not JSON: {resp.text[:200]}") from exc
        if not isinstance(data, dict):
            raise RuntimeError(f"Unexpected GraphQL response: {str(data)[:200]}")
        if data.get("errors"):
            messages = "; ".join(str(e.get("message", e)) for e in data["errors"])
            raise RuntimeError(f"GraphQL errors: {messages[:200]}")
        node = (data.get("data") or {}).get(root)
        if node is None:
            if root == "group":
                raise RuntimeError(f"Group {self.group!r} not found or not accessible")
            raise RuntimeError(f"GraphQL {root} {variables.get('id')!r} not found or not accessible")
        return node

    def paginate(self, query: str, connection: str, variables: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """Drain a cursor-paginated group connection into one list."""
        out: list[dict[str, Any]] = []
        after = None
        page = 0
        while True:
            qp = {"first": self.page_size, **(variables or {}), "after": after}
            group = self.query(query, qp)
            block = group.get(connection) or {}
            out.extend(n for n in block.get("nodes") or [] if n is not None)
            page_info = block.get("pageInfo") or {}
            page += 1
            logger.debug("Fetched %s page %s (%s nodes so far)", connection, page, len(out))
            after = page_info.get("endCursor")
            if not page_info.get("hasNextPage") or not after:
                break
        return out

    def fetch_iterations(self) -> list[dict[str, Any]]:
        group = self.query(ITERATIONS_QUERY)
        return [n for n in (group.get("iterations") or {}).get("nodes") or [] if n is not None]

    def fetch_issues(self) -> list[dict[str, Any]]:
        issues = self.paginate(ISSUES_QUERY, "issues", {"nested": self.nested_page_size})
        for issue in issues:
            if isinstance(issue, dict):
                self._drain_timelogs(issue)
        return issues

    def fetch_merge_requests(self) -> list[dict[str, Any]]:
        return self.paginate(MERGE_REQUESTS_QUERY, "mergeRequests", {"nested": self.nested_page_size})

    def fetch_group_members(self) -> list[dict[str, Any]]:
        members = self.paginate(GROUP_MEMBERS_QUERY, "groupMembers")
        return [m["user"] for m in members if isinstance(m.get("user"), dict)]

    # ------------------ Internal Helpers ------------------
    def _drain_timelogs(self, issue: dict[str, Any]) -> None:
        """Follow an issue's nested timelog cursor until every entry is in place."""
        block = issue.get("timelogs") or {}
        nodes = [n for n in block.get("nodes") or [] if n is not None]
        page_info = block.get("pageInfo") or {}
        after = page_info.get("endCursor")
        pages = 1
        while page_info.get("hasNextPage") and after:
            node = self.query(
                ISSUE_TIMELOGS_QUERY,
                {"id": issue.get("id"), "first": self.nested_page_size, "after": after},
                root="issue",
            )
            block = node.get("timelogs") or {}
            nodes.extend(n for n in block.get("nodes") or [] if n is not None)
            page_info = block.get("pageInfo") or {}
            after = page_info.get("endCursor")
            pages += 1
        if pages > 1:
            logger.debug("Issue %s: fetched %s timelog pages (%s entries)", issue.get("id"), pages, len(nodes))
        issue["timelogs"] = {"nodes": nodes}
