from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, FrozenSet, List, Mapping, Optional

from .roles import SIGNED_IN_ROLES, STAFF_ROLES, Role

logger = logging.getLogger(__name__)

HOME_PATH = "/"


@dataclass(frozen=True)
class NavItem:
    """One sidebar entry.

    ``label_key`` is a dotted path into the translation catalogue; ``label``
    is used when the catalogue has no entry for it.
    """

    path: str
    label_key: str
    label: str
    roles: FrozenSet[Role]

    def allows(self, role: Role) -> bool:
        return role in self.roles


NAVIGATION_ITEMS: tuple = (
    NavItem("/", "nav.home", "Home", SIGNED_IN_ROLES | {Role.GUEST}),
    NavItem("/dashboard", "nav.dashboard", "Dashboard", SIGNED_IN_ROLES),
    NavItem("/complaints", "nav.complaints", "Complaints", SIGNED_IN_ROLES),
    NavItem("/tasks", "dashboard.pendingTasks", "My Tasks", STAFF_ROLES),
    NavItem("/ward", "nav.ward", "Ward Management", frozenset({Role.WARD_OFFICER})),
    NavItem("/maintenance", "nav.maintenance", "Maintenance", frozenset({Role.MAINTENANCE_TEAM})),
    NavItem("/messages", "messages.complaintRegistered", "Communication", STAFF_ROLES),
    NavItem("/reports", "nav.reports", "Reports", STAFF_ROLES | {Role.ADMINISTRATOR}),
    NavItem("/admin/users", "nav.users", "Users", frozenset({Role.ADMINISTRATOR})),
    NavItem("/admin/config", "settings.generalSettings", "System Config", frozenset({Role.ADMINISTRATOR})),
)


def visible_items(role: Optional[Role], items=NAVIGATION_ITEMS) -> List[NavItem]:
    """Return the entries a user with ``role`` may see, in sidebar order.

    Without a signed-in user nothing is shown. The home entry is hidden for
    every signed-in user, guests included.
    """
    if role is None:
        return []
    return [item for item in items if item.path != HOME_PATH and item.allows(role)]


def is_active_route(item_path: str, current_path: str) -> bool:
    if item_path == HOME_PATH:
        return current_path == HOME_PATH
    return current_path.startswith(item_path)


def label_for(item: NavItem, translations: Optional[Mapping[str, Any]] = None) -> str:
    node: Any = translations or {}
    for part in item.label_key.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return item.label
        node = node[part]
    return node if isinstance(node, str) and node else item.label


@dataclass
class SidebarState:
    collapsed: bool = False

    def toggle(self) -> bool:
        self.collapsed = not self.collapsed
        logger.debug("Sidebar collapsed=%s", self.collapsed)
        return self.collapsed
