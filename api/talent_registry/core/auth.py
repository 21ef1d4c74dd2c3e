from dataclasses import dataclass
from enum import Enum


class ViewerRole(str, Enum):
    PROFESSIONAL = "professional"
    EMPLOYER = "employer"
    AGENCY = "agency"
    ADMIN = "admin"
    ANONYMOUS = "anonymous"


CLIENT_ROLES = frozenset({ViewerRole.EMPLOYER, ViewerRole.AGENCY})


@dataclass(slots=True, frozen=True)
class Principal:
    """Identity resolved from the session for the lifetime of one request."""

    subject: str | None
    role: ViewerRole
    session_key: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.subject is not None

    def require_roles(self, allowed: set[ViewerRole]) -> None:
        if self.role not in allowed:
            raise PermissionError(f"role {self.role.value} not allowed")


@dataclass(slots=True, frozen=True)
class Viewer:
    id: str | None
    role: ViewerRole
    is_owner_of_target: bool
    session_key: str | None = None

    @classmethod
    def for_target(cls, principal: Principal, target_user_id: str) -> "Viewer":
        return cls(
            id=principal.subject,
            role=principal.role,
            is_owner_of_target=principal.subject is not None and principal.subject == target_user_id,
            session_key=principal.session_key,
        )


def parse_role(raw: str | None) -> ViewerRole:
    if not raw:
        return ViewerRole.ANONYMOUS
    try:
        return ViewerRole(raw.strip().lower())
    except ValueError:
        return ViewerRole.ANONYMOUS
