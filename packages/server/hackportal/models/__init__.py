# SQLModel definitions, imported here so Alembic sees the full metadata.
from .base import UUIDMixin, TimestampMixin  # noqa: F401
from .organization import Organization  # noqa: F401
from .profile import Profile  # noqa: F401
from .org_member import OrgMember  # noqa: F401
from .task import Task  # noqa: F401
from .event_person import EventPerson  # noqa: F401
from .team_resource import TeamResource  # noqa: F401
from .storage_orphan import StorageOrphan  # noqa: F401
