from enum import Enum


class ProjectStatus(str, Enum):
    QUOTE = "quote"
    APPROVED = "approved"
    IN_PRODUCTION = "in_production"
    COMPLETED = "completed"
    DELIVERED = "delivered"


ACTIVE_STATUSES = (ProjectStatus.APPROVED, ProjectStatus.IN_PRODUCTION)
BILLABLE_STATUSES = (ProjectStatus.COMPLETED, ProjectStatus.DELIVERED)
