"""Company API schemas."""

from pydantic import BaseModel

from app.application.services.company_deletion import DeletionReport


class DeletionResponse(BaseModel):
    """Documents deleted per collection."""

    company_admin_id: str
    deleted: dict[str, int]
    total: int

    @classmethod
    def from_report(cls, report: DeletionReport) -> "DeletionResponse":
        return cls(
            company_admin_id=report.company_admin_id,
            deleted=dict(report.deleted),
            total=report.total,
        )
