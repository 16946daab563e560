from fastapi import HTTPException, Request, status

from app.services.impact_service import ImpactService


def get_impact_service(request: Request) -> ImpactService:
    service = getattr(request.app.state, "impact_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Impact service is not configured.",
        )
    return service
