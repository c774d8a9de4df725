"""
Export API endpoints
"""
from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from taskapp.api.deps import get_db
from taskapp.application.export_service import ExportService


router = APIRouter(prefix="/api/v1/export", tags=["export"])


@router.get("/actions.csv")
def export_actions_csv(db: Session = Depends(get_db)):
    return Response(
        content=ExportService(db).export_actions_csv(),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="actions.csv"'},
    )


@router.get("/actions.json")
def export_actions_json(db: Session = Depends(get_db)):
    return Response(
        content=ExportService(db).export_actions_json(),
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="actions.json"'},
    )
