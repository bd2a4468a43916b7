from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tabook.database import get_db
from tabook.utils.catalog import load_reference
from tabook.utils.student_search import distinct_faculties, distinct_programs

router = APIRouter(prefix="/api", tags=["Catalog"])


@router.get("/faculties")
def list_faculties(program: Optional[str] = None, db: Session = Depends(get_db)):
    """Факультеты из анкет студентов (для фильтра поиска)."""
    return {"success": True, "faculties": distinct_faculties(db, program=program)}


@router.get("/programs")
def list_programs(faculty: Optional[str] = None, db: Session = Depends(get_db)):
    return {"success": True, "programs": distinct_programs(db, faculty=faculty)}


@router.get("/reference")
def reference():
    """Справочник дисциплин, форматов, факультетов и программ для форм."""
    return {"success": True, **load_reference()}
