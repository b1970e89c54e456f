# backend/voll/routers/students.py
from fastapi import APIRouter, Depends, Response
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from .. import crud, schemas
from ..db import get_db
from ..services import exports

router = APIRouter(prefix="/api/students", tags=["Students"])


@router.get("", response_model=list[schemas.StudentOut])
def list_students(db: Session = Depends(get_db)):
    return crud.get_all_students(db)


@router.post("", response_model=schemas.StudentOut, status_code=201)
def create_student(payload: schemas.StudentCreate, db: Session = Depends(get_db)):
    return crud.create_student(db, payload)


@router.delete("/{student_id}", status_code=204)
def delete_student(student_id: int, db: Session = Depends(get_db)):
    crud.delete_student(db, student_id)
    return Response(status_code=204)

# =========================================================
# EXPORTS
# =========================================================
@router.get("/export/csv")
def export_students_csv(db: Session = Depends(get_db)):
    body = exports.students_csv(crud.get_all_students(db))
    return Response(
        content=body.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="alunos.csv"'},
    )


@router.get("/export/pdf")
def export_students_pdf(db: Session = Depends(get_db)):
    body = exports.students_pdf(crud.get_all_students(db))
    return Response(
        content=body,
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="alunos.pdf"'},
    )


@router.get("/export/xlsx")
def export_students_xlsx(db: Session = Depends(get_db)):
    stream = exports.students_xlsx(crud.get_all_students(db))
    return StreamingResponse(
        stream,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": 'attachment; filename="alunos.xlsx"'},
    )
