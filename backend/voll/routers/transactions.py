# backend/voll/routers/transactions.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from .. import crud, schemas
from ..db import get_db

router = APIRouter(prefix="/api/transactions", tags=["Transactions"])


@router.get("", response_model=List[schemas.TransactionOut])
def list_transactions(db: Session = Depends(get_db)):
    return crud.list_transactions(db)


@router.post("", response_model=schemas.TransactionOut, status_code=201)
def create_transaction(payload: schemas.TransactionCreate, db: Session = Depends(get_db)):
    return crud.create_transaction(db, payload)


@router.patch("/{transaction_id}", response_model=schemas.TransactionOut)
def update_transaction_status(
    transaction_id: int,
    payload: schemas.TransactionStatusUpdate,
    db: Session = Depends(get_db),
):
    tx = crud.get_transaction(db, transaction_id)
    if not tx:
        raise HTTPException(status_code=404, detail="Lançamento não encontrado.")
    try:
        return crud.update_transaction_status(db, tx, payload.status)
    except crud.InvalidStatusTransition as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.delete("/{transaction_id}", status_code=204)
def delete_transaction(transaction_id: int, db: Session = Depends(get_db)):
    crud.delete_transaction(db, transaction_id)
    return Response(status_code=204)
