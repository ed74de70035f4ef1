# vehicle_permits/routers/hr_users.py
"""HR user administration — the accounts allowed to decide permits."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from vehicle_permits.database import get_db
from vehicle_permits.models.hr_user import HrUser
from vehicle_permits.schemas.employee import HrUserCreate, HrUserOut

router = APIRouter()


@router.get("/hr-users", response_model=list[HrUserOut])
def list_hr_users(db: Session = Depends(get_db)):
    return db.query(HrUser).order_by(HrUser.id).all()


@router.post("/hr-users", response_model=HrUserOut, status_code=201)
def create_hr_user(body: HrUserCreate, db: Session = Depends(get_db)):
    if db.query(HrUser).filter(HrUser.email == body.email).first():
        raise HTTPException(status_code=400, detail=f"{body.email} already registered")
    user = HrUser(name=body.name, email=body.email, is_hr=body.is_hr)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@router.delete("/hr-users/{user_id}", summary="Remove an HR user; their past decisions are kept")
def delete_hr_user(user_id: int, db: Session = Depends(get_db)):
    user = db.get(HrUser, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="HR user not found")
    db.delete(user)
    db.commit()
    return {"status": "removed", "id": user_id}
