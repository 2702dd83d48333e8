# backend/routes/parcels.py
import math
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Request, UploadFile, File, Form
from sqlalchemy.orm import Session

from database import get_db
from models.parcel import Parcel, HealthState
from models.users import User, FARMER
from schemas.parcel import ParcelOut
from utils.audit import client_ip, write_log
from utils.tokenJWT import role_required
from utils.uploads import remove_image, save_image

router = APIRouter(prefix="/api/farmer/parcels", tags=["Parcels"])

farmer_only = role_required(FARMER)

def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        raise HTTPException(status_code=400, detail="datePlantation must be YYYY-MM-DD")

def _parse_health(value: Optional[str]) -> Optional[HealthState]:
    if value is None:
        return None
    try:
        return HealthState(value.strip().lower())
    except ValueError:
        raise HTTPException(status_code=400, detail="etatSante must be one of: excellent, bon, moyen, critique")

def _own_parcel(db: Session, farmer: User, parcel_id: int) -> Parcel:
    parcel = db.query(Parcel).filter(Parcel.id == parcel_id, Parcel.farmer_id == farmer.id).first()
    if not parcel:
        raise HTTPException(status_code=404, detail="Parcel not found")
    return parcel


@router.get("/", response_model=List[ParcelOut])
def list_parcels(db: Session = Depends(get_db), current_user: User = Depends(farmer_only)):
    return db.query(Parcel).filter(Parcel.farmer_id == current_user.id).order_by(Parcel.id.asc()).all()


@router.post("/", response_model=ParcelOut, status_code=201)
def create_parcel(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(farmer_only),
    photo: Optional[UploadFile] = File(None),
    nom: str = Form(...),
    culture: str = Form(...),
    superficie: float = Form(...),
    localisation: Optional[str] = Form(None),
    datePlantation: Optional[str] = Form(None),
    stade: Optional[str] = Form(None),
    etatSante: str = Form("bon"),
    notes: Optional[str] = Form(None),
):
    if not math.isfinite(superficie) or superficie <= 0:
        raise HTTPException(status_code=400, detail="superficie must be > 0")

    parcel = Parcel(
        farmer_id=current_user.id,
        nom=nom.strip(),
        culture=culture.strip(),
        superficie=superficie,
        localisation=localisation,
        date_plantation=_parse_date(datePlantation),
        stade=stade,
        etat_sante=_parse_health(etatSante),
        notes=notes,
        photo=save_image(photo, "parcels") if photo and photo.filename else None,
    )
    db.add(parcel)
    db.commit()
    db.refresh(parcel)

    write_log(
        db, user_id=current_user.id, action="PARCEL_CREATE", resource="parcels",
        status="SUCCESS", ip=client_ip(request), meta={"id": parcel.id, "culture": parcel.culture},
    )
    return parcel


@router.put("/{parcel_id}/", response_model=ParcelOut)
def update_parcel(
    parcel_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(farmer_only),
    photo: Optional[UploadFile] = File(None),
    nom: Optional[str] = Form(None),
    culture: Optional[str] = Form(None),
    superficie: Optional[float] = Form(None),
    localisation: Optional[str] = Form(None),
    datePlantation: Optional[str] = Form(None),
    stade: Optional[str] = Form(None),
    etatSante: Optional[str] = Form(None),
    notes: Optional[str] = Form(None),
):
    parcel = _own_parcel(db, current_user, parcel_id)

    if superficie is not None:
        if not math.isfinite(superficie) or superficie <= 0:
            raise HTTPException(status_code=400, detail="superficie must be > 0")
        parcel.superficie = superficie
    if nom is not None: parcel.nom = nom.strip()
    if culture is not None: parcel.culture = culture.strip()
    if localisation is not None: parcel.localisation = localisation
    if datePlantation is not None: parcel.date_plantation = _parse_date(datePlantation)
    if stade is not None: parcel.stade = stade
    if etatSante is not None: parcel.etat_sante = _parse_health(etatSante)
    if notes is not None: parcel.notes = notes

    if photo and photo.filename:
        new_url = save_image(photo, "parcels")
        remove_image(parcel.photo)
        parcel.photo = new_url

    db.commit()
    db.refresh(parcel)

    write_log(
        db, user_id=current_user.id, action="PARCEL_UPDATE", resource="parcels",
        status="SUCCESS", ip=client_ip(request), meta={"id": parcel.id},
    )
    return parcel


@router.delete("/{parcel_id}/")
def delete_parcel(
    parcel_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(farmer_only),
):
    parcel = _own_parcel(db, current_user, parcel_id)
    photo = parcel.photo
    db.delete(parcel)
    db.commit()
    remove_image(photo)
    write_log(
        db, user_id=current_user.id, action="PARCEL_DELETE", resource="parcels",
        status="SUCCESS", ip=client_ip(request), meta={"id": parcel_id},
    )
    return {"detail": "Parcel deleted"}
