# backend/routes/diagnostic.py
import logging
from pathlib import Path
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from sqlalchemy.orm import Session

from database import get_db
from models.diagnostic import Diagnostic, ModelVersion
from models.parcel import Parcel
from models.users import User
from schemas.diagnostic import DiagnosticOut
from utils.audit import client_ip, write_log
from utils.classifier import get_classifier
from utils.tokenJWT import get_current_user
from utils.uploads import save_upload, upload_dir

router = APIRouter(prefix="/api/diagnostic", tags=["Diagnostic"])
logger = logging.getLogger(__name__)


@router.post("/", response_model=DiagnosticOut, status_code=201)
def analyze_plant(
    request: Request,
    image: UploadFile = File(...),
    parcel_id: Optional[int] = Form(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    classifier=Depends(get_classifier),
):
    if parcel_id is not None:
        parcel = db.query(Parcel).filter(Parcel.id == parcel_id, Parcel.farmer_id == current_user.id).first()
        if not parcel:
            raise HTTPException(status_code=404, detail="Parcel not found")

    saved: Path = save_upload(image, subdir="diagnostics")
    prediction = classifier.predict(saved)
    logger.info("Diagnostic for user %s: %s (%.1f%%)", current_user.id, prediction.disease, prediction.confidence)

    active_model = db.query(ModelVersion).filter(ModelVersion.is_active == True).first()  # noqa: E712
    diagnostic = Diagnostic(
        user_id=current_user.id,
        parcel_id=parcel_id,
        model_version_id=active_model.id if active_model else None,
        image_url="/uploads/" + saved.relative_to(upload_dir()).as_posix(),
        disease=prediction.disease,
        confidence=prediction.confidence,
        description=prediction.description,
        treatment=list(prediction.treatment),
    )
    db.add(diagnostic)
    db.commit()
    db.refresh(diagnostic)

    write_log(
        db, user_id=current_user.id, action="DIAGNOSTIC", resource="diagnostic", status="SUCCESS",
        ip=client_ip(request), meta={"id": diagnostic.id, "disease": diagnostic.disease},
    )
    return diagnostic


@router.get("/history/", response_model=List[DiagnosticOut])
def diagnostic_history(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return (
        db.query(Diagnostic)
        .filter(Diagnostic.user_id == current_user.id)
        .order_by(Diagnostic.created_at.desc(), Diagnostic.id.desc())
        .all()
    )
