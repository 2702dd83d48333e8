# backend/routes/ml_model.py
import logging
from pathlib import Path
from typing import List, Optional
from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy import func
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models.diagnostic import Diagnostic, Disease, ModelVersion
from models.users import User, ADMIN
from schemas.diagnostic import DiseaseCreate, DiseaseOut, ModelStats, ModelVersionOut
from utils.audit import client_ip, write_log
from utils.classifier import DEFAULT_ACCURACY
from utils.tokenJWT import role_required
from utils.uploads import save_upload

router = APIRouter(prefix="/api/admin/ml-model", tags=["ML model"])
logger = logging.getLogger(__name__)

admin_only = role_required(ADMIN)

MODEL_FILE_TYPES = None  # any binary format is accepted


def _active_model(db: Session) -> Optional[ModelVersion]:
    return (
        db.query(ModelVersion)
        .filter(ModelVersion.is_active == True)  # noqa: E712
        .order_by(ModelVersion.id.desc())
        .first()
    )


def _register_version(db: Session, *, status: str, accuracy: float, file_path: Optional[str], user: User) -> ModelVersion:
    """Add a new model version and make it the only active one."""
    last_version = db.query(func.max(ModelVersion.version)).scalar() or 0
    db.query(ModelVersion).filter(ModelVersion.is_active == True).update({"is_active": False})  # noqa: E712
    version = ModelVersion(
        version=last_version + 1,
        status=status,
        accuracy=accuracy,
        file_path=file_path,
        is_active=True,
        created_by=user.id,
    )
    db.add(version)
    db.commit()
    db.refresh(version)
    return version


@router.get("/stats/", response_model=ModelStats)
def model_stats(db: Session = Depends(get_db), current_user: User = Depends(admin_only)):
    active = _active_model(db)
    return ModelStats(
        accuracy=active.accuracy if active else DEFAULT_ACCURACY,
        diagnostics_count=db.query(func.count(Diagnostic.id)).scalar() or 0,
        supported_diseases=db.query(func.count(Disease.id)).scalar() or 0,
        last_updated=active.created_at if active else None,
    )


# === Disease catalogue ===

@router.get("/diseases/", response_model=List[DiseaseOut])
def list_diseases(db: Session = Depends(get_db), current_user: User = Depends(admin_only)):
    return db.query(Disease).order_by(Disease.name.asc()).all()


@router.post("/diseases/", response_model=DiseaseOut, status_code=201)
def add_disease(
    payload: DiseaseCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Disease name cannot be empty")
    exists = db.query(Disease).filter(func.lower(Disease.name) == name.lower()).first()
    if exists:
        raise HTTPException(status_code=400, detail="Disease already exists")

    disease = Disease(name=name, description=payload.description, treatment=payload.treatment)
    db.add(disease)
    db.commit()
    db.refresh(disease)

    write_log(
        db, user_id=current_user.id, action="DISEASE_CREATE", resource="ml-model", status="SUCCESS",
        ip=client_ip(request), meta={"id": disease.id, "name": disease.name},
    )
    return disease


@router.delete("/diseases/{disease_id}/")
def delete_disease(
    disease_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    disease = db.query(Disease).filter(Disease.id == disease_id).first()
    if not disease:
        raise HTTPException(status_code=404, detail="Disease not found")
    name = disease.name
    db.delete(disease)
    db.commit()
    write_log(
        db, user_id=current_user.id, action="DISEASE_DELETE", resource="ml-model", status="SUCCESS",
        ip=client_ip(request), meta={"id": disease_id, "name": name},
    )
    return {"detail": f"Disease '{name}' deleted"}


# === Model versions ===

@router.post("/train/", response_model=ModelVersionOut, status_code=201)
def train_model(request: Request, db: Session = Depends(get_db), current_user: User = Depends(admin_only)):
    # No training pipeline yet: the run keeps the current weights and accuracy
    active = _active_model(db)
    version = _register_version(
        db,
        status="trained",
        accuracy=active.accuracy if active else DEFAULT_ACCURACY,
        file_path=active.file_path if active else None,
        user=current_user,
    )
    logger.info("Model training run recorded as version %s by user %s", version.version, current_user.id)
    write_log(
        db, user_id=current_user.id, action="MODEL_TRAIN", resource="ml-model", status="SUCCESS",
        ip=client_ip(request), meta={"version": version.version},
    )
    return version


@router.post("/upload/", response_model=ModelVersionOut, status_code=201)
def upload_model(
    request: Request,
    model_file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    model_dir = Path(settings.MODEL_DIR)
    saved = save_upload(model_file, allowed_types=MODEL_FILE_TYPES, base_dir=model_dir)
    if saved.stat().st_size == 0:
        saved.unlink()
        raise HTTPException(status_code=400, detail="Model file is empty")

    active = _active_model(db)
    version = _register_version(
        db,
        status="uploaded",
        accuracy=active.accuracy if active else DEFAULT_ACCURACY,
        file_path=str(saved),
        user=current_user,
    )
    write_log(
        db, user_id=current_user.id, action="MODEL_UPLOAD", resource="ml-model", status="SUCCESS",
        ip=client_ip(request), meta={"version": version.version, "filename": model_file.filename},
    )
    return version


@router.get("/download/")
def download_model(db: Session = Depends(get_db), current_user: User = Depends(admin_only)):
    active = _active_model(db)
    if not active or not active.file_path or not Path(active.file_path).is_file():
        raise HTTPException(status_code=404, detail="No model file available")
    return FileResponse(
        active.file_path,
        media_type="application/octet-stream",
        filename=f"ml-model-v{active.version}.pkl",
    )
