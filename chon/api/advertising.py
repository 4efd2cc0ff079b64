from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from chon.db.database import get_db
from chon.db.repositories import advertising as advertising_repo
from chon.utils.runtime import public_base_url

router = APIRouter(prefix="/api/advertising", tags=["advertising"])


@router.get("")
def list_advertisements(db: Session = Depends(get_db)):
    base_url = public_base_url()
    data = [
        {
            "id": ad.id,
            "company_name": ad.company_name,
            "phone_number": ad.phone_number,
            "image_url": ad.image_url(base_url),
            "created_at": ad.created_at.isoformat(),
        }
        for ad in advertising_repo.list_active(db)
    ]
    return {"success": True, "data": data, "count": len(data)}


@router.get("/random")
def random_advertisement(db: Session = Depends(get_db)):
    ad = advertising_repo.random_active(db)
    if ad is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No active advertisements found")
    return {
        "success": True,
        "data": {
            "id": ad.id,
            "company_name": ad.company_name,
            "phone_number": ad.phone_number,
            "image_url": ad.image_url(public_base_url()),
        },
    }


@router.get("/image")
def advertisement_image(db: Session = Depends(get_db)):
    ad = advertising_repo.first_active(db)
    if ad is None or not ad.image:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No active advertisement image found")
    return {"success": True, "data": {"image_url": ad.image_url(public_base_url())}}


@router.get("/{advertisement_id}")
def show_advertisement(advertisement_id: int, db: Session = Depends(get_db)):
    ad = advertising_repo.get_advertisement(db, advertisement_id=advertisement_id)
    if ad is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Advertisement not found")
    return {
        "success": True,
        "data": {
            "id": ad.id,
            "company_name": ad.company_name,
            "phone_number": ad.phone_number,
            "image_url": ad.image_url(public_base_url()),
            "is_active": ad.is_active,
            "created_at": ad.created_at.isoformat(),
            "updated_at": ad.updated_at.isoformat(),
        },
    }
