from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from app.adapters.media_storage import LocalMediaStorage
from app.api.deps import get_current_user_id, get_media_storage, get_review_service
from app.schemas.product_schema import ReviewOut
from app.services.review_service import ReviewService

router = APIRouter(tags=["reviews"])


@router.get("/elegibles", summary="Received products the user has not reviewed yet")
def eligible_products(
    user_id: int = Depends(get_current_user_id),
    svc: ReviewService = Depends(get_review_service),
):
    return {"productos": svc.eligible_products(user_id)}


@router.post("", status_code=201, summary="Review a received product")
def create_review(
    productoId: int = Form(...),
    comment: str = Form(""),
    sabor: Optional[str] = Form(None),
    empaque: Optional[str] = Form(None),
    precio: Optional[str] = Form(None),
    recomendacion: Optional[str] = Form(None),
    entrega: Optional[str] = Form(None),
    rating: Optional[int] = Form(None),
    images: List[UploadFile] = File(default=[]),
    user_id: int = Depends(get_current_user_id),
    svc: ReviewService = Depends(get_review_service),
    storage: LocalMediaStorage = Depends(get_media_storage),
):
    # reject before any upload is written
    svc.check_can_review(user_id, productoId)

    urls = [storage.save(f.file, f.filename, "reviews") for f in images if f.filename]
    answers = {
        "sabor": sabor,
        "empaque": empaque,
        "precio": precio,
        "recomendacion": recomendacion,
        "entrega": entrega,
    }
    review = svc.submit(user_id, productoId, comment, answers, image_urls=urls, rating=rating)
    return {"review": ReviewOut.model_validate(review).model_dump(by_alias=True)}
