from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from app.adapters.media_storage import LocalMediaStorage
from app.api.deps import get_catalogue_service, get_media_storage
from app.errors import InvalidInput
from app.schemas.product_schema import PromotionIn, PromotionOut, product_dict
from app.services.catalogue_service import CatalogueService

router = APIRouter(tags=["catalogue"])
promotions_router = APIRouter(tags=["catalogue"])


def _store_uploads(storage: LocalMediaStorage, files: List[UploadFile]) -> List[str]:
    return [storage.save(f.file, f.filename, "products") for f in files if f.filename]


@router.get("", summary="List products")
def list_products(
    q: Optional[str] = Query(None, description="search term"),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=200),
    svc: CatalogueService = Depends(get_catalogue_service),
):
    items, total = svc.search(q, page, size)
    return {"items": [product_dict(p) for p in items], "total": total}


@router.get("/admin", summary="All products, newest first")
def list_products_admin(svc: CatalogueService = Depends(get_catalogue_service)):
    return {"productos": [product_dict(p) for p in svc.list_admin()]}


@router.get("/bajo-stock", summary="Products running out of stock")
def low_stock_products(svc: CatalogueService = Depends(get_catalogue_service)):
    return {"productos": [product_dict(p) for p in svc.low_stock()]}


@router.get("/descuentos", summary="Products with and without an active promotion")
def products_by_discount(svc: CatalogueService = Depends(get_catalogue_service)):
    with_promo, without = svc.split_by_discount()
    return {
        "productosConDescuento": [
            {**product_dict(p), "promociones": [PromotionOut.model_validate(promo).model_dump(by_alias=True)]}
            for p, promo in with_promo
        ],
        "productosSinDescuento": [product_dict(p) for p in without],
    }


@router.get("/recomendados", summary="Products recommended for a product")
def recommended_products(
    id: Optional[str] = Query(None),
    svc: CatalogueService = Depends(get_catalogue_service),
):
    if not id:
        raise InvalidInput("Falta el ID del producto")
    try:
        product_id = int(id)
    except ValueError:
        raise InvalidInput("ID inválido")
    return {"productos": [product_dict(p) for p in svc.recommended(product_id)]}


@router.get("/{product_id}", summary="Product with images and reviews")
def get_product(product_id: int, svc: CatalogueService = Depends(get_catalogue_service)):
    return {"producto": product_dict(svc.get(product_id, with_reviews=True), detail=True)}


@router.post("", status_code=201, summary="Create a product")
def create_product(
    name: str = Form(...),
    description: Optional[str] = Form(None),
    precio: Optional[str] = Form(None),
    sabor: Optional[str] = Form(None),
    tamano: Optional[str] = Form(None),
    stock: Optional[str] = Form(None),
    images: List[UploadFile] = File(default=[]),
    svc: CatalogueService = Depends(get_catalogue_service),
    storage: LocalMediaStorage = Depends(get_media_storage),
):
    fields = {
        "name": name,
        "description": description,
        "price": precio,
        "flavor": sabor,
        "size_ml": tamano,
        "stock": stock,
    }
    product = svc.create(fields, _store_uploads(storage, images))
    return {"message": "Producto creado exitosamente", "product": product_dict(product)}


@router.put("/{product_id}", summary="Update a product and optionally its images")
def update_product(
    product_id: int,
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    precio: Optional[str] = Form(None),
    sabor: Optional[str] = Form(None),
    tamano: Optional[str] = Form(None),
    stock: Optional[str] = Form(None),
    removeOldImages: Optional[str] = Form(None),
    images: List[UploadFile] = File(default=[]),
    svc: CatalogueService = Depends(get_catalogue_service),
    storage: LocalMediaStorage = Depends(get_media_storage),
):
    svc.get(product_id)
    fields = {
        "name": name,
        "description": description,
        "price": precio,
        "flavor": sabor,
        "size_ml": tamano,
        "stock": stock,
    }
    product = svc.update(
        product_id,
        fields,
        _store_uploads(storage, images),
        remove_old_images=removeOldImages == "true",
    )
    return {"message": "Producto actualizado exitosamente", "product": product_dict(product)}


@router.delete("/{product_id}", summary="Delete a product and its images")
def delete_product(product_id: int, svc: CatalogueService = Depends(get_catalogue_service)):
    svc.delete(product_id)
    return {"message": "Producto eliminado exitosamente."}


@promotions_router.post("", status_code=201, summary="Create a promotion for a product")
def create_promotion(payload: PromotionIn, svc: CatalogueService = Depends(get_catalogue_service)):
    promo = svc.create_promotion(
        {
            "product_id": payload.productoId,
            "title": payload.titulo,
            "description": payload.descripcion or "",
            "starts_at": payload.fechaInicio,
            "ends_at": payload.fechaFin,
            "discount": payload.descuento,
            "active": payload.activo,
        }
    )
    return {
        "message": "Promocion creada exitosamente",
        "promocion": PromotionOut.model_validate(promo).model_dump(by_alias=True),
    }
