from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.i18n import Translator, get_translator
from app.db.session import get_db
from app.schemas.query import QueryDescriptor
from app.services import catalog
from app.services.envelope import respond

router = APIRouter()


@router.get("")
def get_categories(request: Request, db: Session = Depends(get_db), translator: Translator = Depends(get_translator)):
    result = catalog.query_categories(db, QueryDescriptor.from_params(request.query_params))
    return respond(result, translator)


@router.get("/{category_id}")
def get_category(category_id: int, db: Session = Depends(get_db), translator: Translator = Depends(get_translator)):
    return respond(catalog.query_category(db, category_id), translator)
