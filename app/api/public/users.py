from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.i18n import Translator, get_translator
from app.db.session import get_db
from app.schemas.query import QueryDescriptor
from app.services import catalog
from app.services.envelope import respond

router = APIRouter()


@router.get("")
def get_users(request: Request, db: Session = Depends(get_db), translator: Translator = Depends(get_translator)):
    result = catalog.query_users(db, QueryDescriptor.from_params(request.query_params))
    return respond(result, translator)


@router.get("/{user_id}")
def get_user(user_id: int, db: Session = Depends(get_db), translator: Translator = Depends(get_translator)):
    return respond(catalog.query_user(db, user_id), translator)


@router.get("/{user_id}/reviews")
def get_user_reviews(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    translator: Translator = Depends(get_translator),
):
    result = catalog.query_user_reviews(db, user_id, QueryDescriptor.from_params(request.query_params))
    return respond(result, translator)
