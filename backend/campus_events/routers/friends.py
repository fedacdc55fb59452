"""Friend request and friendship routes."""
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from campus_events.auth.dependencies import get_current_user
from campus_events.database import get_db
from campus_events.models.user import User
from campus_events.schemas.friend import FriendRequestCreate, FriendRequestOut
from campus_events.schemas.user import PublicProfileOut
from campus_events.services import friend_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=list[PublicProfileOut])
def list_friends(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return friend_service.get_friends(db, user.user_id)


@router.get("/requests", response_model=list[FriendRequestOut])
def list_requests(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Incoming requests awaiting a response."""
    return friend_service.get_friend_requests(db, user.user_id)


@router.post("/requests", response_model=FriendRequestOut, status_code=status.HTTP_201_CREATED)
def send_request(
    payload: FriendRequestCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return friend_service.send_friend_request(db, user, payload.receiver_id, payload.message)


@router.post("/requests/{request_id}/accept", response_model=FriendRequestOut)
def accept_request(request_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return friend_service.accept_friend_request(db, request_id, user)


@router.post("/requests/{request_id}/decline", response_model=FriendRequestOut)
def decline_request(request_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return friend_service.decline_friend_request(db, request_id, user)


@router.delete("/{friend_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_friend(friend_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    friend_service.remove_friend(db, user, friend_id)
