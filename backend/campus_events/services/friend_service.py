"""Friend requests and friendships."""
import logging
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from campus_events.models.friendship import FriendRequest, FriendRequestStatus, Friendship, FriendshipStatus
from campus_events.models.user import User

logger = logging.getLogger(__name__)


def _are_friends(db: Session, user_id: str, other_id: str) -> bool:
    return (
        db.query(Friendship)
        .filter(Friendship.user_id == user_id, Friendship.friend_id == other_id)
        .first()
        is not None
    )


def send_friend_request(db: Session, sender: User, receiver_id: str, message: str | None = None) -> FriendRequest:
    if receiver_id == sender.user_id:
        raise HTTPException(status_code=400, detail="You cannot send a friend request to yourself")
    receiver = db.query(User).filter(User.user_id == receiver_id).first()
    if not receiver:
        raise HTTPException(status_code=404, detail="User not found")
    if _are_friends(db, sender.user_id, receiver_id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="You are already friends")

    pending = (
        db.query(FriendRequest)
        .filter(
            FriendRequest.status == FriendRequestStatus.pending.value,
            (
                (FriendRequest.sender_id == sender.user_id) & (FriendRequest.receiver_id == receiver_id)
            ) | (
                (FriendRequest.sender_id == receiver_id) & (FriendRequest.receiver_id == sender.user_id)
            ),
        )
        .first()
    )
    if pending:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A friend request is already pending")

    request = FriendRequest(sender_id=sender.user_id, receiver_id=receiver_id, message=message)
    db.add(request)
    db.commit()
    db.refresh(request)
    logger.info("Friend request %s from %s to %s", request.request_id, sender.user_id, receiver_id)
    return request


def _pending_request_for(db: Session, request_id: str, receiver: User) -> FriendRequest:
    request = db.query(FriendRequest).filter(FriendRequest.request_id == request_id).first()
    if not request:
        raise HTTPException(status_code=404, detail="Friend request not found")
    if request.receiver_id != receiver.user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the recipient may respond to this request")
    if request.status != FriendRequestStatus.pending.value:
        raise HTTPException(status_code=400, detail=f"Friend request is already {request.status}")
    return request


def accept_friend_request(db: Session, request_id: str, receiver: User) -> FriendRequest:
    """Accept a pending request: one friendship row per direction, counters bumped."""
    request = _pending_request_for(db, request_id, receiver)
    request.status = FriendRequestStatus.accepted.value
    request.responded_at = datetime.now(timezone.utc)

    sender = db.query(User).filter(User.user_id == request.sender_id).one()
    if not _are_friends(db, sender.user_id, receiver.user_id):
        db.add(Friendship(user_id=sender.user_id, friend_id=receiver.user_id, status=FriendshipStatus.active.value))
        db.add(Friendship(user_id=receiver.user_id, friend_id=sender.user_id, status=FriendshipStatus.active.value))
        sender.friends_count = (sender.friends_count or 0) + 1
        receiver.friends_count = (receiver.friends_count or 0) + 1

    db.commit()
    db.refresh(request)
    logger.info("Friend request %s accepted", request_id)
    return request


def decline_friend_request(db: Session, request_id: str, receiver: User) -> FriendRequest:
    request = _pending_request_for(db, request_id, receiver)
    request.status = FriendRequestStatus.declined.value
    request.responded_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(request)
    logger.info("Friend request %s declined", request_id)
    return request


def get_friend_requests(db: Session, user_id: str) -> list[FriendRequest]:
    """Incoming requests still awaiting a response."""
    return (
        db.query(FriendRequest)
        .filter(FriendRequest.receiver_id == user_id, FriendRequest.status == FriendRequestStatus.pending.value)
        .order_by(FriendRequest.created_at.desc())
        .all()
    )


def get_friends(db: Session, user_id: str) -> list[User]:
    return (
        db.query(User)
        .join(Friendship, Friendship.friend_id == User.user_id)
        .filter(Friendship.user_id == user_id, Friendship.status == FriendshipStatus.active.value)
        .order_by(User.first_name, User.last_name)
        .all()
    )


def remove_friend(db: Session, user: User, friend_id: str) -> None:
    rows = (
        db.query(Friendship)
        .filter(
            ((Friendship.user_id == user.user_id) & (Friendship.friend_id == friend_id))
            | ((Friendship.user_id == friend_id) & (Friendship.friend_id == user.user_id))
        )
        .all()
    )
    if not rows:
        raise HTTPException(status_code=404, detail="Friendship not found")
    for row in rows:
        db.delete(row)
    friend = db.query(User).filter(User.user_id == friend_id).first()
    user.friends_count = max((user.friends_count or 0) - 1, 0)
    if friend:
        friend.friends_count = max((friend.friends_count or 0) - 1, 0)
    db.commit()
    logger.info("User %s removed friend %s", user.user_id, friend_id)
