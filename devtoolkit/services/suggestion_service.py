# devtoolkit/services/suggestion_service.py
"""Suggestion service for the DevToolkit account service
User feedback, voting and admin responses
"""
from typing import Dict, List, Optional

from loguru import logger
from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError

from devtoolkit.errors import ErrorKind, ServiceResult
from devtoolkit.extensions import db, notifier
from devtoolkit.models.suggestion import (PRIORITIES, STATUSES, SUGGESTION_CATEGORIES,
                                          SUGGESTION_TYPES, Suggestion, SuggestionVote)
from devtoolkit.models.user import User
from devtoolkit.services.activity_service import log_activity
from devtoolkit.utils.timeutil import utcnow

TRANSITIONS = {
    'pending': {'reviewing', 'approved', 'rejected'},
    'reviewing': {'approved', 'rejected'},
    'approved': {'implemented'},
    'rejected': set(),
    'implemented': set(),
}
VOTES = ('upvote', 'downvote')
MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 5000


def _get(suggestion_id) -> Optional[Suggestion]:
    try:
        return db.session.get(Suggestion, int(suggestion_id))
    except (TypeError, ValueError):
        return None


def can_transition(current: str, new: str) -> bool:
    """Same-status updates are allowed so an admin can revise a response"""
    return new == current or new in TRANSITIONS.get(current, set())


def create_suggestion(user_id, data: Dict) -> ServiceResult:
    """
    Store a new suggestion in pending state

    Args:
        user_id: Author
        data: title, description and optional type, category, priority

    Returns:
        ServiceResult carrying the suggestion under data['suggestion']
    """
    title = data.get('title')
    description = data.get('description')
    if not isinstance(title, str) or not isinstance(description, str):
        return ServiceResult.fail(ErrorKind.VALIDATION, 'Title and description are required')
    title, description = title.strip(), description.strip()
    if not title or not description:
        return ServiceResult.fail(ErrorKind.VALIDATION, 'Title and description are required')
    if len(title) > MAX_TITLE_LENGTH:
        return ServiceResult.fail(ErrorKind.VALIDATION, 'Title is too long')
    if len(description) > MAX_DESCRIPTION_LENGTH:
        return ServiceResult.fail(ErrorKind.VALIDATION, 'Description is too long')

    kind = data.get('type', 'feedback')
    category = data.get('category', 'general')
    priority = data.get('priority', 'medium')
    for value, allowed, label in ((kind, SUGGESTION_TYPES, 'type'),
                                  (category, SUGGESTION_CATEGORIES, 'category'),
                                  (priority, PRIORITIES, 'priority')):
        if value not in allowed:
            return ServiceResult.fail(ErrorKind.VALIDATION,
                                      f"Invalid {label}, expected one of: {', '.join(allowed)}")

    now = utcnow()
    suggestion = Suggestion(
        user_id=user_id,
        type=kind,
        category=category,
        title=title,
        description=description,
        priority=priority,
        status='pending',
        created_at=now,
        updated_at=now,
    )
    db.session.add(suggestion)
    db.session.commit()

    log_activity(user_id, 'suggestion_created', 'system', {
        'description': f'Created suggestion: {title}',
        'metadata': {'suggestionId': suggestion.id, 'type': kind, 'category': category},
    })

    return ServiceResult.ok('Suggestion submitted successfully',
                            data={'suggestion': suggestion.to_dict()})


def list_for_user(user_id) -> List[Suggestion]:
    return (Suggestion.query
            .filter_by(user_id=user_id)
            .order_by(Suggestion.created_at.desc(), Suggestion.id.desc())
            .all())


def list_all(status: Optional[str] = None, kind: Optional[str] = None, limit: int = 100) -> List[Suggestion]:
    query = Suggestion.query
    if status:
        query = query.filter_by(status=status)
    if kind:
        query = query.filter_by(type=kind)
    return query.order_by(Suggestion.created_at.desc(), Suggestion.id.desc()).limit(limit).all()


def get(suggestion_id) -> Optional[Suggestion]:
    return _get(suggestion_id)


def update_status(suggestion_id, status: str, admin_id,
                  admin_response: Optional[str] = None) -> ServiceResult:
    """
    Move a suggestion along its workflow, optionally answering the author

    Returns:
        ServiceResult carrying the suggestion under data['suggestion']
    """
    suggestion = _get(suggestion_id)
    if not suggestion:
        return ServiceResult.fail(ErrorKind.NOT_FOUND, 'Suggestion not found')

    if status not in STATUSES:
        return ServiceResult.fail(ErrorKind.VALIDATION,
                                  f"Invalid status, expected one of: {', '.join(STATUSES)}")

    if not can_transition(suggestion.status, status):
        return ServiceResult.fail(ErrorKind.VALIDATION,
                                  f'Cannot change status from {suggestion.status} to {status}')

    now = utcnow()
    values = {'status': status, 'updated_at': now}
    if status == 'implemented' and suggestion.implemented_at is None:
        values['implemented_at'] = now
    if admin_response:
        values.update(admin_response=admin_response, responded_by=admin_id, responded_at=now)

    db.session.execute(
        update(Suggestion)
        .where(Suggestion.id == suggestion.id)
        .values(**values)
    )
    db.session.commit()

    if admin_response:
        author = db.session.get(User, suggestion.user_id)
        if author and author.email_notifications:
            notifier.send(author.email, 'admin_response', {
                'suggestion_title': suggestion.title,
                'admin_response': admin_response,
            })
        log_activity(admin_id, 'suggestion_responded', 'admin', {
            'description': f'Responded to suggestion: {suggestion.title}',
            'metadata': {'suggestionId': suggestion.id, 'status': status},
        })

    logger.info(f"Suggestion {suggestion.id} set to {status} by {admin_id}")
    return ServiceResult.ok('Suggestion updated successfully',
                            data={'suggestion': _get(suggestion.id).to_dict(include_author=True)})


def vote(suggestion_id, user_id, direction: str) -> ServiceResult:
    """Cast one vote per user per suggestion"""
    if direction not in VOTES:
        return ServiceResult.fail(ErrorKind.VALIDATION, 'Vote must be upvote or downvote')

    suggestion = _get(suggestion_id)
    if not suggestion:
        return ServiceResult.fail(ErrorKind.NOT_FOUND, 'Suggestion not found')

    try:
        db.session.add(SuggestionVote(suggestion_id=suggestion.id, user_id=user_id, vote=direction))
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        return ServiceResult.fail(ErrorKind.VALIDATION, 'You have already voted on this suggestion')

    counter = Suggestion.upvotes if direction == 'upvote' else Suggestion.downvotes
    db.session.execute(
        update(Suggestion)
        .where(Suggestion.id == suggestion.id)
        .values({counter: counter + 1})
    )
    db.session.commit()

    refreshed = _get(suggestion.id)
    return ServiceResult.ok('Vote recorded',
                            data={'votes': {'upvotes': refreshed.upvotes,
                                            'downvotes': refreshed.downvotes}})


def stats() -> Dict:
    """Suggestion counts grouped by status"""
    rows = (db.session.query(Suggestion.status, func.count(Suggestion.id))
            .group_by(Suggestion.status)
            .all())
    by_status = {status: 0 for status in STATUSES}
    by_status.update({status: count for status, count in rows})
    return {'total': sum(by_status.values()), 'byStatus': by_status}
