# devtoolkit/models/suggestion.py
"""User feedback and feature suggestions"""
from devtoolkit.extensions import db
from devtoolkit.utils.timeutil import utcnow

SUGGESTION_TYPES = ('feature', 'improvement', 'bug', 'feedback')
SUGGESTION_CATEGORIES = ('tool', 'ui', 'performance', 'general')
PRIORITIES = ('low', 'medium', 'high', 'critical')
STATUSES = ('pending', 'reviewing', 'approved', 'rejected', 'implemented')


class Suggestion(db.Model):
    __tablename__ = 'suggestions'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    type = db.Column(db.String(20), nullable=False, default='feedback')
    category = db.Column(db.String(20), nullable=False, default='general')
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    priority = db.Column(db.String(10), nullable=False, default='medium')
    status = db.Column(db.String(20), nullable=False, default='pending', index=True)

    upvotes = db.Column(db.Integer, nullable=False, default=0)
    downvotes = db.Column(db.Integer, nullable=False, default=0)

    admin_response = db.Column(db.Text)
    responded_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    responded_at = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    implemented_at = db.Column(db.DateTime)

    votes = db.relationship('SuggestionVote', backref='suggestion', lazy=True,
                            cascade='all, delete-orphan')

    def __repr__(self):
        return f'<Suggestion {self.id} status={self.status}>'

    def to_dict(self, include_author=False):
        payload = {
            'id': self.id,
            'userId': self.user_id,
            'type': self.type,
            'category': self.category,
            'title': self.title,
            'description': self.description,
            'priority': self.priority,
            'status': self.status,
            'votes': {'upvotes': self.upvotes, 'downvotes': self.downvotes},
            'adminResponse': None,
            'createdAt': self.created_at.isoformat(),
            'updatedAt': self.updated_at.isoformat(),
            'implementedAt': self.implemented_at.isoformat() if self.implemented_at else None,
        }
        if self.admin_response:
            payload['adminResponse'] = {
                'message': self.admin_response,
                'respondedBy': self.responded_by,
                'respondedAt': self.responded_at.isoformat() if self.responded_at else None,
            }
        if include_author:
            payload['userEmail'] = self.author.email if self.author else 'Unknown'
        return payload


class SuggestionVote(db.Model):
    """One vote per user per suggestion"""
    __tablename__ = 'suggestion_votes'
    __table_args__ = (db.UniqueConstraint('suggestion_id', 'user_id', name='uq_suggestion_voter'),)

    id = db.Column(db.Integer, primary_key=True)
    suggestion_id = db.Column(db.Integer, db.ForeignKey('suggestions.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    vote = db.Column(db.String(10), nullable=False)  # upvote, downvote
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
