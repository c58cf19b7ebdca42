from datetime import datetime, timezone

from mongoengine import DateTimeField, Document, IntField, StringField

THUMBS_UP = "thumbsUp"
THUMBS_DOWN = "thumbsDown"
NEUTRAL = "neutral"
FEEDBACK_STATES = (THUMBS_UP, THUMBS_DOWN, NEUTRAL)

OTHER_CATEGORY = "other"


def utc_now():
    return datetime.now(timezone.utc)


def feedback_tally(feedback):
    """Return the (thumbs_up, thumbs_down) increments a feedback value earns."""
    if feedback == THUMBS_UP:
        return 1, 0
    if feedback == THUMBS_DOWN:
        return 0, 1
    return 0, 0


class ChatEntry(Document):
    question = StringField(required=True)
    normalized_question = StringField(required=True, db_field="normalizedQuestion")
    answer = StringField(required=True)
    feedback = StringField(choices=FEEDBACK_STATES, default=NEUTRAL)
    thumbs_up = IntField(min_value=0, default=0, db_field="thumbsUp")
    thumbs_down = IntField(min_value=0, default=0, db_field="thumbsDown")
    category = StringField(default=OTHER_CATEGORY)
    timestamp = DateTimeField(default=utc_now)
    count = IntField(min_value=0, default=0)

    meta = {
        'collection': 'chathistories',
        'indexes': ['normalized_question', 'category']
    }

    def as_json(self):
        return {
            "_id": str(self.id),
            "question": self.question,
            "normalizedQuestion": self.normalized_question,
            "answer": self.answer,
            "feedback": self.feedback,
            "thumbsUp": self.thumbs_up,
            "thumbsDown": self.thumbs_down,
            "category": self.category,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "count": self.count,
        }
