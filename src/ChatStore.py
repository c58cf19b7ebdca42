import logging
from functools import wraps

from bson import ObjectId
from mongoengine import connect
from mongoengine.connection import ConnectionFailure
from mongoengine.errors import InvalidQueryError, OperationError
from mongoengine.errors import ValidationError as DocumentValidationError
from pymongo.errors import PyMongoError

from ChatEntry import ChatEntry, NEUTRAL, OTHER_CATEGORY, utc_now
from Errors import StorageError

STORAGE_ERRORS = (PyMongoError, ConnectionFailure, OperationError, InvalidQueryError, DocumentValidationError)


def connect_store(mongo_uri, **kwargs):
    logging.info("Connecting to MongoDB...")
    return connect(host=mongo_uri, **kwargs)


def storage_call(method):
    @wraps(method)
    def wrapper(*args, **kwargs):
        try:
            return method(*args, **kwargs)
        except STORAGE_ERRORS as e:
            raise StorageError(f"{method.__name__} failed: {e}") from e
    return wrapper


class ChatStore:
    """
    Reads and writes chat entries.

    Every mutation is a single findAndModify so concurrent requests never
    overwrite each other's counters. Lookups by normalized question take the
    oldest matching entry.
    """

    def _by_key(self, normalized_question):
        return ChatEntry.objects(normalized_question=normalized_question).order_by("timestamp", "id")

    @storage_call
    def find_by_normalized_question(self, normalized_question):
        return self._by_key(normalized_question).first()

    @storage_call
    def find_by_id(self, entry_id):
        if not ObjectId.is_valid(entry_id):
            return None
        return ChatEntry.objects(id=entry_id).first()

    @storage_call
    def record_hit(self, normalized_question):
        """Increment the usage count of a cached entry, or return None on a miss."""
        return self._by_key(normalized_question).modify(new=True, inc__count=1)

    @storage_call
    def insert_answered(self, question, normalized_question, answer):
        """
        Create the entry for a freshly answered question.

        If another request created the same key in the meantime, that entry is
        kept and counted as a hit instead.
        """
        return self._by_key(normalized_question).modify(
            upsert=True,
            new=True,
            set_on_insert__question=question,
            set_on_insert__answer=answer,
            set_on_insert__feedback=NEUTRAL,
            set_on_insert__thumbs_up=0,
            set_on_insert__thumbs_down=0,
            set_on_insert__category=OTHER_CATEGORY,
            set_on_insert__timestamp=utc_now(),
            inc__count=1,
        )

    @storage_call
    def update_classification(self, normalized_question, category, thumbs_up=0, thumbs_down=0):
        return self._by_key(normalized_question).modify(
            new=True,
            set__category=category,
            inc__thumbs_up=thumbs_up,
            inc__thumbs_down=thumbs_down,
        )

    @storage_call
    def insert_stored(self, question, normalized_question, category, answer, feedback):
        return self._by_key(normalized_question).modify(
            upsert=True,
            new=True,
            set_on_insert__question=question,
            set_on_insert__answer=answer,
            set_on_insert__feedback=feedback,
            set_on_insert__thumbs_up=0,
            set_on_insert__thumbs_down=0,
            set_on_insert__category=category,
            set_on_insert__timestamp=utc_now(),
            set_on_insert__count=1,
        )

    @storage_call
    def set_feedback(self, entry_id, feedback, thumbs_up=0, thumbs_down=0):
        """Set the feedback label and bump the tallies, or return None for an unknown id."""
        if not ObjectId.is_valid(entry_id):
            return None
        return ChatEntry.objects(id=entry_id).modify(
            new=True,
            set__feedback=feedback,
            inc__thumbs_up=thumbs_up,
            inc__thumbs_down=thumbs_down,
        )

    @storage_call
    def top_by_thumbs_up(self, category=None, limit=5):
        entries = ChatEntry.objects(category=category) if category else ChatEntry.objects
        return list(entries.order_by("-thumbs_up", "normalized_question").limit(limit))

    @storage_call
    def top_grouped_by_usage(self, match, limit=5):
        """
        Group entries matching `match` by normalized question and rank by total usage.

        Representative question, answer and category come from the earliest
        created entry of each group.
        """
        pipeline = [
            {"$match": match},
            {"$sort": {"timestamp": 1, "_id": 1}},
            {"$group": {
                "_id": "$normalizedQuestion",
                "count": {"$sum": "$count"},
                "question": {"$first": "$question"},
                "answer": {"$first": "$answer"},
                "category": {"$first": "$category"},
            }},
            {"$sort": {"count": -1, "_id": 1}},
            {"$limit": limit},
        ]
        return list(ChatEntry.objects.aggregate(pipeline))
