import logging

from ChatEntry import NEUTRAL, OTHER_CATEGORY, feedback_tally
from Errors import ValidationError
from Normalizer import normalize_question


def classify_category(question, category):
    if category and category.lower() in question.lower():
        return category
    return OTHER_CATEGORY


class ChatStorageService:
    def __init__(self, store):
        self.store = store

    def store_chat(self, question, category, answer, feedback=None):
        """
        Record a chat interaction reported by a client.

        An existing entry gets its category re-classified and its feedback
        tallied; its answer, feedback label and usage count stay as they are.
        A new entry is created with count 1.

        Returns:
            (entry, created) tuple
        """
        normalized_question = normalize_question(question)
        if not normalized_question:
            raise ValidationError("question must contain at least one word")

        resolved_category = classify_category(question, category)
        thumbs_up, thumbs_down = feedback_tally(feedback)

        entry = self.store.update_classification(normalized_question, resolved_category, thumbs_up, thumbs_down)
        if entry is not None:
            logging.info(f"Updated chat {entry.id} (category: {resolved_category})")
            return entry, False

        entry = self.store.insert_stored(question, normalized_question, resolved_category, answer, feedback or NEUTRAL)
        logging.info(f"Saved chat {entry.id} (category: {resolved_category})")
        return entry, True
