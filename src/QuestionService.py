import logging

from Errors import ValidationError
from Normalizer import normalize_question


class QuestionService:
    def __init__(self, store, answer_client):
        self.store = store
        self.answer_client = answer_client

    def process_question(self, question):
        """
        Answer a question from the cache, asking the answering service on a miss.

        A hit bumps the entry's usage count. A miss creates the entry with
        count 1; nothing is written when the answering service fails.
        """
        normalized_question = normalize_question(question)
        if not normalized_question:
            raise ValidationError("question must contain at least one word")

        entry = self.store.record_hit(normalized_question)
        if entry is not None:
            logging.info("Cache hit!")
            return entry

        logging.info("Cache miss, asking answer service...")
        answer = self.answer_client.answer(question)

        logging.info("Saving answer to cache...")
        return self.store.insert_answered(question, normalized_question, answer)
