import logging

from ChatEntry import NEUTRAL, THUMBS_DOWN, THUMBS_UP, feedback_tally
from Errors import NotFoundError


class FeedbackService:
    def __init__(self, store):
        self.store = store

    def update_feedback(self, entry_id, feedback):
        label = feedback if feedback in (THUMBS_UP, THUMBS_DOWN) else NEUTRAL
        thumbs_up, thumbs_down = feedback_tally(label)

        entry = self.store.set_feedback(entry_id, label, thumbs_up, thumbs_down)
        if entry is None:
            raise NotFoundError(f"Chat {entry_id} not found")

        logging.info(f"Feedback for chat {entry_id}: {label}")
        return entry
