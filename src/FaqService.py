from ChatEntry import OTHER_CATEGORY

FAQ_LIMIT = 5
TOP_OVERALL = "faqs"


def _usage_rank(group):
    return -group["count"], group["_id"]


class FaqService:
    def __init__(self, store):
        self.store = store

    def get_faqs(self, category=None):
        if category == TOP_OVERALL:
            return self.top_overall()
        return [entry.as_json() for entry in self.store.top_by_thumbs_up(category, FAQ_LIMIT)]

    def top_overall(self):
        """Blend the most used uncategorized and categorized questions into one top list."""
        uncategorized = self.store.top_grouped_by_usage({"category": OTHER_CATEGORY}, FAQ_LIMIT)
        categorized = self.store.top_grouped_by_usage({"category": {"$ne": OTHER_CATEGORY}}, FAQ_LIMIT)

        combined = sorted(uncategorized + categorized, key=_usage_rank)
        return combined[:FAQ_LIMIT]
