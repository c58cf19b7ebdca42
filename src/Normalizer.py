from nltk.stem import PorterStemmer
from nltk.tokenize import RegexpTokenizer

tokenizer = RegexpTokenizer(r"\w+")
stemmer = PorterStemmer()


def normalize_question(question: str) -> str:
    """
    Build the cache key for a question.

    Lowercases the text, splits it into word tokens and Porter-stems each token,
    so "How do I reset my passwords?" and "how do i RESET my password" share a key.

    Args:
        question: Raw question text

    Returns:
        Space-joined stemmed tokens, or an empty string when there are no words
    """
    words = tokenizer.tokenize((question or "").lower())
    return " ".join(stemmer.stem(word) for word in words)
