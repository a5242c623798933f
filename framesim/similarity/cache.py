import logging

logger = logging.getLogger(__name__)


class SimilarityCache(object):
    """Memoized word and phrase similarities, kept apart per comparison direction.

    The left key is always the reference or source side, the right key the hypothesis side.
    One cache lives for one alignment run unless a caller passes the same cache to several runs.
    """

    def __init__(self):
        self.word_similarities = dict()
        """:type: dict[str, dict[(str, str), float]]"""
        self.phrase_similarities = dict()
        """:type: dict[str, dict[(str, str), (float, float)]]"""
        self.hits = 0
        self.misses = 0

    def word_similarity(self, mode, word, hyp_word, compute):
        """
        :type compute: callable taking no arguments
        """
        table = self.word_similarities.setdefault(mode, dict())
        key = (word, hyp_word)
        if key in table:
            self.hits += 1
            return table[key]
        self.misses += 1
        sim = compute()
        table[key] = sim
        return sim

    def phrase_similarity(self, mode, phrase, hyp_phrase, compute):
        table = self.phrase_similarities.setdefault(mode, dict())
        key = (phrase, hyp_phrase)
        if key in table:
            self.hits += 1
            return table[key]
        self.misses += 1
        sim = compute()
        table[key] = sim
        return sim
