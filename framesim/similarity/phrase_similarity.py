import logging

import numpy as np

from framesim.common.utils import join
from framesim.common.utils import safe_divide
from framesim.similarity.lexical_similarity import modes
from framesim.similarity.lexical_weight import UniformLexicalWeight

logger = logging.getLogger(__name__)


class PhraseSimilarity(object):
    """N-gram weighted precision and recall between a reference (or source) phrase and a hypothesis phrase.

    Each n-gram of one side is matched to its most similar n-gram on the other side. Two n-grams of equal
    width are compared position by position with the lexical similarity model, averaged with the lexical
    weights of the side being scored: hypothesis weights for precision, reference or source weights for
    recall. The best match of each n-gram is then averaged with the n-gram's total lexical weight.
    """

    def __init__(self, lexical_similarity, ref_weight=None, hyp_weight=None, src_weight=None, ngram_size=1):
        """
        :type lexical_similarity: framesim.similarity.lexical_similarity.LexicalSimilarityModel
        :type ref_weight: framesim.similarity.lexical_weight.LexicalWeightModel
        :type hyp_weight: framesim.similarity.lexical_weight.LexicalWeightModel
        :type src_weight: framesim.similarity.lexical_weight.LexicalWeightModel
        :type ngram_size: int
        """
        if ngram_size < 1:
            raise ValueError('N-gram size must be at least 1, got {}'.format(ngram_size))
        self.lexical_similarity = lexical_similarity
        self.ref_weight = ref_weight if ref_weight is not None else UniformLexicalWeight()
        self.hyp_weight = hyp_weight if hyp_weight is not None else self.ref_weight
        self.src_weight = src_weight if src_weight is not None else UniformLexicalWeight()
        self.ngram_size = ngram_size

    @property
    def uses_vectors(self):
        return self.lexical_similarity.uses_vectors

    def weight_model(self, mode):
        if mode == modes.REF:
            return self.ref_weight
        elif mode == modes.HYP:
            return self.hyp_weight
        elif mode == modes.SRC:
            return self.src_weight
        raise ValueError('Unknown comparison mode "{}"'.format(mode))

    def lexical_weight(self, tokens, mode):
        """Total lexical weight of a token sequence"""
        weight = self.weight_model(mode)
        return sum(weight(t) for t in tokens)

    def score(self, tokens, hyp_tokens, mode=modes.REF, cache=None, vectors=None, hyp_vectors=None):
        """Returns (precision, recall) of hyp_tokens against tokens.

        :type tokens: list[str]
        :type hyp_tokens: list[str]
        :type mode: str
        :type cache: framesim.similarity.cache.SimilarityCache
        :param vectors: per-token contextual vectors, required by models comparing vectors
        :rtype: (float, float)
        """
        if len(tokens) == 0 or len(hyp_tokens) == 0:
            return 0.0, 0.0
        if self.uses_vectors:
            # the same string carries different vectors in different contexts, so phrases are not memoized
            if vectors is None or hyp_vectors is None:
                raise ValueError('Lexical similarity model "{}" needs the contextual embeddings of both phrases'.format(
                    self.lexical_similarity.name))
            return self._compute(tokens, hyp_tokens, mode, cache, vectors, hyp_vectors)
        if cache is None:
            return self._compute(tokens, hyp_tokens, mode, None)
        return cache.phrase_similarity(mode, join(tokens), join(hyp_tokens),
                                       lambda: self._compute(tokens, hyp_tokens, mode, cache))

    def _word_similarity(self, word, hyp_word, mode, cache):
        if cache is None:
            return self.lexical_similarity.similarity(word, hyp_word, mode)
        return cache.word_similarity(mode, word, hyp_word,
                                     lambda: self.lexical_similarity.similarity(word, hyp_word, mode))

    def _similarity_matrix(self, tokens, hyp_tokens, mode, cache, vectors, hyp_vectors):
        sims = np.zeros((len(tokens), len(hyp_tokens)), dtype=np.float64)
        for i in range(len(tokens)):
            for j in range(len(hyp_tokens)):
                if vectors is not None:
                    sims[i, j] = self.lexical_similarity.vector_similarity(vectors[i], hyp_vectors[j])
                else:
                    sims[i, j] = self._word_similarity(tokens[i], hyp_tokens[j], mode, cache)
        return sims

    def _compute(self, tokens, hyp_tokens, mode, cache, vectors=None, hyp_vectors=None):
        n = self.ngram_size
        if len(tokens) < n or len(hyp_tokens) < n:
            n = min(len(tokens), len(hyp_tokens))

        sims = self._similarity_matrix(tokens, hyp_tokens, mode, cache, vectors, hyp_vectors)
        weight = self.weight_model(mode)
        weights = [weight(t) for t in tokens]
        hyp_weights = [self.hyp_weight(t) for t in hyp_tokens]

        starts = range(len(tokens) - n + 1)
        hyp_starts = range(len(hyp_tokens) - n + 1)

        nom = 0.0
        denom = 0.0
        for i in starts:
            ngram_weight = sum(weights[i:i + n])
            best = 0.0
            for j in hyp_starts:
                best = max(best, self.ngram_similarity(sims, weights, hyp_weights, i, j, n)[1])
            nom += ngram_weight * best
            denom += ngram_weight
        recall = safe_divide(nom, denom)

        nom = 0.0
        denom = 0.0
        for j in hyp_starts:
            ngram_weight = sum(hyp_weights[j:j + n])
            best = 0.0
            for i in starts:
                best = max(best, self.ngram_similarity(sims, weights, hyp_weights, i, j, n)[0])
            nom += ngram_weight * best
            denom += ngram_weight
        precision = safe_divide(nom, denom)
        return precision, recall

    @staticmethod
    def ngram_similarity(sims, weights, hyp_weights, i, j, n):
        """(precision, recall) of the hypothesis n-gram starting at j against the one starting at i"""
        p = 0.0
        r = 0.0
        plen = 0.0
        rlen = 0.0
        for k in range(n):
            s = sims[i + k, j + k]
            r += weights[i + k] * s
            p += hyp_weights[j + k] * s
            rlen += weights[i + k]
            plen += hyp_weights[j + k]
        return safe_divide(p, plen), safe_divide(r, rlen)

    def ngram_score(self, ngram, hyp_ngram, mode=modes.REF, cache=None):
        """(precision, recall) of two n-grams of the same width"""
        if len(ngram) != len(hyp_ngram):
            raise ValueError('Cannot compare n-grams of different sizes: {} vs {}'.format(
                join(ngram), join(hyp_ngram)))
        sims = self._similarity_matrix(ngram, hyp_ngram, mode, cache, None, None)
        weight = self.weight_model(mode)
        return self.ngram_similarity(sims, [weight(t) for t in ngram], [self.hyp_weight(t) for t in hyp_ngram],
                                     0, 0, len(ngram))
