import logging

import numpy as np

import abc

from framesim.common.utils import Struct
from framesim.common.utils import lowercase
from framesim.embeddings.word_embeddings import load_embeddings
from framesim.embeddings.word_embeddings import read_word_map

logger = logging.getLogger(__name__)

# which side the left word of a comparison comes from; the right word is always from the hypothesis
modes = Struct(REF='ref', HYP='hyp', SRC='src')

EPSILON = 0.00001


def cosine(ref, hyp, mode='cosine'):
    """Cosine similarity; 'cosine' clamps negative values to 0, 'ucosine' keeps them,
    'tcosine' maps [-1, 1] onto [0, 1]

    :type ref: numpy.ndarray
    :type hyp: numpy.ndarray
    """
    if ref.shape != hyp.shape or ref.size == 0:
        return 0.0
    norm = np.linalg.norm(ref) * np.linalg.norm(hyp)
    sim = float(np.dot(ref, hyp) / norm) if norm > 0 else 0.0
    if mode == 'ucosine':
        return sim
    elif mode == 'tcosine':
        return sim * 0.5 + 0.5
    return sim if sim > 0.0 else 0.0


def jaccard(ref, hyp, mode='jaccard'):
    """Weighted Jaccard: sum of elementwise minima over sum of elementwise maxima.

    In 'mjaccard', a dimension where either value is negative only adds |ref| + |hyp| to the union.
    """
    if ref.shape != hyp.shape or ref.size == 0:
        return 0.0
    if mode == 'mjaccard':
        positive = np.logical_and(ref >= 0, hyp >= 0)
        intersection = np.minimum(ref, hyp)[positive].sum()
        union = np.maximum(ref, hyp)[positive].sum() + (np.abs(ref) + np.abs(hyp))[~positive].sum()
    else:
        intersection = np.minimum(ref, hyp).sum()
        union = np.maximum(ref, hyp).sum()
    if union == 0:
        return 0.0
    return float(intersection / union)


SIMILARITY_FUNCTIONS = {
    'cosine': cosine,
    'ucosine': cosine,
    'tcosine': cosine,
    'jaccard': jaccard,
    'mjaccard': jaccard,
}


def vector_similarity(ref, hyp, function='cosine'):
    if function not in SIMILARITY_FUNCTIONS:
        raise ValueError('Input similarity function "%s" is not in the set of known functions: %s' % (
            function, ','.join(sorted(SIMILARITY_FUNCTIONS.keys()))))
    return SIMILARITY_FUNCTIONS[function](np.asarray(ref), np.asarray(hyp), function)


def longest_common_subsequence(a, b):
    """Length of the longest common character subsequence of a and b"""
    if len(a) == 0 or len(b) == 0:
        return 0
    previous = [0] * (len(b) + 1)
    for ca in a:
        current = [0]
        for j, cb in enumerate(b):
            if ca == cb:
                current.append(previous[j] + 1)
            else:
                current.append(max(previous[j + 1], current[j]))
        previous = current
    return previous[-1]


class LexicalSimilarityModel(object, metaclass=abc.ABCMeta):
    """Similarity in [0, 1] between a reference or source word and a hypothesis word"""

    name = None
    uses_vectors = False

    @abc.abstractmethod
    def similarity(self, word, hyp_word, mode=modes.REF):
        pass

    def vector_similarity(self, vec, hyp_vec):
        raise ValueError('Lexical similarity model "{}" does not compare vectors'.format(self.name))

    def _check_monolingual(self, mode):
        if mode == modes.SRC:
            raise ValueError('Lexical similarity model "{}" is not defined in crosslingual settings'.format(
                self.name))


class ExactMatch(LexicalSimilarityModel):
    name = 'exact'

    def __init__(self, epsilon=EPSILON):
        self.epsilon = epsilon

    class Factory(object):
        def create(self, params):
            return ExactMatch()

    def similarity(self, word, hyp_word, mode=modes.REF):
        self._check_monolingual(mode)
        if word == hyp_word:
            return 1.0
        return self.epsilon


class LongestCommonSubsequence(LexicalSimilarityModel):
    name = 'lcs'

    class Factory(object):
        def create(self, params):
            return LongestCommonSubsequence()

    def similarity(self, word, hyp_word, mode=modes.REF):
        self._check_monolingual(mode)
        total = len(word) + len(hyp_word)
        if total == 0:
            return 0.0
        return 2.0 * longest_common_subsequence(word, hyp_word) / total


class WordVectorSimilarity(LexicalSimilarityModel):
    """Monolingual static embeddings; words equal up to case are fully similar"""
    name = 'w2v'

    def __init__(self, embeddings, function='cosine'):
        """
        :type embeddings: framesim.embeddings.word_embeddings.WordEmbedding
        """
        if function not in SIMILARITY_FUNCTIONS:
            raise ValueError('Input similarity function "%s" is not in the set of known functions: %s' % (
                function, ','.join(sorted(SIMILARITY_FUNCTIONS.keys()))))
        self.embeddings = embeddings
        self.function = function

    class Factory(object):
        def create(self, params):
            return WordVectorSimilarity(load_embeddings(params['embeddings']), params.get('function', 'cosine'))

    def get_vector(self, word, mode=modes.HYP):
        return self.embeddings.get_vector(word)

    def similarity(self, word, hyp_word, mode=modes.REF):
        self._check_monolingual(mode)
        if lowercase(word) == lowercase(hyp_word):
            return 1.0
        return self.vector_similarity(self.get_vector(word, mode), self.get_vector(hyp_word, modes.HYP))

    def vector_similarity(self, vec, hyp_vec):
        if len(vec) != self.embeddings.vector_length or len(hyp_vec) != self.embeddings.vector_length:
            return 0.0
        return vector_similarity(vec, hyp_vec, self.function)


class MappedWordVectorSimilarity(WordVectorSimilarity):
    """Crosslingual similarity: source words go through a word map into the output embedding space"""
    name = 'emapw2v'

    def __init__(self, word_map, embeddings, function='cosine'):
        """
        :type word_map: dict[str, str]
        """
        super(MappedWordVectorSimilarity, self).__init__(embeddings, function)
        self.word_map = word_map

    class Factory(object):
        def create(self, params):
            return MappedWordVectorSimilarity(read_word_map(params['input_embeddings']),
                                              load_embeddings(params['embeddings']),
                                              params.get('function', 'cosine'))

    def get_vector(self, word, mode=modes.HYP):
        if mode == modes.SRC:
            if word in self.word_map:
                word = self.word_map[word]
            elif lowercase(word) in self.word_map:
                word = self.word_map[lowercase(word)]
        return self.embeddings.get_vector(word)

    def similarity(self, word, hyp_word, mode=modes.REF):
        if lowercase(word) == lowercase(hyp_word):
            return 1.0
        return self.vector_similarity(self.get_vector(word, mode), self.get_vector(hyp_word, modes.HYP))


class BilingualWordVectorSimilarity(WordVectorSimilarity):
    """Crosslingual similarity over two embedding spaces sharing a dimension"""
    name = 'biw2v'

    def __init__(self, input_embeddings, embeddings, function='cosine'):
        """
        :type input_embeddings: framesim.embeddings.word_embeddings.WordEmbedding
        :type embeddings: framesim.embeddings.word_embeddings.WordEmbedding
        """
        super(BilingualWordVectorSimilarity, self).__init__(embeddings, function)
        if input_embeddings.vector_length != embeddings.vector_length:
            raise ValueError('Input embeddings have dimension {} but output embeddings have {}'.format(
                input_embeddings.vector_length, embeddings.vector_length))
        self.input_embeddings = input_embeddings

    class Factory(object):
        def create(self, params):
            return BilingualWordVectorSimilarity(load_embeddings(params['input_embeddings']),
                                                 load_embeddings(params['embeddings']),
                                                 params.get('function', 'cosine'))

    def get_vector(self, word, mode=modes.HYP):
        if mode == modes.SRC:
            return self.input_embeddings.get_vector(word)
        return self.embeddings.get_vector(word)

    def similarity(self, word, hyp_word, mode=modes.REF):
        # a source word spelled like the hypothesis word only counts as identical when one side has no vector
        if lowercase(word) == lowercase(hyp_word):
            if mode != modes.SRC or not self.input_embeddings.contains(word) or not self.embeddings.contains(hyp_word):
                return 1.0
        return self.vector_similarity(self.get_vector(word, mode), self.get_vector(hyp_word, modes.HYP))


class ContextualEmbeddingSimilarity(LexicalSimilarityModel):
    """Compares externally supplied per-unit vectors; there is no notion of a word string"""
    name = 'emb'
    uses_vectors = True

    def __init__(self, function='cosine'):
        if function not in SIMILARITY_FUNCTIONS:
            raise ValueError('Input similarity function "%s" is not in the set of known functions: %s' % (
                function, ','.join(sorted(SIMILARITY_FUNCTIONS.keys()))))
        self.function = function

    class Factory(object):
        def create(self, params):
            return ContextualEmbeddingSimilarity(params.get('function', 'cosine'))

    def similarity(self, word, hyp_word, mode=modes.REF):
        raise ValueError('Lexical similarity model "emb" is a contextual embedding model; '
                         'it cannot compare words without their embeddings')

    def vector_similarity(self, vec, hyp_vec):
        return vector_similarity(vec, hyp_vec, self.function)


class LexicalSimilarityFactory(object):
    factories = {}

    @staticmethod
    def add_factory(id, factory):
        LexicalSimilarityFactory.factories[id] = factory

    @staticmethod
    def createLexicalSimilarity(id, params):
        """
        :type id: str
        :type params: dict
        :rtype: LexicalSimilarityModel
        """
        if id in LexicalSimilarityFactory.factories:
            logger.info('Creating lexical similarity model {}'.format(id))
            return LexicalSimilarityFactory.factories[id].create(params)
        else:
            raise RuntimeError('Lexical similarity model not supported: {}'.format(id))


LexicalSimilarityFactory.add_factory('exact', ExactMatch.Factory())
LexicalSimilarityFactory.add_factory('lcs', LongestCommonSubsequence.Factory())
LexicalSimilarityFactory.add_factory('w2v', WordVectorSimilarity.Factory())
LexicalSimilarityFactory.add_factory('emapw2v', MappedWordVectorSimilarity.Factory())
LexicalSimilarityFactory.add_factory('ibmw2v', MappedWordVectorSimilarity.Factory())
LexicalSimilarityFactory.add_factory('biw2v', BilingualWordVectorSimilarity.Factory())
LexicalSimilarityFactory.add_factory('emb', ContextualEmbeddingSimilarity.Factory())
