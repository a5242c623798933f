import math
import logging

import abc

from framesim.common.utils import lowercase
from framesim.common.utils import read_file_to_list
from framesim.common.utils import split_paths
from framesim.common.utils import tokenize

logger = logging.getLogger(__name__)


class LexicalWeightModel(object, metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def weight(self, word):
        pass

    def __call__(self, word):
        return self.weight(word)


class UniformLexicalWeight(LexicalWeightModel):
    name = 'uniform'

    class Factory(object):
        def create(self, path):
            return UniformLexicalWeight()

    def weight(self, word):
        return 1.0


class DocumentFrequencyWeight(LexicalWeightModel):
    """IDF-like weight from sentence counts: log2(1 + (N + 1) / (count + 1)).

    N is the number of sentences seen, count the number of those containing the word (the word as given,
    else its lowercase form, else 0).
    """
    name = 'file'

    def __init__(self):
        self.sentence_count = 0.0
        self.counts = dict()
        """:type: dict[str, float]"""

    class Factory(object):
        def create(self, path):
            model = DocumentFrequencyWeight()
            model.read(path)
            return model

    def weight(self, word):
        if word in self.counts:
            c = self.counts[word]
        else:
            c = self.counts.get(lowercase(word), 0.0)
        return math.log2(1.0 + (self.sentence_count + 1.0) / (c + 1.0))

    def learn(self, sentences):
        """
        :type sentences: list[list[str]]
        """
        self.sentence_count += len(sentences)
        for tokens in sentences:
            for word in set(tokens):
                self.counts[word] = self.counts.get(word, 0.0) + 1.0

    def learn_from_files(self, paths):
        """Learns from one or more ':'-separated corpus files, one tokenized sentence per line"""
        sentences = []
        for path in split_paths(paths):
            logger.info('Learning lexical weights from {}'.format(path))
            sentences.extend(tokenize(line) for line in read_file_to_list(path))
        self.learn(sentences)

    def read(self, path):
        """Adds the counts of a weight table file: first N, then 'count word' pairs"""
        logger.info('Reading lexical weight file {}'.format(path))
        try:
            with open(path, 'r', encoding='utf-8') as f:
                fields = f.read().split()
        except IOError as e:
            raise ValueError('Failed to open lexical weight file {}: {}'.format(path, e))
        if len(fields) == 0:
            raise ValueError('Lexical weight file {} is empty'.format(path))
        self.sentence_count += float(fields[0])
        for i in range(1, len(fields) - 1, 2):
            word = fields[i + 1]
            self.counts[word] = self.counts.get(word, 0.0) + float(fields[i])

    def write(self, o):
        """
        :type o: file-like object opened for text writing
        """
        o.write('{:g}\n'.format(self.sentence_count))
        for word in sorted(self.counts):
            o.write('{:g} {}\n'.format(self.counts[word], word))


class LearnedLexicalWeight(DocumentFrequencyWeight):
    name = 'learn'

    def __init__(self, sentences=None):
        super(LearnedLexicalWeight, self).__init__()
        if sentences is not None:
            self.learn(sentences)

    class Factory(object):
        def create(self, path):
            model = LearnedLexicalWeight()
            model.learn_from_files(path)
            return model


class LexicalWeightFactory(object):
    factories = {}

    @staticmethod
    def add_factory(id, factory):
        LexicalWeightFactory.factories[id] = factory

    @staticmethod
    def createLexicalWeight(id, path=''):
        """
        :type id: str
        :type path: str
        :rtype: LexicalWeightModel
        """
        if id in LexicalWeightFactory.factories:
            return LexicalWeightFactory.factories[id].create(path)
        else:
            raise RuntimeError('Lexical weight model not supported: {}'.format(id))


LexicalWeightFactory.add_factory('uniform', UniformLexicalWeight.Factory())
LexicalWeightFactory.add_factory('file', DocumentFrequencyWeight.Factory())
LexicalWeightFactory.add_factory('learn', LearnedLexicalWeight.Factory())
