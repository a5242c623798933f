import os
import logging

import numpy as np

import abc

logger = logging.getLogger(__name__)

UNK_TOKEN = '<unk>'


class WordEmbeddingAbstract(object, metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def load_word_vec_file(self, embedding_filepath):
        return None

    @abc.abstractmethod
    def get_vector(self, word, try_lower=True):
        pass

    @abc.abstractmethod
    def contains(self, word):
        pass


class WordEmbedding(WordEmbeddingAbstract):
    """Static word embeddings in word2vec format, every vector L2-normalized.

    Lookup tries the word itself, then its lowercase form, then the reserved <unk> entry.
    When the file has no <unk>, an empty vector stands in for it, so unknown words score 0 against anything.
    """

    def __init__(self, embedding_filepath=None, words=None, word_vec=None):
        """
        :type embedding_filepath: str
        :type words: list[str]
        :type word_vec: numpy.ndarray
        """
        if embedding_filepath is not None:
            logger.info('Loading embeddings file {}'.format(embedding_filepath))
            words, word_vec = self.load_word_vec_file(embedding_filepath)
        elif words is None or word_vec is None:
            raise ValueError('WordEmbedding needs either an embeddings file or words with their vectors')
        word_vec = np.asarray(word_vec, dtype=np.float64)
        if word_vec.ndim != 2 or word_vec.shape[0] != len(words):
            raise ValueError('Expected one embedding row per word, got {} words and shape {}'.format(
                len(words), word_vec.shape))
        self.vector_length = word_vec.shape[1]

        self.word_vec = normalize(word_vec)
        """:type: numpy.ndarray"""
        self.word_lookup = dict()
        for i, w in enumerate(words):
            self.word_lookup[w] = i
        self.words = list(words)
        self.unk_vector = np.zeros(0, dtype=np.float64)
        if UNK_TOKEN in self.word_lookup:
            self.unk_vector = self.word_vec[self.word_lookup[UNK_TOKEN]]
        logger.info('{} words of dimension {} in embeddings'.format(len(self.words), self.vector_length))

    class Factory(object):
        def create(self, embeddings_params):
            return WordEmbedding(embeddings_params['embedding_file'])

    def load_word_vec_file(self, embedding_filepath):
        if not os.path.exists(embedding_filepath):
            raise ValueError('Embeddings file {} does not exist'.format(embedding_filepath))
        if embedding_filepath.endswith('bin'):
            return read_binary_word_vec(embedding_filepath)
        return read_text_word_vec(embedding_filepath)

    def contains(self, word):
        return word in self.word_lookup

    def get_vector(self, word, try_lower=True):
        """
        :type word: str
        :rtype: numpy.ndarray
        """
        if word in self.word_lookup:
            return self.word_vec[self.word_lookup[word]]
        if try_lower:
            lower = word.lower()
            if lower in self.word_lookup:
                return self.word_vec[self.word_lookup[lower]]
        return self.unk_vector

    def write_text(self, filepath):
        """Writes the embeddings in word2vec text format, leaving out <unk>"""
        logger.info('Writing embeddings in text format to {}'.format(filepath))
        words = [w for w in self.words if w != UNK_TOKEN]
        with open(filepath, 'w', encoding='utf-8') as o:
            o.write('{} {}\n'.format(len(words), self.vector_length))
            for w in words:
                vec = self.word_vec[self.word_lookup[w]]
                o.write('{} {}\n'.format(w, ' '.join(repr(float(v)) for v in vec)))


def normalize(word_vec):
    if word_vec.size == 0:
        return word_vec
    norms = np.linalg.norm(word_vec, axis=1, keepdims=True)
    norms[norms == 0] = 1.0
    return word_vec / norms


def read_text_word_vec(embedding_filepath):
    """Text word2vec: a 'count dim' header line, then one 'word f1 ... fdim' line per word"""
    words = []
    rows = []
    with open(embedding_filepath, 'r', encoding='utf-8') as f:
        header = f.readline().split()
        if len(header) != 2:
            raise ValueError('Embeddings file {} lacks the "count dim" header'.format(embedding_filepath))
        count, dim = int(header[0]), int(header[1])
        for line in f:
            fields = line.rstrip('\r\n').split(' ')
            if len(fields) < dim + 1:
                continue
            words.append(fields[0])
            rows.append([float(x) for x in fields[1:dim + 1]])
            if len(words) == count:
                break
    if len(words) != count:
        logger.warning('Embeddings file {} declares {} words but holds {}'.format(embedding_filepath, count, len(words)))
    word_vec = np.asarray(rows, dtype=np.float64).reshape((len(rows), dim))
    return words, word_vec


def read_binary_word_vec(embedding_filepath):
    """Binary word2vec: a 'count dim' header, then for each word its text, a space and dim little-endian float32"""
    with open(embedding_filepath, 'rb') as f:
        data = f.read()

    pos = 0
    header = []
    while len(header) < 2:
        while pos < len(data) and data[pos:pos + 1].isspace():
            pos += 1
        start = pos
        while pos < len(data) and not data[pos:pos + 1].isspace():
            pos += 1
        if start == pos:
            raise ValueError('Embeddings file {} lacks the "count dim" header'.format(embedding_filepath))
        header.append(int(data[start:pos]))
    count, dim = header
    pos += 1

    words = []
    word_vec = np.zeros((count, dim), dtype=np.float64)
    width = 4 * dim
    for i in range(count):
        end = data.index(b' ', pos)
        words.append(data[pos:end].strip().decode('utf-8'))
        pos = end + 1
        if pos + width > len(data):
            raise ValueError('Embeddings file {} is truncated at word {}'.format(embedding_filepath, i))
        word_vec[i, :] = np.frombuffer(data, dtype='<f4', count=dim, offset=pos)
        pos += width
    logger.info('Read {} binary vectors of dimension {}'.format(count, dim))
    return words, word_vec


class WordEmbeddingFactory(object):
    factories = {}

    @staticmethod
    def add_factory(id, factory):
        WordEmbeddingFactory.factories[id] = factory

    @staticmethod
    def createWordEmbedding(id, embeddings_params):
        if id in WordEmbeddingFactory.factories:
            return WordEmbeddingFactory.factories[id].create(embeddings_params)
        else:
            raise RuntimeError('Embedding type not supported: {}'.format(id))


WordEmbeddingFactory.add_factory('word_embeddings', WordEmbedding.Factory())


def load_embeddings(embedding_file):
    """
    :type embedding_file: str
    :rtype: WordEmbedding
    """
    return WordEmbeddingFactory.createWordEmbedding('word_embeddings', {'embedding_file': embedding_file})


def read_word_map(filepath):
    """Source-to-output word map, one 'source output' pair per line

    :rtype: dict[str, str]
    """
    word_map = dict()
    with open(filepath, 'r', encoding='utf-8') as f:
        for line in f:
            fields = line.split()
            if len(fields) >= 2:
                word_map[fields[0]] = fields[1]
    logger.info('Read {} word map entries from {}'.format(len(word_map), filepath))
    return word_map
