import logging

logger = logging.getLogger(__name__)


class IntPair(object):
    """first and second of a pair of integers, e.g. the unit span of a token"""

    def __init__(self, first, second):
        self.first = first
        self.second = second

    def __eq__(self, other):
        if isinstance(other, self.__class__):
            return self.first == other.first and self.second == other.second
        return False


class Struct:
    """Named constants as attributes, e.g. Struct(WORD='word').WORD"""
    def __init__(self, **entries):
        self.__dict__.update(entries)


def tokenize(line):
    """Splits on single spaces, dropping empty tokens.

    :type line: str
    :rtype: list[str]
    """
    return [token for token in line.split(' ') if len(token) > 0]


def lowercase(word):
    return word.lower()


def join(tokens, delimiter=' '):
    return delimiter.join(tokens)


def safe_divide(nom, denom):
    if denom == 0:
        return 0.0
    return float(nom) / denom


def read_file_to_list(filepath):
    """Reads a text file, one element per line, trailing newlines stripped

    :type filepath: str
    :rtype: list[str]
    """
    ret = []
    with open(filepath, 'r', encoding='utf-8') as f:
        for line in f:
            ret.append(line.rstrip('\r\n'))
    logger.debug('Read {} lines from {}'.format(len(ret), filepath))
    return ret


def split_paths(paths):
    """Several corpus paths may be given in one string, separated by ':'"""
    return [p for p in paths.split(':') if len(p) > 0]
