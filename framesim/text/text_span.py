import logging

import numpy as np

from framesim.common.utils import Struct
from framesim.common.utils import IntPair

logger = logging.getLogger(__name__)

sentence_types = Struct(WORD='word', UNIT='unit', UEMB='uemb')

"""Classes here:
Span
Sentence
"""


class Span(object):
    """Half-open token interval [start, end). An empty span (start == end) marks an unrealized role."""

    def __init__(self, start=0, end=0):
        if start > end:
            raise ValueError('Span start {} is after its end {}'.format(start, end))
        self.start = start
        self.end = end

    def length(self):
        return self.end - self.start

    def is_empty(self):
        return self.start == self.end

    def __eq__(self, other):
        if not isinstance(other, type(self)):
            return False
        return self.start == other.start and self.end == other.end

    def __hash__(self):
        return hash((self.start, self.end))

    def to_string(self):
        return '({},{})'.format(self.start, self.end)

    def __repr__(self):
        return self.to_string()


class Sentence(object):
    """A tokenized sentence, with optional sub-word units and per-unit embeddings.

    token_to_units[i] is the half-open unit interval covering token i; unit_to_token[j] is the
    token that owns unit j. When present, embeddings has one row per unit.
    """

    def __init__(self, tokens, sentence_type=sentence_types.WORD, units=None, token_to_units=None,
                 unit_to_token=None, embeddings=None):
        """
        :type tokens: list[str]
        :type sentence_type: str
        :type units: list[str]
        :type token_to_units: list[framesim.common.utils.IntPair]
        :type unit_to_token: list[int]
        :type embeddings: numpy.ndarray
        """
        if sentence_type not in (sentence_types.WORD, sentence_types.UNIT, sentence_types.UEMB):
            raise ValueError('Unknown sentence type "{}"'.format(sentence_type))
        self.sentence_type = sentence_type
        self.tokens = list(tokens)
        self.units = units
        self.token_to_units = token_to_units if token_to_units is not None else []
        """:type: list[framesim.common.utils.IntPair]"""
        self.unit_to_token = unit_to_token if unit_to_token is not None else []
        self.embeddings = embeddings
        """:type: numpy.ndarray"""

    def has_units(self):
        return self.sentence_type != sentence_types.WORD

    def has_embeddings(self):
        return self.sentence_type == sentence_types.UEMB

    def retokenize(self, tokens):
        """Replaces the tokens by the ones an SRL parser produced.

        The parser may split tokens further (more tokens than we had), which is tolerated with a warning.
        Fewer tokens means the parse cannot be for this sentence.
        """
        if len(tokens) < len(self.tokens):
            raise ValueError('SRL tokenization has {} tokens, fewer than the {} input tokens: {}'.format(
                len(tokens), len(self.tokens), ' '.join(tokens)))
        if len(tokens) > len(self.tokens):
            logger.warning('SRL tokenization widened the sentence from {} to {} tokens: {}'.format(
                len(self.tokens), len(tokens), ' '.join(tokens)))
        self.tokens = list(tokens)
        if self.has_units() and len(self.token_to_units) != len(self.tokens):
            logger.warning('Unit mapping covers {} tokens but the sentence now has {}; token spans past the mapping '
                           'are used as unit spans'.format(len(self.token_to_units), len(self.tokens)))

    def token_span_to_unit_span(self, span):
        """
        :type span: Span
        :rtype: Span
        """
        if not self.has_units() or span.is_empty():
            return Span(span.start, span.end)
        if span.end - 1 >= len(self.token_to_units) or span.start < 0:
            # token indices beyond the unit mapping, e.g. after the SRL widened the tokens
            return Span(span.start, span.end)
        return Span(self.token_to_units[span.start].first, self.token_to_units[span.end - 1].second)

    def unit_span_to_token_span(self, span):
        """
        :type span: Span
        :rtype: Span
        """
        if not self.has_units() or span.is_empty():
            return Span(span.start, span.end)
        if span.end - 1 >= len(self.unit_to_token) or span.start < 0:
            return Span(span.start, span.end)
        return Span(self.unit_to_token[span.start], self.unit_to_token[span.end - 1] + 1)

    def get_tokens(self, span=None):
        if span is None:
            return list(self.tokens)
        return self.tokens[span.start:span.end]

    def get_units(self, span=None):
        """Returns the sub-word units covered by a unit span (tokens for word sentences)

        :type span: Span
        :rtype: list[str]
        """
        if not self.has_units():
            return self.get_tokens(span)
        if span is None:
            return list(self.units)
        return self.units[span.start:span.end]

    def get_embeddings(self, span=None):
        """
        :type span: Span
        :rtype: numpy.ndarray
        """
        if not self.has_embeddings():
            raise ValueError('Sentence of type "{}" carries no unit embeddings'.format(self.sentence_type))
        if span is None:
            return self.embeddings
        return self.embeddings[span.start:span.end]

    def to_string(self):
        return ' '.join(self.tokens)


def build_unit_mapping(unit_ids):
    """From the (unit id, token id) rows of an id stream, build token->unit-span and unit->token lists.

    Consecutive rows sharing a token id belong to the same token.

    :type unit_ids: list[(int, int)]
    :rtype: (list[framesim.common.utils.IntPair], list[int])
    """
    token_to_units = []
    unit_to_token = []
    current_token = None
    for unit_id, token_id in unit_ids:
        unit_to_token.append(token_id)
        if token_id != current_token:
            token_to_units.append(IntPair(unit_id, unit_id + 1))
            current_token = token_id
        else:
            token_to_units[-1].second = unit_id + 1
    return token_to_units, unit_to_token


def normalize_rows(vectors):
    """L2-normalize each row, leaving zero rows untouched

    :type vectors: numpy.ndarray
    """
    norms = np.linalg.norm(vectors, axis=1, keepdims=True)
    norms[norms == 0] = 1.0
    return vectors / norms
