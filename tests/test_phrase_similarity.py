import io
import math

import numpy as np
import pytest

from framesim.similarity.cache import SimilarityCache
from framesim.similarity.lexical_similarity import ContextualEmbeddingSimilarity
from framesim.similarity.lexical_similarity import EPSILON
from framesim.similarity.lexical_similarity import ExactMatch
from framesim.similarity.lexical_similarity import modes
from framesim.similarity.lexical_weight import DocumentFrequencyWeight
from framesim.similarity.lexical_weight import LearnedLexicalWeight
from framesim.similarity.lexical_weight import LexicalWeightFactory
from framesim.similarity.lexical_weight import UniformLexicalWeight
from framesim.similarity.phrase_similarity import PhraseSimilarity


def test_uniform_weight():
    assert UniformLexicalWeight().weight('anything') == 1.0


def test_learned_weight():
    model = LearnedLexicalWeight([['a', 'b', 'a'], ['a']])
    assert model.sentence_count == 2
    assert model.weight('a') == pytest.approx(1.0)
    assert model.weight('A') == pytest.approx(1.0)
    assert model.weight('b') == pytest.approx(math.log2(2.5))
    # unseen words get the largest weight
    assert model.weight('zebra') == pytest.approx(2.0)


def test_weight_table_round_trip(tmp_path):
    model = LearnedLexicalWeight([['a', 'b'], ['a'], ['c']])
    out = io.StringIO()
    model.write(out)
    assert out.getvalue().splitlines() == ['3', '2 a', '1 b', '1 c']

    path = tmp_path / 'weights.txt'
    path.write_text(out.getvalue(), encoding='utf-8')
    table = LexicalWeightFactory.createLexicalWeight('file', str(path))
    assert isinstance(table, DocumentFrequencyWeight)
    for word in ['a', 'b', 'c', 'd']:
        assert table.weight(word) == pytest.approx(model.weight(word))
    # a second table adds up
    table.read(str(path))
    assert table.sentence_count == 6
    assert table.counts['a'] == 4


def test_learn_from_corpus_files(tmp_path):
    first = tmp_path / 'one.txt'
    second = tmp_path / 'two.txt'
    first.write_text('the cat\nthe dog\n', encoding='utf-8')
    second.write_text('a  cat\n', encoding='utf-8')
    model = LexicalWeightFactory.createLexicalWeight('learn', '{}:{}'.format(first, second))
    assert model.sentence_count == 3
    assert model.counts['cat'] == 2
    assert model.counts['the'] == 2
    with pytest.raises(RuntimeError):
        LexicalWeightFactory.createLexicalWeight('tfidf')


def test_identity_is_perfect():
    for n in (1, 2, 3):
        phrase = PhraseSimilarity(ExactMatch(), ngram_size=n)
        tokens = ['the', 'cat', 'sat', 'down']
        assert phrase.score(tokens, tokens) == (pytest.approx(1.0), pytest.approx(1.0))


def test_empty_sequence():
    phrase = PhraseSimilarity(ExactMatch())
    cache = SimilarityCache()
    assert phrase.score([], ['cat'], cache=cache) == (0.0, 0.0)
    assert phrase.score(['cat'], [], cache=cache) == (0.0, 0.0)
    assert cache.misses == 0


def test_unigram_precision_recall():
    phrase = PhraseSimilarity(ExactMatch())
    precision, recall = phrase.score(['the', 'cat', 'sat'], ['the', 'cat'])
    assert recall == pytest.approx((1.0 + 1.0 + EPSILON) / 3)
    assert precision == pytest.approx(1.0)


def test_ngram_size_shrinks_to_shorter_side():
    phrase = PhraseSimilarity(ExactMatch(), ngram_size=3)
    precision, recall = phrase.score(['the', 'cat'], ['the', 'cat'])
    assert (precision, recall) == (pytest.approx(1.0), pytest.approx(1.0))


def test_bigrams():
    phrase = PhraseSimilarity(ExactMatch(), ngram_size=2)
    # 'the cat' matches, 'cat sat' best matches 'cat ran' at half
    precision, recall = phrase.score(['the', 'cat', 'sat'], ['the', 'cat', 'ran'])
    assert recall == pytest.approx((1.0 + (1.0 + EPSILON) / 2) / 2)
    assert precision == pytest.approx(recall)


def test_lexical_weights_drive_recall(counting_similarity):
    ref_weight = LearnedLexicalWeight([['the', 'cat'], ['the', 'dog'], ['the']])
    phrase = PhraseSimilarity(counting_similarity, ref_weight=ref_weight, hyp_weight=UniformLexicalWeight())
    precision, recall = phrase.score(['the', 'cat'], ['the', 'dog'])
    w_the = ref_weight.weight('the')
    w_cat = ref_weight.weight('cat')
    assert recall == pytest.approx(w_the / (w_the + w_cat))
    assert precision == pytest.approx(0.5)


def test_ngram_score_requires_same_width():
    phrase = PhraseSimilarity(ExactMatch())
    assert phrase.ngram_score(['a', 'b'], ['a', 'c']) == (pytest.approx((1 + EPSILON) / 2),
                                                          pytest.approx((1 + EPSILON) / 2))
    with pytest.raises(ValueError):
        phrase.ngram_score(['a', 'b'], ['a'])


def test_cache_is_idempotent(counting_similarity):
    phrase = PhraseSimilarity(counting_similarity)
    cache = SimilarityCache()
    first = phrase.score(['a', 'b', 'c'], ['b', 'c', 'd'], modes.REF, cache)
    calls = counting_similarity.calls
    assert calls == 9
    second = phrase.score(['a', 'b', 'c'], ['b', 'c', 'd'], modes.REF, cache)
    assert first == second
    assert counting_similarity.calls == calls

    # word similarities are shared with other phrases of the same direction
    phrase.score(['a', 'b'], ['b', 'c'], modes.REF, cache)
    assert counting_similarity.calls == calls
    # but not across directions
    phrase.score(['a', 'b'], ['b', 'c'], modes.SRC, cache)
    assert counting_similarity.calls == calls + 4


def test_without_cache_every_call_computes(counting_similarity):
    phrase = PhraseSimilarity(counting_similarity)
    phrase.score(['a'], ['a'])
    phrase.score(['a'], ['a'])
    assert counting_similarity.calls == 2


def test_contextual_vectors():
    phrase = PhraseSimilarity(ContextualEmbeddingSimilarity())
    vectors = np.array([[1.0, 0.0], [0.0, 1.0]])
    hyp_vectors = np.array([[1.0, 0.0], [1.0, 0.0]])
    precision, recall = phrase.score(['bank', 'river'], ['bank', 'bank'], modes.REF, SimilarityCache(),
                                     vectors, hyp_vectors)
    assert recall == pytest.approx(0.5)
    assert precision == pytest.approx(1.0)
    with pytest.raises(ValueError):
        phrase.score(['bank'], ['bank'])
