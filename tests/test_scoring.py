import pytest

from framesim.alignment.structure_alignment import StructureAligner
from framesim.common.scoring import Scorer
from framesim.common.scoring import document_score
from framesim.similarity.lexical_similarity import EPSILON
from framesim.similarity.lexical_similarity import ExactMatch
from framesim.similarity.phrase_similarity import PhraseSimilarity
from framesim.tasks.role_domain import DEFAULT_LABEL_GROUPS
from framesim.tasks.role_domain import RoleDomain
from framesim.tasks.role_domain import create_role_domain
from framesim.text.text_span import Span


def align(hypothesis, references, source=None, lexical_similarity=None):
    phrase = PhraseSimilarity(lexical_similarity if lexical_similarity is not None else ExactMatch())
    return StructureAligner(phrase).align(hypothesis, references, source)


def propbank():
    return RoleDomain(DEFAULT_LABEL_GROUPS)


def test_identity_scores_one(john_ate_an_apple, make_graph):
    reference = make_graph('John ate an apple', [(1, 2, 'V', [(0, 1, 'A0'), (2, 4, 'A1')])])
    record = align(john_ate_an_apple, [reference])
    for beta in (0.0, 0.5, 1.0):
        assert Scorer(propbank(), beta=beta).score(record) == pytest.approx(1.0)


def test_swapped_roles_only_count_the_predicate(john_ate_an_apple, make_graph):
    reference = make_graph('John ate an apple', [(1, 2, 'V', [(0, 1, 'A1'), (2, 4, 'A0')])])
    record = align(john_ate_an_apple, [reference])
    scorer = Scorer(propbank(), beta=1.0)
    assert scorer.precision_features(record).structure == pytest.approx(1.0 / 3)
    assert scorer.recall_features(record).structure == pytest.approx(1.0 / 3)
    assert scorer.score(record) == pytest.approx(1.0 / 3)
    # the words are all there
    assert Scorer(propbank(), beta=0.0).score(record) == pytest.approx(1.0)


def test_lexical_role_weights(john_ate_an_apple, make_graph):
    reference = make_graph('John ate an apple', [(1, 2, 'V', [(0, 1, 'A1'), (2, 4, 'A0')])])
    phrase = PhraseSimilarity(ExactMatch())
    record = StructureAligner(phrase).align(john_ate_an_apple, [reference])
    scorer = Scorer(propbank(), phrase, beta=1.0, lexical_role_weights=True)
    # role weights are filler lengths: 'ate' 1 out of 1 + 1 + 2
    assert scorer.score(record) == pytest.approx(0.25)
    with pytest.raises(ValueError):
        Scorer(propbank(), lexical_role_weights=True)


def test_features(john_ate_an_apple, make_graph):
    reference = make_graph('John ate an apple', [(1, 2, 'V', [(0, 1, 'A0'), (2, 4, 'A1')])])
    features = Scorer(propbank()).features(align(john_ate_an_apple, [reference]))
    assert len(features) == 2 * (len(DEFAULT_LABEL_GROUPS) + 2)
    precision = features[:15]
    recall = features[15:]
    for half in (precision, recall):
        assert half[:3] == [pytest.approx(1.0)] * 3
        assert half[3:13] == [0.0] * 10
        assert half[13] == pytest.approx(1.0)
        assert half[14] == pytest.approx(1.0)


def test_frame_weighting(make_graph):
    hypothesis = make_graph('John ate an apple and wept', [(1, 2, 'V', [(0, 1, 'A0'), (2, 4, 'A1')]), (5, 6, 'V', [])])
    reference = make_graph('John ate an apple and slept', [(1, 2, 'V', [(0, 1, 'A0'), (2, 4, 'A1')]), (5, 6, 'V', [])])
    record = align(hypothesis, [reference])
    coverage = Scorer(propbank(), frame_weighting='coverage').recall_features(record).structure
    uniform = Scorer(propbank(), frame_weighting='uniform').recall_features(record).structure
    assert coverage == pytest.approx((4.0 + EPSILON) / 5)
    assert uniform == pytest.approx((1.0 + EPSILON) / 2)
    with pytest.raises(ValueError):
        Scorer(propbank(), frame_weighting='length')


def test_alpha_weights_precision_and_recall(make_graph):
    record = align(make_graph('the cat'), [make_graph('the cat sat')])
    recall = (2.0 + EPSILON) / 3
    assert Scorer(propbank(), alpha=1.0).score(record) == pytest.approx(recall)
    assert Scorer(propbank(), alpha=0.0).score(record) == pytest.approx(1.0)
    assert Scorer(propbank(), alpha=0.5).score(record) == pytest.approx(2 * recall / (1.0 + recall))
    with pytest.raises(ValueError):
        Scorer(propbank(), alpha=1.5)


def test_scores_are_bounded(make_graph):
    pairs = [
        ('the cat sat on the mat', 'a dog ran'),
        ('a b c', 'c b a'),
        ('x', 'y'),
    ]
    for hyp_text, ref_text in pairs:
        hypothesis = make_graph(hyp_text, [(0, 1, 'V', [(1, len(hyp_text.split()), 'A1')])])
        reference = make_graph(ref_text, [(0, 1, 'V', [(1, len(ref_text.split()), 'A0')])])
        record = align(hypothesis, [reference])
        for beta in (0.0, 0.3, 1.0):
            assert 0.0 <= Scorer(propbank(), beta=beta).score(record) <= 1.0


def test_more_references_never_lower_recall(make_graph):
    hypothesis = make_graph('the cat sat', [(2, 3, 'V', [(0, 2, 'A0')])])
    poor = make_graph('a dog ran', [(2, 3, 'V', [(0, 2, 'A0')])])
    good = make_graph('the cat sat', [(2, 3, 'V', [(0, 2, 'A0')])])
    scorer = Scorer(propbank(), beta=0.5)
    one = scorer.recall_features(align(hypothesis, [poor]))
    two = scorer.recall_features(align(hypothesis, [poor, good]))
    assert two.structure >= one.structure
    assert two.flat >= one.flat
    assert scorer.score(align(hypothesis, [poor, good])) == pytest.approx(1.0)


def test_source_only(make_graph, counting_similarity):
    hypothesis = make_graph('the cat sat', [(2, 3, 'V', [(0, 2, 'A0')])])
    source = make_graph('THE CAT SAT', [(2, 3, 'V', [(0, 2, 'ARG0')])])
    record = align(hypothesis, [], source, counting_similarity)
    assert Scorer(propbank(), beta=0.5).score(record) == pytest.approx(1.0)


def test_unknown_label_is_an_error(make_graph):
    hypothesis = make_graph('the cat sat', [(2, 3, 'V', [(0, 2, 'AGENT')])])
    reference = make_graph('the cat sat', [(2, 3, 'V', [(0, 2, 'A0')])])
    with pytest.raises(ValueError):
        Scorer(propbank(), beta=1.0).score(align(hypothesis, [reference]))


def test_role_domain(john_ate_an_apple):
    domain = propbank()
    assert domain.group_count() == 13
    assert domain.is_same_role('A0', 'ARG0')
    assert not domain.is_same_role('A0', 'A1')
    assert not domain.is_same_role('U', 'U')
    assert not domain.is_same_role('A0', None)
    with pytest.raises(ValueError):
        domain.get_label_index('AGENT')

    domain.estimate_weights([john_ate_an_apple])
    assert domain.get_weight('V') == pytest.approx(1.25)
    assert domain.get_weight('A0') == pytest.approx(2.0)
    assert domain.get_weight('ARG1') == pytest.approx(2.0)
    assert domain.get_weight('AM-LOC') == pytest.approx(1.0)


def test_estimated_weights_skip_unrealized_frames(make_graph):
    graph = make_graph('John ate an apple', [(1, 2, 'V', [(0, 1, 'A0')])])
    unrealized = graph.new_predicate()
    graph.new_argument(unrealized, Span(2, 4), 'A1')
    domain = propbank()
    domain.estimate_weights([graph])
    assert domain.get_weight('V') == pytest.approx(1.25)
    assert domain.get_weight('A0') == pytest.approx(2.0)
    assert domain.get_weight('A1') == pytest.approx(1.0)


def test_role_domain_files(tmp_path):
    labels = tmp_path / 'labels.txt'
    labels.write_text('V\nA0 ARG0\n\nA1\n', encoding='utf-8')
    weights = tmp_path / 'weights.txt'
    weights.write_text('0.5 1 2\n', encoding='utf-8')
    domain = create_role_domain(str(labels), str(weights))
    assert domain.group_count() == 3
    assert domain.get_weight('ARG0') == 1.0
    assert domain.get_weight('A1') == 2.0

    assert create_role_domain(str(labels), 'uniform').get_weight('A1') == 1.0
    assert create_role_domain().group_count() == len(DEFAULT_LABEL_GROUPS)

    weights.write_text('1 1\n', encoding='utf-8')
    with pytest.raises(ValueError):
        create_role_domain(str(labels), str(weights))


def test_document_score():
    assert document_score([]) == 0.0
    assert document_score([1.0, 0.0, 0.5]) == pytest.approx(0.5)
