import pytest

from framesim.graph.frame_graph import FrameGraph
from framesim.similarity.lexical_similarity import LexicalSimilarityModel
from framesim.text.text_span import Sentence
from framesim.text.text_span import Span


class CountingSimilarity(LexicalSimilarityModel):
    """1.0 for words equal up to case, 0.0 otherwise, in every mode; counts its calls"""
    name = 'counting'

    def __init__(self):
        self.calls = 0

    def similarity(self, word, hyp_word, mode='ref'):
        self.calls += 1
        return 1.0 if word.lower() == hyp_word.lower() else 0.0


def build_graph(text, frames=()):
    """frames: (predicate start, predicate end, label, [(start, end, label), ...])"""
    graph = FrameGraph(Sentence(text.split()))
    for start, end, label, arguments in frames:
        pid = graph.new_predicate(Span(start, end), label)
        for arg_start, arg_end, arg_label in arguments:
            graph.new_argument(pid, Span(arg_start, arg_end), arg_label)
    return graph


@pytest.fixture
def make_graph():
    return build_graph


@pytest.fixture
def counting_similarity():
    return CountingSimilarity()


@pytest.fixture
def john_ate_an_apple():
    return build_graph('John ate an apple', [(1, 2, 'V', [(0, 1, 'A0'), (2, 4, 'A1')])])
