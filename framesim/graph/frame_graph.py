import logging

from framesim.graph.graph import Graph
from framesim.text.text_span import Sentence
from framesim.text.text_span import Span

logger = logging.getLogger(__name__)


class FrameGraph(object):
    """Predicate-argument structure of one sentence.

    The root node spans the whole sentence. Each predicate node has an edge to the root, and each argument
    node has an edge to its predicate. The role label of a node sits on its outgoing edge, so the root has
    no label. Node data is the node's token Span.
    """

    def __init__(self, sentence=None):
        """
        :type sentence: framesim.text.text_span.Sentence
        """
        self.graph = Graph()
        self.sentence = None
        """:type: framesim.text.text_span.Sentence"""
        self.root = None
        self.predicates = []
        """:type: list[int]"""
        self.arguments = dict()
        """:type: dict[int, list[int]]"""
        self.argument_to_predicate = dict()
        """:type: dict[int, int]"""
        if sentence is not None:
            self.new_root(sentence)

    def new_root(self, sentence=None):
        if self.root is not None:
            raise ValueError('Frame graph already has a root')
        if sentence is None:
            sentence = Sentence([])
        self.sentence = sentence
        self.root = self.graph.new_node(Span(0, len(sentence.tokens)))
        return self.root

    def _ensure_root(self):
        if self.root is None:
            self.new_root()

    def new_predicate(self, span=None, label=''):
        """Adds a predicate under the root; an omitted span means the predicate is not realized yet

        :type span: framesim.text.text_span.Span
        :type label: str
        """
        self._ensure_root()
        if span is None:
            span = Span(0, 0)
        pid = self.graph.new_node(span)
        self.graph.new_edge(pid, self.root, label)
        self.predicates.append(pid)
        self.arguments[pid] = []
        return pid

    def new_argument(self, predicate_id, span=None, label=''):
        """
        :type predicate_id: int
        :type span: framesim.text.text_span.Span
        :type label: str
        """
        if predicate_id not in self.arguments:
            raise ValueError('Node {} is not a predicate'.format(predicate_id))
        if span is None:
            span = Span(0, 0)
        aid = self.graph.new_node(span)
        self.graph.new_edge(aid, predicate_id, label)
        self.arguments[predicate_id].append(aid)
        self.argument_to_predicate[aid] = predicate_id
        return aid

    def get_root(self):
        return self.root

    def get_predicates(self):
        return list(self.predicates)

    def get_arguments(self, predicate_id):
        if predicate_id not in self.arguments:
            raise ValueError('Node {} is not a predicate'.format(predicate_id))
        return list(self.arguments[predicate_id])

    def get_predicate(self, argument_id):
        if argument_id not in self.argument_to_predicate:
            raise ValueError('Node {} is not an argument'.format(argument_id))
        return self.argument_to_predicate[argument_id]

    def get_role_label(self, nid):
        """Returns the label of a predicate or argument, None for the root"""
        outgoing = self.graph.outgoing_edges(nid)
        if len(outgoing) == 0:
            return None
        return self.graph.edge_label(outgoing[0])

    def set_role_label(self, nid, label):
        outgoing = self.graph.outgoing_edges(nid)
        if len(outgoing) == 0:
            raise ValueError('The root node carries no role label')
        self.graph.set_edge_label(outgoing[0], label)

    def get_role_span(self, nid):
        """
        :rtype: framesim.text.text_span.Span
        """
        return self.graph.node_data(nid)

    def set_role_span(self, nid, span):
        self.graph.set_node_data(nid, span)

    def get_sentence(self):
        return self.sentence

    def set_sentence(self, sentence):
        """Wraps another sentence; the root span follows its token count"""
        self._ensure_root()
        self.sentence = sentence
        self.graph.set_node_data(self.root, Span(0, len(sentence.tokens)))

    def set_tokens(self, tokens):
        self._ensure_root()
        self.sentence.retokenize(tokens)
        self.graph.set_node_data(self.root, Span(0, len(self.sentence.tokens)))

    def get_tokens(self, span=None):
        return self.sentence.get_tokens(span)

    def sentence_length(self):
        return len(self.sentence.tokens)

    def get_role_filler(self, nid):
        """Tokens covered by a node"""
        return self.sentence.get_tokens(self.get_role_span(nid))

    def get_role_filler_units(self, nid):
        """Sub-word units covered by a node (its tokens for word sentences)"""
        uspan = self.sentence.token_span_to_unit_span(self.get_role_span(nid))
        return self.sentence.get_units(uspan)

    def get_role_filler_embeddings(self, nid):
        uspan = self.sentence.token_span_to_unit_span(self.get_role_span(nid))
        return self.sentence.get_embeddings(uspan)

    def to_string(self, sentence_id=None):
        """One bracketed line per realized frame, e.g. '[A0 John] [V ate] [A1 an apple]'.
        A sentence without predicates renders as its tokens.
        """
        prefix = '' if sentence_id is None else '{}: '.format(sentence_id)
        lines = []
        for pid in self.predicates:
            pred_span = self.get_role_span(pid)
            if pred_span.is_empty():
                continue
            frame_tokens = self.get_tokens()
            self._bracket(frame_tokens, pred_span, self.get_role_label(pid))
            for aid in self.arguments[pid]:
                arg_span = self.get_role_span(aid)
                if not arg_span.is_empty():
                    self._bracket(frame_tokens, arg_span, self.get_role_label(aid))
            lines.append(prefix + ' '.join(frame_tokens))
        if len(self.predicates) == 0:
            lines.append(prefix + ' '.join(self.get_tokens()))
        return '\n'.join(lines)

    @staticmethod
    def _bracket(tokens, span, label):
        if span.end > len(tokens):
            return
        tokens[span.start] = '[{} {}'.format(label, tokens[span.start])
        tokens[span.end - 1] = tokens[span.end - 1] + ']'

    def __str__(self):
        return self.to_string()
