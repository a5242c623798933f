import logging

from collections import defaultdict

from framesim.graph.frame_graph import FrameGraph
from framesim.text.text_span import Sentence
from framesim.text.text_span import Span

logger = logging.getLogger(__name__)

# ID FORM LEMMA PLEMMA POS PPOS FEAT PFEAT HEAD PHEAD DEPREL PDEPREL FILLPRED PRED APREDs
ID_COLUMN = 0
FORM_COLUMN = 1
HEAD_COLUMN = 8
PRED_COLUMN = 13
APRED_COLUMN = 14

PREDICATE_LABEL = 'V'


def resolve_argument_span(children, head, predicate, start, end):
    """Widens [start, end] (inclusive) to the dependency subtree of head.

    A node having the predicate among its children is not expanded any further.

    :type children: dict[int, list[int]]
    :rtype: (int, int)
    """
    current = children.get(head, [])
    if predicate in current:
        return start, end
    for child in current:
        start = min(start, child)
        end = max(end, child)
        start, end = resolve_argument_span(children, child, predicate, start, end)
    return start, end


def read_conll09(lines, sentence=None):
    """Builds the frame graph of one CoNLL-2009 sentence.

    Each token with a PRED value is a one-token predicate labeled 'V'. The i-th APRED column holds the argument
    labels of the i-th predicate, at the argument head tokens.

    :type lines: list[str]
    :param sentence: when given, re-tokenized with the parse tokens and wrapped by the graph
    :rtype: framesim.graph.frame_graph.FrameGraph
    """
    tokens = []
    predicates = []
    arguments = defaultdict(list)
    children = defaultdict(list)
    for line in lines:
        if len(line.strip()) == 0:
            continue
        fields = line.rstrip('\r\n').split('\t')
        if len(fields) <= PRED_COLUMN:
            raise ValueError('CoNLL-2009 line has {} columns, expected at least {}: {}'.format(
                len(fields), PRED_COLUMN + 1, line.rstrip()))
        tid = int(fields[ID_COLUMN]) - 1
        tokens.append(fields[FORM_COLUMN])
        parent = int(fields[HEAD_COLUMN])
        if parent > 0:
            children[parent - 1].append(tid)
        if fields[PRED_COLUMN] != '_':
            predicates.append(tid)
        for i in range(APRED_COLUMN, len(fields)):
            if fields[i] != '_':
                arguments[i - APRED_COLUMN].append((tid, fields[i]))

    if sentence is None:
        sentence = Sentence(tokens)
    else:
        sentence.retokenize(tokens)
    graph = FrameGraph(sentence)

    pids = []
    for tid in predicates:
        pids.append(graph.new_predicate(Span(tid, tid + 1), PREDICATE_LABEL))
    for column in sorted(arguments):
        if column >= len(predicates):
            raise ValueError('APRED column {} has no predicate in a sentence with {} predicates'.format(
                column + 1, len(predicates)))
        for head, label in arguments[column]:
            start, end = resolve_argument_span(children, head, predicates[column], head, head)
            graph.new_argument(pids[column], Span(start, end + 1), label)
    return graph


def split_conll09_blocks(lines):
    """Groups lines into sentences; every empty line closes one sentence, which may itself be empty

    :rtype: list[list[str]]
    """
    blocks = []
    block = []
    for line in lines:
        if len(line.strip()) == 0:
            blocks.append(block)
            block = []
        else:
            block.append(line)
    if len(block) > 0:
        blocks.append(block)
    return blocks


def read_conll09_file(filepath, sentences=None):
    """
    :type filepath: str
    :type sentences: list[framesim.text.text_span.Sentence]
    :rtype: list[framesim.graph.frame_graph.FrameGraph]
    """
    logger.info('Reading CoNLL-2009 parses from {}'.format(filepath))
    with open(filepath, 'r', encoding='utf-8') as f:
        blocks = split_conll09_blocks(f.read().splitlines())
    return read_conll09_blocks(blocks, sentences)


def read_conll09_blocks(blocks, sentences=None):
    if sentences is None:
        return [read_conll09(block) for block in blocks]
    if len(blocks) != len(sentences):
        raise ValueError('No. of SRL parses ({}) does not match no. of sentences ({})'.format(
            len(blocks), len(sentences)))
    return [read_conll09(block, sentence) for block, sentence in zip(blocks, sentences)]
