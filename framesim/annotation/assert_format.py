import logging

from framesim.graph.frame_graph import FrameGraph
from framesim.text.text_span import Span

logger = logging.getLogger(__name__)

TARGET_LABEL = 'TARGET'


def read_assert_line(line):
    """Parses one ASSERT frame line: 'id : tok [ARG0 tok tok] [TARGET tok ] ...'

    :rtype: (int, list[str], (Span, str), list[(Span, str)])
    :return: sentence id, tokens, the predicate span and label (None when no TARGET), argument spans and labels
    """
    fields = line.split()
    if len(fields) < 2 or fields[1] != ':':
        raise ValueError('Malformed ASSERT line: {}'.format(line.rstrip()))
    sid = int(fields[0])

    tokens = []
    predicate = None
    arguments = []
    role_start = 0
    role_label = None
    for s in fields[2:]:
        if s.startswith('['):
            role_label = s[1:]
            role_start = len(tokens)
        elif s.startswith(']'):
            arguments, predicate = _close_role(role_label, Span(role_start, len(tokens)), arguments, predicate)
            role_label = None
        elif s.endswith(']'):
            tokens.append(s[:-1])
            arguments, predicate = _close_role(role_label, Span(role_start, len(tokens)), arguments, predicate)
            role_label = None
        else:
            tokens.append(s)
    return sid, tokens, predicate, arguments


def _close_role(label, span, arguments, predicate):
    if label is None:
        raise ValueError('Closing bracket without an open role at token {}'.format(span.end))
    if label == TARGET_LABEL:
        predicate = (span, label)
    else:
        arguments.append((span, label))
    return arguments, predicate


def read_assert_file(filepath, sentences):
    """Adds the frames of an ASSERT parse file to graphs over the given sentences. Each line is one frame of
    the sentence with the given id; sentences without lines keep no predicates.

    :type sentences: list[framesim.text.text_span.Sentence]
    :rtype: list[framesim.graph.frame_graph.FrameGraph]
    """
    logger.info('Reading ASSERT parses from {}'.format(filepath))
    graphs = [FrameGraph(sentence) for sentence in sentences]
    with open(filepath, 'r', encoding='utf-8') as f:
        for line in f:
            if len(line.strip()) == 0:
                break
            sid, tokens, predicate, arguments = read_assert_line(line)
            if sid < 0 or sid >= len(graphs):
                raise ValueError('ASSERT parse refers to sentence {} but there are {} sentences'.format(
                    sid, len(graphs)))
            graph = graphs[sid]
            pid = graph.new_predicate()
            if predicate is not None:
                graph.set_role_span(pid, predicate[0])
                graph.set_role_label(pid, predicate[1])
            for span, label in arguments:
                graph.new_argument(pid, span, label)
            if len(tokens) > 0:
                graph.set_tokens(tokens)
    return graphs
