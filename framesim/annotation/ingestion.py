import logging

import numpy as np

from framesim.common.utils import read_file_to_list
from framesim.common.utils import split_paths
from framesim.common.utils import tokenize
from framesim.text.text_span import Sentence
from framesim.text.text_span import build_unit_mapping
from framesim.text.text_span import normalize_rows
from framesim.text.text_span import sentence_types

logger = logging.getLogger(__name__)


def read_unit_id_file(filepath, with_embeddings):
    """Reads the unit id stream: one 'unitId tokenId [f1 ... fd]' line per unit, an empty line after each sentence.

    :rtype: list[(list[(int, int)], numpy.ndarray)]
    """
    sentences = []
    unit_ids = []
    vectors = []
    with open(filepath, 'r', encoding='utf-8') as f:
        for line in f:
            fields = line.split()
            if len(fields) == 0:
                sentences.append((unit_ids, _to_matrix(vectors, with_embeddings)))
                unit_ids = []
                vectors = []
                continue
            if len(fields) < 2:
                raise ValueError('Malformed unit id line in {}: {}'.format(filepath, line.rstrip()))
            unit_ids.append((int(fields[0]), int(fields[1])))
            if with_embeddings:
                vectors.append([float(v) for v in fields[2:]])
    if len(unit_ids) > 0:
        sentences.append((unit_ids, _to_matrix(vectors, with_embeddings)))
    return sentences


def _to_matrix(vectors, with_embeddings):
    if not with_embeddings:
        return None
    if len(vectors) == 0:
        return np.zeros((0, 0), dtype=np.float64)
    dims = set(len(v) for v in vectors)
    if len(dims) != 1:
        raise ValueError('Unit embeddings of one sentence have different dimensions: {}'.format(sorted(dims)))
    return normalize_rows(np.asarray(vectors, dtype=np.float64))


def read_sentences(sentence_type, token_path, unit_path='', unit_id_path=''):
    """Reads one Sentence per line of the token file.

    For 'unit' and 'uemb' sentences, the unit file holds the sub-word units of each sentence on one line and
    the unit id file maps each unit to its token (and, for 'uemb', carries its embedding).

    :type sentence_type: str
    :rtype: list[framesim.text.text_span.Sentence]
    """
    if sentence_type not in (sentence_types.WORD, sentence_types.UNIT, sentence_types.UEMB):
        raise ValueError('Unknown sentence type "{}"'.format(sentence_type))

    token_lines = read_file_to_list(token_path)
    if sentence_type == sentence_types.WORD:
        return [Sentence(tokenize(line)) for line in token_lines]

    if not unit_path or not unit_id_path:
        raise ValueError('Sentence type "{}" needs a unit file and a unit id file'.format(sentence_type))
    unit_lines = read_file_to_list(unit_path)
    with_embeddings = sentence_type == sentence_types.UEMB
    unit_sentences = read_unit_id_file(unit_id_path, with_embeddings)
    if len(unit_lines) != len(token_lines) or len(unit_sentences) != len(token_lines):
        raise ValueError('No. of sentences in token file ({}), unit file ({}) and unit id file ({}) do not match'.format(
            len(token_lines), len(unit_lines), len(unit_sentences)))

    ret = []
    for token_line, unit_line, (unit_ids, embeddings) in zip(token_lines, unit_lines, unit_sentences):
        units = tokenize(unit_line)
        if len(unit_ids) != len(units):
            raise ValueError('Sentence has {} units but {} unit ids: {}'.format(len(units), len(unit_ids), unit_line))
        token_to_units, unit_to_token = build_unit_mapping(unit_ids)
        ret.append(Sentence(tokenize(token_line), sentence_type, units=units, token_to_units=token_to_units,
                            unit_to_token=unit_to_token, embeddings=embeddings))
    logger.info('Read {} {} sentences from {}'.format(len(ret), sentence_type, token_path))
    return ret


def read_reference_sentences(sentence_type, token_paths, unit_paths='', unit_id_paths='', expected_count=None):
    """Reads several ':'-separated reference files, and regroups them per line.

    :rtype: list[list[framesim.text.text_span.Sentence]]
    """
    token_files = split_paths(token_paths)
    unit_files = split_paths(unit_paths) if unit_paths else [''] * len(token_files)
    unit_id_files = split_paths(unit_id_paths) if unit_id_paths else [''] * len(token_files)
    if len(unit_files) != len(token_files) or len(unit_id_files) != len(token_files):
        raise ValueError('Each reference token file needs its own unit and unit id file')

    per_line = None
    for token_file, unit_file, unit_id_file in zip(token_files, unit_files, unit_id_files):
        sentences = read_sentences(sentence_type, token_file, unit_file, unit_id_file)
        if expected_count is not None and len(sentences) != expected_count:
            raise ValueError('No. of sentences in ref file {} ({}) does not match with no. of sentences in '
                             'hyp file ({})'.format(token_file, len(sentences), expected_count))
        if per_line is None:
            per_line = [[] for _ in sentences]
        elif len(sentences) != len(per_line):
            raise ValueError('Reference file {} has {} sentences, other reference files have {}'.format(
                token_file, len(sentences), len(per_line)))
        for i, sentence in enumerate(sentences):
            per_line[i].append(sentence)
    return per_line if per_line is not None else []
