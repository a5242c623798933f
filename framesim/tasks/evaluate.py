import argparse
import logging

from framesim.alignment.structure_alignment import StructureAligner
from framesim.annotation.ingestion import read_sentences
from framesim.annotation.srl import SemanticRoleLabelerFactory
from framesim.common.parameters import load_parameters
from framesim.common.scoring import Scorer
from framesim.common.scoring import document_score
from framesim.common.utils import split_paths
from framesim.similarity.cache import SimilarityCache
from framesim.similarity.lexical_similarity import LexicalSimilarityFactory
from framesim.similarity.lexical_weight import LexicalWeightFactory
from framesim.similarity.phrase_similarity import PhraseSimilarity
from framesim.tasks.role_domain import create_role_domain

logger = logging.getLogger(__name__)


def create_phrase_similarity(params):
    """
    :type params: framesim.common.parameters.EvaluationParameters
    :rtype: framesim.similarity.phrase_similarity.PhraseSimilarity
    """
    lexical_similarity = LexicalSimilarityFactory.createLexicalSimilarity(
        params.lexsim_type, params.lexical_similarity_params())
    ref_weight = LexicalWeightFactory.createLexicalWeight(params.ref_lexweight_type, params.ref_lexweight_path)
    hyp_weight = None
    if params.hyp_lexweight_type:
        hyp_weight = LexicalWeightFactory.createLexicalWeight(params.hyp_lexweight_type, params.hyp_lexweight_path)
    src_weight = None
    if params.src_file:
        src_weight = LexicalWeightFactory.createLexicalWeight(params.src_lexweight_type, params.src_lexweight_path)
    return PhraseSimilarity(lexical_similarity, ref_weight, hyp_weight, src_weight, params.ngram_size)


def _per_file(paths, count):
    """Per reference file paths of a ':'-separated list, or '' for each when not given"""
    if not paths:
        return [''] * count
    ret = split_paths(paths)
    if len(ret) != count:
        raise ValueError('Expected {} ":"-separated paths, one per reference file, got {}'.format(count, paths))
    return ret


class Evaluator(object):
    """Scores a hypothesis file against reference files and/or a source file, line by line"""

    def __init__(self, params):
        """
        :type params: framesim.common.parameters.EvaluationParameters
        """
        self.params = params
        self.phrase_similarity = create_phrase_similarity(params)
        self.aligner = StructureAligner(self.phrase_similarity)
        self.role_domain = create_role_domain(params.label_config, params.weight_config)
        self.estimate_role_weights = params.weight_config == ''
        self.scorer = Scorer(self.role_domain, self.phrase_similarity, params.alpha, params.beta,
                             params.frame_weighting, lexical_role_weights=params.weight_config == 'lexweight')

    def parse_hypotheses(self):
        params = self.params
        sentences = read_sentences(params.sentence_type, params.hyp_file, params.hyp_unit_file,
                                   params.hyp_unit_id_file)
        logger.info('SRL-ing {} hypotheses'.format(len(sentences)))
        labeler = SemanticRoleLabelerFactory.createSemanticRoleLabeler(params.hyp_srl_type, params.hyp_srl_path)
        return labeler.parse(sentences)

    def parse_references(self, count):
        """
        :rtype: list[list[framesim.graph.frame_graph.FrameGraph]]
        """
        params = self.params
        per_line = [[] for _ in range(count)]
        if not params.ref_file:
            return per_line
        ref_files = split_paths(params.ref_file)
        unit_files = _per_file(params.ref_unit_file, len(ref_files))
        unit_id_files = _per_file(params.ref_unit_id_file, len(ref_files))
        if params.ref_srl_type in ('read', 'assert'):
            srl_paths = _per_file(params.ref_srl_path, len(ref_files))
        else:
            srl_paths = [params.ref_srl_path] * len(ref_files)

        for ref_file, unit_file, unit_id_file, srl_path in zip(ref_files, unit_files, unit_id_files, srl_paths):
            sentences = read_sentences(params.sentence_type, ref_file, unit_file, unit_id_file)
            if len(sentences) != count:
                raise ValueError('No. of sentences in ref file {} ({}) does not match with no. of sentences in '
                                 'hyp file ({})'.format(ref_file, len(sentences), count))
            logger.info('SRL-ing {} references from {}'.format(len(sentences), ref_file))
            labeler = SemanticRoleLabelerFactory.createSemanticRoleLabeler(params.ref_srl_type, srl_path)
            graphs = labeler.parse(sentences)
            if self.estimate_role_weights:
                self.role_domain.estimate_weights(graphs)
            for i, graph in enumerate(graphs):
                per_line[i].append(graph)
        return per_line

    def parse_sources(self, count):
        params = self.params
        if not params.src_file:
            return [None] * count
        sentences = read_sentences(params.src_sentence_type, params.src_file, params.src_unit_file,
                                   params.src_unit_id_file)
        if len(sentences) != count:
            raise ValueError('No. of sentences in src file ({}) does not match with no. of sentences in '
                             'hyp file ({})'.format(len(sentences), count))
        logger.info('SRL-ing {} sources'.format(len(sentences)))
        labeler = SemanticRoleLabelerFactory.createSemanticRoleLabeler(params.src_srl_type, params.src_srl_path)
        graphs = labeler.parse(sentences)
        if self.estimate_role_weights:
            self.role_domain.estimate_weights(graphs)
        return graphs

    def evaluate(self):
        """Writes sentence scores (or features) and, in score mode, the document score

        :rtype: list
        """
        params = self.params
        hypotheses = self.parse_hypotheses()
        references = self.parse_references(len(hypotheses))
        sources = self.parse_sources(len(hypotheses))

        results = []
        alignment_dumps = []
        for i, hypothesis in enumerate(hypotheses):
            logger.debug('Evaluating line {}'.format(i + 1))
            record = self.aligner.align(hypothesis, references[i], sources[i], SimilarityCache())
            if params.alignment_file:
                alignment_dumps.append(record.to_string())
            if params.mode == 'features':
                results.append(self.scorer.features(record))
            else:
                results.append(self.scorer.score(record))

        with open(params.sntscore_file, 'w', encoding='utf-8') as o:
            for result in results:
                if params.mode == 'features':
                    o.write(' '.join('{:g}'.format(v) for v in result) + '\n')
                else:
                    o.write('{:g}\n'.format(result))
        logger.info('Wrote {} sentence results to {}'.format(len(results), params.sntscore_file))

        if params.mode == 'score':
            doc = document_score(results)
            with open(params.docscore_file, 'w', encoding='utf-8') as o:
                o.write('{:g}\n'.format(doc))
            logger.info('Document score {:g} written to {}'.format(doc, params.docscore_file))

        if params.alignment_file:
            with open(params.alignment_file, 'w', encoding='utf-8') as o:
                for i, dump in enumerate(alignment_dumps):
                    o.write('# {}\n{}\n'.format(i, dump))
        return results


def main(argv=None):
    parser = argparse.ArgumentParser(description='Semantic frame similarity of hypotheses against references')
    parser.add_argument('--params', default=None)    # JSON parameter file
    parser.add_argument('--mode', default=None)      # score, features
    parser.add_argument('--hyp_file', default=None)
    parser.add_argument('--ref_file', default=None)  # ':'-separated
    parser.add_argument('--src_file', default=None)
    parser.add_argument('--sntscore_file', default=None)
    parser.add_argument('--docscore_file', default=None)
    args = parser.parse_args(argv)

    overrides = dict(vars(args))
    params_file = overrides.pop('params')
    params = load_parameters(params_file, overrides)
    logger.info(params.to_json())
    return Evaluator(params).evaluate()


if __name__ == "__main__":
    logging.basicConfig(format='%(asctime)s %(name)-12s %(levelname)-8s %(message)s', level=logging.DEBUG)
    main()
