import json
import logging

from framesim.common.scoring import frame_weight_types
from framesim.text.text_span import sentence_types

logger = logging.getLogger(__name__)

INTEGERS = {'ngram_size'}

FLOATS = {'alpha', 'beta'}

STRINGS = {'hyp_file', 'ref_file', 'src_file', 'sntscore_file', 'docscore_file', 'mode',
           'sentence_type', 'src_sentence_type',
           'hyp_unit_file', 'hyp_unit_id_file', 'ref_unit_file', 'ref_unit_id_file', 'src_unit_file',
           'src_unit_id_file',
           'lexsim_type', 'embeddings', 'input_embeddings', 'similarity_function',
           'ref_lexweight_type', 'ref_lexweight_path', 'hyp_lexweight_type', 'hyp_lexweight_path',
           'src_lexweight_type', 'src_lexweight_path',
           'hyp_srl_type', 'hyp_srl_path', 'ref_srl_type', 'ref_srl_path', 'src_srl_type', 'src_srl_path',
           'label_config', 'weight_config', 'frame_weighting', 'alignment_file'}

DEFAULTS = {
    'ngram_size': 1,
    'alpha': 0.5,
    'beta': 0.0,
    'ref_file': '',
    'src_file': '',
    'sntscore_file': '',
    'docscore_file': '',
    'mode': 'score',
    'sentence_type': sentence_types.WORD,
    'src_sentence_type': '',
    'hyp_unit_file': '',
    'hyp_unit_id_file': '',
    'ref_unit_file': '',
    'ref_unit_id_file': '',
    'src_unit_file': '',
    'src_unit_id_file': '',
    'lexsim_type': 'exact',
    'embeddings': '',
    'input_embeddings': '',
    'similarity_function': 'cosine',
    'ref_lexweight_type': 'uniform',
    'ref_lexweight_path': '',
    'hyp_lexweight_type': '',
    'hyp_lexweight_path': '',
    'src_lexweight_type': 'uniform',
    'src_lexweight_path': '',
    'hyp_srl_type': '',
    'hyp_srl_path': '',
    'ref_srl_type': None,
    'ref_srl_path': '',
    'src_srl_type': '',
    'src_srl_path': '',
    'label_config': '',
    'weight_config': '',
    'frame_weighting': 'coverage',
    'alignment_file': '',
}

output_modes = {'score', 'features'}


class EvaluationParameters(object):
    def __init__(self, params):
        """Sets an attribute for every known parameter, from params or its default.
        e.g. if the parameter file contains 'alpha': 0.8, the below sets self.alpha = 0.8

        :type params: dict
        """
        if 'hyp_file' not in params or not params['hyp_file']:
            raise ValueError('Parameter "hyp_file" is required')

        for key, value in DEFAULTS.items():
            setattr(self, key, value)

        for integer_variable in INTEGERS:
            if integer_variable in params:
                setattr(self, integer_variable, int(params.get(integer_variable)))

        for float_variable in FLOATS:
            if float_variable in params:
                setattr(self, float_variable, float(params.get(float_variable)))

        for string_variable in STRINGS:
            if string_variable in params and params.get(string_variable) is not None:
                setattr(self, string_variable, str(params.get(string_variable)))

        unknown = set(params.keys()) - INTEGERS - FLOATS - STRINGS
        if len(unknown) > 0:
            logger.warning('Ignoring unknown parameters: {}'.format(', '.join(sorted(unknown))))

        self._fill_defaults()
        self.validate()

    def _fill_defaults(self):
        # references are parsed like the hypothesis unless told otherwise
        if self.ref_srl_type is None:
            self.ref_srl_type = self.hyp_srl_type
            if not self.ref_srl_path and self.hyp_srl_type in ('', 'tok', 'command'):
                self.ref_srl_path = self.hyp_srl_path
        if not self.src_sentence_type:
            self.src_sentence_type = self.sentence_type
        # learned lexical weights default to the corpus being scored
        if self.ref_lexweight_type == 'learn' and not self.ref_lexweight_path:
            self.ref_lexweight_path = self.ref_file
        if self.hyp_lexweight_type == 'learn' and not self.hyp_lexweight_path:
            self.hyp_lexweight_path = self.hyp_file
        if self.src_lexweight_type == 'learn' and not self.src_lexweight_path:
            self.src_lexweight_path = self.src_file
        if not self.sntscore_file:
            self.sntscore_file = self.hyp_file + '.sntscore'
        if not self.docscore_file:
            self.docscore_file = self.sntscore_file + '.docscore'

    def validate(self):
        if self.mode not in output_modes:
            raise ValueError('Input mode "%s" is not in the set of known modes: %s' % (
                self.mode, ','.join(sorted(output_modes))))
        if self.frame_weighting not in frame_weight_types:
            raise ValueError('Input frame_weighting "%s" is not in the set of known frame weightings: %s' % (
                self.frame_weighting, ','.join(sorted(frame_weight_types))))
        if not 0.0 <= self.alpha <= 1.0:
            raise ValueError('alpha must be in [0, 1], got {}'.format(self.alpha))
        if not 0.0 <= self.beta <= 1.0:
            raise ValueError('beta must be in [0, 1], got {}'.format(self.beta))
        if self.ngram_size < 1:
            raise ValueError('ngram_size must be at least 1, got {}'.format(self.ngram_size))
        if not self.ref_file and not self.src_file:
            raise ValueError('Nothing to compare the hypothesis with: give "ref_file" or "src_file"')

    def lexical_similarity_params(self):
        return {
            'embeddings': self.embeddings,
            'input_embeddings': self.input_embeddings,
            'function': self.similarity_function,
        }

    def to_json(self):
        d = dict()
        for key in sorted(INTEGERS | FLOATS | STRINGS):
            d[key] = getattr(self, key)
        return json.dumps(d, sort_keys=True, indent=4)


def load_parameters(params_file, overrides=None):
    """
    :type params_file: str
    :param overrides: values replacing those of the file, e.g. from the command line; None values are skipped
    :rtype: EvaluationParameters
    """
    params = dict()
    if params_file:
        with open(params_file) as f:
            params = json.load(f)
    if overrides is not None:
        for key, value in overrides.items():
            if value is not None:
                params[key] = value
    return EvaluationParameters(params)
