# ai_service.py

import requests
from flask import Blueprint, request, jsonify, current_app
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from auth import session_required
from errors import InvalidRequest, GenerationFailed
from pokemon import ABILITIES, ANIMAL_TYPES, NEGATIVE_PROMPT, GenerationRequest

# Create a Blueprint for AI routes
ai_bp = Blueprint('ai', __name__, url_prefix='/api')


def _create_requests_session():
    """Create a requests session with connection pooling and no retries."""
    session = requests.Session()
    retry_strategy = Retry(
        total=0,  # Callers resubmit themselves; never retry a generation
        backoff_factor=0,
        status_forcelist=[]
    )
    adapter = HTTPAdapter(max_retries=retry_strategy, pool_connections=10, pool_maxsize=10)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


class ImageResult:
    def __init__(self, image_url, prompt):
        self.image_url = image_url
        self.prompt = prompt

    def to_dict(self):
        return {'success': True, 'imageUrl': self.image_url, 'prompt': self.prompt}


class StableDiffusionClient:
    """Client for an AUTOMATIC1111 compatible txt2img endpoint."""

    def __init__(self, base_url, timeout=None, steps=20, width=512, height=512,
                 cfg_scale=7, sampler_name='Euler a', session=None):
        self.txt2img_url = f"{base_url.rstrip('/')}/sdapi/v1/txt2img"
        self.timeout = timeout or None
        self.steps = steps
        self.width = width
        self.height = height
        self.cfg_scale = cfg_scale
        self.sampler_name = sampler_name
        self._session = session or _create_requests_session()

    def build_body(self, prompt, negative_prompt=NEGATIVE_PROMPT):
        return {
            'prompt': prompt,
            'negative_prompt': negative_prompt,
            'steps': self.steps,
            'width': self.width,
            'height': self.height,
            'cfg_scale': self.cfg_scale,
            'sampler_name': self.sampler_name,
        }

    def txt2img(self, prompt, negative_prompt=NEGATIVE_PROMPT):
        """Generate one image and return it as a data URL.

        Raises GenerationFailed on transport errors, non-success statuses or
        an empty image list.
        """
        try:
            resp = self._session.post(
                self.txt2img_url,
                json=self.build_body(prompt, negative_prompt),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise GenerationFailed(f'Stable Diffusion request failed: {e}') from e

        if not resp.ok:
            raise GenerationFailed(f'Stable Diffusion API error: {resp.status_code}')

        try:
            j = resp.json()
        except ValueError as e:
            raise GenerationFailed('Stable Diffusion returned a non-JSON response') from e

        # AUTOMATIC1111 returns images as base64 strings in j['images']
        images = j.get('images') if isinstance(j, dict) else None
        if not isinstance(images, list) or not images or not images[0]:
            raise GenerationFailed('No images generated')
        return f"data:image/png;base64,{images[0]}"

    def generate(self, generation_request):
        prompt = generation_request.prompt()
        return ImageResult(self.txt2img(prompt), prompt)


@ai_bp.route('/generate-pokemon', methods=['POST'])
@session_required
def generate_pokemon(user):
    cfg = current_app.config
    data = request.get_json(silent=True) or {}
    try:
        gen_request = GenerationRequest.from_payload(
            data,
            max_animal_types=cfg['MAX_ANIMAL_TYPES'],
            max_abilities=cfg['MAX_ABILITIES'],
            name_max_length=cfg['NAME_MAX_LENGTH'],
            description_max_length=cfg['DESCRIPTION_MAX_LENGTH'],
        )
    except InvalidRequest as e:
        return jsonify({'error': str(e)}), 400

    client = current_app.extensions['image_client']
    current_app.logger.info('Generating image for %s (user %s)', gen_request.name, user.id)
    current_app.logger.info('Prompt: %s', gen_request.prompt())
    try:
        result = client.generate(gen_request)
    except GenerationFailed as e:
        current_app.logger.error('Error generating pokemon: %s', e)
        return jsonify({'error': 'Failed to generate pokemon image'}), 500

    return jsonify(result.to_dict()), 200


@ai_bp.route('/pokemon-options', methods=['GET'])
def pokemon_options():
    cfg = current_app.config
    return jsonify({
        'animalTypes': ANIMAL_TYPES,
        'abilities': ABILITIES,
        'maxAnimalTypes': cfg['MAX_ANIMAL_TYPES'],
        'maxAbilities': cfg['MAX_ABILITIES'],
        'nameMaxLength': cfg['NAME_MAX_LENGTH'],
        'descriptionMaxLength': cfg['DESCRIPTION_MAX_LENGTH'],
    }), 200
